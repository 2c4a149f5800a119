"""Structured logging context carried by sessions and cycles.

A context is immutable once built: a session binds request details when it
starts and terminal details when it ends, each time producing a new context,
so events already emitted never change retroactively.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Mapping, Optional


@dataclass(frozen=True)
class LogContext:
    """Identity of one session or cycle plus any bound extras."""

    session_id: Optional[str] = None
    mode: Optional[str] = None
    document_type: Optional[str] = None
    subject: Optional[str] = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    def bind(self, **values: Any) -> "LogContext":
        """Return a copy with named fields replaced and the rest added to ``extra``."""
        known = {f.name for f in fields(self)} - {"extra"}
        direct = {k: v for k, v in values.items() if k in known}
        merged = {**self.extra, **{k: v for k, v in values.items() if k not in known}}
        return replace(self, extra=merged, **direct)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for f in fields(self):
            if f.name != "extra":
                out[f.name] = getattr(self, f.name)
        out.update(self.extra)
        return {k: v for k, v in out.items() if v is not None}


__all__ = ["LogContext"]
