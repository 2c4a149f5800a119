"""Diff presentation boundary.

A presenter shows the human the original document next to the current best
text. Edits made in the presenter flow back through
:meth:`RefinementCycle.record_manual_edit`; presenters never mutate the cycle
themselves.
"""
from __future__ import annotations

import difflib
import sys
from typing import List, Optional, Protocol, TextIO, Tuple, runtime_checkable


@runtime_checkable
class DiffPresenter(Protocol):
    def present(self, original: str, current: str) -> None:
        ...


def render_unified_diff(original: str, current: str, *, label: str = "document", context: int = 3) -> str:
    """Return a unified diff of ``original`` against ``current`` (empty when equal)."""
    lines = difflib.unified_diff(
        original.splitlines(keepends=True),
        current.splitlines(keepends=True),
        fromfile=f"{label} (original)",
        tofile=f"{label} (refined)",
        n=context,
    )
    out = []
    for line in lines:
        out.append(line if line.endswith("\n") else line + "\n")
    return "".join(out)


class UnifiedDiffPresenter:
    """Write a unified diff to a text stream (stdout by default)."""

    def __init__(self, stream: Optional[TextIO] = None, *, label: str = "document") -> None:
        self._stream = stream
        self.label = label

    def present(self, original: str, current: str) -> None:
        stream = self._stream or sys.stdout
        diff = render_unified_diff(original, current, label=self.label)
        stream.write(diff or "(no changes)\n")
        stream.flush()


class RecordingPresenter:
    """Keep every presented pair; used by headless callers and tests."""

    def __init__(self) -> None:
        self.presented: List[Tuple[str, str]] = []

    def present(self, original: str, current: str) -> None:
        self.presented.append((original, current))

    @property
    def last(self) -> Optional[Tuple[str, str]]:
        return self.presented[-1] if self.presented else None


__all__ = ["DiffPresenter", "UnifiedDiffPresenter", "RecordingPresenter", "render_unified_diff"]
