"""Streaming metrics collected for a single generation session."""
from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


@dataclass
class SessionMetrics:
    """Counters and timings for one session.

    ``frames`` counts interpreted frames of any kind; ``dropped_frames`` are
    ``data:`` lines that failed to decode; ``unrecognized_frames`` decoded but
    matched no known frame type.
    """

    frames: int = 0
    dropped_frames: int = 0
    unrecognized_frames: int = 0
    time_to_first_chunk_ms: Optional[float] = None
    total_duration_ms: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = ["SessionMetrics"]
