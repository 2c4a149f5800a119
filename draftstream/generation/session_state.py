"""Session status enumeration and the read-only snapshot given to observers."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..base.errors import ErrorCode


class SessionStatus(str, Enum):
    """Lifecycle of a generation session.

    ``STOPPED`` means the stream ended without a ``complete`` or ``error``
    frame, or the caller cancelled it; it is terminal but not a failure.
    """

    IDLE = "idle"
    IN_FLIGHT = "in_flight"
    COMPLETE = "complete"
    FAILED = "failed"
    STOPPED = "stopped"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionStatus.COMPLETE, SessionStatus.FAILED, SessionStatus.STOPPED)


class StopReason(str, Enum):
    END_OF_STREAM = "end_of_stream"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class SessionSnapshot:
    """Point-in-time view of a session."""

    status: SessionStatus
    accumulated_content: str
    progress_percent: float
    last_error: Optional[str] = None
    error_code: Optional[ErrorCode] = None
    stop_reason: Optional[StopReason] = None

    @property
    def succeeded(self) -> bool:
        return self.status is SessionStatus.COMPLETE


__all__ = ["SessionStatus", "StopReason", "SessionSnapshot"]
