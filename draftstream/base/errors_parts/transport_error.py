"""
Structured transport error exception type.

Raised by stream transports when a request cannot be sent, the producer
answers with a non-success status, or the response carries no body. The
generation session converts it into a ``FAILED`` state; it never escapes
``GenerationSession.start``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .error_code import ErrorCode


@dataclass
class TransportError(Exception):
    """Represents a failure to open or read the producer stream.

    Attributes:
        code: Normalized :class:`ErrorCode` classification for the failure.
        message: Human-readable message surfaced verbatim as ``last_error``.
        status_code: HTTP status when the producer answered, else ``None``.
        raw: Optional original exception for diagnostics.
    """

    code: ErrorCode
    message: str
    status_code: Optional[int] = None
    raw: Optional[Exception] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.code.value}: {self.message}"


__all__ = ["TransportError"]
