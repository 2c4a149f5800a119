"""Cancellation error type.

Raised by ``CancellationToken.raise_if_cancelled``. The generation session
catches it inside its read loop and maps it to ``STOPPED`` with
``stop_reason="cancelled"``; it is never surfaced from ``start()``.
"""

from __future__ import annotations

from typing import Optional

DEFAULT_CANCEL_MESSAGE = "stream cancelled"


class CancelledError(RuntimeError):
    """A read loop observed a cancellation request.

    ``reason`` is whatever the canceller supplied (``None`` when it gave
    nothing); the exception text falls back to ``"stream cancelled"``.
    """

    def __init__(self, reason: Optional[str] = None) -> None:
        super().__init__(reason or DEFAULT_CANCEL_MESSAGE)
        self.reason = reason


__all__ = ["CancelledError", "DEFAULT_CANCEL_MESSAGE"]
