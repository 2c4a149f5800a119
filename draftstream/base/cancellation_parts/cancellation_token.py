"""Cooperative cancellation for streaming read loops.

A session polls its token between transport reads. A refinement cycle (or a
CLI signal handler) holds a parent token and hands each round a child, so one
``cancel()`` reaches whichever session is running without holding a
reference to it.

Children are tracked weakly: a finished round's token disappears from its
parent once nothing else references it, so a long-lived cycle does not
accumulate one entry per round.
"""

from __future__ import annotations

import threading
import weakref
from typing import Optional

from .cancelled_error import CancelledError


class CancellationToken:
    """Thread-safe one-shot cancellation flag with parent-to-child cascade."""

    def __init__(self, *, parent: Optional["CancellationToken"] = None) -> None:
        self._flag = threading.Event()
        self._reason: Optional[str] = None
        self._guard = threading.Lock()
        self._children: "weakref.WeakSet[CancellationToken]" = weakref.WeakSet()
        if parent is not None:
            parent._adopt(self)

    @property
    def cancelled(self) -> bool:
        return self._flag.is_set()

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    @property
    def live_children(self) -> int:
        """Number of child tokens still referenced somewhere."""
        return len(self._children)

    def cancel(self, reason: Optional[str] = None) -> None:
        """Request cancellation. Only the first call counts; children follow."""
        with self._guard:
            if self._flag.is_set():
                return
            self._reason = reason
            self._flag.set()
            pending = list(self._children)
        for token in pending:
            token.cancel(reason)

    def child(self) -> "CancellationToken":
        """Return a new token cancelled together with this one."""
        return CancellationToken(parent=self)

    def raise_if_cancelled(self) -> None:
        if self._flag.is_set():
            raise CancelledError(self._reason)

    def _adopt(self, token: "CancellationToken") -> None:
        with self._guard:
            if not self._flag.is_set():
                self._children.add(token)
                return
        token.cancel(self._reason)

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return f"CancellationToken(cancelled={self.cancelled}, reason={self._reason!r})"


__all__ = ["CancellationToken"]
