"""
Precondition errors for sessions and refinement cycles.

These are raised to the caller (not folded into session state) because they
signal misuse of the API: starting a session twice, starting a second
refinement while one is running, or touching a cycle that was accepted.
"""
from __future__ import annotations


class DraftStreamError(RuntimeError):
    """Base class for draftstream precondition failures."""


class SessionStateError(DraftStreamError):
    """Raised when a session operation is invalid for its current status."""


class RefinementInProgressError(DraftStreamError):
    """Raised when a refinement is requested while another one is in flight."""


class CycleStateError(DraftStreamError):
    """Raised when a cycle operation is invalid for the current review phase."""


class CycleClosedError(CycleStateError):
    """Raised for any operation on a cycle whose result was already accepted."""


__all__ = [
    "DraftStreamError",
    "SessionStateError",
    "RefinementInProgressError",
    "CycleStateError",
    "CycleClosedError",
]
