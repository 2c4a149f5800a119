"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `draftstream.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .transport_error import TransportError
from .state_errors import (
    CycleClosedError,
    CycleStateError,
    DraftStreamError,
    RefinementInProgressError,
    SessionStateError,
)
from .classification import classify_exception, classify_message, status_to_code

__all__ = [
    "ErrorCode",
    "TransportError",
    "DraftStreamError",
    "SessionStateError",
    "RefinementInProgressError",
    "CycleStateError",
    "CycleClosedError",
    "classify_exception",
    "classify_message",
    "status_to_code",
]
