"""Unified draftstream error taxonomy public surface.

This module re-exports the one-class-per-file implementations under
``draftstream.base.errors_parts`` to maintain a stable import path.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.transport_error import TransportError
from .errors_parts.state_errors import (
    CycleClosedError,
    CycleStateError,
    DraftStreamError,
    RefinementInProgressError,
    SessionStateError,
)
from .errors_parts.classification import classify_exception, classify_message, status_to_code

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
