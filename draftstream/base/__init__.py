"""Base layer: streaming primitives and ambient infrastructure.

Nothing in this package imports from ``draftstream.generation``,
``draftstream.refinement`` or ``draftstream.service``.
"""

from .errors import ErrorCode, TransportError, DraftStreamError, classify_exception
from .cancellation import CancellationToken, CancelledError
from .logging import LogContext, get_logger, configure_logger, log_event, normalized_log_event
from .timeouts import TimeoutConfig, get_timeout_config

__all__ = [
    "ErrorCode",
    "TransportError",
    "DraftStreamError",
    "classify_exception",
    "CancellationToken",
    "CancelledError",
    "LogContext",
    "get_logger",
    "configure_logger",
    "log_event",
    "normalized_log_event",
    "TimeoutConfig",
    "get_timeout_config",
]
