"""draftstream package

Client-side streaming pipeline for generating and refining agent, skill and
file drafts against a ``data: <json>`` event-stream producer.

Public API (re-exported):
    - Version: ``__version__``
    - Streaming: :class:`GenerationSession`, :class:`GenerationRequest`,
      :class:`SessionStatus`, :class:`SessionSnapshot`, :class:`StopReason`
    - Refinement: :class:`RefinementCycle`, :class:`CyclePhase`,
      :class:`UnifiedDiffPresenter`, :class:`RecordingPresenter`
    - Errors: :class:`ErrorCode`, :class:`TransportError`,
      :class:`DraftStreamError`
    - Cancellation: :class:`CancellationToken`

The dev producer (``draftstream.service.app``) and the CLI
(``draftstream.service.cli``) are not imported here; they pull in FastAPI and
argparse wiring that library callers do not need.
"""

__version__ = "0.1.0"

from .base.errors import DraftStreamError, ErrorCode, TransportError
from .base.cancellation import CancellationToken
from .generation import (
    GenerationRequest,
    GenerationSession,
    HttpStreamTransport,
    SessionSnapshot,
    SessionStatus,
    StopReason,
)
from .refinement import CyclePhase, RecordingPresenter, RefinementCycle, UnifiedDiffPresenter

__all__ = [
    "__version__",
    "DraftStreamError",
    "ErrorCode",
    "TransportError",
    "CancellationToken",
    "GenerationRequest",
    "GenerationSession",
    "HttpStreamTransport",
    "SessionSnapshot",
    "SessionStatus",
    "StopReason",
    "RefinementCycle",
    "CyclePhase",
    "UnifiedDiffPresenter",
    "RecordingPresenter",
]
