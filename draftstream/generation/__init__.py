"""Generation layer: request model, transports and the session state machine."""

from .request import GenerationRequest, GenerationMode, DocumentType
from .session_state import SessionSnapshot, SessionStatus, StopReason
from .transport import HttpStreamTransport, StreamTransport
from .generation_session import GenerationSession

__all__ = [
    "GenerationRequest",
    "GenerationMode",
    "DocumentType",
    "SessionSnapshot",
    "SessionStatus",
    "StopReason",
    "StreamTransport",
    "HttpStreamTransport",
    "GenerationSession",
]
