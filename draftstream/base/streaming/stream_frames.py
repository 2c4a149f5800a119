"""Closed set of semantic stream frames and the interpreter producing them.

Every decoded payload maps to exactly one of :class:`ChunkFrame`,
:class:`CompleteFrame`, :class:`ErrorFrame` or :class:`UnrecognizedFrame`.
Unknown shapes become ``UnrecognizedFrame`` rather than raising, so a producer
adding new frame types never breaks an older client.

Chunk frames normally carry the *full* content produced so far under
``fullContent`` and must replace, not extend, what the session holds. The
generic document endpoint instead streams deltas under ``content``; those are
flagged ``is_snapshot=False`` and appended.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Union

DEFAULT_ERROR_MESSAGE = "producer reported an error"


@dataclass(frozen=True)
class ChunkFrame:
    """In-flight content: a full snapshot or, for delta producers, an increment."""

    content: str
    is_snapshot: bool = True
    kind: Literal["chunk"] = "chunk"


@dataclass(frozen=True)
class CompleteFrame:
    """Terminal success carrying the final full content."""

    content: str
    kind: Literal["complete"] = "complete"


@dataclass(frozen=True)
class ErrorFrame:
    """Terminal failure reported by the producer."""

    message: str
    kind: Literal["error"] = "error"


@dataclass(frozen=True)
class UnrecognizedFrame:
    """Any payload this client does not understand; always ignored."""

    payload: Any
    kind: Literal["unrecognized"] = "unrecognized"


StreamFrame = Union[ChunkFrame, CompleteFrame, ErrorFrame, UnrecognizedFrame]


def interpret_frame(payload: Any) -> StreamFrame:
    """Classify a decoded payload into a :data:`StreamFrame`."""
    if not isinstance(payload, dict):
        return UnrecognizedFrame(payload)
    frame_type = payload.get("type")
    full = payload.get("fullContent")
    if frame_type == "chunk":
        if isinstance(full, str):
            return ChunkFrame(full, is_snapshot=True)
        delta = payload.get("content")
        if isinstance(delta, str):
            return ChunkFrame(delta, is_snapshot=False)
        return UnrecognizedFrame(payload)
    if frame_type == "complete":
        return CompleteFrame(full) if isinstance(full, str) else UnrecognizedFrame(payload)
    if frame_type == "error":
        message = payload.get("message")
        if not isinstance(message, str):
            message = DEFAULT_ERROR_MESSAGE
        return ErrorFrame(message)
    return UnrecognizedFrame(payload)


__all__ = [
    "ChunkFrame",
    "CompleteFrame",
    "ErrorFrame",
    "UnrecognizedFrame",
    "StreamFrame",
    "interpret_frame",
    "DEFAULT_ERROR_MESSAGE",
]
