from __future__ import annotations

import json
import re
from typing import Any, Dict, Iterator, List

from draftstream.config.defaults import DEV_SERVER_CHUNK_SIZE
from draftstream.generation import GenerationRequest

ERROR_MARKER = "[[error]]"
TRUNCATE_MARKER = "[[truncate]]"
SCRIPTED_ERROR_MESSAGE = "scripted producer error"

_FENCE_OPEN = re.compile(r"^```[a-zA-Z]*\n")
_FENCE_CLOSE = re.compile(r"\n```$")


def encode_frame(payload: Dict[str, Any]) -> bytes:
    """Encode one payload as an SSE ``data:`` frame followed by a blank line."""
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n".encode("utf-8")


def strip_code_fence(text: str) -> str:
    """Remove a leading ```lang line and a trailing ``` line, if both wrap the text."""
    cleaned = text.strip()
    if _FENCE_OPEN.match(cleaned):
        cleaned = _FENCE_OPEN.sub("", cleaned, count=1)
        cleaned = _FENCE_CLOSE.sub("", cleaned, count=1)
    return cleaned


def _directives(request: GenerationRequest) -> str:
    return " ".join(filter(None, [request.instructions, request.subject_description]))


def render_document(request: GenerationRequest) -> str:
    """Deterministic stand-in for a model response, wrapped in a code fence."""
    if request.mode == "refine":
        base = (request.base_content or "").rstrip()
        instructions = (request.instructions or "").replace(ERROR_MARKER, "").replace(TRUNCATE_MARKER, "").strip()
        body = f"{base}\n\n## Revision notes\n\n- {instructions}\n"
    else:
        kind = request.document_type.capitalize()
        body = (
            f"# {request.subject_name}\n\n"
            f"{kind} generated from the description below.\n\n"
            f"## Purpose\n\n{request.subject_description}\n\n"
            "## Instructions\n\n"
            "1. Read the request carefully.\n"
            "2. Work in small, verifiable steps.\n"
            "3. Report what changed.\n"
        )
    return f"```markdown\n{body}```"


def split_chunks(text: str, size: int = DEV_SERVER_CHUNK_SIZE) -> List[str]:
    return [text[i:i + size] for i in range(0, len(text), size)] or [""]


def iter_frames(request: GenerationRequest, *, snapshots: bool = True, chunk_size: int = DEV_SERVER_CHUNK_SIZE) -> Iterator[bytes]:
    """Yield the scripted stream for ``request``.

    ``snapshots=True`` sends ``fullContent`` on every chunk; otherwise each chunk
    carries only the new text under ``content`` plus ``currentLength``.
    """
    document = render_document(request)
    pieces = split_chunks(document, chunk_size)
    directives = _directives(request)
    if ERROR_MARKER in directives:
        pieces = pieces[: max(1, len(pieces) // 2)]

    produced = ""
    for piece in pieces:
        produced += piece
        if snapshots:
            yield encode_frame({"type": "chunk", "fullContent": produced})
        else:
            yield encode_frame({"type": "chunk", "content": piece, "currentLength": len(produced)})

    if ERROR_MARKER in directives:
        yield encode_frame({"type": "error", "message": SCRIPTED_ERROR_MESSAGE})
        return
    if TRUNCATE_MARKER in directives:
        return
    yield encode_frame({"type": "complete", "fullContent": strip_code_fence(produced)})


__all__ = [
    "ERROR_MARKER",
    "TRUNCATE_MARKER",
    "SCRIPTED_ERROR_MESSAGE",
    "encode_frame",
    "strip_code_fence",
    "render_document",
    "split_chunks",
    "iter_frames",
]
