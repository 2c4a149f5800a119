"""Helpers for streaming tests.

``ScriptedTransport`` stands in for the HTTP producer: every ``open_stream``
call replays the next script (a list of raw text chunks, exactly as a network
read would deliver them). The last script is reused once the queue runs out.
"""
from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Optional, Sequence

from draftstream.generation import GenerationRequest


def data_line(payload: Any) -> str:
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n"


def chunk_line(full: str) -> str:
    return data_line({"type": "chunk", "fullContent": full})


def delta_line(content: str) -> str:
    return data_line({"type": "chunk", "content": content})


def complete_line(full: str) -> str:
    return data_line({"type": "complete", "fullContent": full})


def error_line(message: str) -> str:
    return data_line({"type": "error", "message": message})


def split_at(text: str, offsets: Sequence[int]) -> List[str]:
    """Split ``text`` at the given absolute offsets (sorted, in range)."""
    pieces: List[str] = []
    start = 0
    for off in sorted(offsets):
        pieces.append(text[start:off])
        start = off
    pieces.append(text[start:])
    return pieces


def completed_script(text: str) -> List[str]:
    """A stream that grows ``text`` in two snapshots and completes with it."""
    half = text[: max(1, len(text) // 2)]
    return [chunk_line(half), chunk_line(text), complete_line(text)]


class ScriptedTransport:
    """In-memory transport replaying scripted chunk lists.

    Parameters
    ----------
    scripts:
        One list of raw chunks per ``open_stream`` call.
    open_error:
        Raised from ``open_stream`` before anything is yielded.
    read_error_at:
        Index of the chunk before which ``read_error`` is raised.
    on_chunk:
        Called with the chunk index right before it is yielded.
    """

    def __init__(
        self,
        *scripts: Sequence[str],
        open_error: Optional[BaseException] = None,
        read_error: Optional[BaseException] = None,
        read_error_at: Optional[int] = None,
        on_chunk: Optional[Callable[[int], None]] = None,
    ) -> None:
        self._scripts = [list(s) for s in scripts] or [[]]
        self.open_error = open_error
        self.read_error = read_error
        self.read_error_at = read_error_at
        self.on_chunk = on_chunk
        self.requests: List[GenerationRequest] = []
        self.opened = 0
        self.closed = 0
        self.yielded = 0

    @contextmanager
    def open_stream(self, request: GenerationRequest) -> Iterator[Iterator[str]]:
        self.requests.append(request)
        if self.open_error is not None:
            raise self.open_error
        script = self._scripts[min(self.opened, len(self._scripts) - 1)]
        self.opened += 1
        try:
            yield self._iterate(script)
        finally:
            self.closed += 1

    def _iterate(self, script: List[str]) -> Iterator[str]:
        for idx, raw in enumerate(script):
            if self.read_error is not None and idx == self.read_error_at:
                raise self.read_error
            if self.on_chunk is not None:
                self.on_chunk(idx)
            self.yielded += 1
            yield raw


def refine_request(base: str = "orig", instructions: str = "make it shorter") -> GenerationRequest:
    return GenerationRequest.refine(base, instructions, document_type="file", file_name="notes.md")


def generate_request(name: str = "reviewer", description: str = "Reviews pull requests") -> GenerationRequest:
    return GenerationRequest.generate(name, description, document_type="agent")
