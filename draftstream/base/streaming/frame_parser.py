"""Incremental parser for ``data: <json>`` event streams.

Network reads do not respect line boundaries, so the parser keeps the last,
possibly incomplete, line of every chunk as carry-over and prepends it to the
next one. Only lines that were terminated by ``\\n`` are decoded; the result
is independent of where the transport happened to split the stream.

A line that carries the ``data: `` marker but fails to decode as JSON is
dropped with a warning and counted in :attr:`FrameParser.dropped`; parsing
continues with the next line. This covers producers whose JSON payload itself
contains a raw newline and therefore desynchronizes line framing.
"""
from __future__ import annotations

import json
import logging
from typing import Any, List, Optional

from ..logging import LogContext, get_logger, log_event

DATA_PREFIX = "data: "
LINE_SEPARATOR = "\n"
_PREVIEW_CHARS = 120


class FrameParser:
    """Turn arbitrary text chunks into decoded frame payloads, in order."""

    def __init__(self, *, logger: Optional[logging.Logger] = None, ctx: Optional[LogContext] = None) -> None:
        self._buffer = ""
        self._logger = logger or get_logger("draftstream.stream")
        self._ctx = ctx
        self.parsed = 0
        self.dropped = 0

    @property
    def pending(self) -> str:
        """Carry-over text still waiting for its line terminator."""
        return self._buffer

    def feed(self, raw_chunk: str) -> List[Any]:
        """Consume one transport chunk and return the payloads it completed."""
        if not raw_chunk:
            return []
        lines = (self._buffer + raw_chunk).split(LINE_SEPARATOR)
        self._buffer = lines.pop()
        return self._decode_lines(lines)

    def flush(self) -> List[Any]:
        """Decode whatever is left in the carry-over buffer at end of data."""
        if not self._buffer:
            return []
        remainder, self._buffer = self._buffer, ""
        return self._decode_lines([remainder])

    def _decode_lines(self, lines: List[str]) -> List[Any]:
        payloads: List[Any] = []
        for line in lines:
            if line.endswith("\r"):
                line = line[:-1]
            if not line.strip() or not line.startswith(DATA_PREFIX):
                continue
            body = line[len(DATA_PREFIX):].strip()
            if not body:
                continue
            try:
                payloads.append(json.loads(body))
            except ValueError as exc:
                self.dropped += 1
                log_event(
                    self._logger,
                    "stream.frame_dropped",
                    self._ctx,
                    level=logging.WARNING,
                    reason=str(exc),
                    length=len(body),
                    preview=body[:_PREVIEW_CHARS],
                )
                continue
            self.parsed += 1
        return payloads


__all__ = ["FrameParser", "DATA_PREFIX"]
