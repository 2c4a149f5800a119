"""Frame parser tests: chunk-boundary independence and malformed-line recovery."""
from __future__ import annotations

import random

from draftstream.base.streaming import FrameParser
from draftstream.tests.streaming.helpers import chunk_line, complete_line, data_line, split_at
from draftstream.tests.utils import event_payloads

SCENARIO = chunk_line("Hello") + chunk_line("Hello world") + complete_line("Hello world!")
EXPECTED = [
    {"type": "chunk", "fullContent": "Hello"},
    {"type": "chunk", "fullContent": "Hello world"},
    {"type": "complete", "fullContent": "Hello world!"},
]


def _feed_all(pieces):
    parser = FrameParser()
    out = []
    for piece in pieces:
        out.extend(parser.feed(piece))
    return parser, out


def test_whole_stream_in_one_chunk():
    parser, frames = _feed_all([SCENARIO])
    assert frames == EXPECTED  # nosec B101
    assert parser.pending == ""  # nosec B101
    assert parser.parsed == 3 and parser.dropped == 0  # nosec B101


def test_one_character_at_a_time_matches_whole_stream():
    _, frames = _feed_all(list(SCENARIO))
    assert frames == EXPECTED  # nosec B101


def test_random_split_points_match_whole_stream():
    rng = random.Random(1234)
    for _ in range(50):
        offsets = rng.sample(range(1, len(SCENARIO)), 4)
        _, frames = _feed_all(split_at(SCENARIO, offsets))
        if frames != EXPECTED:
            raise AssertionError(f"split at {sorted(offsets)} produced {frames}")


def test_partial_line_is_carried_over_until_newline():
    parser = FrameParser()
    line = chunk_line("abc")
    assert parser.feed(line[:10]) == []  # nosec B101
    assert parser.pending == line[:10]  # nosec B101
    assert parser.feed(line[10:]) == [{"type": "chunk", "fullContent": "abc"}]  # nosec B101


def test_crlf_blank_and_foreign_lines_are_ignored():
    raw = (
        ": keep-alive comment\r\n"
        "\r\n"
        "event: message\r\n"
        + data_line({"type": "chunk", "fullContent": "x"}).replace("\n", "\r\n")
        + "\n"
    )
    parser, frames = _feed_all([raw])
    assert frames == [{"type": "chunk", "fullContent": "x"}]  # nosec B101
    assert parser.dropped == 0  # nosec B101


def test_malformed_line_is_dropped_and_following_frames_survive(log_capture):
    raw = "data: {not json\n" + complete_line("done")
    parser, frames = _feed_all([raw])
    assert frames == [{"type": "complete", "fullContent": "done"}]  # nosec B101
    assert parser.dropped == 1  # nosec B101
    dropped = event_payloads(log_capture, "stream.frame_dropped")
    assert len(dropped) == 1  # nosec B101
    assert dropped[0]["preview"] == "{not json"  # nosec B101


def test_embedded_raw_newline_desyncs_only_that_frame():
    # A payload containing a literal newline splits into two undecodable lines.
    raw = 'data: {"type":"chunk","fullContent":"line1\nline2"}\n' + complete_line("ok")
    parser, frames = _feed_all([raw])
    assert frames == [{"type": "complete", "fullContent": "ok"}]  # nosec B101
    assert parser.dropped == 1  # nosec B101


def test_flush_decodes_unterminated_final_line():
    parser = FrameParser()
    tail = complete_line("end").rstrip("\n")
    assert parser.feed(tail) == []  # nosec B101
    assert parser.flush() == [{"type": "complete", "fullContent": "end"}]  # nosec B101
    assert parser.pending == "" and parser.flush() == []  # nosec B101


def test_empty_feed_is_noop():
    parser = FrameParser()
    assert parser.feed("") == []  # nosec B101
    assert parser.pending == ""  # nosec B101
