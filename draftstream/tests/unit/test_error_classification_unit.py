from __future__ import annotations

import httpx
import pytest

from draftstream.base.errors import (
    CycleClosedError,
    CycleStateError,
    DraftStreamError,
    ErrorCode,
    TransportError,
    classify_exception,
    classify_message,
    status_to_code,
)


@pytest.mark.parametrize(
    "status,code",
    [
        (400, ErrorCode.VALIDATION),
        (401, ErrorCode.AUTH),
        (403, ErrorCode.AUTH),
        (404, ErrorCode.NOT_FOUND),
        (429, ErrorCode.RATE_LIMIT),
        (500, ErrorCode.SERVER_ERROR),
        (502, ErrorCode.TRANSPORT),
        (503, ErrorCode.UNAVAILABLE),
        (504, ErrorCode.TIMEOUT),
        (507, ErrorCode.SERVER_ERROR),
        (418, ErrorCode.TRANSPORT),
    ],
)
def test_status_mapping(status, code):
    assert status_to_code(status) is code  # nosec B101


@pytest.mark.parametrize(
    "message,code",
    [
        ("Rate limit exceeded", ErrorCode.RATE_LIMIT),
        ("rate limited", ErrorCode.RATE_LIMIT),
        ("request timed out", ErrorCode.TIMEOUT),
        ("Invalid API key", ErrorCode.AUTH),
        ("model overloaded", ErrorCode.UNAVAILABLE),
        ("agent not found", ErrorCode.NOT_FOUND),
        ("internal error", ErrorCode.SERVER_ERROR),
    ],
)
def test_message_heuristics(message, code):
    assert classify_message(message) is code  # nosec B101


def test_unmatched_message_uses_default():
    assert classify_message("model refused") is ErrorCode.UNKNOWN  # nosec B101
    assert classify_message(None, default=ErrorCode.PRODUCER) is ErrorCode.PRODUCER  # nosec B101


def test_exception_precedence():
    req = httpx.Request("POST", "http://producer.test/api/agents/generate")
    assert classify_exception(TransportError(ErrorCode.AUTH, "x")) is ErrorCode.AUTH  # nosec B101
    assert classify_exception(httpx.ReadTimeout("slow", request=req)) is ErrorCode.TIMEOUT  # nosec B101
    assert classify_exception(TimeoutError()) is ErrorCode.TIMEOUT  # nosec B101
    assert classify_exception(httpx.ConnectError("refused", request=req)) is ErrorCode.TRANSPORT  # nosec B101
    resp = httpx.Response(429, request=req)
    err = httpx.HTTPStatusError("too many", request=req, response=resp)
    assert classify_exception(err) is ErrorCode.RATE_LIMIT  # nosec B101
    assert classify_exception(ValueError("boom")) is ErrorCode.UNKNOWN  # nosec B101


def test_state_error_hierarchy():
    assert issubclass(CycleClosedError, CycleStateError)  # nosec B101
    assert issubclass(CycleStateError, DraftStreamError)  # nosec B101
