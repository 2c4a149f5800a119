"""End-to-end tests: HTTP transport against the scripted FastAPI producer.

The FastAPI ``TestClient`` is an ``httpx.Client``, so it is handed to
``HttpStreamTransport`` directly and the whole pipeline (request body, SSE
framing, snapshot and delta chunks, terminal frames) runs without a socket.
"""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from draftstream import __version__
from draftstream.base.errors import ErrorCode
from draftstream.config import get_stream_config
from draftstream.generation import (
    GenerationRequest,
    GenerationSession,
    HttpStreamTransport,
    SessionStatus,
    StopReason,
)
from draftstream.service.app import app
from draftstream.service.app_parts.producer_core import SCRIPTED_ERROR_MESSAGE, iter_frames, strip_code_fence


@pytest.fixture()
def client():
    with TestClient(app) as c:
        yield c


def _run(client, request, **overrides):
    cfg = get_stream_config({"base_url": str(client.base_url), **overrides})
    updates = []
    session = GenerationSession(
        HttpStreamTransport(config=cfg, client=client),
        on_update=updates.append,
        progress_target=2000,
    )
    return session.start(request), updates, session


def test_agent_generation_completes_without_code_fence(client):
    snap, updates, _ = _run(client, GenerationRequest.generate("reviewer", "Reviews pull requests"))
    assert snap.status is SessionStatus.COMPLETE  # nosec B101
    assert snap.accumulated_content.startswith("# reviewer\n")  # nosec B101
    assert "```" not in snap.accumulated_content  # nosec B101
    assert "Reviews pull requests" in snap.accumulated_content  # nosec B101
    assert len(updates) > 2 and updates[0].accumulated_content.startswith("```markdown")  # nosec B101


def test_skill_refinement_on_snapshot_route(client):
    snap, _, _ = _run(client, GenerationRequest.refine("# skill\n", "tighten wording", document_type="skill"))
    assert snap.status is SessionStatus.COMPLETE  # nosec B101
    assert snap.accumulated_content == "# skill\n\n## Revision notes\n\n- tighten wording"  # nosec B101


def test_document_refinement_streams_deltas(client):
    request = GenerationRequest.refine("orig text", "make it shorter", document_type="file", file_name="notes.md")
    snap, updates, _ = _run(client, request)
    assert snap.status is SessionStatus.COMPLETE  # nosec B101
    assert snap.accumulated_content == "orig text\n\n## Revision notes\n\n- make it shorter"  # nosec B101
    in_flight = [u.accumulated_content for u in updates if u.status is SessionStatus.IN_FLIGHT]
    for earlier, later in zip(in_flight, in_flight[1:]):
        assert later.startswith(earlier)  # nosec B101


def test_scripted_error_fails_session(client):
    snap, _, _ = _run(client, GenerationRequest.refine("base", "please [[error]]", document_type="agent"))
    assert snap.status is SessionStatus.FAILED  # nosec B101
    assert snap.last_error == SCRIPTED_ERROR_MESSAGE  # nosec B101
    assert snap.error_code is ErrorCode.PRODUCER  # nosec B101
    assert snap.accumulated_content  # nosec B101


def test_truncated_stream_is_stopped(client):
    snap, _, _ = _run(client, GenerationRequest.generate("x", "cut me off [[truncate]]", document_type="skill"))
    assert snap.status is SessionStatus.STOPPED  # nosec B101
    assert snap.stop_reason is StopReason.END_OF_STREAM  # nosec B101
    assert snap.progress_percent < 100  # nosec B101


def test_required_cookie(client, monkeypatch):
    monkeypatch.setenv("DRAFTSTREAM_DEV_REQUIRED_COOKIE", "session=ok")
    request = GenerationRequest.generate("reviewer", "Reviews pull requests")

    snap, _, session = _run(client, request)
    assert snap.status is SessionStatus.FAILED  # nosec B101
    assert snap.last_error == "HTTP error! status: 401 (Unauthorized)"  # nosec B101
    assert snap.error_code is ErrorCode.AUTH  # nosec B101
    assert session.metrics.frames == 0  # nosec B101

    snap, _, _ = _run(client, request, cookie="session=ok")
    assert snap.status is SessionStatus.COMPLETE  # nosec B101


def test_validation_errors_are_400(client):
    resp = client.post("/api/agents/generate", json={"name": "", "description": "x"})
    assert resp.status_code == 400 and resp.json()["error"] == "Validation failed"  # nosec B101
    assert resp.json()["details"]  # nosec B101

    resp = client.post("/api/document/refine", json={"name": "a", "description": "b", "fileType": "agent"})
    assert resp.status_code == 400  # nosec B101

    resp = client.post("/api/skills/generate", content=b"not json", headers={"content-type": "application/json"})
    assert resp.status_code == 400 and resp.json()["error"] == "Invalid JSON body"  # nosec B101

    resp = client.post("/api/skills/generate", json=["a"])
    assert resp.status_code == 400  # nosec B101


def test_health(client):
    assert client.get("/api/health").json() == {"ok": True, "version": __version__}  # nosec B101


def test_frame_script_shapes():
    request = GenerationRequest.generate("n", "d")
    frames = [f.decode("utf-8") for f in iter_frames(request, chunk_size=10)]
    assert all(f.startswith("data: ") and f.endswith("\n\n") for f in frames)  # nosec B101
    assert '"type": "complete"' in frames[-1]  # nosec B101
    assert strip_code_fence("```md\nbody\n```") == "body"  # nosec B101
    assert strip_code_fence("plain\n```") == "plain\n```"  # nosec B101
