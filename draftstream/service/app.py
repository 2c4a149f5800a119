"""
Scripted FastAPI producer for local development and end-to-end tests.

Purpose
-------
Serve the same routes and wire format as the dashboard producer
(``data: <json>`` frames over ``text/event-stream``) without calling a model,
so the client pipeline can be exercised offline.

Routes
------
- ``POST /api/agents/generate`` and ``POST /api/skills/generate``: chunk
  frames carrying the full content so far, then ``complete``.
- ``POST /api/document/refine``: refine-only, chunk frames carrying deltas.
- ``GET /api/health``.

Instructions (or the description, for generate) containing ``[[error]]`` end
the stream with an ``error`` frame; ``[[truncate]]`` ends it with no terminal
frame at all.

Auth
----
When ``DRAFTSTREAM_DEV_REQUIRED_COOKIE`` is set, requests whose ``Cookie``
header does not contain it are answered with 401.
"""
from __future__ import annotations

import os
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import ValidationError

from draftstream import __version__
from draftstream.base.logging import get_logger, log_event
from draftstream.config.defaults import DEV_SERVER_CORS_DEFAULT_ORIGINS
from draftstream.generation import GenerationRequest

from .app_parts.producer_core import iter_frames

logger = get_logger("draftstream.service")

app = FastAPI(title="draftstream dev producer", version=__version__)

_STREAM_HEADERS = {"Cache-Control": "no-cache", "Connection": "keep-alive"}


# ---------------------------------------------------------------------------
# CORS configuration
# ---------------------------------------------------------------------------

cors_origins_env = os.getenv("DRAFTSTREAM_DEV_CORS_ORIGINS", DEV_SERVER_CORS_DEFAULT_ORIGINS)
allow_origins = [o.strip() for o in cors_origins_env.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(status_code: int, message: str, details: Any = None) -> JSONResponse:
    body: Dict[str, Any] = {"error": message}
    if details is not None:
        body["details"] = details
    return JSONResponse(body, status_code=status_code)


def _authorized(request: Request) -> bool:
    required = os.getenv("DRAFTSTREAM_DEV_REQUIRED_COOKIE")
    if not required:
        return True
    return required in (request.headers.get("cookie") or "")


async def _parse_request(request: Request, document_type: Optional[str]) -> GenerationRequest | JSONResponse:
    try:
        body = await request.json()
    except ValueError:
        return _error(400, "Invalid JSON body")
    if not isinstance(body, dict):
        return _error(400, "Validation failed", "body must be a JSON object")
    try:
        return GenerationRequest.from_wire(body, document_type=document_type)
    except ValidationError as e:
        return _error(400, "Validation failed", e.errors(include_url=False, include_context=False))


async def _stream(request: Request, route: str, *, document_type: Optional[str], snapshots: bool, refine_only: bool = False):
    if not _authorized(request):
        return _error(401, "Unauthorized")
    parsed = await _parse_request(request, document_type)
    if isinstance(parsed, JSONResponse):
        return parsed
    if refine_only and parsed.mode != "refine":
        return _error(400, "Validation failed", "this endpoint only refines existing documents")
    log_event(
        logger,
        "producer.stream",
        route=route,
        mode=parsed.mode,
        document_type=parsed.document_type,
        base_length=len(parsed.base_content or ""),
    )
    return StreamingResponse(
        iter_frames(parsed, snapshots=snapshots),
        media_type="text/event-stream",
        headers=_STREAM_HEADERS,
    )


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@app.get("/api/health")
def health() -> Dict[str, Any]:
    return {"ok": True, "version": __version__}


# ---------------------------------------------------------------------------
# Streaming endpoints
# ---------------------------------------------------------------------------


@app.post("/api/agents/generate")
async def post_agent_generate(request: Request):
    """Generate or refine an agent definition as a snapshot stream."""
    return await _stream(request, "agents/generate", document_type="agent", snapshots=True)


@app.post("/api/skills/generate")
async def post_skill_generate(request: Request):
    """Generate or refine a skill definition as a snapshot stream."""
    return await _stream(request, "skills/generate", document_type="skill", snapshots=True)


@app.post("/api/document/refine")
async def post_document_refine(request: Request):
    """Refine any document; chunks carry deltas rather than the full text."""
    return await _stream(request, "document/refine", document_type=None, snapshots=False, refine_only=True)


def get_app() -> FastAPI:
    """Return the FastAPI application instance."""
    return app


__all__ = ["app", "get_app"]
