"""draftstream.config.defaults
==========================

Central place for small, stable default values used across draftstream and
its dev producer. Environment variables or an external config file override
them (see :mod:`draftstream.config`).

This module performs no I/O and imports nothing from the rest of the package.
"""

from __future__ import annotations

# ---- Producer endpoints ----

# Base URL of the dashboard that serves the generation streams.
DEFAULT_BASE_URL = "http://127.0.0.1:3000"

# Request paths per document type. Agents and skills have their own
# generate/refine endpoints; arbitrary files are refined through the generic
# document endpoint and cannot be generated from scratch.
AGENT_STREAM_PATH = "/api/agents/generate"
SKILL_STREAM_PATH = "/api/skills/generate"
DOCUMENT_REFINE_PATH = "/api/document/refine"

DOCUMENT_TYPES = ("agent", "skill", "file")

# ---- Streaming heuristics ----

# Assumed final document size (characters) used to estimate progress while a
# stream is in flight. The producer never announces a total length.
PROGRESS_ASSUMED_TARGET_LENGTH = 2000
# Estimated progress is capped below completion; only the terminal
# ``complete`` frame moves a session to 100%.
PROGRESS_IN_FLIGHT_CAP = 95.0

# Longest instruction text the producer accepts.
MAX_INSTRUCTIONS_LENGTH = 5000

# ---- Dev producer ----

DEV_SERVER_DEFAULT_HOST = "127.0.0.1"
DEV_SERVER_DEFAULT_PORT = 3000
# Characters added per chunk frame by the scripted producer.
DEV_SERVER_CHUNK_SIZE = 48
# Comma-separated list of allowed origins for the dev producer.
DEV_SERVER_CORS_DEFAULT_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000"


__all__ = [
    "DEFAULT_BASE_URL",
    "AGENT_STREAM_PATH",
    "SKILL_STREAM_PATH",
    "DOCUMENT_REFINE_PATH",
    "DOCUMENT_TYPES",
    "PROGRESS_ASSUMED_TARGET_LENGTH",
    "PROGRESS_IN_FLIGHT_CAP",
    "MAX_INSTRUCTIONS_LENGTH",
    "DEV_SERVER_DEFAULT_HOST",
    "DEV_SERVER_DEFAULT_PORT",
    "DEV_SERVER_CHUNK_SIZE",
    "DEV_SERVER_CORS_DEFAULT_ORIGINS",
]
