"""Unified timeout configuration for producer streams.

This module centralizes the timeout values used when opening and reading a
generation stream. The producer never announces how long a stream lasts, so
the only guard against a hung producer is an idle (read) timeout between
network reads; expiry surfaces as a ``FAILED`` session with the ``timeout``
error code.

Key Components
--------------
TimeoutConfig
    Frozen dataclass capturing normalized timeout values.

get_timeout_config()
    Returns a process-cached configuration, parsing environment overrides on
    first use and whenever the relevant variables change. Supported
    environment variables (all optional):
        DRAFTSTREAM_TIMEOUT_CONNECT_SECONDS
        DRAFTSTREAM_TIMEOUT_STREAM_IDLE_SECONDS
        DRAFTSTREAM_TIMEOUT_WRITE_SECONDS

build_httpx_timeout()
    Converts the configuration into an ``httpx.Timeout``.

Design Constraints
------------------
1. No hard-coded ad-hoc timeouts outside this module.
2. Avoid per-call env parsing (cache keyed on the raw env values).
"""
from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Optional

import httpx

_ENV_CONNECT = "DRAFTSTREAM_TIMEOUT_CONNECT_SECONDS"
_ENV_IDLE = "DRAFTSTREAM_TIMEOUT_STREAM_IDLE_SECONDS"
_ENV_WRITE = "DRAFTSTREAM_TIMEOUT_WRITE_SECONDS"


@dataclass(frozen=True)
class TimeoutConfig:
    """Container for normalized timeout values (seconds).

    Attributes:
        connect_timeout_seconds: Time allowed to establish the connection and
            receive the response headers.
        stream_idle_timeout_seconds: Longest gap tolerated between two reads
            of the streamed body. ``None`` disables the idle guard.
        write_timeout_seconds: Time allowed to send the request body.
    """

    connect_timeout_seconds: float = 30.0
    stream_idle_timeout_seconds: Optional[float] = 60.0
    write_timeout_seconds: float = 30.0


_CACHED: TimeoutConfig | None = None
_ENV_GUARD: str | None = None


def _parse_env_float(name: str, default: float | None) -> float | None:
    """Parse a positive float from the environment, else return ``default``."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        val = float(raw)
        return val if val > 0 else default
    except ValueError:
        return default


def get_timeout_config() -> TimeoutConfig:
    """Return the process-cached `TimeoutConfig` instance."""
    global _CACHED, _ENV_GUARD  # noqa: PLW0603 - intentional module cache
    guard = "/".join(os.getenv(n, "") for n in (_ENV_CONNECT, _ENV_IDLE, _ENV_WRITE))
    if _CACHED is not None and _ENV_GUARD == guard:
        return _CACHED

    defaults = TimeoutConfig()
    _CACHED = TimeoutConfig(
        connect_timeout_seconds=float(_parse_env_float(_ENV_CONNECT, defaults.connect_timeout_seconds)),
        stream_idle_timeout_seconds=_parse_env_float(_ENV_IDLE, defaults.stream_idle_timeout_seconds),
        write_timeout_seconds=float(_parse_env_float(_ENV_WRITE, defaults.write_timeout_seconds)),
    )
    _ENV_GUARD = guard
    return _CACHED


def build_httpx_timeout(cfg: TimeoutConfig | None = None) -> httpx.Timeout:
    """Translate a `TimeoutConfig` into an ``httpx.Timeout``.

    The read timeout applies per network read on a streamed body, which is
    exactly the idle gap between two frames.
    """
    cfg = cfg or get_timeout_config()
    return httpx.Timeout(
        connect=cfg.connect_timeout_seconds,
        read=cfg.stream_idle_timeout_seconds,
        write=cfg.write_timeout_seconds,
        pool=cfg.connect_timeout_seconds,
    )


__all__ = [
    "TimeoutConfig",
    "get_timeout_config",
    "build_httpx_timeout",
]
