"""Unified configuration layer for draftstream.

Goals
-----
* Centralize the producer endpoint settings (base URL, per-document paths,
  forwarded session cookie, extra headers) and the progress heuristic.
* Merge sources in a predictable order (later wins):
    1. Built-in defaults (:mod:`draftstream.config.defaults`)
    2. Optional external config file (JSON or YAML) named by
       ``DRAFTSTREAM_CONFIG_FILE``
    3. Environment variables (``DRAFTSTREAM_*``, a ``.env`` file is read once)
    4. In-code overrides passed to :func:`get_stream_config`
* Keep PyYAML optional (YAML is only parsed when it is installed).

Environment Variables
---------------------
DRAFTSTREAM_BASE_URL, DRAFTSTREAM_COOKIE, DRAFTSTREAM_AGENT_PATH,
DRAFTSTREAM_SKILL_PATH, DRAFTSTREAM_DOCUMENT_PATH, DRAFTSTREAM_PROGRESS_TARGET.

External Config File
--------------------
```
base_url: https://dashboard.internal
cookie: "next-auth.session-token=..."
headers:
  X-Requested-With: draftstream
paths:
  file: /api/document/refine
progress_target: 4000
```

Public API
----------
* get_stream_config(overrides: dict | None = None) -> dict
* endpoint_for(document_type: str, config: dict | None = None) -> str
* reset_config_cache() -> None
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional
import json
import os

from .defaults import (
    AGENT_STREAM_PATH,
    DEFAULT_BASE_URL,
    DOCUMENT_REFINE_PATH,
    PROGRESS_ASSUMED_TARGET_LENGTH,
    SKILL_STREAM_PATH,
)

try:  # Optional YAML support
    import yaml  # type: ignore
except ImportError:  # pragma: no cover
    yaml = None  # type: ignore


def _defaults() -> Dict[str, Any]:
    return {
        "base_url": DEFAULT_BASE_URL,
        "cookie": None,
        "headers": {},
        "paths": {
            "agent": AGENT_STREAM_PATH,
            "skill": SKILL_STREAM_PATH,
            "file": DOCUMENT_REFINE_PATH,
        },
        "progress_target": PROGRESS_ASSUMED_TARGET_LENGTH,
    }


ENV_FIELD_MAP = {
    "base_url": "DRAFTSTREAM_BASE_URL",
    "cookie": "DRAFTSTREAM_COOKIE",
    "progress_target": "DRAFTSTREAM_PROGRESS_TARGET",
}

ENV_PATH_MAP = {
    "agent": "DRAFTSTREAM_AGENT_PATH",
    "skill": "DRAFTSTREAM_SKILL_PATH",
    "file": "DRAFTSTREAM_DOCUMENT_PATH",
}


_FILE_CACHE: Optional[Dict[str, Any]] = None
_DOTENV_LOADED = False


def _load_dotenv_once() -> None:
    """Read KEY=VALUE lines from ``.env`` (or ``DOTENV_FILE``) once.

    Existing environment variables are never overwritten.
    """
    global _DOTENV_LOADED
    if _DOTENV_LOADED:
        return
    path = os.getenv("DOTENV_FILE", ".env")
    _DOTENV_LOADED = True
    if not os.path.isfile(path):
        return
    with open(path, "r", encoding="utf-8") as fh:
        for line in fh:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            k, v = line.split("=", 1)
            k = k.strip()
            v = v.strip().strip('"').strip("'")
            if k and k not in os.environ:
                os.environ[k] = v


def _load_external_config() -> Dict[str, Any]:
    global _FILE_CACHE
    if _FILE_CACHE is not None:
        return _FILE_CACHE
    path = os.getenv("DRAFTSTREAM_CONFIG_FILE")
    if not path or not Path(path).exists():
        _FILE_CACHE = {}
        return _FILE_CACHE
    text = Path(path).read_text(encoding="utf-8")
    data: Any = {}
    try:
        data = json.loads(text)
    except ValueError:
        if yaml is not None:  # pragma: no cover (depends on optional lib)
            try:
                data = yaml.safe_load(text) or {}
            except yaml.YAMLError:
                data = {}
    if not isinstance(data, dict):
        data = {}
    _FILE_CACHE = data
    return data


def _coerce_target(value: Any) -> int:
    try:
        target = int(value)
    except (TypeError, ValueError):
        return PROGRESS_ASSUMED_TARGET_LENGTH
    return target if target > 0 else PROGRESS_ASSUMED_TARGET_LENGTH


def _merge(cfg: Dict[str, Any], layer: Dict[str, Any]) -> None:
    """Merge one source into ``cfg``; ``paths`` and ``headers`` merge per key."""
    for key, value in layer.items():
        if value is None:
            continue
        if key in ("paths", "headers") and isinstance(value, dict):
            cfg[key] = {**cfg.get(key, {}), **value}
        else:
            cfg[key] = value


def _env_overrides() -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for field, name in ENV_FIELD_MAP.items():
        val = os.getenv(name)
        if val:
            out[field] = val
    paths = {doc: os.getenv(name) for doc, name in ENV_PATH_MAP.items() if os.getenv(name)}
    if paths:
        out["paths"] = paths
    return out


def get_stream_config(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return the merged producer configuration.

    Merge order (later wins): defaults -> external config -> env vars -> overrides
    """
    _load_dotenv_once()
    cfg = _defaults()
    _merge(cfg, _load_external_config())
    _merge(cfg, _env_overrides())
    if overrides:
        _merge(cfg, overrides)
    cfg["base_url"] = str(cfg["base_url"]).rstrip("/")
    cfg["progress_target"] = _coerce_target(cfg.get("progress_target"))
    return cfg


def endpoint_for(document_type: str, config: Optional[Dict[str, Any]] = None) -> str:
    """Return the request path serving ``document_type``.

    Raises:
        KeyError: when no path is configured for the document type.
    """
    cfg = config if config is not None else get_stream_config()
    paths = cfg.get("paths", {})
    key = (document_type or "").lower().strip()
    if key not in paths:
        raise KeyError(f"no stream endpoint configured for document type {document_type!r}")
    return paths[key]


def reset_config_cache() -> None:
    """Forget the cached external config file (tests and long-lived shells)."""
    global _FILE_CACHE
    _FILE_CACHE = None


__all__ = [
    "get_stream_config",
    "endpoint_for",
    "reset_config_cache",
    "ENV_FIELD_MAP",
    "ENV_PATH_MAP",
]
