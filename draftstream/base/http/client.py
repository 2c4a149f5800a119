"""Shared ``httpx.Client`` pool for stream transports.

Repeated refinement rounds against the same producer reuse one connection
pool. A client is keyed by ``(base_url, purpose, TimeoutConfig)``: changing a
``DRAFTSTREAM_TIMEOUT_*`` variable yields a fresh client on the next lookup
instead of silently keeping the old timeouts. Superseded and closed clients
are closed and dropped when that happens.

All clients are closed at interpreter exit; tests call
:func:`close_all_clients` between cases.
"""

from __future__ import annotations

import atexit
import contextlib
import threading
from typing import Dict, Optional, Tuple

import httpx

from ..timeouts import TimeoutConfig, build_httpx_timeout, get_timeout_config

_PoolKey = Tuple[Optional[str], str, TimeoutConfig]

_pool: Dict[_PoolKey, httpx.Client] = {}
_pool_lock = threading.Lock()


def _build(base_url: Optional[str], cfg: TimeoutConfig) -> httpx.Client:
    kwargs = {"timeout": build_httpx_timeout(cfg)}
    if base_url:
        kwargs["base_url"] = base_url
    return httpx.Client(**kwargs)


def _evict_stale(base_url: Optional[str], purpose: str, current: TimeoutConfig) -> None:
    for key in [k for k in _pool if k[:2] == (base_url, purpose) and k[2] != current]:
        with contextlib.suppress(Exception):
            _pool.pop(key).close()


def get_httpx_client(base_url: Optional[str], purpose: str = "stream") -> httpx.Client:
    """Return the pooled client for ``base_url`` and ``purpose``.

    ``purpose`` separates pools that should not share connections (for
    example a health probe next to a long-lived stream).
    """
    cfg = get_timeout_config()
    key = (base_url, purpose, cfg)
    with _pool_lock:
        client = _pool.get(key)
        if client is None or client.is_closed:
            _evict_stale(base_url, purpose, cfg)
            client = _pool[key] = _build(base_url, cfg)
        return client


def close_all_clients() -> None:
    """Close and forget every pooled client."""
    with _pool_lock:
        clients = list(_pool.values())
        _pool.clear()
    for client in clients:
        with contextlib.suppress(Exception):  # nosec B110 - shutdown path
            client.close()


atexit.register(close_all_clients)

__all__ = ["get_httpx_client", "close_all_clients"]
