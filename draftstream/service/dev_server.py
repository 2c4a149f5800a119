from __future__ import annotations

import os
import uvicorn

from draftstream.config.defaults import DEV_SERVER_DEFAULT_HOST, DEV_SERVER_DEFAULT_PORT


def _parse_port(value: str | None, default: int) -> int:
    """Best-effort parse of a port from string, falling back to a sane default."""
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def main() -> None:
    """Start the scripted dev producer.

    - DRAFTSTREAM_DEV_HOST: interface to bind (default "127.0.0.1")
    - DRAFTSTREAM_DEV_PORT: port to bind (default 3000, the dashboard's port,
      so the client defaults work unchanged)
    - DRAFTSTREAM_DEV_RELOAD: "true" to enable auto-reload (default off)
    """
    host = os.getenv("DRAFTSTREAM_DEV_HOST", DEV_SERVER_DEFAULT_HOST)
    port = _parse_port(os.getenv("DRAFTSTREAM_DEV_PORT"), DEV_SERVER_DEFAULT_PORT)
    reload_enabled = (os.getenv("DRAFTSTREAM_DEV_RELOAD") or "").lower() == "true"

    uvicorn.run(
        "draftstream.service.app:app",
        host=host,
        port=port,
        reload=reload_enabled,
    )


if __name__ == "__main__":
    main()
