"""Pytest configuration for the draftstream test suite.

Provides a log capture fixture bound to the shared ``draftstream`` logger
(which does not propagate to root) and resets process-wide caches (HTTP client
pool, external config file) around every test.
"""

from __future__ import annotations

import logging
from contextlib import suppress
from typing import Iterator, List

import pytest

from draftstream.base.http import close_all_clients
from draftstream.base.logging import BASE_LOGGER_NAME, get_logger
from draftstream.config import reset_config_cache


class _ListHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.records: List[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


@pytest.fixture()
def log_capture(monkeypatch: pytest.MonkeyPatch) -> Iterator[List[logging.LogRecord]]:
    """Collect every record reaching the ``draftstream`` logger, DEBUG included."""
    monkeypatch.setenv("DRAFTSTREAM_LOG_LEVEL", "DEBUG")
    base = get_logger(BASE_LOGGER_NAME)
    handler = _ListHandler()
    base.addHandler(handler)
    try:
        yield handler.records
    finally:
        base.removeHandler(handler)


@pytest.fixture(autouse=True)
def _isolate_process_state(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[None]:
    """Keep env-driven config and pooled clients from leaking between tests."""
    for name in (
        "DRAFTSTREAM_BASE_URL",
        "DRAFTSTREAM_COOKIE",
        "DRAFTSTREAM_AGENT_PATH",
        "DRAFTSTREAM_SKILL_PATH",
        "DRAFTSTREAM_DOCUMENT_PATH",
        "DRAFTSTREAM_PROGRESS_TARGET",
        "DRAFTSTREAM_CONFIG_FILE",
        "DRAFTSTREAM_DEV_REQUIRED_COOKIE",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DOTENV_FILE", str(tmp_path / "absent.env"))
    reset_config_cache()
    yield
    reset_config_cache()
    with suppress(Exception):  # teardown must not fail tests
        close_all_clients()
