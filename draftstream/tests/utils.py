"""Shared testing utilities.

Exports:
    - assert_true(condition: bool, message: str) -> None
    - event_payloads(records, event=None) -> list of decoded JSON log payloads
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional


def assert_true(condition: bool, message: str) -> None:
    """Raise AssertionError with ``message`` if ``condition`` is False."""
    if not condition:
        raise AssertionError(message)


def event_payloads(records: List[logging.LogRecord], event: Optional[str] = None) -> List[Dict[str, Any]]:
    """Decode JSON log messages, optionally keeping only one event name."""
    out: List[Dict[str, Any]] = []
    for r in records:
        try:
            payload = json.loads(r.getMessage())
        except ValueError:
            continue
        if not isinstance(payload, dict):
            continue
        if event is None or payload.get("event") == event:
            out.append(payload)
    return out
