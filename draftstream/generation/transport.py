"""Stream transports: the only code that touches the network.

Purpose
-------
A transport opens the producer stream for a :class:`GenerationRequest` and
hands the session an iterator of decoded text chunks. The HTTP response is a
resource owned by the session for the duration of one ``start()`` call: it is
opened and closed through the context manager returned by ``open_stream``,
never stored globally.

External dependencies
---------------------
- ``httpx`` streaming responses (``Client.stream`` + ``Response.iter_text``).
  ``iter_text`` decodes incrementally, so a multi-byte character split across
  two network reads is reassembled before it reaches the frame parser.

Failure semantics
-----------------
- Connection errors, non-2xx statuses and empty bodies raise
  :class:`TransportError` *before* the first chunk is yielded.
- Read failures while iterating (including the idle timeout) raise
  :class:`TransportError` from the iterator.
- Nothing is retried here.
"""

from __future__ import annotations

from contextlib import ExitStack, contextmanager
from typing import Any, Dict, Iterator, Optional, Protocol, runtime_checkable

import httpx

from ..base.errors import ErrorCode, TransportError, classify_exception, status_to_code
from ..base.http import get_httpx_client
from ..config import endpoint_for, get_stream_config
from .request import GenerationRequest

_ERROR_DETAIL_CHARS = 200


@runtime_checkable
class StreamTransport(Protocol):
    """Opens a producer stream for one request."""

    def open_stream(self, request: GenerationRequest):  # -> ContextManager[Iterator[str]]
        ...


def _error_detail(response: httpx.Response) -> Optional[str]:
    """Extract ``{"error": ...}`` from a JSON error body, if any."""
    try:
        response.read()
        data = response.json()
    except (httpx.HTTPError, ValueError):
        return None
    if isinstance(data, dict):
        detail = data.get("error") or data.get("detail")
        if isinstance(detail, str) and detail:
            return detail[:_ERROR_DETAIL_CHARS]
    return None


def _check_response(response: httpx.Response) -> None:
    if not response.is_success:
        detail = _error_detail(response)
        message = f"HTTP error! status: {response.status_code}"
        if detail:
            message = f"{message} ({detail})"
        raise TransportError(
            code=status_to_code(response.status_code),
            message=message,
            status_code=response.status_code,
        )
    if response.status_code == 204 or response.headers.get("content-length") == "0":
        raise TransportError(code=ErrorCode.TRANSPORT, message="No response body", status_code=response.status_code)


def _iter_body(response: httpx.Response) -> Iterator[str]:
    received = False
    try:
        for text in response.iter_text():
            if text:
                received = True
                yield text
    except httpx.HTTPError as exc:
        raise TransportError(code=classify_exception(exc), message=f"stream read failed: {exc}", raw=exc) from exc
    if not received:
        # A body that ends before its first byte carries no stream at all.
        raise TransportError(code=ErrorCode.TRANSPORT, message="No response body", status_code=response.status_code)


class HttpStreamTransport:
    """POSTs the request body to the configured endpoint and streams the reply."""

    def __init__(self, *, config: Optional[Dict[str, Any]] = None, client: Optional[httpx.Client] = None) -> None:
        self._config = config if config is not None else get_stream_config()
        self._client = client

    @property
    def config(self) -> Dict[str, Any]:
        return self._config

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "text/event-stream", **self._config.get("headers", {})}
        cookie = self._config.get("cookie")
        if cookie:
            headers["Cookie"] = cookie
        return headers

    @contextmanager
    def open_stream(self, request: GenerationRequest) -> Iterator[Iterator[str]]:
        client = self._client or get_httpx_client(self._config["base_url"], purpose="stream")
        path = endpoint_for(request.document_type, self._config)
        with ExitStack() as stack:
            try:
                response = stack.enter_context(
                    client.stream("POST", path, json=request.to_wire(), headers=self._headers())
                )
            except httpx.HTTPError as exc:
                raise TransportError(
                    code=classify_exception(exc),
                    message=f"request failed: {exc}",
                    raw=exc,
                ) from exc
            _check_response(response)
            yield _iter_body(response)


__all__ = ["StreamTransport", "HttpStreamTransport"]
