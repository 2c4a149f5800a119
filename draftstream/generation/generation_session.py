"""Generation session: the state machine owning one streaming operation.

States: ``IDLE -> IN_FLIGHT -> {COMPLETE, FAILED, STOPPED}``. A session is
started at most once; ``reset()`` only returns a finished session to ``IDLE``
for disposal.

The read loop blocks on one network read at a time. Between reads, parsing,
interpretation and state transitions run synchronously, so observers always
see a consistent snapshot. Terminal outcomes are reported through state and
callbacks; ``start()`` itself only raises for misuse.
"""
from __future__ import annotations

import logging
import threading
import time
import uuid
from typing import Callable, Optional

from ..base.cancellation import CancellationToken, CancelledError
from ..base.errors import ErrorCode, SessionStateError, TransportError, classify_exception, classify_message
from ..base.logging import LogContext, get_logger, log_event, normalized_log_event
from ..base.streaming import (
    ChunkFrame,
    CompleteFrame,
    ErrorFrame,
    FrameParser,
    ProgressEstimator,
    SessionMetrics,
    StreamFrame,
    UnrecognizedFrame,
    interpret_frame,
)
from ..config import get_stream_config
from .request import GenerationRequest
from .session_state import SessionSnapshot, SessionStatus, StopReason
from .transport import HttpStreamTransport, StreamTransport

UpdateCallback = Callable[[SessionSnapshot], None]
TextCallback = Callable[[str], None]
StopCallback = Callable[[StopReason], None]

_ERROR_PREVIEW_CHARS = 260


class GenerationSession:
    """Drive one generate/refine stream and expose its progress.

    Parameters
    ----------
    transport:
        Opens the producer stream. Defaults to :class:`HttpStreamTransport`
        built from the merged configuration.
    cancellation_token:
        Checked before every chunk is processed. Pass a child of a longer-lived
        token to cancel from outside.
    on_update, on_complete, on_error, on_stop:
        Observer callbacks. Exceptions raised by observers are logged and do
        not affect the session.
    progress_target:
        Assumed final length used by the progress estimate.
    """

    def __init__(
        self,
        transport: Optional[StreamTransport] = None,
        *,
        cancellation_token: Optional[CancellationToken] = None,
        on_update: Optional[UpdateCallback] = None,
        on_complete: Optional[TextCallback] = None,
        on_error: Optional[TextCallback] = None,
        on_stop: Optional[StopCallback] = None,
        progress_target: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        config = None
        if transport is None or progress_target is None:
            config = get_stream_config()
        self._transport = transport or HttpStreamTransport(config=config)
        self._token = cancellation_token or CancellationToken()
        self._on_update = on_update
        self._on_complete = on_complete
        self._on_error = on_error
        self._on_stop = on_stop
        self._progress = ProgressEstimator(progress_target or config["progress_target"])
        self._logger = logger or get_logger("draftstream.session")
        self._lock = threading.Lock()
        self.session_id = uuid.uuid4().hex[:8]
        self._ctx = LogContext(session_id=self.session_id)
        self._request: Optional[GenerationRequest] = None
        self._started = False
        self._running = False
        self._status = SessionStatus.IDLE
        self._content = ""
        self._percent = 0.0
        self._last_error: Optional[str] = None
        self._error_code: Optional[ErrorCode] = None
        self._stop_reason: Optional[StopReason] = None
        self.metrics = SessionMetrics()

    # Observation -----------------------------------------------------------
    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def accumulated_content(self) -> str:
        return self._content

    @property
    def progress_percent(self) -> float:
        return self._percent

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    @property
    def error_code(self) -> Optional[ErrorCode]:
        return self._error_code

    @property
    def stop_reason(self) -> Optional[StopReason]:
        return self._stop_reason

    @property
    def request(self) -> Optional[GenerationRequest]:
        return self._request

    @property
    def is_terminal(self) -> bool:
        return self._status.is_terminal

    @property
    def cancellation_token(self) -> CancellationToken:
        return self._token

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            status=self._status,
            accumulated_content=self._content,
            progress_percent=self._percent,
            last_error=self._last_error,
            error_code=self._error_code,
            stop_reason=self._stop_reason,
        )

    # Operations ------------------------------------------------------------
    def start(self, request: GenerationRequest) -> SessionSnapshot:
        """Open the stream and consume it until a terminal state is reached.

        Returns the final snapshot. Raises :class:`SessionStateError` when the
        session was already started (including after ``reset()``).
        """
        with self._lock:
            if self._started or self._status is not SessionStatus.IDLE:
                raise SessionStateError(f"session {self.session_id} cannot be started twice")
            self._started = True
            self._running = True
            self._request = request
            self._status = SessionStatus.IN_FLIGHT

        self._ctx = self._ctx.bind(
            mode=request.mode,
            document_type=request.document_type,
            subject=request.file_name or request.subject_name,
        )
        parser = FrameParser(logger=get_logger("draftstream.stream"), ctx=self._ctx)
        t0 = time.perf_counter()
        log_event(self._logger, "session.start", self._ctx, base_length=len(request.base_content or ""))
        phase = "open"
        try:
            with self._transport.open_stream(request) as chunks:
                phase = "read"
                self._token.raise_if_cancelled()
                for raw in chunks:
                    self._token.raise_if_cancelled()
                    self._apply_payloads(parser.feed(raw), t0)
                    if self.is_terminal:
                        break
                else:
                    self._apply_payloads(parser.flush(), t0)
                    if not self.is_terminal:
                        self._stop(StopReason.END_OF_STREAM, parser)
        except CancelledError as exc:
            self._stop(StopReason.CANCELLED, parser, cancel_reason=exc.reason)
        except TransportError as exc:
            self._fail(exc.message, exc.code, phase=phase)
        except Exception as exc:  # custom transports may raise anything mid-stream
            self._fail(str(exc)[:_ERROR_PREVIEW_CHARS] or type(exc).__name__, classify_exception(exc), phase=phase)
        finally:
            if self._status is SessionStatus.IN_FLIGHT:
                # KeyboardInterrupt or SystemExit escaped the read loop
                self._stop_reason = StopReason.CANCELLED
                self._status = SessionStatus.STOPPED
            self._running = False
            self.metrics.dropped_frames = parser.dropped
            self.metrics.total_duration_ms = (time.perf_counter() - t0) * 1000.0
        self._log_terminal()
        return self.snapshot()

    def cancel(self, reason: Optional[str] = None) -> None:
        """Ask the read loop to stop before it processes the next chunk.

        The stream is closed when the loop notices; the session then ends in
        ``STOPPED`` with ``stop_reason=CANCELLED``. A no-op once terminal.
        """
        self._token.cancel(reason or "cancelled by caller")

    def detach(self) -> None:
        """Drop all observer callbacks; the stream keeps being consumed."""
        self._on_update = self._on_complete = self._on_error = self._on_stop = None

    def reset(self) -> None:
        """Return a finished session to ``IDLE`` for disposal.

        The session cannot be started again afterwards.
        """
        with self._lock:
            if self._running or self._status is SessionStatus.IN_FLIGHT:
                raise SessionStateError(f"session {self.session_id} is still in flight")
            self._status = SessionStatus.IDLE
            self._content = ""
            self._percent = 0.0
            self._last_error = None
            self._error_code = None
            self._stop_reason = None

    # Frame handling ----------------------------------------------------------
    def _apply_payloads(self, payloads, t0: float) -> None:
        for payload in payloads:
            if self.is_terminal:
                return
            self.metrics.frames += 1
            self._apply(interpret_frame(payload), t0)

    def _apply(self, frame: StreamFrame, t0: float) -> None:
        if isinstance(frame, ChunkFrame):
            if self.metrics.time_to_first_chunk_ms is None:
                self.metrics.time_to_first_chunk_ms = (time.perf_counter() - t0) * 1000.0
            if frame.is_snapshot and len(frame.content) < len(self._content):
                # in-flight content never shrinks; only complete may replace it with shorter text
                log_event(
                    self._logger,
                    "stream.snapshot_regressed",
                    self._ctx,
                    level=logging.WARNING,
                    current_length=len(self._content),
                    snapshot_length=len(frame.content),
                )
                return
            self._content = frame.content if frame.is_snapshot else self._content + frame.content
            self._percent = self._progress.update(len(self._content))
            log_event(
                self._logger,
                "session.chunk",
                self._ctx,
                level=logging.DEBUG,
                content_length=len(self._content),
                progress=round(self._percent, 2),
            )
            self._notify(self._on_update, self.snapshot())
        elif isinstance(frame, CompleteFrame):
            self._content = frame.content
            self._percent = 100.0
            self._status = SessionStatus.COMPLETE
            self._notify(self._on_update, self.snapshot())
            self._notify(self._on_complete, self._content)
        elif isinstance(frame, ErrorFrame):
            self._last_error = frame.message
            self._error_code = classify_message(frame.message, default=ErrorCode.PRODUCER)
            self._status = SessionStatus.FAILED
            self._notify(self._on_update, self.snapshot())
            self._notify(self._on_error, frame.message)
        elif isinstance(frame, UnrecognizedFrame):
            self.metrics.unrecognized_frames += 1
            payload_type = frame.payload.get("type") if isinstance(frame.payload, dict) else type(frame.payload).__name__
            log_event(self._logger, "stream.frame_unrecognized", self._ctx, level=logging.DEBUG, payload_type=payload_type)

    def _fail(self, message: str, code: ErrorCode, *, phase: str) -> None:
        self._last_error = message
        self._error_code = code
        self._status = SessionStatus.FAILED
        self._ctx = self._ctx.bind(failed_phase=phase)
        self._notify(self._on_update, self.snapshot())
        self._notify(self._on_error, message)

    def _stop(self, reason: StopReason, parser: FrameParser, *, cancel_reason: Optional[str] = None) -> None:
        self._stop_reason = reason
        self._status = SessionStatus.STOPPED
        self._ctx = self._ctx.bind(pending_chars=len(parser.pending) or None, cancel_reason=cancel_reason)
        self._notify(self._on_update, self.snapshot())
        self._notify(self._on_stop, reason)

    def _notify(self, callback, value) -> None:
        if callback is None:
            return
        try:
            callback(value)
        except Exception as exc:  # observers must not break the stream
            log_event(
                self._logger,
                "session.observer_error",
                self._ctx,
                level=logging.WARNING,
                callback=getattr(callback, "__name__", repr(callback)),
                error=str(exc)[:_ERROR_PREVIEW_CHARS],
            )

    def _log_terminal(self) -> None:
        level = logging.INFO
        if self._status is SessionStatus.FAILED:
            level = logging.ERROR
        elif self._stop_reason is StopReason.END_OF_STREAM:
            level = logging.WARNING
        normalized_log_event(
            self._logger,
            f"session.{self._status.value}",
            self._ctx,
            phase="finalize",
            frames=self.metrics.frames,
            content_length=len(self._content),
            progress=self._percent,
            error_code=self._error_code.value if self._error_code else None,
            level=level,
            error=self._last_error,
            stop_reason=self._stop_reason.value if self._stop_reason else None,
            dropped_frames=self.metrics.dropped_frames or None,
            duration_ms=round(self.metrics.total_duration_ms or 0.0, 1),
            ttfc_ms=round(self.metrics.time_to_first_chunk_ms, 1) if self.metrics.time_to_first_chunk_ms else None,
        )


__all__ = ["GenerationSession"]
