"""Refinement cycle: reconcile machine output with human edits across rounds.

Phases
------
``DRAFTING``   nothing to review yet (initial, or after ``reject()``)
``REFINING``   a generation session is running
``REVIEWING``  a completed result is presented; the human may edit, refine
               again, accept or reject
``ACCEPTED``   the effective content was handed to ``on_accept``; the cycle
               is closed

The rule the cycle exists for: a second refinement pass starts from the
human-edited text whenever edits exist, never from the stale machine output.

Failure semantics
-----------------
A session ending ``FAILED`` or ``STOPPED`` leaves the machine content and the
manual override untouched and returns the cycle to the phase it was in, so the
human can retry or fall back to accept/reject on the last good state. Misuse
(wrong phase, concurrent refinement, closed cycle) raises a
:class:`~draftstream.base.errors.DraftStreamError` subclass.
"""
from __future__ import annotations

import logging
import threading
import uuid
from enum import Enum
from typing import Callable, Optional

from ..base.cancellation import CancellationToken
from ..base.errors import CycleClosedError, CycleStateError, ErrorCode, RefinementInProgressError
from ..base.logging import LogContext, get_logger, log_event
from ..generation import DocumentType, GenerationRequest, GenerationSession, SessionSnapshot, SessionStatus
from .presentation import DiffPresenter

SessionFactory = Callable[[CancellationToken], GenerationSession]
AcceptCallback = Callable[[str], None]


class CyclePhase(str, Enum):
    DRAFTING = "drafting"
    REFINING = "refining"
    REVIEWING = "reviewing"
    ACCEPTED = "accepted"


def _default_session_factory(token: CancellationToken) -> GenerationSession:
    return GenerationSession(cancellation_token=token)


class RefinementCycle:
    """Own the sessions of one document's refine / edit / accept loop.

    Parameters
    ----------
    original_content:
        The document as it was before any refinement. Never modified.
    session_factory:
        Builds a fresh :class:`GenerationSession` for each round from the
        cancellation token the cycle hands it.
    presenter:
        Receives ``(original_content, latest_machine_content)`` after every
        successful round, while the cycle lock is held. It may call back into
        the cycle from the same thread.
    on_accept:
        Save collaborator; receives the effective final content.
    cancellation_token:
        Optional parent token. Every round runs on a child of it.
    """

    def __init__(
        self,
        original_content: str,
        *,
        session_factory: Optional[SessionFactory] = None,
        presenter: Optional[DiffPresenter] = None,
        on_accept: Optional[AcceptCallback] = None,
        document_type: DocumentType = "file",
        file_name: Optional[str] = None,
        cancellation_token: Optional[CancellationToken] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._original = original_content
        self._factory = session_factory or _default_session_factory
        self._presenter = presenter
        self._on_accept = on_accept
        self.document_type: DocumentType = document_type
        self.file_name = file_name
        self._token = cancellation_token or CancellationToken()
        self._logger = logger or get_logger("draftstream.refinement")
        self._lock = threading.RLock()
        self.cycle_id = uuid.uuid4().hex[:8]
        self._ctx = LogContext(session_id=self.cycle_id, mode="refine", document_type=document_type, subject=file_name)

        self._phase = CyclePhase.DRAFTING
        self._active: Optional[GenerationSession] = None
        self._latest: Optional[str] = None
        self._override: Optional[str] = None
        self._has_manual_edits = False
        self._last_error: Optional[str] = None
        self._last_error_code: Optional[ErrorCode] = None
        self._last_snapshot: Optional[SessionSnapshot] = None
        self.rounds = 0

    # Observation -----------------------------------------------------------
    @property
    def original_content(self) -> str:
        return self._original

    @property
    def latest_machine_content(self) -> Optional[str]:
        return self._latest

    @property
    def manual_override(self) -> Optional[str]:
        return self._override

    @property
    def has_manual_edits(self) -> bool:
        return self._has_manual_edits

    @property
    def phase(self) -> CyclePhase:
        return self._phase

    @property
    def active_session(self) -> Optional[GenerationSession]:
        return self._active

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    @property
    def last_error_code(self) -> Optional[ErrorCode]:
        return self._last_error_code

    @property
    def last_status(self) -> Optional[SessionStatus]:
        return self._last_snapshot.status if self._last_snapshot else None

    @property
    def effective_content(self) -> Optional[str]:
        """Manual override when the human edited the result, else the machine text."""
        if self._has_manual_edits:
            return self._override
        return self._latest

    # Operations ------------------------------------------------------------
    def begin_refinement(self, content: str, instructions: str) -> SessionSnapshot:
        """Run one refinement round on ``content`` and return its final snapshot.

        Raises ``pydantic.ValidationError`` for blank content or instructions
        before any session is created.
        """
        request = GenerationRequest.refine(
            content,
            instructions,
            document_type=self.document_type,
            file_name=self.file_name,
        )
        with self._lock:
            self._ensure_open("begin_refinement")
            if self._active is not None:
                raise RefinementInProgressError(f"cycle {self.cycle_id} already has a refinement in flight")
            previous_phase = self._phase
            self.rounds += 1
            session = self._factory(self._token.child())
            self._active = session
            self._phase = CyclePhase.REFINING

        log_event(
            self._logger,
            "cycle.begin",
            self._ctx,
            round=self.rounds,
            session=session.session_id,
            base_length=len(content),
            instructions_length=len(instructions),
            from_manual_edit=self._has_manual_edits and content == self._override,
        )
        snapshot = None
        try:
            snapshot = session.start(request)
        finally:
            # phase restore, result and presentation are one step for review operations
            with self._lock:
                self._active = None
                self._phase = previous_phase
                if snapshot is not None:
                    self._record_result(snapshot)
        return snapshot

    def record_manual_edit(self, new_text: str) -> None:
        with self._lock:
            self._require_reviewing("record_manual_edit")
            self._override = new_text
            self._has_manual_edits = new_text != self._latest
            log_event(
                self._logger,
                "cycle.manual_edit",
                self._ctx,
                length=len(new_text),
                has_manual_edits=self._has_manual_edits,
            )

    def refine_again(self, instructions: str) -> SessionSnapshot:
        """Refine the current best text again; human edits are never discarded."""
        with self._lock:
            self._require_reviewing("refine_again")
            content = self.effective_content or ""
        return self.begin_refinement(content, instructions)

    def accept(self) -> str:
        with self._lock:
            self._require_reviewing("accept")
            final = self.effective_content or ""
            if self._on_accept is not None:
                self._on_accept(final)
            self._phase = CyclePhase.ACCEPTED
            log_event(
                self._logger,
                "cycle.accept",
                self._ctx,
                rounds=self.rounds,
                length=len(final),
                manual_edits=self._has_manual_edits,
            )
            return final

    def reject(self) -> None:
        """Discard the machine result and any edits; ``original_content`` stays as is."""
        with self._lock:
            self._require_reviewing("reject")
            self._latest = None
            self._override = None
            self._has_manual_edits = False
            self._phase = CyclePhase.DRAFTING
            log_event(self._logger, "cycle.reject", self._ctx, rounds=self.rounds)

    def cancel(self, reason: Optional[str] = None) -> bool:
        """Cancel the running round, if any. Returns whether one was running."""
        session = self._active
        if session is None:
            return False
        session.cancel(reason or "refinement cancelled")
        return True

    # Internals ---------------------------------------------------------------
    def _record_result(self, snapshot: SessionSnapshot) -> None:
        self._last_snapshot = snapshot
        if snapshot.status is SessionStatus.COMPLETE:
            self._latest = snapshot.accumulated_content
            self._override = None
            self._has_manual_edits = False
            self._last_error = None
            self._last_error_code = None
            self._phase = CyclePhase.REVIEWING
        elif snapshot.status is SessionStatus.FAILED:
            self._last_error = snapshot.last_error
            self._last_error_code = snapshot.error_code
        else:
            self._last_error = None
            self._last_error_code = None

        log_event(
            self._logger,
            "cycle.result",
            self._ctx,
            level=logging.INFO if snapshot.succeeded else logging.WARNING,
            round=self.rounds,
            status=snapshot.status.value,
            phase=self._phase.value,
            error=snapshot.last_error,
            error_code=snapshot.error_code.value if snapshot.error_code else None,
            stop_reason=snapshot.stop_reason.value if snapshot.stop_reason else None,
        )
        if snapshot.succeeded and self._presenter is not None:
            self._presenter.present(self._original, self._latest)

    def _ensure_open(self, operation: str) -> None:
        if self._phase is CyclePhase.ACCEPTED:
            raise CycleClosedError(f"{operation}: cycle {self.cycle_id} was already accepted")

    def _require_reviewing(self, operation: str) -> None:
        self._ensure_open(operation)
        if self._phase is CyclePhase.REFINING:
            raise RefinementInProgressError(f"{operation}: a refinement is still in flight")
        if self._phase is not CyclePhase.REVIEWING:
            raise CycleStateError(f"{operation} needs a completed refinement (phase is {self._phase.value})")


__all__ = ["RefinementCycle", "CyclePhase", "SessionFactory"]
