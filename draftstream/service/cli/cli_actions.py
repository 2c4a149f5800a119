"""CLI action handlers.

Purpose
-------
Subcommand handlers for ``draftstream generate`` and ``draftstream refine``.
They wire a :class:`GenerationSession` or :class:`RefinementCycle` to the
terminal: progress on stderr, results on stdout or in files, diffs through
:class:`UnifiedDiffPresenter`. No top-level side effects; safe to import in
tests.

Injection points
----------------
Every handler accepts ``transport`` (defaults to HTTP from the merged config),
and ``handle_refine`` additionally ``input_fn`` and ``edit_fn`` so tests can
drive the interactive loop without a terminal or an editor.

Exit codes
----------
``0`` generated / accepted, ``1`` failure, ``2`` rejected or aborted.
"""

from __future__ import annotations

import argparse
import json
import os
import shlex
import subprocess  # nosec B404 - launches the user's own $EDITOR
import sys
import tempfile
from typing import Any, Callable, Dict, Optional, TextIO

from pydantic import ValidationError

from ...base.cancellation import CancellationToken
from ...base.logging import LogContext, get_logger, log_event
from ...config import get_stream_config
from ...generation import (
    GenerationRequest,
    GenerationSession,
    HttpStreamTransport,
    SessionSnapshot,
    SessionStatus,
    StreamTransport,
)
from ...refinement import CyclePhase, RefinementCycle, UnifiedDiffPresenter

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_ABORTED = 2

REVIEW_PROMPT = "[a]ccept  [r]eject  [e]dit  [g <instructions>] refine again  [q]uit > "
RETRY_PROMPT = "[g <instructions>] retry  [q]uit > "

InputFn = Callable[[str], str]
EditFn = Callable[[str], str]


def build_transport(args: argparse.Namespace) -> StreamTransport:
    """Return an HTTP transport using the merged config plus CLI overrides."""
    overrides = {"base_url": getattr(args, "base_url", None), "cookie": getattr(args, "cookie", None)}
    return HttpStreamTransport(config=get_stream_config(overrides))


def progress_printer(stream: Optional[TextIO] = None) -> Callable[[SessionSnapshot], None]:
    """Return an ``on_update`` observer rendering a one-line progress counter."""

    def _print(snapshot: SessionSnapshot) -> None:
        out = stream or sys.stderr
        out.write(f"\r{snapshot.status.value:<9} {snapshot.progress_percent:5.1f}%  {len(snapshot.accumulated_content):>6} chars")
        if snapshot.status.is_terminal:
            out.write("\n")
        out.flush()

    return _print


def snapshot_to_dict(snapshot: SessionSnapshot, metrics: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {
        "status": snapshot.status.value,
        "content": snapshot.accumulated_content,
        "progress": snapshot.progress_percent,
        "error": snapshot.last_error,
        "error_code": snapshot.error_code.value if snapshot.error_code else None,
        "stop_reason": snapshot.stop_reason.value if snapshot.stop_reason else None,
        "metrics": metrics,
    }


def _describe_failure(snapshot: SessionSnapshot) -> str:
    if snapshot.status is SessionStatus.FAILED:
        return f"error: {snapshot.last_error}"
    reason = snapshot.stop_reason.value if snapshot.stop_reason else "unknown"
    return f"stopped before completion ({reason})"


def edit_in_editor(text: str, *, suffix: str = ".md") -> str:
    """Open ``text`` in ``$VISUAL``/``$EDITOR`` and return the saved result.

    Raises ``subprocess.CalledProcessError`` when the editor exits non-zero.
    """
    editor = os.environ.get("VISUAL") or os.environ.get("EDITOR") or "vi"
    fd, path = tempfile.mkstemp(suffix=suffix, prefix="draftstream-")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(text)
        subprocess.run([*shlex.split(editor), path], check=True)  # nosec B603
        with open(path, "r", encoding="utf-8") as fh:
            return fh.read()
    finally:
        os.unlink(path)


def handle_generate(args: argparse.Namespace, *, transport: Optional[StreamTransport] = None) -> int:
    """Execute the ``generate`` subcommand.

    Returns
    -------
    int
        ``0`` when the session completed; ``1`` on failure or an early stop;
        ``2`` on invalid input or Ctrl-C.
    """
    try:
        request = GenerationRequest.generate(args.name, args.description, document_type=args.document_type)
    except ValidationError as e:
        print(json.dumps({"error": "invalid request", "details": e.errors(include_url=False, include_context=False)}), file=sys.stderr)
        return EXIT_ABORTED

    session = GenerationSession(
        transport or build_transport(args),
        on_update=None if args.json else progress_printer(),
    )
    try:
        snapshot = session.start(request)
    except KeyboardInterrupt:
        print("aborted", file=sys.stderr)
        return EXIT_ABORTED

    if args.json:
        print(json.dumps(snapshot_to_dict(snapshot, session.metrics.to_dict()), ensure_ascii=False))
        return EXIT_OK if snapshot.succeeded else EXIT_FAILURE
    if not snapshot.succeeded:
        print(_describe_failure(snapshot), file=sys.stderr)
        return EXIT_FAILURE
    if args.out:
        with open(args.out, "w", encoding="utf-8") as fh:
            fh.write(snapshot.accumulated_content)
        print(f"wrote {len(snapshot.accumulated_content)} chars to {args.out}", file=sys.stderr)
    else:
        print(snapshot.accumulated_content)
    return EXIT_OK


def _write_file(path: str) -> Callable[[str], None]:
    def _save(text: str) -> None:
        with open(path, "w", encoding="utf-8") as fh:
            fh.write(text)

    return _save


def _run_round(run: Callable[[], SessionSnapshot]) -> Optional[SessionSnapshot]:
    try:
        snapshot = run()
    except ValidationError as e:
        messages = "; ".join(err.get("msg", "") for err in e.errors(include_url=False, include_context=False))
        print(f"invalid request: {messages}", file=sys.stderr)
        return None
    if not snapshot.succeeded:
        print(_describe_failure(snapshot), file=sys.stderr)
    return snapshot


def handle_refine(
    args: argparse.Namespace,
    *,
    transport: Optional[StreamTransport] = None,
    input_fn: InputFn = input,
    edit_fn: EditFn = edit_in_editor,
    out: Optional[TextIO] = None,
) -> int:
    """Execute the ``refine`` subcommand as an interactive refinement cycle.

    Commands while reviewing: ``a`` accept (writes the file), ``r`` reject,
    ``e`` edit the current best text, ``g <instructions>`` refine again from
    the current best text, ``q`` quit without saving. After a failed or
    stopped round only ``g`` and ``q`` are offered (plus the reviewing
    commands when an earlier round succeeded).
    """
    try:
        with open(args.file, "r", encoding="utf-8") as fh:
            original = fh.read()
    except OSError as e:
        print(json.dumps({"error": f"cannot read {args.file}: {e}"}), file=sys.stderr)
        return EXIT_FAILURE

    stream_transport = transport or build_transport(args)
    file_name = os.path.basename(args.file)
    cycle = RefinementCycle(
        original,
        session_factory=lambda token: GenerationSession(
            stream_transport, cancellation_token=token, on_update=progress_printer()
        ),
        presenter=UnifiedDiffPresenter(out, label=file_name),
        on_accept=_write_file(args.file),
        document_type=args.document_type,
        file_name=file_name,
        cancellation_token=CancellationToken(),
    )
    logger = get_logger("draftstream.cli")
    ctx = LogContext(session_id=cycle.cycle_id, mode="refine", document_type=args.document_type, subject=file_name)

    try:
        if _run_round(lambda: cycle.begin_refinement(original, args.instructions)) is None:
            return EXIT_ABORTED
        while True:
            reviewing = cycle.phase is CyclePhase.REVIEWING
            if args.yes:
                if not reviewing:
                    return EXIT_FAILURE
                cycle.accept()
                print(f"accepted; wrote {args.file}", file=sys.stderr)
                return EXIT_OK

            try:
                command = input_fn(REVIEW_PROMPT if reviewing else RETRY_PROMPT).strip()
            except EOFError:
                command = "q"
            verb, _, rest = command.partition(" ")
            verb = verb.lower()

            if verb == "q":
                log_event(logger, "cli.quit", ctx, phase=cycle.phase.value)
                print("quit; file unchanged", file=sys.stderr)
                return EXIT_ABORTED
            if verb == "g":
                if reviewing:
                    _run_round(lambda: cycle.refine_again(rest.strip()))
                else:
                    _run_round(lambda: cycle.begin_refinement(cycle.original_content, rest.strip()))
                continue
            if not reviewing:
                print(f"unknown command {command!r}", file=sys.stderr)
                continue
            if verb == "a":
                cycle.accept()
                print(f"accepted; wrote {args.file}", file=sys.stderr)
                return EXIT_OK
            if verb == "r":
                cycle.reject()
                print("rejected; file unchanged", file=sys.stderr)
                return EXIT_ABORTED
            if verb == "e":
                try:
                    edited = edit_fn(cycle.effective_content or "")
                except (OSError, subprocess.CalledProcessError) as e:
                    print(f"editor failed: {e}", file=sys.stderr)
                    continue
                cycle.record_manual_edit(edited)
                UnifiedDiffPresenter(out, label=f"{file_name} (edited)").present(original, edited)
                continue
            print(f"unknown command {command!r}", file=sys.stderr)
    except KeyboardInterrupt:
        cycle.cancel("interrupted")
        print("aborted; file unchanged", file=sys.stderr)
        return EXIT_ABORTED


__all__ = [
    "EXIT_OK",
    "EXIT_FAILURE",
    "EXIT_ABORTED",
    "build_transport",
    "progress_printer",
    "snapshot_to_dict",
    "edit_in_editor",
    "handle_generate",
    "handle_refine",
]
