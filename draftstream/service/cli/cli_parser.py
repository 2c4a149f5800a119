"""CLI parser construction for the ``draftstream`` command.

This module wires subparsers but contains no execution logic. Subcommand
handlers live in ``cli_actions``.
"""

from __future__ import annotations

import argparse

from ... import __version__


def add_connection_flags(parser: argparse.ArgumentParser) -> None:
    """Attach producer connection overrides (``--base-url``, ``--cookie``).

    Both default to ``None`` so the merged configuration (file, env) applies.
    """
    parser.add_argument("--base-url", default=None, help="Producer base URL (overrides DRAFTSTREAM_BASE_URL)")
    parser.add_argument("--cookie", default=None, help="Session cookie forwarded to the producer")


def build_parser() -> argparse.ArgumentParser:
    """Construct the top-level CLI parser with ``generate`` and ``refine``."""
    p = argparse.ArgumentParser(prog="draftstream", description="Stream and refine agent, skill and file drafts")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR")
    p.add_argument("--log-file", default=None, help="Also write JSON logs to this file")
    sub = p.add_subparsers(dest="cmd", required=True)

    # generate
    p_gen = sub.add_parser("generate", help="Generate a new agent or skill definition")
    p_gen.add_argument("--type", dest="document_type", choices=["agent", "skill"], default="agent")
    p_gen.add_argument("--name", required=True)
    p_gen.add_argument("--description", required=True)
    p_gen.add_argument("--out", default=None, help="Write the result here instead of stdout")
    p_gen.add_argument("--json", action="store_true", help="Print the final session snapshot as JSON")
    add_connection_flags(p_gen)

    # refine
    p_ref = sub.add_parser("refine", help="Refine an existing file interactively")
    p_ref.add_argument("--file", required=True)
    p_ref.add_argument("--instructions", required=True)
    p_ref.add_argument("--type", dest="document_type", choices=["agent", "skill", "file"], default="file")
    p_ref.add_argument("--yes", action="store_true", help="Accept the first successful result without asking")
    add_connection_flags(p_ref)

    return p


__all__ = ["build_parser", "add_connection_flags"]
