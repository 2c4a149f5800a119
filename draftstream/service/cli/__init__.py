"""draftstream CLI (package entrypoint).

Wires argument parsing to the handlers in ``cli_actions``; performs no
streaming logic directly.
"""

from __future__ import annotations

from typing import Optional

from ...base.logging import configure_logger
from .cli_actions import handle_generate, handle_refine
from .cli_parser import build_parser


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entrypoint.

    Parameters
    ----------
    argv: Optional[list[str]]
        Argument vector; when ``None`` uses ``sys.argv[1:]``.

    Returns
    -------
    int
        Process exit code (0 success, 1 failure, 2 rejected or aborted).
    """
    args = build_parser().parse_args(argv)
    if args.log_level or args.log_file:
        configure_logger(level=args.log_level, file_path=args.log_file)
    if args.cmd == "generate":
        return handle_generate(args)
    return handle_refine(args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
