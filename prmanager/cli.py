"""CLI entry point for RPM.

Provides ``rpm start`` and ``rpm pr <number>``.

``load_config()`` must run before importing ``prmanager.main`` because that
module calls ``configure_logging()`` at import time.
"""

from __future__ import annotations

import argparse
import os
import sys

from prmanager.validation import InvalidInputError, validate_pr_number


def _add_server_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--host", help="Host to bind to")
    parser.add_argument("--port", type=int, help="Port to bind to")
    parser.add_argument("--repo", help="Repository to review (default: current directory)")
    parser.add_argument(
        "--no-open", action="store_true", help="Do not open the UI in a browser"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rpm",
        description="RPM - review GitHub pull requests locally",
    )
    sub = parser.add_subparsers(dest="command")

    start_parser = sub.add_parser("start", help="Start the review server")
    _add_server_arguments(start_parser)

    pr_parser = sub.add_parser("pr", help="Start the server and open a pull request")
    pr_parser.add_argument("number", help="Pull request number")
    _add_server_arguments(pr_parser)
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point (``rpm`` command)."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "start":
        _run_start(args)
    elif args.command == "pr":
        try:
            pr_number = validate_pr_number(args.number)
        except InvalidInputError as exc:
            parser.error(exc.message)
        _run_start(args, pr_number=pr_number)
    else:
        parser.print_help()
        sys.exit(1)


def _apply_overrides(args: argparse.Namespace, pr_number: int | None) -> None:
    if args.host:
        os.environ["RPM_HOST"] = args.host
    if args.port:
        os.environ["RPM_PORT"] = str(args.port)
    if args.repo:
        os.environ["RPM_REPO_PATH"] = args.repo
    os.environ["RPM_OPEN_BROWSER"] = "0" if args.no_open else "1"
    if pr_number is not None:
        os.environ["RPM_OPEN_PR"] = str(pr_number)


def _run_start(args: argparse.Namespace, pr_number: int | None = None) -> None:
    """Handle ``rpm start`` and ``rpm pr``."""
    _apply_overrides(args, pr_number)

    from prmanager.config import load_config

    load_config()

    from prmanager.main import run

    run()


if __name__ == "__main__":
    main()
