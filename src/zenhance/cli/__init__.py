"""Zenhance CLI — development server.

Entry point registered as ``zenhance`` in ``pyproject.toml``::

    [project.scripts]
    zenhance = "zenhance.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``zenhance`` command."""
    parser = argparse.ArgumentParser(
        prog="zenhance",
        description="Zenhance — convention-based MVC dispatch for Python web apps.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- zenhance run ------------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Start the development server")
    run_parser.add_argument(
        "app",
        nargs="?",
        default=None,
        help="Import string (e.g. myapp:app). Omit to serve --root.",
    )
    run_parser.add_argument("--root", default=".", help="Application root directory")
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "run":
        from zenhance.cli._run import run_server

        run_server(args)
