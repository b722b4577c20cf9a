"""``zenhance run`` — development server command."""

import argparse
import sys

from zenhance.app import App
from zenhance.cli._resolve import resolve_app


def load_app(args: argparse.Namespace) -> App:
    """The App named by ``args.app``, or one rooted at ``args.root``."""
    if args.app is None:
        return App.from_directory(args.root)
    try:
        return resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc


def run_server(args: argparse.Namespace) -> None:
    """Start the development server for the resolved app."""
    app = load_app(args)
    app.run(host=args.host, port=args.port)
