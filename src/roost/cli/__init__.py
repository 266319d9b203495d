"""Roost CLI — route table inspection.

Entry point registered as ``roost`` in ``pyproject.toml``::

    [project.scripts]
    roost = "roost.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``roost`` command."""
    parser = argparse.ArgumentParser(
        prog="roost",
        description="Roost — filesystem routing for ASGI apps.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- roost routes -----------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List registered routes")
    routes_parser.add_argument(
        "app",
        nargs="?",
        help="Import string (e.g. myapp:app)",
    )
    routes_parser.add_argument(
        "--dir",
        dest="routes_dir",
        default=None,
        help="Build a fresh app from a routes directory instead",
    )
    routes_parser.add_argument(
        "--base-path",
        default="",
        help="Base path for --dir (default: none)",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "routes":
        from roost.cli._routes import run_routes

        run_routes(args)
