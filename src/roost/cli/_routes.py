"""``roost routes`` — list registered routes.

Prints every registration in dispatch order with its method, pattern
and handler name.
"""

import argparse
import sys

from roost.app import App
from roost.cli._resolve import resolve_app
from roost.config import AppConfig
from roost.errors import ConfigurationError
from roost.routing.route import Route, describe_handler


def _load_app(args: argparse.Namespace) -> App:
    if (args.app is None) == (args.routes_dir is None):
        msg = "Pass either an import string or --dir"
        raise TypeError(msg)
    if args.routes_dir is not None:
        app = App(AppConfig(base_path=args.base_path))
        app.mount_routes(args.routes_dir)
        return app
    return resolve_app(args.app)


def format_routes(routes: list[Route]) -> str:
    """Render *routes* as a METHOD / PATH / HANDLER table."""
    rows = [(route.method, route.pattern, describe_handler(route.handler)) for route in routes]

    max_method = max([len(r[0]) for r in rows] + [6])  # "METHOD" header
    max_path = max([len(r[1]) for r in rows] + [4])  # "PATH" header

    fmt = f"{{:<{max_method}}}  {{:<{max_path}}}  {{}}"
    lines = [fmt.format("METHOD", "PATH", "HANDLER")]
    sep_len = max_method + max_path + 4 + max((len(r[2]) for r in rows), default=7)
    lines.append("-" * min(sep_len, 80))
    lines.extend(fmt.format(*row) for row in rows)
    return "\n".join(lines)


def run_routes(args: argparse.Namespace) -> None:
    """List registered routes for a roost app."""
    try:
        app = _load_app(args)
    except (ModuleNotFoundError, AttributeError, TypeError, FileNotFoundError, ConfigurationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    app._ensure_frozen()
    routes = app.router.routes
    if not routes:
        print("No routes registered.")
        return

    print(format_routes(routes))
