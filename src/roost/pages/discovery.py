"""Filesystem route discovery for a routes/ directory.

Walks the routes directory tree and turns every file into a
:class:`RouteEntry`:

- ``.py`` files are imported and decoded (``component``, ``config``,
  ``handlers`` / ``handler``, or ``get`` / ``post`` / ... functions)
- ``.html`` files become jinja2-backed components; an ``.html`` file
  next to a ``.py`` file of the same name supplies that module's
  component when the module doesn't export one

Bracketed names (``[slug]``, ``[...rest]``) and ``(group)`` directories
are kept verbatim in the entry path; ``to_pattern`` translates them.
"""

from __future__ import annotations

import importlib.util
import os
import re
from collections.abc import Iterator, Sequence
from pathlib import Path
from types import ModuleType

from jinja2 import Environment

from roost.errors import RouteModuleError
from roost.pages.templates import TemplateComponent, create_environment
from roost.pages.types import RouteEntry, decode_route_module
from roost.routing.paths import route_sort_key

# Test modules living next to routes are not routes
DEFAULT_IGNORE: tuple[str, ...] = (r"[._]test\.py$",)

_ROUTE_SUFFIXES = (".py", ".html")


def discover_routes(
    routes_dir: str | Path,
    *,
    ignore: Sequence[str] | None = None,
    env: Environment | None = None,
) -> list[RouteEntry]:
    """Walk a routes directory and load every route entry.

    Args:
        routes_dir: Path to the ``routes/`` directory.
        ignore: Regex patterns matched against each file's path relative
            to *routes_dir*; matching files are skipped. Defaults to
            :data:`DEFAULT_IGNORE`.
        env: jinja2 environment for ``.html`` files. Defaults to one
            rooted at *routes_dir*.

    Returns:
        Entries in specificity order.

    Raises:
        FileNotFoundError: If *routes_dir* is not a directory.
        RouteModuleError: If a module has no usable exports or a handler
            has the wrong arity.
    """
    root = Path(routes_dir).resolve()
    if not root.is_dir():
        raise FileNotFoundError(f"Routes directory not found: {root}")

    patterns = [re.compile(p) for p in (DEFAULT_IGNORE if ignore is None else ignore)]
    env = env or create_environment(root)

    modules: dict[str, Path] = {}
    templates: dict[str, Path] = {}
    for file in _walk_directory(root, patterns):
        route_path = normalize_route_path(file.relative_to(root).as_posix())
        target = modules if file.suffix == ".py" else templates
        target[route_path] = file

    entries: list[RouteEntry] = []
    for route_path in sorted({*modules, *templates}, key=route_sort_key):
        template_file = templates.get(route_path)
        component = None
        if template_file is not None:
            component = TemplateComponent(env.get_template(template_file.relative_to(root).as_posix()))

        module_file = modules.get(route_path)
        if module_file is None:
            entries.append(
                RouteEntry.from_parts(route_path, file_path=str(template_file), component=component)
            )
            continue

        module = load_module(module_file, route_path)
        entries.append(
            decode_route_module(
                route_path,
                module,
                file_path=str(module_file),
                fallback_component=component,
            )
        )
    return entries


def normalize_route_path(relative: str) -> str:
    """``blog/[slug].py`` -> ``/blog/[slug]``."""
    stem, _, _ = relative.rpartition(".")
    return "/" + (stem or relative).strip("/")


def load_module(file: Path, route_path: str) -> ModuleType:
    """Import a route module from *file* under a private module name."""
    safe_name = re.sub(r"\W", "_", route_path)
    spec = importlib.util.spec_from_file_location(f"_roost_route{safe_name}", file)
    if spec is None or spec.loader is None:
        raise RouteModuleError(route_path, f"Cannot import {file}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _walk_directory(root: Path, patterns: Sequence[re.Pattern[str]]) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if not d.startswith(".") and d != "__pycache__")
        for filename in sorted(filenames):
            file = Path(dirpath) / filename
            if file.suffix not in _ROUTE_SUFFIXES or filename == "__init__.py":
                continue
            relative = file.relative_to(root).as_posix()
            if any(p.search(relative) for p in patterns):
                continue
            yield file
