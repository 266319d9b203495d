"""Route tree assembly from a flat list of route entries.

Entries are walked in specificity order (see ``route_sort_key``), which
guarantees every ``_app``, ``_middleware`` and ``_layout`` entry is seen
before the entries below it. An ancestor stack tracks which of them are
in scope; for each dispatchable leaf the stack is folded into the
leaf's middleware and layout chains, and one handler per declared
method is compiled and registered on the app.

Layout order is always: app wrapper, layouts root-to-leaf, the leaf's
own component. A leaf can opt out of the app wrapper
(``skip_app_wrapper``) or of its inherited layouts
(``skip_inherited_layouts``); only the leaf's own config counts.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from roost._internal.types import Component, Handler
from roost.middleware.compose import compose
from roost.pages.renderer import render_middleware
from roost.pages.types import RouteConfig, RouteEntry, RouteKind
from roost.routing.paths import ALL, route_sort_key, to_pattern

if TYPE_CHECKING:
    from roost.app import App
    from roost.routing.route import Route

logger = logging.getLogger("roost.routing")


@dataclass(frozen=True, slots=True)
class LeafChain:
    """The inherited chains of one leaf route.

    Attributes:
        middleware: ``_middleware`` handlers, outermost first.
        layouts: Components to render, outermost first, leaf last.
    """

    middleware: tuple[Handler, ...] = ()
    layouts: tuple[Component, ...] = ()


@dataclass(slots=True)
class BuildResult:
    """What a build registered.

    Attributes:
        routes: Registered routes, in registration order.
        error_entries: ``_error`` entries seen but not registered.
    """

    routes: list[Route] = field(default_factory=list)
    error_entries: list[RouteEntry] = field(default_factory=list)


def in_scope(ancestor: RouteEntry, path: str) -> bool:
    """Whether *ancestor* wraps *path* (segment-boundary prefix test)."""
    return ancestor.base == "" or path.startswith(ancestor.base + "/")


def resolve_chain(stack: Sequence[RouteEntry], leaf: RouteEntry) -> LeafChain:
    """Fold the in-scope ancestors of *leaf* into its chains.

    A deeper ``_app`` replaces an outer one, so at most one app wrapper
    is ever active. ``_middleware`` entries contribute only a single
    dispatch-any handler; a per-method map there is ignored.
    """
    middleware: list[Handler] = []
    layouts: list[Component] = []
    app_component: Component | None = None

    for entry in stack:
        if entry.kind is RouteKind.MIDDLEWARE:
            if entry.has_method_map:
                logger.warning(
                    "Ignoring per-method handlers in middleware %s; export a single handler",
                    entry.file_path,
                )
            elif entry.handlers is not None:
                middleware.append(entry.handlers)  # type: ignore[arg-type]
        elif entry.kind is RouteKind.APP:
            app_component = entry.component
        elif entry.kind is RouteKind.LAYOUT and entry.component is not None:
            layouts.append(entry.component)

    config = leaf.config or RouteConfig()
    chain: list[Component] = []
    if app_component is not None and not config.skip_app_wrapper:
        chain.append(app_component)
    if not config.skip_inherited_layouts:
        chain.extend(layouts)
    if leaf.component is not None:
        chain.append(leaf.component)

    return LeafChain(middleware=tuple(middleware), layouts=tuple(chain))


def _dispatch_plan(leaf: RouteEntry) -> list[tuple[str, Handler | None]]:
    handlers = leaf.handlers
    if handlers is None:
        return [("GET", None)]
    if leaf.has_method_map:
        plan = list(handlers.items())  # type: ignore[union-attr]
        return plan or [("GET", None)]
    return [(ALL, handlers)]  # type: ignore[list-item]


def compile_leaf(leaf: RouteEntry, chain: LeafChain) -> list[tuple[str, str, Handler]]:
    """Compile *leaf* into ``(method, pattern, handler)`` registrations.

    Each handler renders the layout chain around the leaf's own handler
    for that method, wrapped in the inherited middleware when there is any.
    """
    pattern = (leaf.config.route_override if leaf.config else None) or to_pattern(leaf.path)
    compiled: list[tuple[str, str, Handler]] = []
    for method, handler in _dispatch_plan(leaf):
        route_handler = render_middleware(chain.layouts, handler)
        if chain.middleware:
            route_handler = compose([*chain.middleware, route_handler])
        compiled.append((method, pattern, route_handler))
    return compiled


def build_routes(app: App, entries: Iterable[RouteEntry]) -> BuildResult:
    """Walk *entries* in specificity order and register their routes on *app*.

    Registration goes through ``App.add_route``, so the app's base path
    applies. Compiled routes are registered in the specificity order of
    their patterns, not of their file paths: route groups and
    ``route_override`` can make the two disagree. Returns what was
    registered.
    """
    ordered = sorted(entries, key=lambda entry: route_sort_key(entry.path))
    stack: list[RouteEntry] = []
    result = BuildResult()
    compiled: list[tuple[str, str, Handler, RouteEntry]] = []

    for entry in ordered:
        while stack and not in_scope(stack[-1], entry.path):
            stack.pop()

        if entry.kind.is_ancestor:
            stack.append(entry)
            continue

        if entry.kind is RouteKind.ERROR:
            # TODO: decide whether _error installs an error boundary around its subtree
            logger.debug("Skipping error route %s; error routes are not dispatched", entry.file_path)
            result.error_entries.append(entry)
            continue

        chain = resolve_chain(stack, entry)
        compiled.extend((*registration, entry) for registration in compile_leaf(entry, chain))

    # Stable: registrations with equal patterns keep their walk order
    compiled.sort(key=lambda registration: route_sort_key(registration[1]))
    for method, pattern, handler, entry in compiled:
        route = app.add_route(method, pattern, handler)
        logger.debug("Registered %s %s from %s", route.method, route.pattern, entry.file_path)
        result.routes.append(route)

    return result
