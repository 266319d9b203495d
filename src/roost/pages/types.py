"""Data models for file-derived routes.

A loaded route module is decoded exactly once, at the load boundary,
into an immutable :class:`RouteEntry` tagged with its :class:`RouteKind`.
Everything downstream (the builder, the CLI) works with entries and
never sniffs module attributes again.
"""

from __future__ import annotations

import inspect
from collections.abc import Mapping
from dataclasses import dataclass, fields
from enum import Enum
from types import MappingProxyType
from typing import Any

from roost._internal.types import Component, Handler
from roost.errors import ConfigurationError, RouteModuleError
from roost.routing.paths import METHODS, normalize_method


class RouteKind(Enum):
    """The role a route entry plays, from its trailing path segment."""

    APP = "_app"
    MIDDLEWARE = "_middleware"
    LAYOUT = "_layout"
    ERROR = "_error"
    PAGE = "page"

    @classmethod
    def from_path(cls, path: str) -> RouteKind:
        name = path.rstrip("/").rsplit("/", 1)[-1]
        for kind in (cls.APP, cls.MIDDLEWARE, cls.LAYOUT, cls.ERROR):
            if name == kind.value:
                return kind
        return cls.PAGE

    @property
    def is_ancestor(self) -> bool:
        """True for entries that wrap their subtree instead of dispatching."""
        return self in (RouteKind.APP, RouteKind.MIDDLEWARE, RouteKind.LAYOUT)


@dataclass(frozen=True, slots=True)
class RouteConfig:
    """Per-route overrides exported as ``config`` by a route module.

    Attributes:
        route_override: Explicit router pattern replacing the one derived
            from the file path (e.g. ``"/legacy/:id"``).
        skip_app_wrapper: Render this route without the ``_app`` wrapper.
        skip_inherited_layouts: Render this route without ancestor
            ``_layout`` components (the app wrapper still applies).
    """

    route_override: str | None = None
    skip_app_wrapper: bool = False
    skip_inherited_layouts: bool = False

    @classmethod
    def coerce(cls, path: str, value: Any) -> RouteConfig | None:
        """Accept a ``RouteConfig``, a mapping of its fields, or ``None``."""
        if value is None or isinstance(value, RouteConfig):
            return value
        if not isinstance(value, Mapping):
            raise RouteModuleError(path, f"config must be a RouteConfig or a mapping, got {type(value).__name__}")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(value) - known)
        if unknown:
            raise RouteModuleError(path, f"Unknown config keys: {', '.join(unknown)}")
        override = value.get("route_override")
        if override is not None and not isinstance(override, str):
            raise RouteModuleError(path, "config route_override must be a string")
        return cls(
            route_override=override,
            skip_app_wrapper=bool(value.get("skip_app_wrapper", False)),
            skip_inherited_layouts=bool(value.get("skip_inherited_layouts", False)),
        )


def _positional_arity(func: Handler) -> int:
    """Count required positional parameters of *func*."""
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        return 1
    return sum(
        1
        for param in sig.parameters.values()
        if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD)
        and param.default is param.empty
    )


def _check_handler(path: str, func: Any, label: str) -> Handler:
    if not callable(func):
        raise RouteModuleError(path, f"{label} must be callable, got {type(func).__name__}")
    if _positional_arity(func) > 1:
        raise RouteModuleError(
            path,
            f"{label} must accept exactly one argument (the request context) "
            "but declares more than one",
        )
    return func


def _normalize_handlers(path: str, handlers: Any) -> Handler | Mapping[str, Handler] | None:
    if handlers is None:
        return None
    if isinstance(handlers, Mapping):
        methods: dict[str, Handler] = {}
        for key, func in handlers.items():
            try:
                method = normalize_method(str(key))
            except ConfigurationError as exc:
                raise RouteModuleError(path, str(exc)) from exc
            if method not in METHODS:
                raise RouteModuleError(path, f"Method map cannot contain {key!r}; export a single handler instead")
            methods[method] = _check_handler(path, func, f"Handler for {method}")
        return MappingProxyType(methods)
    return _check_handler(path, handlers, "Handler")


@dataclass(frozen=True, slots=True)
class RouteEntry:
    """A file-derived routing unit.

    Attributes:
        path: Normalized, extension-less route path (``/blog/[slug]``).
        base: Parent directory path; ``""`` for the routes root.
        file_path: Where the entry was loaded from (for error messages).
        kind: The entry's role.
        config: Route overrides, if the module exported any.
        handlers: ``None``, one dispatch-any handler, or a read-only
            ``METHOD -> handler`` mapping.
        component: The renderable, if any.
    """

    path: str
    base: str
    file_path: str
    kind: RouteKind
    config: RouteConfig | None = None
    handlers: Handler | Mapping[str, Handler] | None = None
    component: Component | None = None

    @classmethod
    def from_parts(
        cls,
        path: str,
        *,
        file_path: str | None = None,
        config: Any = None,
        handlers: Any = None,
        component: Any = None,
    ) -> RouteEntry:
        """Validate loaded exports and build an entry.

        Raises:
            RouteModuleError: If nothing usable was exported, a handler
                takes more than one positional argument, or ``config``
                is invalid.
        """
        path = "/" + path.strip("/")
        if component is None and config is None and handlers is None:
            raise RouteModuleError(
                path,
                "Expected a route, middleware, layout or error template, "
                "but couldn't find relevant exports",
            )
        if component is not None and not callable(component):
            raise RouteModuleError(path, f"component must be callable, got {type(component).__name__}")

        return cls(
            path=path,
            base=path[: path.rfind("/")],
            file_path=file_path or path,
            kind=RouteKind.from_path(path),
            config=RouteConfig.coerce(path, config),
            handlers=_normalize_handlers(path, handlers),
            component=component,
        )

    @property
    def has_method_map(self) -> bool:
        return isinstance(self.handlers, Mapping)


def decode_route_module(
    path: str,
    module: Any,
    *,
    file_path: str | None = None,
    fallback_component: Component | None = None,
) -> RouteEntry:
    """Decode a loaded route module into a :class:`RouteEntry`.

    Recognized exports:

    - ``component``: the renderable for pages, layouts and the app wrapper.
    - ``config``: a :class:`RouteConfig` or a mapping of its fields.
    - ``handlers`` / ``handler``: one dispatch-any function or a method map.
    - Module-level ``get``, ``post``, ... functions, used as a method map
      when neither ``handlers`` nor ``handler`` is exported.

    *fallback_component* is used when the module exports no ``component``
    (e.g. a template file of the same name).
    """
    handlers = getattr(module, "handlers", None)
    if handlers is None:
        handlers = getattr(module, "handler", None)
    if handlers is None:
        found = {
            method: func
            for method in METHODS
            if callable(func := getattr(module, method.lower(), None))
        }
        handlers = found or None

    return RouteEntry.from_parts(
        path,
        file_path=file_path,
        config=getattr(module, "config", None),
        handlers=handlers,
        component=getattr(module, "component", None) or fallback_component,
    )
