"""Route and RouteMatch frozen dataclasses."""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from roost._internal.types import Handler


@dataclass(frozen=True, slots=True)
class PatternSegment:
    """A parsed segment of a router pattern.

    Static:       ``users``     (kind="static")
    Capture:      ``:id``       (kind="param", names=("id",))
    Mixed:        ``post-:id``  (kind="param", names=("id",))
    Catch-all:    ``:rest*``    (kind="catch_all", names=("rest",))
    """

    value: str
    kind: str = "static"
    names: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Route:
    """A compiled route registration.

    Created once while routes are registered; read-only afterwards.
    ``method`` is an upper-case verb or ``"ALL"``.
    """

    method: str
    pattern: str
    handler: Handler
    segments: tuple[PatternSegment, ...] = ()
    matcher: re.Pattern[str] | None = field(default=None, compare=False, repr=False)

    @property
    def param_names(self) -> tuple[str, ...]:
        return tuple(name for segment in self.segments for name in segment.names)


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of matching a request against the router.

    ``handlers`` holds every matching registration's handler in
    registration order; it is empty when nothing matched. ``params`` is
    read-only: matches are cached and shared across requests.
    """

    handlers: tuple[Handler, ...] = ()
    params: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def __bool__(self) -> bool:
        return bool(self.handlers)


def describe_handler(handler: Any) -> str:
    """Human-readable name for a handler (used by route listings)."""
    return getattr(handler, "__qualname__", None) or getattr(handler, "__name__", None) or repr(handler)
