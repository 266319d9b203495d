"""Pattern router with registration-ordered matching.

Routes are registered during setup and frozen when the app starts
serving. Unlike a first-match router, ``match`` returns *every*
registration that fits the request, in registration order, so the
dispatcher can compose them into one middleware chain. Registration
order therefore carries meaning: file routes are registered in
specificity order, which puts the most specific handler first.
"""

import re
from collections.abc import Iterator
from types import MappingProxyType

from roost._internal.types import Handler
from roost.errors import ConfigurationError
from roost.routing.paths import ALL, WILDCARD_PATH, normalize_method, split_path
from roost.routing.route import PatternSegment, Route, RouteMatch

_PARAM_RE = re.compile(r":([A-Za-z_]\w*)")
_CATCH_ALL_RE = re.compile(r"^:([A-Za-z_]\w*)\*$")


def parse_pattern(pattern: str) -> list[PatternSegment]:
    """Parse a router pattern into segments.

    Examples::

        "/users"            -> [PatternSegment("users")]
        "/users/:id"        -> [..., PatternSegment(":id", kind="param", names=("id",))]
        "/files/:path*"     -> [..., PatternSegment(":path*", kind="catch_all", names=("path",))]
        "/posts/post-:id"   -> [..., PatternSegment("post-:id", kind="param", names=("id",))]
    """
    segments: list[PatternSegment] = []
    seen: set[str] = set()
    for part in split_path(pattern):
        catch_all = _CATCH_ALL_RE.match(part)
        if catch_all:
            segment = PatternSegment(part, kind="catch_all", names=(catch_all.group(1),))
        elif _PARAM_RE.search(part):
            segment = PatternSegment(part, kind="param", names=tuple(_PARAM_RE.findall(part)))
        else:
            segment = PatternSegment(part)

        for name in segment.names:
            if name in seen:
                msg = f"Duplicate parameter {name!r} in route pattern {pattern!r}"
                raise ConfigurationError(msg)
            seen.add(name)
        segments.append(segment)
    return segments


def compile_segments(segments: list[PatternSegment]) -> re.Pattern[str]:
    """Compile parsed segments into an anchored regex.

    Captures become positional groups ``p0``, ``p1``... in the order of
    ``Route.param_names``. A single capture never crosses ``/``; a
    catch-all takes one or more whole segments.
    """
    parts: list[str] = []
    index = 0
    for segment in segments:
        if segment.kind == "static":
            parts.append(re.escape(segment.value))
        elif segment.kind == "catch_all":
            parts.append(f"(?P<p{index}>[^/]+(?:/[^/]+)*)")
            index += 1
        else:
            # split() alternates static text and capture names
            pieces = _PARAM_RE.split(segment.value)
            regex = ""
            for i, piece in enumerate(pieces):
                if i % 2 == 0:
                    regex += re.escape(piece)
                else:
                    regex += f"(?P<p{index}>[^/]+?)"
                    index += 1
            parts.append(regex)
    return re.compile("^/" + "/".join(parts) + "$")


class Router:
    """Registration-ordered pattern router.

    Usage::

        router = Router()
        router.add("GET", "/users/:id", show_user)
        router.add("ALL", "*", timing)
        router.compile()
        match = router.match("GET", "/users/42")
        match.handlers  # (show_user, timing)
        match.params    # {"id": "42"}
    """

    __slots__ = ("_compiled", "_routes")

    def __init__(self) -> None:
        self._routes: list[Route] = []
        self._compiled = False

    def add(self, method: str, path: str, handler: Handler) -> Route:
        """Register *handler* for *method* on *path*. Must precede compile()."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        method = normalize_method(method)
        if path == WILDCARD_PATH:
            route = Route(method=method, pattern=path, handler=handler)
        else:
            segments = parse_pattern(path)
            route = Route(
                method=method,
                pattern=path,
                handler=handler,
                segments=tuple(segments),
                matcher=compile_segments(segments),
            )
        self._routes.append(route)
        return route

    @property
    def routes(self) -> list[Route]:
        """All registrations, in registration order."""
        return list(self._routes)

    def __iter__(self) -> Iterator[Route]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    @property
    def compiled(self) -> bool:
        return self._compiled

    def match(self, method: str, path: str) -> RouteMatch:
        """Collect every registration matching *method* and *path*.

        Registrations for ``ALL`` match any method. Captured parameters
        are merged in registration order, so a later match overwrites an
        earlier capture of the same name. A miss returns an empty match.
        """
        method = method.upper()
        normalized = "/" + "/".join(split_path(path))

        handlers: list[Handler] = []
        params: dict[str, str] = {}
        for route in self._routes:
            if route.method != ALL and route.method != method:
                continue
            if route.matcher is None:
                handlers.append(route.handler)
                continue
            found = route.matcher.match(normalized)
            if found is None:
                continue
            handlers.append(route.handler)
            for i, name in enumerate(route.param_names):
                params[name] = found.group(f"p{i}")

        return RouteMatch(handlers=tuple(handlers), params=MappingProxyType(params))
