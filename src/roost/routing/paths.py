"""Path translation — file-derived route paths to URL patterns.

Route files live in a directory tree; their paths use a bracket
syntax that this module turns into router patterns::

    "/blog/[slug]"          -> "/blog/:slug"
    "/docs/[...rest]"       -> "/docs/:rest*"
    "/(marketing)/about"    -> "/about"
    "/blog/index"           -> "/blog"

It also owns the global specificity ordering. Sorting route paths with
``route_sort_key`` puts ancestor markers (``_middleware``, ``_app``,
``_layout``) ahead of everything else in their directory, and puts
static segments ahead of captures, so the route builder sees ancestors
before descendants and the router tries the most specific pattern first.
"""

import re

from roost.errors import ConfigurationError

# Concrete HTTP verbs a route may declare
METHODS: tuple[str, ...] = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD")

# Wildcard method, matches any request method
ALL = "ALL"

# Pattern matching every path (global middleware)
WILDCARD_PATH = "*"

_BRACKET_RE = re.compile(r"\[([^\[\]]+)\]")
_MULTI_CAPTURE_RE = re.compile(r"^\[\.\.\.([^\[\]]+)\]$")
# Capture names must be usable as router parameter names
_CAPTURE_NAME_RE = re.compile(r"^[A-Za-z_]\w*$")

# Segment ranks, lower sorts first
_RANK_MIDDLEWARE = 0
_RANK_WRAPPER = 1  # _app and _layout
_RANK_ERROR = 2
_RANK_INDEX = 3
_RANK_STATIC = 4
_RANK_CAPTURE = 5
_RANK_MULTI_CAPTURE = 6
_RANK_WILDCARD = 7


def normalize_method(method: str) -> str:
    """Upper-case *method* and check it against the method vocabulary."""
    upper = method.upper()
    if upper != ALL and upper not in METHODS:
        msg = f"Unsupported HTTP method {method!r}. Expected one of {', '.join(METHODS)} or ALL."
        raise ConfigurationError(msg)
    return upper


def split_path(path: str) -> list[str]:
    """Split a path into its non-empty segments."""
    return [part for part in path.split("/") if part]


def to_pattern(path: str) -> str:
    """Translate a file-derived route path into a router pattern.

    ``[name]`` becomes a single-segment capture, ``[...name]`` a
    multi-segment capture, ``(group)`` segments are dropped, and a
    trailing ``index`` collapses onto its directory. Captures may sit
    inside a static segment (``post-[id]`` -> ``post-:id``) but two
    captures cannot touch.

    Examples::

        to_pattern("/a/[b]/index")   -> "/a/:b"
        to_pattern("/a/[...rest]")   -> "/a/:rest*"
        to_pattern("/a/(group)/b")   -> "/a/b"
        to_pattern("index")          -> "/"
    """
    parts = split_path(path)
    if parts and parts[-1] == "index":
        parts.pop()

    pattern: list[str] = []
    for part in parts:
        if part.startswith("(") and part.endswith(")"):
            continue

        multi = _MULTI_CAPTURE_RE.match(part)
        if multi:
            pattern.append(f":{_capture_name(multi.group(1), path)}*")
            continue

        if "][" in part:
            msg = (
                f"Route segment {part!r} in {path!r} has adjacent parameters; "
                "separate them with a static character (e.g. [a]-[b])."
            )
            raise ConfigurationError(msg)
        pattern.append(_BRACKET_RE.sub(lambda m: f":{_capture_name(m.group(1), path)}", part))

    return "/" + "/".join(pattern)


def _capture_name(name: str, path: str) -> str:
    if name.startswith("..."):
        msg = (
            f"Multi-segment parameter [{name}] in {path!r} must be a whole "
            "path segment (e.g. /docs/[...rest])."
        )
        raise ConfigurationError(msg)
    if not _CAPTURE_NAME_RE.match(name):
        msg = (
            f"Invalid parameter name {name!r} in {path!r}. Use letters, "
            "digits and underscores, not starting with a digit (e.g. [post_id])."
        )
        raise ConfigurationError(msg)
    return name


def merge_paths(base: str, path: str) -> str:
    """Prefix *path* with *base*, yielding exactly one leading ``/``.

    Duplicate separators collapse and a trailing ``/`` is dropped unless
    the result is the root. The global ``"*"`` pattern is never prefixed.
    """
    if path == WILDCARD_PATH:
        return path
    merged = re.sub(r"/+", "/", f"/{base}/{path}")
    if len(merged) > 1:
        merged = merged.rstrip("/")
    return merged


def _segment_rank(segment: str) -> int:
    if segment == "_middleware":
        return _RANK_MIDDLEWARE
    if segment in ("_app", "_layout"):
        return _RANK_WRAPPER
    if segment == "_error":
        return _RANK_ERROR
    if segment == "index":
        return _RANK_INDEX
    if segment.startswith("[...") or (segment.startswith(":") and segment.endswith("*")):
        return _RANK_MULTI_CAPTURE
    if "[" in segment or ":" in segment:
        return _RANK_CAPTURE
    return _RANK_STATIC


def route_sort_key(path: str) -> tuple[tuple[int, str], ...]:
    """Sort key implementing route specificity.

    Paths are compared segment by segment from the root. At the first
    differing segment the lower rank wins; equal ranks fall back to the
    segment text. A path that is a prefix of another sorts first, and
    ``"*"`` sorts after everything.
    """
    if path == WILDCARD_PATH:
        return ((_RANK_WILDCARD, path),)
    return tuple((_segment_rank(segment), segment) for segment in split_path(path))


def sort_route_paths(a: str, b: str) -> int:
    """Three-way comparator over route paths (see ``route_sort_key``)."""
    key_a = route_sort_key(a)
    key_b = route_sort_key(b)
    if key_a < key_b:
        return -1
    if key_a > key_b:
        return 1
    return 0
