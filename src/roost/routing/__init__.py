"""Routing — path translation, specificity ordering, and pattern matching.

File-derived route paths become router patterns through
``to_pattern``; the ``Router`` returns every registration matching a
request, in registration order.
"""

from roost.routing.paths import (
    ALL,
    METHODS,
    merge_paths,
    route_sort_key,
    sort_route_paths,
    to_pattern,
)
from roost.routing.route import Route, RouteMatch
from roost.routing.router import Router

__all__ = [
    "ALL",
    "METHODS",
    "Route",
    "RouteMatch",
    "Router",
    "merge_paths",
    "route_sort_key",
    "sort_route_paths",
    "to_pattern",
]
