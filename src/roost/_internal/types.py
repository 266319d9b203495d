"""Shared type aliases used across roost modules."""

from collections.abc import Callable, Mapping
from typing import Any, TypeAlias

# Route handler or middleware: receives the request Context, returns a response
Handler: TypeAlias = Callable[..., Any]

# Renderable component: receives the Context, returns markup
Component: TypeAlias = Callable[..., Any]

# The handlers export of a route module: one dispatch-any function or a method map
Handlers: TypeAlias = Handler | Mapping[str, Handler]
