"""Filesystem-based routing with inherited layouts and middleware.

The ``routes/`` directory structure defines URL paths, layout nesting
and middleware scope::

    routes/
      _app.html            # App wrapper around every page
      _middleware.py       # handler(ctx) runs before every route below
      index.py             # GET /
      blog/
        _layout.html       # Nested layout for /blog/*
        index.py           # GET /blog
        [slug].py          # /blog/:slug
      docs/
        [...path].py       # /docs/:path*
      (marketing)/
        about.py           # /about (groups add no URL segment)

Usage::

    app = App()
    app.mount_routes("routes")
"""

from roost.pages.builder import BuildResult, LeafChain, build_routes, resolve_chain
from roost.pages.discovery import discover_routes
from roost.pages.renderer import render_components, render_middleware
from roost.pages.templates import TemplateComponent, create_environment
from roost.pages.types import RouteConfig, RouteEntry, RouteKind, decode_route_module

__all__ = [
    "BuildResult",
    "LeafChain",
    "RouteConfig",
    "RouteEntry",
    "RouteKind",
    "TemplateComponent",
    "build_routes",
    "create_environment",
    "decode_route_module",
    "discover_routes",
    "render_components",
    "render_middleware",
    "resolve_chain",
]
