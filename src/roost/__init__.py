"""Roost — filesystem routing with inherited layouts and middleware.

Route files in a directory tree become URL patterns; ``_app``,
``_layout`` and ``_middleware`` files wrap everything beneath them.
The result is a plain ASGI application.

Basic usage::

    from roost import App

    app = App()
    app.mount_routes("routes")

    @app.route("/health")
    def health(ctx):
        return Response("ok")

Run it with any ASGI server (``uvicorn myapp:app``).
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "ConfigurationError",
    "Context",
    "HTTPError",
    "Middleware",
    "Next",
    "NotFound",
    "Request",
    "Response",
    "RoostError",
    "RouteConfig",
    "RouteModuleError",
    "compose",
    "get_request",
    "redirect",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import roost`` fast while providing a clean top-level API.
    """
    if name == "App":
        from roost.app import App

        return App

    if name == "AppConfig":
        from roost.config import AppConfig

        return AppConfig

    if name == "Request":
        from roost.http.request import Request

        return Request

    if name in ("Response", "redirect"):
        from roost.http import response

        return getattr(response, name)

    if name in ("Context", "get_request"):
        from roost import context

        return getattr(context, name)

    if name in ("Middleware", "Next", "compose"):
        from roost import middleware

        return getattr(middleware, name)

    if name == "RouteConfig":
        from roost.pages.types import RouteConfig

        return RouteConfig

    if name in ("RoostError", "ConfigurationError", "RouteModuleError", "HTTPError", "NotFound"):
        from roost import errors

        return getattr(errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
