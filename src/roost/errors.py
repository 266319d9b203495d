"""Roost exception hierarchy.

Shared across the router, the route builder, the app, and the ASGI
glue so every module raises and catches the same types.
"""

from dataclasses import dataclass


class RoostError(Exception):
    """Base for all roost-specific errors."""


class ConfigurationError(RoostError):
    """Raised when routes or app configuration are invalid.

    Typically raised while the route tree is being built at startup.
    """


class RouteModuleError(ConfigurationError):
    """A route module could not be turned into a route entry.

    Raised at build time for modules without any recognizable exports,
    handlers with the wrong arity, unknown HTTP methods, or an invalid
    ``config`` export. Always names the offending route path.
    """

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{reason} (in route module {path!r})")


@dataclass(frozen=True, slots=True)
class HTTPError(RoostError):
    """An error that maps directly to an HTTP status code.

    Handlers and middleware may raise it; the ASGI entry point turns it
    into a plain response with the same status.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818, conventional name in web frameworks
    """404 — nothing handled the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)
