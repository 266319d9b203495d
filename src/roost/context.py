"""Per-request dispatch context.

Every handler, middleware and component receives one ``Context``. It
carries the request, the matched path parameters, a per-request
``state`` dict for middleware to hand data downstream, and ``next``, the
continuation into the rest of the chain.

The current request is also published through a ContextVar so helpers
deep in user code can reach it without threading it through calls.
``ContextVar`` is task-local under asyncio. No locks needed.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

from markupsafe import Markup

from roost.http.response import Response, redirect

if TYPE_CHECKING:
    from roost._internal.types import Component
    from roost.config import AppConfig
    from roost.http.request import Request

request_var: ContextVar[Request] = ContextVar("roost_request")
"""The current request. Set by the ASGI handler before dispatch."""


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get()


class Context:
    """Mutable per-request state handed through the handler chain.

    Attributes:
        request: The incoming request.
        config: The app configuration.
        params: Path parameters captured by the matched patterns.
        state: Free-form per-request storage for middleware.
        next: Continuation into the downstream chain. Rebound by
            ``compose()`` for each handler it runs.
        layouts: Components the current route renders, outermost first.
        component: While rendering, the markup of the inner component.
        data: Page data passed to ``render()``.
    """

    __slots__ = ("component", "config", "data", "layouts", "next", "params", "request", "state")

    def __init__(
        self,
        request: Request,
        config: AppConfig,
        next: Callable[[], Awaitable[Response]],
        *,
        params: Mapping[str, str] | None = None,
    ) -> None:
        self.request = request
        self.config = config
        self.next = next
        self.params: dict[str, str] = dict(params or {})
        self.state: dict[str, Any] = {}
        self.layouts: tuple[Component, ...] = ()
        self.component: Markup = Markup("")
        self.data: Any = None

    @property
    def url(self) -> str:
        return self.request.url

    async def render(
        self,
        data: Any = None,
        *,
        status: int = 200,
        headers: Mapping[str, str] | None = None,
    ) -> Response:
        """Render the route's layout chain into an HTML response.

        *data* is exposed to every component as ``ctx.data``.
        """
        from roost.pages.renderer import render_components

        self.data = data
        html = await render_components(self.layouts, self)
        response = Response(body=str(html), status=status)
        if headers:
            response = response.with_headers(headers)
        return response

    def redirect(self, location: str, status: int = 302) -> Response:
        return redirect(location, status)

    def __repr__(self) -> str:
        return f"<Context {self.request.method} {self.request.url} params={self.params!r}>"
