"""Layout chain rendering.

Components are plain callables receiving the request ``Context``. The
chain is rendered inside-out: the leaf component first, then each
wrapper from the innermost layout to the app wrapper, with
``ctx.component`` holding the markup produced so far::

    def component(ctx):            # _app
        return f"<html><body>{ctx.component}</body></html>"

Markup is carried as ``markupsafe.Markup`` so template-backed
components embed it without escaping.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from markupsafe import Markup

from roost._internal.invoke import invoke
from roost.http.response import Response

if TYPE_CHECKING:
    from roost._internal.types import Component, Handler
    from roost.context import Context


async def render_components(components: Sequence[Component], ctx: Context) -> Markup:
    """Render *components* (outermost first) nested inside each other.

    Returns empty markup when there is nothing to render.
    """
    html = Markup("")
    for component in reversed(components):
        ctx.component = html
        result = await invoke(component, ctx)
        html = Markup("") if result is None else Markup(result)
    return html


def render_middleware(components: Sequence[Component], handler: Handler | None = None) -> Handler:
    """Build the innermost handler of a compiled route.

    It installs *components* as the route's layout chain and then:

    - without *handler*, renders the chain with no page data;
    - with *handler*, calls it; a ``Response`` result is returned as-is,
      anything else is rendered as page data (``ctx.data``).

    The handler may also call ``ctx.render(data)`` itself.
    """
    layouts = tuple(components)

    async def render_route(ctx: Context) -> Any:
        ctx.layouts = layouts
        if handler is None:
            return await ctx.render()
        result = await invoke(handler, ctx)
        if isinstance(result, Response):
            return result
        return await ctx.render(result)

    if handler is not None:
        render_route.__qualname__ = getattr(handler, "__qualname__", render_route.__qualname__)
        render_route.__wrapped__ = handler  # type: ignore[attr-defined]
    return render_route
