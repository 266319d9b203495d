"""Structural type of a middleware.

Anything callable with the request ``Context`` qualifies: a plain
function, an ``async def``, or an object with ``__call__``. Middleware
reaches the rest of the chain through ``ctx.next()``::

    async def require_token(ctx: Context) -> Response:
        if "x-token" not in ctx.request.headers:
            return Response("missing token", status=401)
        return await ctx.next()
"""

from collections.abc import Awaitable, Callable
from typing import Protocol, TypeAlias

from roost.context import Context
from roost.http.response import Response

# ctx.next: runs everything downstream and resolves to its response
Next: TypeAlias = Callable[[], Awaitable[Response]]


class Middleware(Protocol):
    """A ``_middleware`` handler or an ``App.use()`` callable."""

    async def __call__(self, ctx: Context) -> Response: ...
