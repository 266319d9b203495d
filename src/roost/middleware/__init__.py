"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(ctx: Context) -> Response

``compose()`` chains middleware with onion-model delegation through
``ctx.next()``.
"""

from roost.middleware.compose import compose
from roost.middleware.protocol import Middleware, Next

__all__ = ["Middleware", "Next", "compose"]
