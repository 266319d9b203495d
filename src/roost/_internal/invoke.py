"""Uniform calling of user callables that may or may not be coroutines.

Handlers, middleware, components and fallbacks can all be written as
``def`` or ``async def``; callers go through :func:`invoke` instead of
checking themselves.
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await its result when that result is awaitable."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
