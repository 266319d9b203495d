"""Onion-model composition of handler chains.

``compose([h0, h1, h2])`` returns one handler. When it runs, ``h0`` is
called with ``ctx.next`` bound to a continuation that runs ``h1``, whose
``ctx.next`` runs ``h2``, whose ``ctx.next`` runs whatever ``ctx.next``
was when the composed handler was entered (the terminal fallback).

A handler may return without calling ``ctx.next()`` to short-circuit
everything downstream, or await ``ctx.next()`` and post-process the
result. Code after ``await ctx.next()`` runs only once the whole
downstream chain has resolved, and ``h(i+1)`` never starts before
``h(i)`` asks for it.
"""

from collections.abc import Iterable
from typing import Any

from roost._internal.invoke import invoke
from roost._internal.types import Handler
from roost.context import Context


def compose(handlers: Iterable[Handler]) -> Handler:
    """Compose *handlers* into a single ``(ctx) -> response`` handler.

    Handlers may be sync or async. The composed handler restores
    ``ctx.next`` on exit, so composed chains nest inside each other.
    """
    chain = tuple(handlers)

    async def composed(ctx: Context) -> Any:
        terminal = ctx.next

        async def run(index: int) -> Any:
            if index == len(chain):
                return await invoke(terminal)

            called = False

            async def next_() -> Any:
                nonlocal called
                if called:
                    msg = f"ctx.next() called multiple times by {chain[index]!r}"
                    raise RuntimeError(msg)
                called = True
                try:
                    return await run(index + 1)
                finally:
                    ctx.next = next_

            ctx.next = next_
            return await invoke(chain[index], ctx)

        try:
            return await run(0)
        finally:
            ctx.next = terminal

    return composed
