"""Middleware protocol and chain composition.

A middleware is any callable matching::

    async def my_mw(ctx: Context, next: Next) -> Any: ...

No base class required. ``Router`` instances fit the shape, so several
routers (and ordinary middleware) can be chained::

    app = compose([timing, users_router, messages_router])
    result = await app(ctx, not_found)

``next`` takes no arguments; the context is shared by the whole chain.
Middleware may be sync or async, and so may the final ``next``.
"""

from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Protocol

from wren._internal.invoke import invoke
from wren._internal.types import Next
from wren.context import Context


class Middleware(Protocol):
    """Protocol for wren middleware.

    Accepts both functions and callable objects::

        # Function middleware
        async def timing(ctx: Context, next: Next) -> Any:
            start = time.monotonic()
            result = await next()
            ctx.state["elapsed"] = time.monotonic() - start
            return result

        # Class middleware
        class Router:
            async def __call__(self, ctx: Context, next: Next) -> Any:
                ...
    """

    async def __call__(self, ctx: Context, next: Next) -> Any: ...


def compose(middleware: Sequence[Any]) -> Callable[[Context, Next], Awaitable[Any]]:
    """Combine *middleware* into a single middleware.

    Each entry gets a ``next`` that runs the rest of the chain; the last
    one's ``next`` is the ``next`` passed to the composed callable.
    """
    chain = tuple(middleware)

    async def composed(ctx: Context, next: Next) -> Any:
        handler: Next = next
        for mw in reversed(chain):
            outer = handler

            async def make_next(_mw: Any = mw, _next: Next = outer) -> Any:
                return await invoke(_mw, ctx, _next)

            handler = make_next

        return await invoke(handler)

    return composed
