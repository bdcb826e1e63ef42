"""Call sync or async callables uniformly.

Route handlers, middleware and the ``next`` callable handed to the router
may each be plain functions or coroutine functions. The router and
``compose`` call all of them through ``invoke``.
"""

from inspect import isawaitable
from typing import Any


async def invoke(func: Any, /, *args: Any) -> Any:
    """Call ``func(*args)``; if that produced an awaitable, return its result.

    ``lambda ctx: 2`` and ``async def show(ctx): ...`` are both valid
    handlers. A sync ``next`` returning a plain value is passed through.
    """
    value = func(*args)
    return await value if isawaitable(value) else value
