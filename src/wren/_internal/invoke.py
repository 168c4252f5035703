"""Invoke helpers — call sync or async callables uniformly.

Route handlers and lifespan hooks can be ``def`` or ``async def``.
This module keeps the sync/async check in exactly one place.

Usage::

    from wren._internal.invoke import invoke

    await invoke(handler, ctx)
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it's awaitable.

    Works with both sync and async callables::

        # sync: returns immediately, no await needed
        def on_startup():
            warm_cache()

        # async: returns a coroutine, awaited automatically
        async def health(ctx):
            await ctx.text("ok")
    """
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
