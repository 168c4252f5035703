"""Middleware protocol and Next type alias.

A middleware is any callable matching::

    async def my_mw(ctx: Context, next: Next) -> None: ...

No base class required. The framework checks the shape, not the lineage.

``next`` takes no arguments. Awaiting it runs the rest of the chain and
returns once that rest has completed. Not calling it short-circuits the
chain; calling it twice raises ``DoubleNextInvocation``.
"""

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from wren.context import Context

# Resumes the remainder of the chain
type Next = Callable[[], Awaitable[None]]

# Terminal step; sync handlers are accepted and awaited uniformly
type Handler = Callable[["Context"], Awaitable[None] | Any]


class Middleware(Protocol):
    """Protocol for wren middleware.

    Accepts both functions and callable objects::

        # Function middleware
        async def timing(ctx: Context, next: Next) -> None:
            start = time.monotonic()
            await next()
            elapsed = time.monotonic() - start
            logger.info("%s %s %.3fs", ctx.method, ctx.path, elapsed)

        # Class middleware
        class RequireJSON:
            async def __call__(self, ctx: Context, next: Next) -> None:
                if not ctx.is_content_type("json"):
                    await ctx.status(415).text("Unsupported Media Type")
                    return
                await next()
    """

    async def __call__(self, ctx: "Context", next: Next) -> None: ...
