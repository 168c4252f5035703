"""Onion-style chain execution.

``run_chain`` runs an ordered middleware sequence followed by a terminal
handler. Each middleware receives a ``next`` that resumes the chain at
the following index; dispatch goes through a cursor over a fixed tuple,
not through nested continuation closures built up front.

Given ``[a, b, c]`` and handler ``h``, code before ``await next()``
runs a, b, c, h and code after it runs h, c, b, a.
"""

from collections.abc import Awaitable, Iterable
from typing import TYPE_CHECKING

from wren._internal.invoke import invoke
from wren.errors import DoubleNextInvocation
from wren.middleware.protocol import Handler, Middleware, Next

if TYPE_CHECKING:
    from wren.context import Context


class _Cursor:
    """Walks one chain for one request.

    ``_index`` is the highest position dispatched so far. ``next()`` from
    the middleware at position ``i`` dispatches ``i + 1``; a second call
    finds ``i + 1 <= _index`` and is rejected before anything runs.
    """

    __slots__ = ("_ctx", "_handler", "_index", "_stack")

    def __init__(self, ctx: "Context", stack: tuple[Middleware, ...], handler: Handler) -> None:
        self._ctx = ctx
        self._stack = stack
        self._handler = handler
        self._index = -1

    def dispatch(self, position: int) -> Awaitable[None]:
        if position <= self._index:
            msg = f"next() called multiple times (middleware #{position - 1})"
            raise DoubleNextInvocation(msg)
        self._index = position
        return self._run(position)

    def _next_for(self, position: int) -> Next:
        def next_() -> Awaitable[None]:
            return self.dispatch(position + 1)

        return next_

    async def _run(self, position: int) -> None:
        if position == len(self._stack):
            await invoke(self._handler, self._ctx)
            return
        middleware = self._stack[position]
        await middleware(self._ctx, self._next_for(position))


async def run_chain(
    ctx: "Context",
    middleware: Iterable[Middleware],
    handler: Handler,
) -> None:
    """Run *middleware* around *handler* for *ctx*.

    Exceptions from any layer propagate unchanged to the caller.
    """
    await _Cursor(ctx, tuple(middleware), handler).dispatch(0)


def compose(*middleware: Middleware) -> Middleware:
    """Fold several middleware into one with identical onion semantics.

    The composed middleware's own ``next`` becomes the terminal step of
    the inner stack, so it fits anywhere a single middleware does::

        auth_stack = compose(request_id, require_user)
        app.post("/admin", auth_stack, handler)
    """
    stack = tuple(middleware)

    if not stack:

        async def passthrough(ctx: "Context", next: Next) -> None:
            await next()

        return passthrough

    if len(stack) == 1:
        return stack[0]

    async def composed(ctx: "Context", next: Next) -> None:
        async def resume(_ctx: "Context") -> None:
            await next()

        await _Cursor(ctx, stack, resume).dispatch(0)

    return composed
