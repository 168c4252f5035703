"""Best-effort request timeout.

Races the rest of the chain against a timer. On expiry the context's
cancel token is tripped and ``TimeoutFailure`` (408) is raised, which
propagates like any other chain failure.

The rest of the chain keeps running after expiry unless ``cancel=True``.
Anything it later tries to write is refused by the response writer, and
its outcome is only logged.
"""

import asyncio
import logging
from typing import TYPE_CHECKING

from wren.errors import ConfigurationError, TimeoutFailure
from wren.middleware.protocol import Next

if TYPE_CHECKING:
    from wren.context import Context

logger = logging.getLogger("wren.middleware")


def _log_orphan(task: asyncio.Future[None]) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Work finished with an error after its request timed out", exc_info=exc)


class RequestTimeout:
    """Middleware that fails the request after *seconds*.

    Usage::

        app.use(RequestTimeout(30.0))              # best-effort
        app.use(RequestTimeout(5.0, cancel=True))  # also cancel in-flight work
    """

    __slots__ = ("cancel", "seconds")

    def __init__(self, seconds: float, *, cancel: bool = False) -> None:
        if seconds <= 0:
            msg = f"RequestTimeout needs a positive duration, got {seconds!r}."
            raise ConfigurationError(msg)
        self.seconds = seconds
        self.cancel = cancel

    async def __call__(self, ctx: "Context", next: Next) -> None:
        task = asyncio.ensure_future(next())
        try:
            done, _ = await asyncio.wait({task}, timeout=self.seconds)
        except asyncio.CancelledError:
            task.cancel()
            raise

        if task in done:
            task.result()
            return

        ctx.cancel_token.cancel(f"timed out after {self.seconds:g}s")
        logger.warning("%s %s timed out after %.3fs", ctx.method, ctx.path, self.seconds)
        if self.cancel:
            task.cancel()
        task.add_done_callback(_log_orphan)
        raise TimeoutFailure(self.seconds)
