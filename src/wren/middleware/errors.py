"""Structured error responses.

Wraps everything registered after it, turning failures into a JSON
error body. The core only guarantees a plain 500 fallback; install this
first when clients expect machine-readable errors::

    app.use(ErrorHandler(debug=config.debug))
"""

import logging
import traceback
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from wren.errors import HTTPError, MiddlewareChainFailure
from wren.http.response import PRESERVED_ON_ERROR
from wren.middleware.protocol import Next

if TYPE_CHECKING:
    from wren.context import Context

logger = logging.getLogger("wren.middleware")


def _unwrap(exc: Exception) -> Exception:
    if isinstance(exc, MiddlewareChainFailure) and isinstance(exc.original, Exception):
        return exc.original
    return exc


class ErrorHandler:
    """Map ``HTTPError`` to its status and anything else to 500, as JSON.

    Client errors (4xx) are logged at WARNING, everything else with a
    traceback. When the response head has already gone out the error is
    logged and nothing more is written.
    Headers the failed response had set are discarded, except
    ``x-request-id``.
    """

    __slots__ = ("debug",)

    def __init__(self, *, debug: bool = False) -> None:
        self.debug = debug

    async def __call__(self, ctx: "Context", next: Next) -> None:
        try:
            await next()
        except Exception as raised:
            exc = _unwrap(raised)
            status = exc.status if isinstance(exc, HTTPError) else 500
            if status < 500:
                logger.warning("%d %s %s: %s", status, ctx.method, ctx.path, exc)
            else:
                logger.error("%d %s %s", status, ctx.method, ctx.path, exc_info=exc)

            if ctx.headers_sent:
                logger.error(
                    "Cannot send error response for %s %s: headers already sent",
                    ctx.method,
                    ctx.path,
                )
                return

            await self._respond(ctx, exc)

    async def _respond(self, ctx: "Context", exc: Exception) -> None:
        if isinstance(exc, HTTPError):
            status = exc.status
            code = exc.code or "HTTP_ERROR"
            error = exc.phrase
            message = exc.detail or exc.phrase
        else:
            status = 500
            code = "INTERNAL_SERVER_ERROR"
            error = "Internal Server Error"
            message = str(exc) if self.debug else error

        payload: dict[str, Any] = {
            "error": error,
            "message": message,
            "status": status,
            "code": code,
            "path": ctx.original_url,
            "method": ctx.method,
            "timestamp": datetime.now(UTC).isoformat(),
        }
        if ctx.request_id:
            payload["request_id"] = ctx.request_id
        if self.debug:
            payload["traceback"] = traceback.format_exception(exc)

        ctx.response.clear_headers(keep=PRESERVED_ON_ERROR)
        if isinstance(exc, HTTPError):
            for name, value in exc.headers:
                ctx.set_header(name, value)
        await ctx.status(status).set_header("x-error-code", code).json(payload)
