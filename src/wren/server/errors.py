"""Fallback responses for the request handler.

The core writes exactly three kinds of response on its own: a plain 404
when no route matches, the status of an ``HTTPError`` that escaped the
chain, and a plain 500 for anything else. Richer formatting belongs to
middleware such as ``ErrorHandler``.
"""

import logging

from wren.context import Context
from wren.errors import MiddlewareChainFailure
from wren.http.response import PRESERVED_ON_ERROR

logger = logging.getLogger("wren.server")

NOT_FOUND_BODY = "Route Not Found"
INTERNAL_ERROR_BODY = "Internal Server Error"


async def write_plain(
    ctx: Context,
    status: int,
    body: str,
    headers: tuple[tuple[str, str], ...] = (),
) -> None:
    """Replace the pending status, headers and body with plain text.

    Headers the failed response had set (``content-encoding``,
    ``content-disposition``...) are dropped; only ``x-request-id`` is kept.
    """
    response = ctx.response
    response.clear_headers(keep=PRESERVED_ON_ERROR)
    response.status_code = status
    for name, value in headers:
        response.set_header(name, value)
    response.set_header("content-type", "text/plain; charset=utf-8")
    await response.end(body)


async def write_not_found(ctx: Context) -> None:
    logger.debug("404 %s %s", ctx.method, ctx.path)
    await write_plain(ctx, 404, NOT_FOUND_BODY)


async def handle_chain_failure(failure: MiddlewareChainFailure, ctx: Context) -> None:
    """Answer a failed chain, unless the response already started."""
    if ctx.headers_sent:
        logger.error(
            "%s %s failed after the response started; not writing a second response",
            ctx.method,
            ctx.path,
            exc_info=failure.original,
        )
        return

    http_error = failure.http_error
    if http_error is not None:
        logger.debug("%d %s %s: %s", http_error.status, ctx.method, ctx.path, http_error.detail)
        await write_plain(
            ctx,
            http_error.status,
            http_error.detail or http_error.phrase,
            headers=http_error.headers,
        )
        return

    logger.error("500 %s %s", ctx.method, ctx.path, exc_info=failure.original)
    await write_plain(ctx, 500, INTERNAL_ERROR_BODY)
