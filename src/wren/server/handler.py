"""Request handler — one ASGI ``http`` scope in, one response out.

Received -> global middleware -> route match -> route middleware -> handler.
Global middleware always runs, even for requests that end in a 404;
route middleware runs only once a route is resolved. Routes match
the raw, still percent-encoded path; captured params are decoded.
"""

import logging
from collections.abc import Iterable

from wren._internal.asgi import Receive, Scope, Send
from wren.config import AppConfig
from wren.context import Context, context_var
from wren.errors import MiddlewareChainFailure, RouteNotFound
from wren.http.query import QueryParams
from wren.http.request import RawRequest
from wren.http.response import ResponseWriter
from wren.middleware.chain import run_chain
from wren.middleware.protocol import Middleware
from wren.routing.router import Router
from wren.server.errors import handle_chain_failure, write_not_found
from wren.templating import Templates

logger = logging.getLogger("wren.server")


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    middleware: Iterable[Middleware],
    config: AppConfig,
    templates: Templates | None = None,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    request = RawRequest(scope, receive)
    response = ResponseWriter(send)
    ctx = Context(
        request,
        response,
        query=QueryParams(request.query_string),
        config=config,
        templates=templates,
    )
    token = context_var.set(ctx)

    async def dispatch(ctx: Context) -> None:
        try:
            match = router.match(ctx.method, ctx.request.raw_path)
        except RouteNotFound:
            await write_not_found(ctx)
            return
        ctx.params.update(match.params)
        await run_chain(ctx, match.route.middleware, match.route.handler)

    try:
        await run_chain(ctx, middleware, dispatch)
    except Exception as exc:
        await handle_chain_failure(MiddlewareChainFailure.wrap(exc), ctx)
    else:
        if not response.finished:
            # Short-circuit or handler that never answered; close what is pending
            logger.warning("%s %s completed without finishing the response", ctx.method, ctx.path)
            await response.end()
    finally:
        context_var.reset(token)
