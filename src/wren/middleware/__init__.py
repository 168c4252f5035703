"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(ctx: Context, next: Next) -> None

Chain execution:
    run_chain -- Run middleware around a terminal handler
    compose -- Fold several middleware into one

Built-in middleware:
    ErrorHandler -- JSON error responses
    RequestId -- Request ID propagation
    RequestTimeout -- Best-effort 408 after a deadline
"""

from wren.middleware.chain import compose, run_chain
from wren.middleware.errors import ErrorHandler
from wren.middleware.protocol import Handler, Middleware, Next
from wren.middleware.request_id import RequestId
from wren.middleware.timeout import RequestTimeout

__all__ = [
    "ErrorHandler",
    "Handler",
    "Middleware",
    "Next",
    "RequestId",
    "RequestTimeout",
    "compose",
    "run_chain",
]
