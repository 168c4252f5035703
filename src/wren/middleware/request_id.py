"""Request ID middleware.

Reuses an inbound ``X-Request-ID`` when present, otherwise generates
one, stores it on ``ctx.request_id`` and echoes it in the response.
"""

import uuid
from collections.abc import Callable
from typing import TYPE_CHECKING

from wren.middleware.protocol import Next

if TYPE_CHECKING:
    from wren.context import Context


def generate_request_id() -> str:
    return str(uuid.uuid4())


class RequestId:
    """Assign every request an ID.

    Usage::

        app.use(RequestId())
        app.use(RequestId("x-correlation-id", response_header=None))
    """

    __slots__ = ("generate", "generator", "header", "response_header")

    def __init__(
        self,
        header: str = "x-request-id",
        *,
        generate: bool = True,
        generator: Callable[[], str] | None = None,
        response_header: str | None = "x-request-id",
    ) -> None:
        self.header = header
        self.generate = generate
        self.generator = generator or generate_request_id
        self.response_header = response_header

    async def __call__(self, ctx: "Context", next: Next) -> None:
        request_id = (ctx.get(self.header) or "").strip()
        if not request_id and self.generate:
            request_id = self.generator()

        if request_id:
            ctx.request_id = request_id
            if self.response_header:
                ctx.set_header(self.response_header, request_id)

        await next()
