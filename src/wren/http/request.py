"""Raw inbound request handle.

A thin view over the ASGI scope and ``receive`` callable. Header
access goes back to the scope each time; only the body is cached,
because ``receive`` can be consumed once.
"""

from collections.abc import AsyncGenerator

from wren._internal.asgi import Receive, Scope
from wren.http.headers import Headers


class RawRequest:
    """The request side of one ASGI ``http`` connection."""

    __slots__ = ("_body", "_receive", "scope")

    def __init__(self, scope: Scope, receive: Receive) -> None:
        self.scope = scope
        self._receive = receive
        self._body: bytes | None = None

    @property
    def method(self) -> str:
        return str(self.scope.get("method") or "GET").upper()

    @property
    def scheme(self) -> str:
        return self.scope.get("scheme") or "http"

    @property
    def http_version(self) -> str:
        return self.scope.get("http_version", "1.1")

    @property
    def path(self) -> str:
        """Percent-decoded path, as the ASGI server provides it."""
        return self.scope.get("path") or "/"

    @property
    def raw_path(self) -> str:
        """The path exactly as sent on the wire."""
        raw = self.scope.get("raw_path")
        if raw:
            return raw.decode("latin-1")
        return self.path

    @property
    def query_string(self) -> bytes:
        return self.scope.get("query_string") or b""

    @property
    def url(self) -> str:
        """Original request target: raw path plus query string."""
        qs = self.query_string
        if qs:
            return f"{self.raw_path}?{qs.decode('latin-1')}"
        return self.raw_path

    @property
    def headers(self) -> Headers:
        return Headers(tuple(self.scope.get("headers") or ()))

    @property
    def client(self) -> tuple[str, int] | None:
        client = self.scope.get("client")
        return tuple(client) if client else None  # type: ignore[return-value]

    async def stream(self) -> AsyncGenerator[bytes]:
        """Stream the request body in chunks."""
        if self._body is not None:
            if self._body:
                yield self._body
            return
        while True:
            message = await self._receive()
            if message["type"] == "http.disconnect":
                break
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    async def body(self) -> bytes:
        """Read the full request body.

        Result is cached — ``receive`` is consumed once, then the same
        bytes are returned on subsequent calls.
        """
        if self._body is None:
            self._body = b"".join([chunk async for chunk in self.stream()])
        return self._body
