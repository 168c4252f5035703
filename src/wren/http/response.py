"""Raw response handle over ASGI ``send``.

Status and headers stay pending until the head is sent, either
explicitly via ``start()`` or implicitly by the first ``write()`` or by
``end()``. After that, mutating status or headers raises
``HeadersAlreadySent``; so does any write after ``end()``. This is what
guarantees a response is never written twice.
"""

from wren._internal.asgi import Send
from wren.errors import HeadersAlreadySent

# Headers an error response keeps from the failed one
PRESERVED_ON_ERROR: tuple[str, ...] = ("x-request-id",)


def body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


def _encode(chunk: str | bytes) -> bytes:
    return chunk.encode("utf-8") if isinstance(chunk, str) else chunk


class ResponseWriter:
    """The response side of one ASGI ``http`` connection."""

    __slots__ = ("_finished", "_headers", "_headers_sent", "_send", "_status")

    def __init__(self, send: Send) -> None:
        self._send = send
        self._status = 200
        self._headers: list[tuple[str, str]] = []
        self._headers_sent = False
        self._finished = False

    # -- State --

    @property
    def headers_sent(self) -> bool:
        return self._headers_sent

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def status_code(self) -> int:
        return self._status

    @status_code.setter
    def status_code(self, status: int) -> None:
        self._ensure_head_pending()
        self._status = status

    # -- Pending headers --

    @property
    def headers(self) -> tuple[tuple[str, str], ...]:
        return tuple(self._headers)

    def get_header(self, name: str) -> str | None:
        """First pending value for *name* (case-insensitive)."""
        key = name.lower()
        for header, value in self._headers:
            if header == key:
                return value
        return None

    def get_headers(self, name: str) -> list[str]:
        key = name.lower()
        return [value for header, value in self._headers if header == key]

    def set_header(self, name: str, value: str) -> None:
        """Replace every pending value of *name* with *value*."""
        self._ensure_head_pending()
        key = name.lower()
        self._headers = [(h, v) for h, v in self._headers if h != key]
        self._headers.append((key, value))

    def append_header(self, name: str, value: str) -> None:
        """Add a value for *name*, keeping existing ones (``Set-Cookie``)."""
        self._ensure_head_pending()
        self._headers.append((name.lower(), value))

    def remove_header(self, name: str) -> None:
        self._ensure_head_pending()
        key = name.lower()
        self._headers = [(h, v) for h, v in self._headers if h != key]

    def clear_headers(self, keep: tuple[str, ...] = ()) -> None:
        """Drop every pending header except those named in *keep*."""
        self._ensure_head_pending()
        kept = {name.lower() for name in keep}
        self._headers = [(h, v) for h, v in self._headers if h in kept]

    # -- Sending --

    async def start(self) -> None:
        """Send the response head with the pending status and headers."""
        self._ensure_head_pending()
        self._headers_sent = True
        await self._send(
            {
                "type": "http.response.start",
                "status": self._status,
                "headers": [
                    (name.encode("latin-1"), value.encode("latin-1"))
                    for name, value in self._headers
                ],
            }
        )

    async def write(self, chunk: str | bytes) -> None:
        """Stream one body chunk, sending the head first if needed."""
        self._ensure_open()
        if not self._headers_sent:
            await self.start()
        data = _encode(chunk)
        if data and body_allowed(self._status):
            await self._send({"type": "http.response.body", "body": data, "more_body": True})

    async def end(self, body: str | bytes = b"") -> None:
        """Finish the response, optionally with a final body.

        When the head has not been sent yet, ``content-length`` is set
        from *body* unless a value is already pending or the status
        forbids a body.
        """
        self._ensure_open()
        data = _encode(body) if body_allowed(self._status) else b""
        if not self._headers_sent:
            if body_allowed(self._status) and self.get_header("content-length") is None:
                self.set_header("content-length", str(len(data)))
            await self.start()
        self._finished = True
        await self._send({"type": "http.response.body", "body": data, "more_body": False})

    # -- Guards --

    def _ensure_head_pending(self) -> None:
        if self._headers_sent:
            msg = "Response headers already sent"
            raise HeadersAlreadySent(msg)

    def _ensure_open(self) -> None:
        if self._finished:
            msg = "Response already finished"
            raise HeadersAlreadySent(msg)
