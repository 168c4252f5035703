"""Per-request context.

One ``Context`` is created for every inbound request and handed by
reference through the global chain, the route chain and the handler.
It carries the raw request/response handles, route params, the parsed
query, and a fixed set of optional per-request fields. Collaborators
that need more attach it through ``ctx.state`` with a ``ContextKey``
rather than by adding attributes (``Context`` has ``__slots__``).

The active context is also published through a ``ContextVar``::

    from wren.context import get_context

    def current_user():
        return get_context().user
"""

import asyncio
import ipaddress
import json as json_module
import mimetypes
from collections.abc import AsyncIterable, Iterable
from contextvars import ContextVar
from datetime import datetime
from pathlib import Path
from typing import Any, Self

from wren._internal.paths import safe_join
from wren.config import AppConfig
from wren.errors import ConfigurationError, FileNotFound
from wren.http.cookies import EPOCH, SetCookie, parse_cookies
from wren.http.query import QueryParams
from wren.http.request import RawRequest
from wren.http.response import ResponseWriter
from wren.templating import Templates

context_var: ContextVar["Context"] = ContextVar("wren_context")
"""The current request's context. Set by the request handler during dispatch."""


def get_context() -> "Context":
    """Return the current request's context.

    Raises ``LookupError`` if called outside a request.
    """
    return context_var.get()


class ContextKey[T]:
    """A stable key for one capability in ``Context.state``.

    Define keys at module level and share them between the middleware
    that writes and the handlers that read::

        SESSION = ContextKey[Session]("session")

        ctx.set_state(SESSION, session)
        session = ctx.get_state(SESSION)
    """

    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"ContextKey({self.name!r})"


class CancelToken:
    """Cooperative cancellation signal for one request.

    Tripped by ``RequestTimeout`` on expiry. Work that may outlive the
    timeout response can poll ``cancelled`` or ``await wait()``.
    """

    __slots__ = ("_event", "reason")

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason = ""

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "") -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    async def wait(self) -> None:
        await self._event.wait()


def _guess_type(path: Path) -> str:
    content_type, _ = mimetypes.guess_type(path.name)
    return content_type or "application/octet-stream"


class Context:
    """Mutable, request-scoped state plus request and response helpers.

    Request accessors read the live scope on every call. Response
    helpers write through ``response``; ``status()`` and
    ``set_header()`` return the context so calls chain::

        await ctx.status(201).set_header("Location", url).json(user)
    """

    __slots__ = (
        "_config",
        "_templates",
        "body",
        "cancel_token",
        "files",
        "is_authenticated",
        "params",
        "query",
        "request",
        "request_id",
        "response",
        "state",
        "user",
    )

    def __init__(
        self,
        request: RawRequest,
        response: ResponseWriter,
        *,
        query: QueryParams | None = None,
        params: dict[str, str] | None = None,
        config: AppConfig | None = None,
        templates: Templates | None = None,
    ) -> None:
        self.request = request
        self.response = response
        self.params: dict[str, str] = dict(params or {})
        self.query = query if query is not None else QueryParams(request.query_string)

        # Written by collaborators, never by the core
        self.body: Any = None
        self.request_id: str | None = None
        self.is_authenticated = False
        self.user: Any = None
        self.files: list[Any] | None = None

        self.state: dict[ContextKey[Any], Any] = {}
        self.cancel_token = CancelToken()

        self._config = config or AppConfig()
        self._templates = templates

    def __repr__(self) -> str:
        return f"<Context {self.method} {self.original_url!r}>"

    # -- Side table --

    def get_state[T](self, key: ContextKey[T], default: T | None = None) -> T | None:
        return self.state.get(key, default)

    def set_state[T](self, key: ContextKey[T], value: T) -> None:
        self.state[key] = value

    # -- Request helpers --

    def get(self, name: str) -> str | None:
        """First value of request header *name* (case-insensitive)."""
        return self.request.headers.get(name)

    def header(self, name: str) -> str | None:
        """Alias of ``get``."""
        return self.get(name)

    def has_header(self, name: str) -> bool:
        return name in self.request.headers

    def is_content_type(self, kind: str) -> bool:
        """True if the request ``Content-Type`` contains *kind*."""
        return kind.lower() in (self.get("content-type") or "").lower()

    @property
    def method(self) -> str:
        return self.request.method

    @property
    def path(self) -> str:
        return self.request.path

    @property
    def original_url(self) -> str:
        return self.request.url

    @property
    def ip(self) -> str:
        client = self.request.client
        return client[0] if client else ""

    @property
    def protocol(self) -> str:
        return "https" if self.request.scheme in ("https", "wss") else "http"

    @property
    def secure(self) -> bool:
        return self.protocol == "https"

    @property
    def hostname(self) -> str:
        """``Host`` header without the port. IPv6 literals keep brackets."""
        host = self.get("host") or ""
        if host.startswith("["):
            end = host.find("]")
            return host[: end + 1] if end != -1 else host
        return host.split(":", 1)[0]

    @property
    def subdomains(self) -> list[str]:
        """Hostname labels left of the registrable domain, in order.

        ``a.b.example.com`` gives ``["a", "b"]``; IP hosts give ``[]``.
        """
        hostname = self.hostname
        if not hostname:
            return []
        try:
            ipaddress.ip_address(hostname.strip("[]"))
        except ValueError:
            return hostname.split(".")[:-2]
        return []

    @property
    def cookies(self) -> dict[str, str]:
        return parse_cookies(self.get("cookie") or "")

    # -- Response helpers --

    @property
    def headers_sent(self) -> bool:
        return self.response.headers_sent

    def status(self, code: int) -> Self:
        if not 100 <= code <= 599:
            msg = f"Invalid HTTP status code: {code}"
            raise ValueError(msg)
        self.response.status_code = code
        return self

    def set_header(self, name: str, value: str) -> Self:
        self.response.set_header(name, value)
        return self

    async def send(self, body: str | bytes, content_type: str = "application/octet-stream") -> None:
        self.response.set_header("content-type", content_type)
        await self.response.end(body)

    async def text(self, body: str) -> None:
        await self.send(body, "text/plain; charset=utf-8")

    async def html(self, body: str) -> None:
        await self.send(body, "text/html; charset=utf-8")

    async def xml(self, body: str) -> None:
        await self.send(body, "application/xml; charset=utf-8")

    async def json(self, data: Any) -> None:
        await self.send(json_module.dumps(data), "application/json")

    async def redirect(self, url: str, status: int = 302) -> None:
        if not 300 <= status <= 399:
            msg = f"Redirect status must be 3xx, got {status}"
            raise ValueError(msg)
        self.response.status_code = status
        self.response.set_header("location", url)
        await self.response.end()

    def cookie(
        self,
        name: str,
        value: str,
        *,
        max_age: int | None = None,
        path: str = "/",
        domain: str | None = None,
        expires: datetime | None = None,
        secure: bool = False,
        httponly: bool = True,
        samesite: str | None = "Lax",
    ) -> Self:
        """Append a ``Set-Cookie`` header; earlier cookies are kept."""
        cookie = SetCookie(
            name=name,
            value=value,
            max_age=max_age,
            domain=domain,
            path=path,
            expires=expires,
            httponly=httponly,
            secure=secure,
            samesite=samesite,
        )
        self.response.append_header("set-cookie", cookie.to_header_value())
        return self

    def clear_cookie(self, name: str, path: str = "/") -> Self:
        return self.cookie(name, "", max_age=0, path=path, expires=EPOCH)

    async def download(self, path: str | Path, filename: str | None = None) -> None:
        """Send a file under ``files_dir`` as an attachment."""
        file_path = self._resolve_file(path)
        name = (filename or file_path.name).replace('"', "")
        self.response.set_header("content-type", _guess_type(file_path))
        self.response.set_header("content-disposition", f'attachment; filename="{name}"')
        await self._send_path(file_path)

    async def send_file(self, path: str | Path) -> None:
        """Send a file under ``files_dir`` inline."""
        file_path = self._resolve_file(path)
        self.response.set_header("content-type", _guess_type(file_path))
        await self._send_path(file_path)

    async def stream(
        self,
        chunks: AsyncIterable[str | bytes] | Iterable[str | bytes],
        content_type: str = "application/octet-stream",
    ) -> None:
        """Pass chunks straight through to the client, then finish."""
        self.response.set_header("content-type", content_type)
        if isinstance(chunks, AsyncIterable):
            async for chunk in chunks:
                await self.response.write(chunk)
        else:
            for chunk in chunks:
                await self.response.write(chunk)
        await self.response.end()

    async def render(self, template: str, **data: Any) -> None:
        """Render *template* from ``template_dir`` and send it as HTML."""
        if self._templates is None:
            msg = "No template directory configured for this context."
            raise ConfigurationError(msg)
        await self.html(self._templates.render(template, data))

    # -- Internal --

    def _resolve_file(self, path: str | Path) -> Path:
        file_path = safe_join(self._config.files_dir, path)
        if not file_path.is_file():
            msg = f"File not found: {path}"
            raise FileNotFound(msg)
        return file_path

    async def _send_path(self, file_path: Path) -> None:
        self.response.set_header("content-length", str(file_path.stat().st_size))
        chunk_size = self._config.download_chunk_size
        with file_path.open("rb") as fh:
            while chunk := fh.read(chunk_size):
                await self.response.write(chunk)
        await self.response.end()
