"""Shared fixtures: raw ASGI scopes, a recording ``send``, contexts."""

from collections.abc import Callable
from typing import Any

import pytest

from wren.config import AppConfig
from wren.context import Context
from wren.http.request import RawRequest
from wren.http.response import ResponseWriter


def _make_scope(**overrides: Any) -> dict[str, Any]:
    """Build a minimal valid ASGI HTTP scope."""
    base: dict[str, Any] = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "GET",
        "scheme": "http",
        "path": "/",
        "raw_path": b"/",
        "query_string": b"",
        "root_path": "",
        "headers": [(b"host", b"example.com")],
        "server": ("example.com", 80),
        "client": ("127.0.0.1", 54321),
    }
    base.update(overrides)
    return base


class SendRecorder:
    """An ASGI ``send`` that keeps every message."""

    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []

    async def __call__(self, message: dict[str, Any]) -> None:
        self.messages.append(message)

    @property
    def starts(self) -> list[dict[str, Any]]:
        return [m for m in self.messages if m["type"] == "http.response.start"]

    @property
    def status(self) -> int:
        return self.starts[0]["status"]

    @property
    def headers(self) -> list[tuple[str, str]]:
        return [(k.decode(), v.decode()) for k, v in self.starts[0]["headers"]]

    def header(self, name: str) -> str | None:
        for key, value in self.headers:
            if key == name:
                return value
        return None

    @property
    def body(self) -> bytes:
        return b"".join(
            m.get("body", b"") for m in self.messages if m["type"] == "http.response.body"
        )


@pytest.fixture
def make_scope() -> Callable[..., dict[str, Any]]:
    return _make_scope


@pytest.fixture
def recorder() -> SendRecorder:
    return SendRecorder()


@pytest.fixture
def make_ctx(recorder: SendRecorder) -> Callable[..., Context]:
    """Factory for a Context wired to ``recorder``."""

    async def receive() -> dict[str, Any]:
        return {"type": "http.request", "body": b"", "more_body": False}

    def factory(config: AppConfig | None = None, **scope: Any) -> Context:
        request = RawRequest(_make_scope(**scope), receive)
        return Context(request, ResponseWriter(recorder), config=config)

    return factory
