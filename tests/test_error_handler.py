"""Tests for wren.middleware.errors — JSON error responses."""

import logging

from wren import App
from wren.errors import HTTPError, MiddlewareChainFailure
from wren.middleware import ErrorHandler, RequestId
from wren.testing import TestClient


def _app(debug: bool = False) -> App:
    app = App()
    app.use(ErrorHandler(debug=debug))

    @app.get("/boom")
    async def boom(ctx):
        raise RuntimeError("secret detail")

    @app.get("/gone")
    async def gone(ctx):
        raise HTTPError(410, "This page is gone", code="GONE", headers=(("x-why", "old"),))

    @app.get("/wrapped")
    async def wrapped(ctx):
        raise MiddlewareChainFailure(HTTPError(409, "conflict"))

    @app.get("/partial")
    async def partial(ctx):
        await ctx.response.write("streaming")
        raise RuntimeError("mid-stream")

    return app


class TestErrorHandler:
    async def test_unhandled_error_is_json_500(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/boom")
        assert response.status == 500
        assert response.content_type == "application/json"
        assert response.header("x-error-code") == "INTERNAL_SERVER_ERROR"
        body = response.json()
        assert body["error"] == "Internal Server Error"
        assert body["message"] == "Internal Server Error"
        assert body["status"] == 500
        assert body["path"] == "/boom"
        assert body["method"] == "GET"
        assert "timestamp" in body
        assert "traceback" not in body

    async def test_debug_includes_message_and_traceback(self) -> None:
        async with TestClient(_app(debug=True)) as client:
            response = await client.get("/boom")
        body = response.json()
        assert body["message"] == "secret detail"
        assert any("RuntimeError" in line for line in body["traceback"])

    async def test_http_error(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/gone")
        assert response.status == 410
        assert response.header("x-why") == "old"
        body = response.json()
        assert body["error"] == "Gone"
        assert body["message"] == "This page is gone"
        assert body["code"] == "GONE"

    async def test_chain_failure_unwrapped(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/wrapped")
        assert response.status == 409
        assert response.json()["code"] == "HTTP_ERROR"

    async def test_not_found_still_plain(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/missing")
        assert response.status == 404
        assert response.text == "Route Not Found"

    async def test_request_id_included(self) -> None:
        app = App()
        app.use(RequestId(), ErrorHandler())

        @app.get("/boom")
        async def boom(ctx):
            raise RuntimeError("x")

        async with TestClient(app) as client:
            response = await client.get("/boom", headers={"X-Request-ID": "req-1"})
        assert response.json()["request_id"] == "req-1"
        assert response.header("x-request-id") == "req-1"

    async def test_headers_sent_only_logs(self, caplog) -> None:
        with caplog.at_level(logging.ERROR, logger="wren.middleware"):
            async with TestClient(_app()) as client:
                response = await client.get("/partial")
        assert response.status == 200
        assert response.body == b"streaming"
        assert "headers already sent" in caplog.text

    async def test_client_errors_logged_as_warning(self, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="wren.middleware"):
            async with TestClient(_app()) as client:
                await client.get("/gone")
        records = [r for r in caplog.records if r.name == "wren.middleware"]
        assert [r.levelno for r in records] == [logging.WARNING]

    async def test_pending_headers_dropped(self) -> None:
        app = App()
        app.use(RequestId(), ErrorHandler())

        @app.get("/archive")
        async def archive(ctx):
            ctx.set_header("content-encoding", "gzip")
            raise RuntimeError("x")

        async with TestClient(app) as client:
            response = await client.get("/archive", headers={"X-Request-ID": "req-2"})
        assert response.status == 500
        assert response.header("content-encoding") is None
        assert response.header("x-request-id") == "req-2"
        assert response.content_type == "application/json"
