"""Tests for wren.http.response — the raw response writer."""

import pytest

from wren.errors import HeadersAlreadySent
from wren.http.response import ResponseWriter, body_allowed


class TestBodyAllowed:
    @pytest.mark.parametrize("status", [100, 101, 204, 304])
    def test_no_body(self, status: int) -> None:
        assert not body_allowed(status)

    @pytest.mark.parametrize("status", [200, 201, 302, 404, 500])
    def test_body(self, status: int) -> None:
        assert body_allowed(status)


class TestPendingHeaders:
    def test_set_replaces_and_lowercases(self, recorder) -> None:
        writer = ResponseWriter(recorder)
        writer.set_header("X-Token", "a")
        writer.set_header("x-token", "b")
        assert writer.headers == (("x-token", "b"),)
        assert writer.get_header("X-TOKEN") == "b"

    def test_append_keeps_existing(self, recorder) -> None:
        writer = ResponseWriter(recorder)
        writer.append_header("Set-Cookie", "a=1")
        writer.append_header("Set-Cookie", "b=2")
        assert writer.get_headers("set-cookie") == ["a=1", "b=2"]

    def test_clear_keeps_named_headers(self, recorder) -> None:
        writer = ResponseWriter(recorder)
        writer.set_header("Content-Encoding", "gzip")
        writer.set_header("X-Request-ID", "abc")
        writer.append_header("set-cookie", "a=1")
        writer.clear_headers(keep=("x-request-id",))
        assert writer.headers == (("x-request-id", "abc"),)

    def test_remove(self, recorder) -> None:
        writer = ResponseWriter(recorder)
        writer.set_header("content-length", "10")
        writer.remove_header("Content-Length")
        assert writer.get_header("content-length") is None

    def test_default_status(self, recorder) -> None:
        assert ResponseWriter(recorder).status_code == 200


class TestSending:
    async def test_end_sends_head_and_body(self, recorder) -> None:
        writer = ResponseWriter(recorder)
        writer.status_code = 201
        writer.set_header("content-type", "text/plain")
        await writer.end("hello")
        assert recorder.messages == [
            {
                "type": "http.response.start",
                "status": 201,
                "headers": [(b"content-type", b"text/plain"), (b"content-length", b"5")],
            },
            {"type": "http.response.body", "body": b"hello", "more_body": False},
        ]
        assert writer.headers_sent
        assert writer.finished

    async def test_explicit_content_length_kept(self, recorder) -> None:
        writer = ResponseWriter(recorder)
        writer.set_header("content-length", "0")
        await writer.end()
        assert recorder.header("content-length") == "0"

    async def test_write_streams_then_end_closes(self, recorder) -> None:
        writer = ResponseWriter(recorder)
        await writer.write("a")
        await writer.write(b"b")
        await writer.end()
        assert len(recorder.starts) == 1
        assert recorder.header("content-length") is None
        assert recorder.body == b"ab"
        assert [m.get("more_body") for m in recorder.messages[1:]] == [True, True, False]

    async def test_empty_chunk_not_sent(self, recorder) -> None:
        writer = ResponseWriter(recorder)
        await writer.write(b"")
        assert len(recorder.messages) == 1

    async def test_body_dropped_for_204(self, recorder) -> None:
        writer = ResponseWriter(recorder)
        writer.status_code = 204
        await writer.end("ignored")
        assert recorder.body == b""
        assert recorder.header("content-length") is None


class TestGuards:
    async def test_status_after_start(self, recorder) -> None:
        writer = ResponseWriter(recorder)
        await writer.start()
        with pytest.raises(HeadersAlreadySent, match="headers already sent"):
            writer.status_code = 500

    async def test_headers_after_start(self, recorder) -> None:
        writer = ResponseWriter(recorder)
        await writer.write("x")
        with pytest.raises(HeadersAlreadySent):
            writer.set_header("x-late", "1")
        with pytest.raises(HeadersAlreadySent):
            writer.append_header("set-cookie", "a=1")
        with pytest.raises(HeadersAlreadySent):
            writer.clear_headers()

    async def test_start_twice(self, recorder) -> None:
        writer = ResponseWriter(recorder)
        await writer.start()
        with pytest.raises(HeadersAlreadySent):
            await writer.start()

    async def test_write_after_end(self, recorder) -> None:
        writer = ResponseWriter(recorder)
        await writer.end("done")
        with pytest.raises(HeadersAlreadySent, match="already finished"):
            await writer.write("more")
        with pytest.raises(HeadersAlreadySent):
            await writer.end()
        assert len(recorder.messages) == 2
