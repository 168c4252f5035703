"""Tests for wren.http.headers — case-insensitive header mapping."""

import pytest

from wren.http.headers import Headers


class TestHeaders:
    def test_case_insensitive(self) -> None:
        headers = Headers(((b"Content-Type", b"text/html"),))
        assert headers["content-type"] == "text/html"
        assert headers["CONTENT-TYPE"] == "text/html"
        assert "Content-type" in headers

    def test_first_value_and_list(self) -> None:
        headers = Headers(((b"accept", b"a"), (b"Accept", b"b")))
        assert headers["accept"] == "a"
        assert headers.get_list("ACCEPT") == ["a", "b"]
        assert len(headers) == 1
        assert list(headers) == ["accept"]

    def test_missing(self) -> None:
        headers = Headers()
        assert headers.get("x") is None
        assert headers.get("x", "d") == "d"
        assert 1 not in headers
        with pytest.raises(KeyError):
            headers["x"]

    def test_raw(self) -> None:
        raw = ((b"X-Token", b"1"),)
        assert Headers(raw).raw == raw

    def test_accepts_list_of_pairs(self) -> None:
        headers = Headers([(b"host", b"example.com")])
        assert dict(headers) == {"host": "example.com"}
