"""Tests for wren.http.query — QueryParams."""

from wren.http.query import QueryParams


class TestQueryParams:
    def test_single_values_are_strings(self) -> None:
        qp = QueryParams(b"page=2&q=wren")
        assert qp["page"] == "2"
        assert qp["q"] == "wren"

    def test_repeated_keys_are_lists(self) -> None:
        qp = QueryParams(b"tag=a&tag=b&tag=c")
        assert qp["tag"] == ["a", "b", "c"]
        assert qp.first("tag") == "a"
        assert qp.get_list("tag") == ["a", "b", "c"]

    def test_blank_values_kept(self) -> None:
        assert QueryParams(b"flag=&x=1")["flag"] == ""

    def test_percent_and_plus_decoding(self) -> None:
        qp = QueryParams(b"q=hello+world&city=M%C3%BCnchen")
        assert qp["q"] == "hello world"
        assert qp["city"] == "München"

    def test_missing(self) -> None:
        qp = QueryParams(b"")
        assert "x" not in qp
        assert qp.get("x") is None
        assert qp.first("x", "d") == "d"
        assert qp.get_list("x") == []
        assert len(qp) == 0

    def test_get_int(self) -> None:
        qp = QueryParams("page=3&bad=x")
        assert qp.get_int("page") == 3
        assert qp.get_int("bad", 1) == 1
        assert qp.get_int("missing") is None

    def test_to_dict_and_raw(self) -> None:
        qp = QueryParams(b"a=1&b=2&b=3")
        assert qp.to_dict() == {"a": "1", "b": ["2", "3"]}
        assert qp.raw == b"a=1&b=2&b=3"
        assert list(qp) == ["a", "b"]
