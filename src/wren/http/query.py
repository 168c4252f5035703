"""Query string parameters.

A key seen once maps to a string; a repeated key maps to the list of
its values in order of appearance::

    QueryParams(b"tag=a&tag=b&page=2")
    # {"tag": ["a", "b"], "page": "2"}
"""

from collections.abc import Iterator, Mapping
from urllib.parse import parse_qsl


class QueryParams(Mapping[str, str | list[str]]):
    """Parsed query string.

    Attributes:
        _data: Field name -> every value, in order.
        _raw: Raw query string bytes.
    """

    __slots__ = ("_data", "_raw")

    def __init__(self, query_string: bytes | str = b"") -> None:
        if isinstance(query_string, str):
            query_string = query_string.encode("latin-1")
        self._raw = query_string
        self._data: dict[str, list[str]] = {}
        for key, value in parse_qsl(query_string.decode("latin-1"), keep_blank_values=True):
            self._data.setdefault(key, []).append(value)

    def __getitem__(self, key: str) -> str | list[str]:
        values = self._data[key]
        if len(values) == 1:
            return values[0]
        return list(values)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"QueryParams({{{items}}})"

    def first(self, key: str, default: str | None = None) -> str | None:
        """Return the first value for *key*, or *default* if missing."""
        values = self._data.get(key)
        if values:
            return values[0]
        return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        return list(self._data.get(key, []))

    def get_int(self, key: str, default: int | None = None) -> int | None:
        """Return the first value as int, or *default* if missing or not numeric."""
        value = self.first(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default

    def to_dict(self) -> dict[str, str | list[str]]:
        """Plain ``dict`` copy with the same single/list shape."""
        return {key: self[key] for key in self._data}

    @property
    def raw(self) -> bytes:
        return self._raw
