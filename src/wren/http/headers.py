"""Case-insensitive request headers.

Implements ``Mapping[str, str]`` over the scope's ``(name, value)`` byte
pairs. Names are lower-cased once at construction; ``RawRequest``
builds a fresh view on every access, so it never goes stale.
"""

from collections.abc import Iterable, Iterator, Mapping


class Headers(Mapping[str, str]):
    """Request headers keyed by lower-cased name.

    Indexing returns the first value for a name; ``get_list`` returns
    every value in arrival order (repeated ``Accept``, ``Cookie``...).
    """

    __slots__ = ("_pairs", "_raw")

    def __init__(self, raw: Iterable[tuple[bytes, bytes]] = ()) -> None:
        self._raw = tuple(raw)
        self._pairs = [
            (name.decode("latin-1").lower(), value.decode("latin-1")) for name, value in self._raw
        ]

    def __getitem__(self, key: str) -> str:
        wanted = key.lower()
        for name, value in self._pairs:
            if name == wanted:
                return value
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and any(name == key.lower() for name, _ in self._pairs)

    def __iter__(self) -> Iterator[str]:
        return iter(dict.fromkeys(name for name, _ in self._pairs))

    def __len__(self) -> int:
        return len(dict.fromkeys(name for name, _ in self._pairs))

    def __repr__(self) -> str:
        return f"Headers({self._pairs!r})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        try:
            return self[key]
        except KeyError:
            return default

    def get_list(self, key: str) -> list[str]:
        wanted = key.lower()
        return [value for name, value in self._pairs if name == wanted]

    @property
    def raw(self) -> tuple[tuple[bytes, bytes], ...]:
        """The scope's original byte pairs."""
        return self._raw
