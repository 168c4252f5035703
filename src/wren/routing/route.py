"""CompiledRoute and RouteMatch frozen dataclasses."""

import re
from dataclasses import dataclass
from urllib.parse import unquote

from wren.middleware.protocol import Handler, Middleware


@dataclass(frozen=True, slots=True)
class CompiledRoute:
    """A registered route. Immutable after registration.

    ``param_names`` lists every named group in ``regex`` in the order
    the groups open, ``wildcard`` is set for patterns ending in ``*``.
    """

    method: str
    pattern: str
    regex: re.Pattern[str]
    param_names: tuple[str, ...]
    wildcard: bool
    handler: Handler
    middleware: tuple[Middleware, ...] = ()

    def match(self, method: str, path: str) -> dict[str, str] | None:
        """Return extracted params if *method* and *path* match, else ``None``.

        *path* is the raw, still percent-encoded path, so ``%2F`` and
        ``%3F`` stay inside one segment. Captured values are decoded.
        Only groups that took part in the match are returned; a parameter
        inside an alternative that did not match is omitted.
        """
        if method != self.method:
            return None
        m = self.regex.match(path)
        if m is None:
            return None
        return {
            name: unquote(value) for name, value in m.groupdict().items() if value is not None
        }


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: CompiledRoute
    params: dict[str, str]
