"""Ordered route table with linear first-match lookup.

Precedence is insertion order only. There is no "most specific wins"
resolution, so this registers a trap::

    router.add("GET", "/users/:id", show_user)
    router.add("GET", "/users/me", show_me)      # never reached
    router.match("GET", "/users/me").params      # {"id": "me"}

Register literal routes before parameterised siblings.
"""

import logging
from collections.abc import Iterable, Iterator

from wren.errors import ConfigurationError, RouteNotFound
from wren.middleware.protocol import Handler, Middleware
from wren.routing.compiler import compile_pattern
from wren.routing.route import CompiledRoute, RouteMatch

logger = logging.getLogger("wren.routing")

HTTP_METHODS: tuple[str, ...] = ("GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS", "HEAD")


def split_url(url: str) -> tuple[str, str]:
    """Split a raw URL into ``(path, query_string)``."""
    path, _, query = url.partition("?")
    return path, query


class Router:
    """An ordered collection of compiled routes.

    Usage::

        router = Router()
        router.add("GET", "/users/:id(\\d+)", show_user)
        match = router.match("GET", "/users/42?verbose=1")
        match.params  # {"id": "42"}
    """

    __slots__ = ("_routes",)

    def __init__(self) -> None:
        self._routes: list[CompiledRoute] = []

    def add(
        self,
        method: str,
        pattern: str,
        handler: Handler,
        middleware: Iterable[Middleware] = (),
    ) -> CompiledRoute:
        """Compile *pattern* and append a route.

        Raises ``RouteCompilationError`` for a malformed pattern and
        ``ConfigurationError`` for an unsupported method.
        """
        method = method.upper()
        if method not in HTTP_METHODS:
            msg = f"Unsupported HTTP method {method!r} for route {pattern!r}."
            raise ConfigurationError(msg)

        compiled = compile_pattern(pattern)
        route = CompiledRoute(
            method=method,
            pattern=pattern,
            regex=compiled.regex,
            param_names=compiled.param_names,
            wildcard=compiled.wildcard,
            handler=handler,
            middleware=tuple(middleware),
        )
        self._routes.append(route)
        logger.debug("route %s %s -> %s", method, pattern, compiled.regex.pattern)
        return route

    @property
    def routes(self) -> tuple[CompiledRoute, ...]:
        """All registered routes in match order."""
        return tuple(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def __iter__(self) -> Iterator[CompiledRoute]:
        return iter(self._routes)

    def match(self, method: str, url: str) -> RouteMatch:
        """Return the first route matching *method* and *url*.

        *url* is the raw request target: the path still percent-encoded,
        optionally followed by ``?query``. Only a literal ``?`` ends the
        path; ``%3F`` is part of it. Matching is case- and
        slash-sensitive. Raises ``RouteNotFound`` when nothing matches.
        """
        path, _ = split_url(url)
        method = method.upper()
        for route in self._routes:
            params = route.match(method, path)
            if params is not None:
                return RouteMatch(route=route, params=params)
        raise RouteNotFound
