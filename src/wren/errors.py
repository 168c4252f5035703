"""Wren exception hierarchy.

Shared across the router, the chain executor, the context helpers and
the request handler so every module raises and catches the same types.
"""

from dataclasses import dataclass
from http import HTTPStatus


class WrenError(Exception):
    """Base for all wren-specific errors."""


class ConfigurationError(WrenError):
    """Raised when app configuration or registration is invalid.

    Registration errors surface at import/setup time, never per request.
    """


class RouteCompilationError(ConfigurationError):
    """A route pattern could not be compiled into a matcher."""

    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid route pattern {pattern!r}: {reason}")


@dataclass(frozen=True, slots=True)
class HTTPError(WrenError):
    """An error that maps directly to an HTTP status code.

    Raised by context helpers, middleware, or handlers. The request
    handler writes ``status`` with ``detail`` as a plain-text body when
    nothing else has answered the request.
    """

    status: int
    detail: str = ""
    code: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)

    @property
    def phrase(self) -> str:
        """The standard reason phrase for ``status``."""
        try:
            return HTTPStatus(self.status).phrase
        except ValueError:
            return "Error"


class RouteNotFound(HTTPError):  # noqa: N818
    """404 — no registered route matched the method and path."""

    def __init__(self, detail: str = "Route Not Found") -> None:
        super().__init__(status=404, detail=detail, code="ROUTE_NOT_FOUND")


class FileNotFound(HTTPError):  # noqa: N818
    """404 — a file helper was asked for a path that does not exist."""

    def __init__(self, detail: str = "File not found") -> None:
        super().__init__(status=404, detail=detail, code="FILE_NOT_FOUND")


class PathTraversalError(HTTPError):
    """403 — a file path resolved outside its base directory."""

    def __init__(self, detail: str = "Forbidden") -> None:
        super().__init__(status=403, detail=detail, code="PATH_TRAVERSAL")


class TimeoutFailure(HTTPError):
    """408 — the chain did not complete before the timeout guard fired.

    Best-effort only: work started before expiry is not stopped unless
    the guard was configured to cancel it.
    """

    def __init__(self, timeout: float) -> None:
        super().__init__(
            status=408,
            detail=f"Request timeout after {timeout * 1000:g}ms",
            code="REQUEST_TIMEOUT",
        )


class MiddlewareChainFailure(WrenError):
    """A middleware or handler raised while the chain was running.

    The request handler wraps escaping exceptions in this type before
    mapping them to a response. The original exception is kept as
    ``original`` and chained as ``__cause__``.
    """

    def __init__(self, original: BaseException) -> None:
        self.original = original
        super().__init__(f"{type(original).__name__}: {original}")

    @classmethod
    def wrap(cls, exc: Exception) -> "MiddlewareChainFailure":
        """Wrap *exc*, returning it unchanged if it is already a failure."""
        if isinstance(exc, cls):
            return exc
        failure = cls(exc)
        failure.__cause__ = exc
        return failure

    @property
    def http_error(self) -> HTTPError | None:
        """The underlying ``HTTPError``, if that is what was raised."""
        if isinstance(self.original, HTTPError):
            return self.original
        return None


class DoubleNextInvocation(WrenError, RuntimeError):  # noqa: N818
    """``next()`` was called more than once by the same middleware."""


class HeadersAlreadySent(WrenError, RuntimeError):  # noqa: N818
    """The response head (or whole response) was already written."""
