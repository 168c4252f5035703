"""Route pattern compiler.

Turns a path pattern into an anchored regular expression::

    "/users/:id"            -> ^/users/(?P<id>[^/]+)$
    "/users/:id(\\d+)"      -> ^/users/(?P<id>\\d+)$
    "/v:major.:minor/docs"  -> ^/v(?P<major>[^/]+)\\.(?P<minor>[^/]+)/docs$
    "/files/*"              -> ^/files/(?P<wildcard>.*)

Literal text is escaped and compared with the raw, percent-encoded
request path, so non-ASCII literals must be written encoded. ``*`` is
only accepted as a whole final segment (``/files/*.txt`` is an error) and
captures the rest of the path, separators included, as ``wildcard``;
the pattern is left unanchored at the end in that case. Any problem is
reported as ``RouteCompilationError`` naming the pattern, so bad routes
fail at registration instead of at request time.
"""

import re
import string
from dataclasses import dataclass

from wren.errors import RouteCompilationError

WILDCARD = "wildcard"
"""Reserved parameter name for the ``*`` capture."""

DEFAULT_SEGMENT = r"[^/]+"
"""Sub-pattern used by ``:name`` tokens without an explicit one."""

_NAME_START = frozenset(string.ascii_letters + "_")
_NAME_CHARS = _NAME_START | frozenset(string.digits)


@dataclass(frozen=True, slots=True)
class ParamToken:
    """A ``:name`` or ``:name(sub-pattern)`` token inside a segment."""

    name: str
    sub_pattern: str | None = None


# A segment is a run of literal strings and parameter tokens.
type Segment = list[str | ParamToken]


@dataclass(frozen=True, slots=True)
class CompiledPattern:
    """The matchable form of a route pattern."""

    pattern: str
    regex: re.Pattern[str]
    param_names: tuple[str, ...]
    wildcard: bool


def tokenize(pattern: str) -> list[Segment]:
    """Split *pattern* into segments of literal text and parameter tokens.

    A ``/`` inside a parenthesised sub-pattern does not start a new
    segment. The leading empty segment produced by an initial ``/`` is
    discarded.
    """
    segments: list[Segment] = [[]]
    literal: list[str] = []

    def flush() -> None:
        if literal:
            segments[-1].append("".join(literal))
            literal.clear()

    i = 0
    n = len(pattern)
    while i < n:
        ch = pattern[i]
        if ch == "/":
            flush()
            segments.append([])
            i += 1
            continue
        if ch == ":" and i + 1 < n and pattern[i + 1] in _NAME_START:
            flush()
            j = i + 1
            while j < n and pattern[j] in _NAME_CHARS:
                j += 1
            name = pattern[i + 1 : j]
            sub_pattern: str | None = None
            if j < n and pattern[j] == "(":
                end = _find_group_end(pattern, j)
                sub_pattern = pattern[j + 1 : end]
                j = end + 1
            segments[-1].append(ParamToken(name, sub_pattern))
            i = j
            continue
        literal.append(ch)
        i += 1
    flush()

    if pattern.startswith("/"):
        segments.pop(0)
    return segments


def _find_group_end(pattern: str, start: int) -> int:
    """Return the index of the ``)`` closing the group opened at *start*."""
    depth = 0
    in_class = False
    i = start
    while i < len(pattern):
        ch = pattern[i]
        if ch == "\\":
            i += 2
            continue
        if in_class:
            if ch == "]":
                in_class = False
        elif ch == "[":
            in_class = True
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return i
        i += 1
    raise RouteCompilationError(pattern, "unbalanced '(' in parameter sub-pattern")


def _check_sub_pattern(pattern: str, token: ParamToken) -> str:
    sub = token.sub_pattern
    if sub is None:
        return DEFAULT_SEGMENT
    if not sub:
        raise RouteCompilationError(pattern, f"parameter {token.name!r} has an empty sub-pattern")
    if sub.startswith("^") or (sub.endswith("$") and not sub.endswith("\\$")):
        raise RouteCompilationError(
            pattern, f"parameter {token.name!r} sub-pattern {sub!r} must not be anchored"
        )
    try:
        re.compile(sub)
    except re.error as exc:
        raise RouteCompilationError(
            pattern, f"parameter {token.name!r} has an invalid sub-pattern {sub!r}: {exc}"
        ) from exc
    return sub


def compile_pattern(pattern: str) -> CompiledPattern:
    """Compile *pattern* into a ``CompiledPattern``.

    Raises ``RouteCompilationError`` for a misplaced ``*``, a duplicate
    parameter name, or a sub-pattern that is empty, anchored, unbalanced
    or otherwise invalid.
    """
    segments = tokenize(pattern)
    parts: list[str] = []
    seen: set[str] = set()
    wildcard = False

    for index, segment in enumerate(segments):
        if segment == ["*"]:
            if index != len(segments) - 1:
                raise RouteCompilationError(pattern, "'*' is only allowed as the final segment")
            parts.append(f"(?P<{WILDCARD}>.*)")
            wildcard = True
            break

        out: list[str] = []
        for token in segment:
            if isinstance(token, str):
                if "*" in token:
                    raise RouteCompilationError(
                        pattern, "'*' is only allowed as a whole final segment"
                    )
                out.append(re.escape(token))
                continue
            if token.name in seen:
                raise RouteCompilationError(pattern, f"duplicate parameter name {token.name!r}")
            seen.add(token.name)
            out.append(f"(?P<{token.name}>{_check_sub_pattern(pattern, token)})")
        parts.append("".join(out))

    if wildcard and WILDCARD in seen:
        raise RouteCompilationError(pattern, f"{WILDCARD!r} is reserved for the '*' capture")

    source = "^/" + "/".join(parts)
    if not wildcard:
        source += "$"

    try:
        regex = re.compile(source)
    except re.error as exc:
        raise RouteCompilationError(pattern, str(exc)) from exc

    names = tuple(sorted(regex.groupindex, key=regex.groupindex.__getitem__))
    return CompiledPattern(pattern=pattern, regex=regex, param_names=names, wildcard=wildcard)
