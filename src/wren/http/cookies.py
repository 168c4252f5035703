"""Cookie header parsing and ``Set-Cookie`` serialization.

Values are percent-encoded on write and decoded on read, so any string
round-trips through a browser unchanged.
"""

import re
from dataclasses import dataclass
from datetime import UTC, datetime
from email.utils import format_datetime
from urllib.parse import quote, unquote

# RFC 6265 cookie-name: an HTTP token
_TOKEN = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")

# Left unescaped on write, like encodeURIComponent
_VALUE_SAFE = "-_.!~*'()"

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def parse_cookies(header: str) -> dict[str, str]:
    """Parse a ``Cookie`` header into a dict.

    Pairs without ``=`` are skipped. When a name repeats, the first
    value wins (browsers send the most specific path first).
    """
    cookies: dict[str, str] = {}
    for pair in header.split(";"):
        name, sep, value = pair.partition("=")
        name = name.strip()
        if not sep or not name or name in cookies:
            continue
        value = value.strip()
        if len(value) > 1 and value[0] == value[-1] == '"':
            value = value[1:-1]
        cookies[name] = unquote(value)
    return cookies


@dataclass(frozen=True, slots=True)
class SetCookie:
    """One ``Set-Cookie`` directive.

    ``max_age`` is in seconds. Invalid names raise ``ValueError`` on
    construction rather than producing a header browsers would drop.
    """

    name: str
    value: str
    max_age: int | None = None
    domain: str | None = None
    path: str = "/"
    expires: datetime | None = None
    httponly: bool = True
    secure: bool = False
    samesite: str | None = "Lax"

    def __post_init__(self) -> None:
        if not _TOKEN.match(self.name):
            msg = f"Invalid cookie name: {self.name!r}"
            raise ValueError(msg)

    def to_header_value(self) -> str:
        attrs = [f"{self.name}={quote(self.value, safe=_VALUE_SAFE)}"]
        if self.max_age is not None:
            attrs.append(f"Max-Age={self.max_age}")
        if self.domain:
            attrs.append(f"Domain={self.domain}")
        if self.path:
            attrs.append(f"Path={self.path}")
        if self.expires is not None:
            attrs.append(f"Expires={format_datetime(self.expires.astimezone(UTC), usegmt=True)}")
        if self.httponly:
            attrs.append("HttpOnly")
        if self.secure:
            attrs.append("Secure")
        if self.samesite:
            attrs.append(f"SameSite={self.samesite}")
        return "; ".join(attrs)
