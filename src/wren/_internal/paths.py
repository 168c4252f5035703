"""Base-directory confinement for file-serving and rendering helpers."""

import os
from pathlib import Path, PureWindowsPath
from urllib.parse import unquote

from wren.errors import PathTraversalError


def _fully_unquote(value: str) -> str:
    # Repeat until stable so "%252e%252e" cannot slip through as "%2e%2e"
    for _ in range(5):
        decoded = unquote(value)
        if decoded == value:
            return decoded
        value = decoded
    return value


def safe_join(base: str | Path, relative: str | os.PathLike[str]) -> Path:
    """Resolve *relative* under *base*, refusing anything that escapes it.

    The argument is percent-decoded and must be relative: a leading
    ``/`` or ``\\`` or a drive letter is refused. It is then joined to
    the resolved base and resolved again (following symlinks). The
    result must be the base itself or start with ``base + os.sep``;
    comparing with the separator keeps ``/srv/files-evil`` from passing
    as a child of ``/srv/files``.

    Raises ``PathTraversalError`` before anything is read.
    """
    base_path = Path(base).resolve()
    decoded = _fully_unquote(os.fspath(relative))
    if "\x00" in decoded:
        msg = "Forbidden: NUL byte in path"
        raise PathTraversalError(msg)
    if decoded.startswith(("/", "\\")) or PureWindowsPath(decoded).drive:
        msg = f"Forbidden: {os.fspath(relative)!r} is an absolute path"
        raise PathTraversalError(msg)

    resolved = (base_path / decoded).resolve()
    if resolved != base_path and not str(resolved).startswith(str(base_path) + os.sep):
        msg = f"Forbidden: {os.fspath(relative)!r} escapes the base directory"
        raise PathTraversalError(msg)
    return resolved
