"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, files_dir="./downloads", request_timeout=30.0)
    """

    debug: bool = False

    # Base directory for ctx.download() / ctx.send_file()
    files_dir: str | Path = "public"

    # Templates (ctx.render(), requires the ``templates`` extra)
    template_dir: str | Path = "templates"
    autoescape: bool = True

    # When set, RequestTimeout wraps the whole global chain
    request_timeout: float | None = None

    # Chunk size for streamed file bodies
    download_chunk_size: int = 64 * 1024
