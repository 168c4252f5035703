"""HTML rendering through the kida template engine.

Optional: install the ``templates`` extra. Template names are checked
against ``AppConfig.template_dir`` with the same confinement rule as
file downloads before kida sees them.
"""

from pathlib import Path
from typing import Any

from wren._internal.paths import safe_join
from wren.errors import ConfigurationError, FileNotFound


class Templates:
    """Lazily-built kida environment rooted at one directory.

    Usage::

        templates = Templates("templates")
        html = templates.render("users/show.html", {"user": user})
    """

    __slots__ = ("_autoescape", "_directory", "_env")

    def __init__(self, directory: str | Path, *, autoescape: bool = True) -> None:
        self._directory = Path(directory).resolve()
        self._autoescape = autoescape
        self._env: Any = None

    @property
    def directory(self) -> Path:
        return self._directory

    def _environment(self) -> Any:
        if self._env is None:
            try:
                from kida import Environment, FileSystemLoader
            except ImportError:
                msg = (
                    "Template rendering requires the 'kida' template engine. "
                    "Install it with: pip install wren[templates]"
                )
                raise ConfigurationError(msg) from None

            self._env = Environment(
                loader=FileSystemLoader(str(self._directory)),
                autoescape=self._autoescape,
            )
        return self._env

    def render(self, name: str, data: dict[str, Any]) -> str:
        """Render template *name* with *data*.

        Raises ``PathTraversalError`` for names outside the template
        directory and ``FileNotFound`` for missing templates.
        """
        path = safe_join(self._directory, name)
        if not path.is_file():
            msg = f"Template not found: {name}"
            raise FileNotFound(msg)
        relative = path.relative_to(self._directory).as_posix()
        template = self._environment().get_template(relative)
        return template.render(data)
