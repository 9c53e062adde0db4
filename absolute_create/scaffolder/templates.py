"""Jinja2 environment for the generated TypeScript, SQL and YAML sources.

Templates live next to this module under ``templates/``.  Rendering is
strict: a missing context variable raises instead of leaving a hole in the
generated code.  Output is never HTML-escaped.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined

TEMPLATE_DIR = Path(__file__).parent / "templates"


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


def escape_quotes(value: str) -> str:
    """Escape *value* for use inside a double-quoted YAML or shell string.

    Backslashes are escaped first so the quote escapes are not doubled.
    """
    return value.replace("\\", "\\\\").replace('"', '\\"')


def js_string(value: str) -> str:
    """Quote *value* as a single-quoted JavaScript string literal."""
    return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"


FILTERS: dict[str, Callable[[str], str]] = {
    "escape_quotes": escape_quotes,
    "js_string": js_string,
}


# ---------------------------------------------------------------------------
# Renderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders ``.j2`` templates from one template directory.

    Block tags are trimmed (``trim_blocks`` and ``lstrip_blocks``), so
    ``{% if %}`` lines leave no blank lines behind, and a template's final
    newline is kept.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        self.template_dir = Path(template_dir) if template_dir is not None else TEMPLATE_DIR
        self.env = Environment(
            loader=FileSystemLoader(self.template_dir),
            autoescape=False,
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self.env.filters.update(FILTERS)

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render the template at *template_path* (relative to the template directory).

        Raises:
            jinja2.TemplateNotFound: If no such template exists.
            jinja2.UndefinedError: If the template uses a name missing from
                *context*.
        """
        return self.env.get_template(template_path).render(context)

