from __future__ import annotations

from pathlib import Path

from .errors import FilesystemError, ValidationError

DEFAULT_TEMPLATES_DIR = "templates"


def check_template_name(template_name: str) -> str:
    # The name comes from a model response and becomes a file name.
    if not template_name or "/" in template_name or "\\" in template_name or ".." in template_name:
        raise ValidationError(f"Invalid template name for a file: {template_name!r}")
    return template_name


def template_path(template_name: str, directory: str | Path) -> Path:
    return Path(directory) / f"{check_template_name(template_name)}.html"


def write_template(template_name: str, html: str, directory: str | Path = DEFAULT_TEMPLATES_DIR) -> Path:
    """Write ``{template_name}.html`` under ``directory``, replacing any previous version."""
    dst = template_path(template_name, directory)
    try:
        dst.parent.mkdir(parents=True, exist_ok=True)
        dst.write_text(html, encoding="utf-8")
    except OSError as e:
        raise FilesystemError(f"Could not write template to {dst}: {e}") from e
    return dst.resolve()
