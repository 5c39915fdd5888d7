"""Jinja2 environment shared by the renderer and the site assembler."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, TemplateError as JinjaTemplateError, select_autoescape

from .errors import TemplateError

PACKAGE_TEMPLATES = Path(__file__).parent / "templates"


def build_environment(templates_dir: Path | None = None) -> Environment:
    """Create the template environment.

    Templates found in ``templates_dir`` override the packaged defaults
    file by file.
    """
    search_path = [str(PACKAGE_TEMPLATES)]
    if templates_dir is not None:
        search_path.insert(0, str(templates_dir))
    env = Environment(
        loader=FileSystemLoader(search_path),
        autoescape=select_autoescape(["html", "xml"]),
        keep_trailing_newline=True,
    )
    env.filters["isodate"] = lambda value: value.strftime("%Y-%m-%d")
    env.filters["rfc3339"] = lambda value: value.strftime("%Y-%m-%dT%H:%M:%SZ")
    return env


def render_template(env: Environment, name: str, source: Path | None = None, **context: Any) -> str:
    """Render ``name`` with ``context``, wrapping Jinja2 failures in TemplateError."""
    try:
        return env.get_template(name).render(**context)
    except JinjaTemplateError as exc:
        raise TemplateError(f"template {name} failed: {exc}", source) from exc
