"""Slug helpers shared by the loader, renderer and checks."""

from __future__ import annotations

import re
from pathlib import Path

_DATE_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}[-_]")


def slugify(text: str) -> str:
    """Convert text to URL-safe slug.

    Args:
        text: The text to slugify

    Returns:
        A lowercase, hyphenated slug limited to 80 characters
    """
    slug = text.lower()
    slug = re.sub(r"[^a-z0-9]+", "-", slug)
    slug = slug.strip("-")
    if not slug:
        slug = "untitled"
    return slug[:80].rstrip("-")


def slug_from_path(path: Path) -> str:
    """Derive a slug from a source file name, dropping a leading date prefix."""
    stem = path.stem
    # page bundles: posts/<name>/index.md
    if stem.lower() in {"index", "_index"}:
        stem = path.parent.name
    return slugify(_DATE_PREFIX.sub("", stem))


def post_url(slug: str, posts_dir: str = "posts") -> str:
    """Return the site-relative URL of a post page."""
    return f"/{posts_dir.strip('/')}/{slug}/"
