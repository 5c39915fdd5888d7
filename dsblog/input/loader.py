"""Content loader for Markdown posts.

Each post starts with a metadata header followed by the Markdown body.
Two header forms are accepted:

    ---
    title: "Hash tables in CPython"
    date: 2020-01-01
    ---

or a bare block of ``Key: value`` lines ending at the first blank line:

    Title: "Hash tables in CPython"
    date: 2020-01-01
    Summary: How dictobject.c probes for a free slot

Keys are case-insensitive. A post without a title or a parseable date is a
ParseError naming the file.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, time, timezone
from pathlib import Path
from typing import Any

import frontmatter
import yaml

from ..config import AppConfig, resolve_static_dir
from ..core.slug import slug_from_path, slugify
from ..core.types import Post
from ..errors import ParseError

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIXES = (".md", ".markdown")
_HEADER_LINE = re.compile(r"^(?P<key>[A-Za-z][A-Za-z0-9_-]*)\s*:(?P<value>.*)$")
_KNOWN_KEYS = {"title", "date", "summary", "slug", "draft"}


def parse_document(text: str, path: Path | None = None) -> tuple[dict[str, Any], str]:
    """Split a document into its metadata header and Markdown body.

    Args:
        text: Raw document text
        path: Source path, used only for error messages

    Returns:
        A tuple of (metadata, body). Metadata keys are lower-cased.

    Raises:
        ParseError: If the header is missing or malformed
    """
    text = _norm_text(text)
    if text.lstrip().startswith("---"):
        meta, body = _parse_yaml_block(text, path)
    else:
        meta, body = _parse_bare_header(text, path)

    if not meta:
        raise ParseError("missing metadata header", path)
    return {str(k).strip().lower(): v for k, v in meta.items()}, body


def load_post(path: Path) -> Post:
    """Read and validate one post.

    Raises:
        ParseError: If the header is malformed, or the title or date is missing
    """
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ParseError("file is not valid UTF-8", path) from exc
    meta, body = parse_document(text, path)

    title = meta.get("title")
    if title is None or not str(title).strip():
        raise ParseError("missing title", path)

    if meta.get("date") in (None, ""):
        raise ParseError("missing date", path)
    published = coerce_date(meta["date"], path)

    summary = meta.get("summary")
    if summary is not None:
        summary = str(summary).strip() or None

    slug = slugify(str(meta["slug"])) if meta.get("slug") else slug_from_path(path)

    return Post(
        title=str(title).strip(),
        date=published,
        body=body,
        slug=slug,
        source_path=path,
        summary=summary,
        draft=_parse_bool(meta.get("draft")),
        extra={k: v for k, v in meta.items() if k not in _KNOWN_KEYS},
    )


def load_posts(
    source_dir: Path,
    cfg: AppConfig,
    errors: list[ParseError] | None = None,
) -> list[Post]:
    """Load every post under ``source_dir`` in path order.

    Drafts are skipped unless ``cfg.content.drafts`` is set. Files under the
    static directory are ignored.

    Args:
        source_dir: Directory holding the Markdown posts
        cfg: Application configuration
        errors: When given, parse errors are appended here and loading
            continues with the next file instead of raising

    Raises:
        ParseError: On the first malformed post, or when two posts share a slug
    """
    posts: list[Post] = []
    seen: dict[str, Path] = {}

    for path in discover_sources(source_dir, cfg):
        try:
            post = load_post(path)
            if post.draft and not cfg.content.drafts:
                logger.debug(f"Skipping draft {path}")
                continue
            if post.slug in seen:
                raise ParseError(f"duplicate slug '{post.slug}' (also used by {seen[post.slug]})", path)
        except ParseError as exc:
            if errors is None:
                raise
            errors.append(exc)
            continue
        seen[post.slug] = path
        posts.append(post)

    logger.info(f"Loaded {len(posts)} posts from {source_dir}")
    return posts


def discover_sources(source_dir: Path, cfg: AppConfig) -> list[Path]:
    """Return every Markdown file under source_dir, sorted, outside the static directory."""
    static_dir = resolve_static_dir(cfg, source_dir).resolve()
    sources: list[Path] = []
    for path in sorted(source_dir.rglob("*")):
        if not path.is_file() or path.suffix.lower() not in MARKDOWN_SUFFIXES:
            continue
        if path.resolve().is_relative_to(static_dir):
            continue
        sources.append(path)
    return sources


def coerce_date(value: Any, path: Path | None = None) -> datetime:
    """Convert a header date value to a naive datetime.

    Accepts YAML dates and datetimes, and ISO 8601 strings. Aware datetimes
    are converted to UTC.

    Raises:
        ParseError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        result = value
    elif isinstance(value, date):
        result = datetime.combine(value, time())
    elif isinstance(value, str):
        raw = value.strip().strip('"').strip("'")
        try:
            result = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError as exc:
            raise ParseError(f"invalid date '{value}'", path) from exc
    else:
        raise ParseError(f"invalid date '{value}'", path)

    if result.tzinfo is not None:
        result = result.astimezone(timezone.utc).replace(tzinfo=None)
    return result


def _parse_yaml_block(text: str, path: Path | None) -> tuple[dict[str, Any], str]:
    # out-of-range timestamps such as 2020-02-30 raise ValueError from datetime
    try:
        post = frontmatter.loads(text)
    except (yaml.YAMLError, ValueError) as exc:
        raise ParseError(f"malformed metadata header: {exc}", path) from exc
    if not post.metadata:
        raise ParseError("missing metadata header", path)
    return dict(post.metadata), post.content.strip("\n")


def _parse_bare_header(text: str, path: Path | None) -> tuple[dict[str, Any], str]:
    lines = text.split("\n")
    meta: dict[str, Any] = {}
    last_key: str | None = None
    idx = 0

    while idx < len(lines) and not lines[idx].strip():
        idx += 1

    for idx in range(idx, len(lines)):
        line = lines[idx]
        if not line.strip():
            break
        # indented lines continue the previous value
        if line[0] in " \t" and last_key is not None:
            meta[last_key] = f"{meta[last_key]} {line.strip()}".strip()
            continue
        match = _HEADER_LINE.match(line)
        if not match:
            if not meta:
                return {}, text
            raise ParseError(f"malformed header line {idx + 1}: {line!r}", path)
        last_key = match.group("key")
        meta[last_key] = _parse_value(match.group("value").strip())
    else:
        idx = len(lines)

    body = "\n".join(lines[idx + 1 :]) if meta else text
    return meta, body.strip("\n")


def _parse_value(raw: str) -> Any:
    if not raw:
        return ""
    try:
        value = yaml.safe_load(raw)
    except (yaml.YAMLError, ValueError):
        return raw
    # "Title: Linked lists: part 2" style values are kept verbatim
    if isinstance(value, dict):
        return raw
    return value


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "on"}
    return False


def _norm_text(s: str) -> str:
    return s.replace("\r\n", "\n").replace("\r", "\n").lstrip("\ufeff")
