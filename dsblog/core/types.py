"""
Core data types for the blog build.

This module defines the fundamental data structures used throughout the pipeline:
- Post: A parsed source document (metadata header plus Markdown body)
- CodeBlock: A fenced code sample found in a post body
- RenderedPost: Post with rendered HTML and its neighbours in date order
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any


@dataclass
class Post:
    """Represents one Markdown post.

    Attributes:
        title: The post headline (never empty)
        date: Publication timestamp; bare dates are stored at midnight
        body: Markdown body with the header removed
        slug: URL slug, unique across the corpus
        source_path: File the post was read from
        summary: Optional summary from the header
        draft: Whether the post is marked as a draft
        extra: Any other header keys, lower-cased
    """

    title: str
    date: datetime
    body: str
    slug: str
    source_path: Path
    summary: str | None = None
    draft: bool = False
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class CodeBlock:
    """A fenced code sample.

    Attributes:
        language: Language tag from the opening fence ("" when untagged)
        code: Text between the fences
        line: 1-based line number of the opening fence within the body
    """

    language: str
    code: str
    line: int


@dataclass
class RenderedPost:
    """Post with rendered HTML.

    Attributes:
        post: The source Post
        url: Site-relative URL of the post page
        excerpt_html: HTML of the text before the excerpt marker
        body_html: HTML of the full body with the marker removed
        summary_text: Plain-text summary used for meta descriptions and feeds
        prev: Older neighbour in date order
        next: Newer neighbour in date order
    """

    post: Post
    url: str
    excerpt_html: str
    body_html: str
    summary_text: str
    prev: RenderedPost | None = field(default=None, repr=False, compare=False)
    next: RenderedPost | None = field(default=None, repr=False, compare=False)
