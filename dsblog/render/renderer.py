"""
Markdown rendering for posts.

Markdown to HTML conversion is delegated to Python-Markdown. This module
only handles the parts around it:
1. Split the excerpt from the body at the excerpt marker
2. Expand shortcodes (figures, cross-references)
3. Convert both parts to HTML

Rendering is deterministic: a fresh ``markdown.Markdown`` instance is used
for every conversion so no state (footnote counters, heading ids) leaks
between posts or between runs.
"""

from __future__ import annotations

import html
import re
from pathlib import Path

import markdown

from ..config import AppConfig
from ..core.slug import post_url
from ..core.types import Post, RenderedPost
from .fences import split_segments
from .shortcodes import ShortcodeRenderer

_TAG = re.compile(r"<[^>]+>")


def marker_pattern(marker: str) -> re.Pattern[str]:
    """Compile the excerpt marker, tolerating whitespace inside HTML comments."""
    marker = marker.strip()
    if marker.startswith("<!--") and marker.endswith("-->"):
        inner = marker[4:-3].strip()
        return re.compile(rf"<!--\s*{re.escape(inner)}\s*-->", re.IGNORECASE)
    return re.compile(re.escape(marker))


def split_excerpt(body: str, marker: re.Pattern[str]) -> tuple[str | None, str]:
    """Split ``body`` at the first excerpt marker outside code fences.

    Returns:
        A tuple of (excerpt, full_body). ``excerpt`` is None when the body has
        no marker. The full body has the marker removed; a marker in the
        middle of a line leaves a single space between the two halves.
    """
    segments = split_segments(body)
    for idx, (is_code, text) in enumerate(segments):
        if is_code:
            continue
        match = marker.search(text)
        if match is None:
            continue
        before = "".join(t for _, t in segments[:idx]) + text[: match.start()]
        after = text[match.end() :] + "".join(t for _, t in segments[idx + 1 :])
        return before.strip(), _join_halves(before, after)
    return None, body


def first_block(body: str) -> str:
    """Return the first paragraph of ``body``, or "" when it opens with code."""
    segments = split_segments(body.lstrip("\n"))
    if not segments or segments[0][0]:
        return ""
    return segments[0][1].strip().split("\n\n", 1)[0].strip()


def html_to_text(fragment: str) -> str:
    """Flatten an HTML fragment into a single line of plain text."""
    return " ".join(html.unescape(_TAG.sub(" ", fragment)).split())


class MarkdownRenderer:
    """Renders posts to HTML.

    Args:
        cfg: Application configuration (extensions, excerpt marker, posts dir)
        shortcodes: Shortcode expander bound to the corpus
    """

    def __init__(self, cfg: AppConfig, shortcodes: ShortcodeRenderer):
        self.cfg = cfg
        self.shortcodes = shortcodes
        self.marker = marker_pattern(cfg.content.excerpt_marker)

    def to_html(self, text: str, source: Path | None = None) -> str:
        expanded = self.shortcodes.expand(text, source)
        md = markdown.Markdown(extensions=list(self.cfg.render.extensions), output_format="html")
        return md.convert(expanded)

    def render(self, post: Post) -> RenderedPost:
        excerpt, full = split_excerpt(post.body, self.marker)
        if excerpt is None:
            excerpt = first_block(post.body)

        excerpt_html = self.to_html(excerpt, post.source_path) if excerpt else ""
        body_html = self.to_html(full, post.source_path)
        summary_text = post.summary or html_to_text(excerpt_html)

        return RenderedPost(
            post=post,
            url=post_url(post.slug, self.cfg.output.posts_dir),
            excerpt_html=excerpt_html,
            body_html=body_html,
            summary_text=summary_text,
        )


def _join_halves(before: str, after: str) -> str:
    head = before.rstrip(" \t")
    tail = after.lstrip(" \t")
    if not head or not tail or head.endswith("\n") or tail.startswith("\n"):
        return head + tail
    return f"{head} {tail}"
