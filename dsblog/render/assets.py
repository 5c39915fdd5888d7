from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from ..core.types import Post
from .fences import map_noncode
from .shortcodes import iter_shortcodes

MD_IMAGE = re.compile(r'!\[(?P<alt>[^\]]*)\]\((?P<url>[^)\s]+)(?:\s+"[^"]*")?\)')
HTML_IMG_SRC = re.compile(r'<img\b[^>]*?\bsrc\s*=\s*([\'"])(?P<url>[^\'"]+)\1', re.IGNORECASE)
MD_LINK = re.compile(r'(?<!!)\[(?P<text>[^\]]*)\]\((?P<url>[^)\s]+)(?:\s+"[^"]*")?\)')
_SCHEME = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")


@dataclass
class AssetRef:
    """A local image referenced by a post.

    Attributes:
        url: URL as written in the post
        source: Resolved file, or None when it cannot be found
    """

    url: str
    source: Path | None

    @property
    def is_relative(self) -> bool:
        return not self.url.startswith("/")


def is_local(url: str) -> bool:
    if not url:
        return False
    if _SCHEME.match(url) or url.startswith(("//", "#", "{{")):
        return False
    return True


def image_urls(md: str) -> list[str]:
    """Return image URLs from Markdown images, <img> tags and figure shortcodes."""
    urls: list[str] = []

    def _collect(text: str) -> str:
        urls.extend(m.group("url") for m in MD_IMAGE.finditer(text))
        urls.extend(m.group("url") for m in HTML_IMG_SRC.finditer(text))
        return text

    map_noncode(md, _collect)
    for code in iter_shortcodes(md):
        if code.name == "figure":
            src = code.kwargs.get("src") or (code.args[0] if code.args else "")
            if src:
                urls.append(src)
    return urls


def link_urls(md: str) -> list[str]:
    """Return link targets of Markdown links (images excluded) outside code."""
    urls: list[str] = []

    def _collect(text: str) -> str:
        urls.extend(m.group("url") for m in MD_LINK.finditer(text))
        return text

    map_noncode(md, _collect)
    return urls


def resolve_asset(url: str, post_dir: Path, static_dir: Path) -> Path | None:
    """Find the file behind a local URL.

    Site-absolute URLs ("/images/x.png") live in the static directory.
    Relative URLs are looked up next to the post first, then in the static
    directory.
    """
    path = url.split("#", 1)[0].split("?", 1)[0]
    if path.startswith("/"):
        candidates = [static_dir / path.lstrip("/")]
    else:
        candidates = [post_dir / path, static_dir / path]
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None


def find_assets(post: Post, static_dir: Path) -> list[AssetRef]:
    """Return every local image referenced by ``post``, deduplicated in order."""
    refs: list[AssetRef] = []
    seen: set[str] = set()
    for url in image_urls(post.body):
        if not is_local(url) or url in seen:
            continue
        seen.add(url)
        refs.append(AssetRef(url=url, source=resolve_asset(url, post.source_path.parent, static_dir)))
    return refs
