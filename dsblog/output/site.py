"""
Site assembly.

Writes the rendered posts into the output directory:
- posts/<slug>/index.html for every post, plus any images it references
  by relative path
- index.html listing every post with its excerpt, newest first
- feed.xml Atom feed of the newest posts
- the static directory, copied to the output root
"""

from __future__ import annotations

import hashlib
import logging
import shutil
from datetime import datetime
from pathlib import Path

from jinja2 import Environment

from ..config import AppConfig
from ..core.types import RenderedPost
from ..errors import BuildError
from ..render.assets import find_assets
from ..templating import render_template
from ..utils.logging import log_event

logger = logging.getLogger(__name__)


def sort_pages(pages: list[RenderedPost]) -> list[RenderedPost]:
    """Sort newest first. The sort is stable: equal dates keep input order."""
    return sorted(pages, key=lambda page: page.post.date, reverse=True)


def link_neighbours(pages: list[RenderedPost]) -> None:
    """Set prev (older) and next (newer) on pages sorted newest first."""
    for idx, page in enumerate(pages):
        page.next = pages[idx - 1] if idx > 0 else None
        page.prev = pages[idx + 1] if idx + 1 < len(pages) else None


def clean_output_dir(output_dir: Path, source_dir: Path) -> None:
    """Remove a previous build.

    Raises:
        BuildError: If the output directory is the source directory or contains it
    """
    if not output_dir.exists():
        return
    output_resolved = output_dir.resolve()
    source_resolved = source_dir.resolve()
    if source_resolved == output_resolved or source_resolved.is_relative_to(output_resolved):
        raise BuildError(f"refusing to clean {output_dir}: it contains the source directory")
    shutil.rmtree(output_dir)


def copy_tree(src_dir: Path, dst_dir: Path) -> int:
    """Copy every file under ``src_dir`` into ``dst_dir``, skipping unchanged files.

    Returns:
        Number of files written
    """
    if not src_dir.exists():
        return 0
    written = 0
    for src in sorted(src_dir.rglob("*")):
        if not src.is_file():
            continue
        dst = dst_dir / src.relative_to(src_dir)
        if copy_file(src, dst):
            written += 1
    return written


def copy_file(src: Path, dst: Path) -> bool:
    if dst.exists() and _digest(src) == _digest(dst):
        return False
    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(src, dst)
    return True


class SiteAssembler:
    """Writes HTML pages, feed and static files for a set of rendered posts.

    Args:
        cfg: Application configuration
        env: Template environment
        static_dir: Directory of static files copied to the output root
    """

    def __init__(self, cfg: AppConfig, env: Environment, static_dir: Path):
        self.cfg = cfg
        self.env = env
        self.static_dir = static_dir

    def assemble(self, pages: list[RenderedPost], output_dir: Path) -> Path:
        """Write the whole site and return the path of index.html."""
        output_dir.mkdir(parents=True, exist_ok=True)
        pages = sort_pages(pages)
        link_neighbours(pages)

        for page in pages:
            self.write_post(page, output_dir)

        index_path = output_dir / "index.html"
        index_path.write_text(
            render_template(self.env, "index.html", site=self.cfg.site, pages=pages),
            encoding="utf-8",
        )
        self.write_feed(pages, output_dir)

        copied = copy_tree(self.static_dir, output_dir)
        log_event(
            logger,
            "Site assembled",
            event="site_assembled",
            output=str(output_dir),
            posts=len(pages),
            static_files=copied,
        )
        return index_path

    def write_post(self, page: RenderedPost, output_dir: Path) -> Path:
        post_dir = output_dir / self.cfg.output.posts_dir / page.post.slug
        post_dir.mkdir(parents=True, exist_ok=True)
        html = render_template(
            self.env,
            "post.html",
            page.post.source_path,
            site=self.cfg.site,
            page=page,
        )
        out_path = post_dir / "index.html"
        out_path.write_text(html, encoding="utf-8")

        for ref in find_assets(page.post, self.static_dir):
            if ref.source is not None and ref.is_relative:
                copy_file(ref.source, post_dir / ref.url.split("#", 1)[0].split("?", 1)[0])

        logger.debug(f"Wrote {out_path}")
        return out_path

    def write_feed(self, pages: list[RenderedPost], output_dir: Path) -> Path:
        feed_pages = pages[: max(0, self.cfg.site.feed_limit)]
        updated = feed_pages[0].post.date if feed_pages else datetime(1970, 1, 1)
        feed_path = output_dir / "feed.xml"
        feed_path.write_text(
            render_template(
                self.env,
                "feed.xml",
                site=self.cfg.site,
                base_url=self.cfg.site.base_url.rstrip("/"),
                pages=feed_pages,
                updated=updated,
            ),
            encoding="utf-8",
        )
        return feed_path


def _digest(path: Path) -> str:
    return hashlib.sha256(path.read_bytes()).hexdigest()
