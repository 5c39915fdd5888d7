"""
Content integrity checks.

Run before any output is written:
- every code fence is closed and tagged with a recognised language or "plain"
- every internal cross-reference points at an existing post
- every local image exists next to the post or in the static directory

``check_post`` returns every problem found in one post instead of stopping
at the first, so ``dsblog check`` can list them all.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .config import AppConfig
from .core.types import Post
from .errors import BuildError, DanglingReferenceError, FenceError, MissingAssetError
from .render.assets import find_assets, link_urls
from .render.fences import PLAIN_LANGUAGE, iter_code_blocks
from .render.shortcodes import REF_NAMES, iter_shortcodes, normalize_ref, ref_target
from .utils.logging import log_event

logger = logging.getLogger(__name__)


def check_fences(post: Post, cfg: AppConfig) -> list[BuildError]:
    try:
        blocks = iter_code_blocks(post.body, post.source_path)
    except FenceError as exc:
        return [exc]

    known = {lang.lower() for lang in cfg.content.languages} | {PLAIN_LANGUAGE}
    errors: list[BuildError] = []
    for block in blocks:
        if not block.language:
            if cfg.content.allow_untagged_fences:
                continue
            errors.append(
                FenceError(
                    f"code fence at body line {block.line} has no language tag "
                    f"(use '{PLAIN_LANGUAGE}' for untyped samples)",
                    post.source_path,
                )
            )
        elif block.language not in known:
            errors.append(
                FenceError(
                    f"code fence at body line {block.line} has unknown language '{block.language}'",
                    post.source_path,
                )
            )
    return errors


def check_references(post: Post, references: dict[str, str], posts_dir: str = "posts") -> list[BuildError]:
    errors: list[BuildError] = []
    for code in iter_shortcodes(post.body):
        if code.name not in REF_NAMES:
            continue
        target = ref_target(code) or ""
        if normalize_ref(target) not in references:
            errors.append(
                DanglingReferenceError(f"reference to unknown post '{target}'", post.source_path)
            )

    prefix = f"/{posts_dir.strip('/')}/"
    urls = set(references.values())
    for url in link_urls(post.body):
        if not url.startswith(prefix):
            continue
        path = url.split("#", 1)[0].split("?", 1)[0]
        if not path.endswith("/"):
            path += "/"
        if path not in urls:
            errors.append(DanglingReferenceError(f"link to unknown post '{url}'", post.source_path))
    return errors


def check_assets(post: Post, static_dir: Path) -> list[BuildError]:
    return [
        MissingAssetError(f"image not found: {ref.url}", post.source_path)
        for ref in find_assets(post, static_dir)
        if ref.source is None
    ]


def check_post(
    post: Post,
    cfg: AppConfig,
    references: dict[str, str],
    static_dir: Path,
) -> list[BuildError]:
    """Run every check against one post and return all problems found."""
    errors: list[BuildError] = []
    errors.extend(check_fences(post, cfg))
    errors.extend(check_references(post, references, cfg.output.posts_dir))
    errors.extend(check_assets(post, static_dir))
    for error in errors:
        log_event(
            logger,
            str(error),
            level=logging.WARNING,
            event="check_failed",
            kind=type(error).__name__,
            file=str(post.source_path),
        )
    return errors


def check_corpus(
    posts: list[Post],
    cfg: AppConfig,
    references: dict[str, str],
    static_dir: Path,
) -> list[BuildError]:
    """Check every post; errors are returned in post order."""
    errors: list[BuildError] = []
    for post in posts:
        errors.extend(check_post(post, cfg, references, static_dir))
    return errors
