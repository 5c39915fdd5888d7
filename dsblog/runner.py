"""
Build orchestration.

This module coordinates the entire workflow:
1. Load posts and parse their headers
2. Check content integrity (fences, cross-references, images)
3. Render Markdown to HTML
4. Assemble pages, index, feed and static files

Every document is independent; the first error aborts the build and names
the offending file.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from contextlib import nullcontext
from pathlib import Path

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeRemainingColumn,
)

from .checks import check_corpus
from .config import AppConfig, resolve_static_dir, resolve_templates_dir
from .core.types import Post, RenderedPost
from .errors import BuildError
from .input.loader import load_posts
from .output.site import SiteAssembler, clean_output_dir
from .render.renderer import MarkdownRenderer
from .render.shortcodes import ShortcodeRenderer, build_reference_index
from .templating import build_environment
from .utils.logging import close_logging, log_event, setup_logging


def run_build(
    source_dir: Path,
    output_dir: Path,
    cfg: AppConfig,
    show_progress: bool = True,
    console: Console | None = None,
) -> Path:
    """Build the site from ``source_dir`` into ``output_dir``.

    Args:
        source_dir: Directory of Markdown posts
        output_dir: Destination directory for the generated site
        cfg: Application configuration
        show_progress: Whether to display progress bars
        console: Rich console for output (creates default if None)

    Returns:
        Path to the generated index.html

    Raises:
        BuildError: On the first content error; the build writes nothing
            further once an error is found
    """
    if cfg.output.clean:
        clean_output_dir(output_dir, source_dir)
    logger = setup_logging(cfg.logging, output_dir if cfg.logging.file else None)
    log_event(
        logger,
        "Build start",
        event="build_start",
        source=str(source_dir),
        output=str(output_dir),
    )

    progress = None
    if show_progress:
        progress = Progress(
            SpinnerColumn(),
            TextColumn("{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeRemainingColumn(),
            console=console or Console(),
        )

    try:
        with progress if progress is not None else nullcontext():
            stage_task = progress.add_task("Stages", total=4) if progress is not None else None

            posts = load_posts(source_dir, cfg)
            _advance(progress, stage_task)

            static_dir = resolve_static_dir(cfg, source_dir)
            env = build_environment(resolve_templates_dir(cfg, source_dir))
            references = build_reference_index(posts, cfg.output.posts_dir)
            errors = check_corpus(posts, cfg, references, static_dir)
            if errors:
                raise errors[0]
            _advance(progress, stage_task)

            renderer = MarkdownRenderer(cfg, ShortcodeRenderer(env, references))
            render_task = progress.add_task("Render", total=len(posts)) if progress is not None else None
            pages = render_posts(posts, renderer, cfg, logger, progress, render_task)
            _advance(progress, stage_task)

            index_path = SiteAssembler(cfg, env, static_dir).assemble(pages, output_dir)
            _advance(progress, stage_task)
    except BuildError as exc:
        log_event(
            logger,
            f"Build failed: {exc}",
            level=logging.ERROR,
            event="build_failed",
            kind=type(exc).__name__,
            file=str(exc.path) if exc.path else None,
        )
        close_logging(logger)
        raise

    log_event(
        logger,
        "Build complete",
        event="build_complete",
        output=str(index_path),
        total=len(pages),
    )
    close_logging(logger)
    return index_path


def run_check(source_dir: Path, cfg: AppConfig) -> list[BuildError]:
    """Load and check every post without writing output.

    Unlike ``run_build`` this does not stop at the first problem.
    """
    logger = setup_logging(cfg.logging, None)
    errors: list[BuildError] = []
    posts = load_posts(source_dir, cfg, errors=errors)
    references = build_reference_index(posts, cfg.output.posts_dir)
    errors.extend(check_corpus(posts, cfg, references, resolve_static_dir(cfg, source_dir)))
    log_event(
        logger,
        "Check complete",
        event="check_complete",
        posts=len(posts),
        errors=len(errors),
    )
    return errors


def render_posts(
    posts: list[Post],
    renderer: MarkdownRenderer,
    cfg: AppConfig,
    logger: logging.Logger | None = None,
    progress: Progress | None = None,
    render_task: int | None = None,
) -> list[RenderedPost]:
    """Render every post, keeping input order regardless of concurrency."""
    concurrency = max(1, int(cfg.render.concurrency))

    if concurrency == 1:
        results: list[RenderedPost] = []
        for post in posts:
            results.append(renderer.render(post))
            _advance(progress, render_task)
        return results

    log_event(logger, "Render concurrency enabled", event="render_concurrency_enabled", workers=concurrency)
    results_list: list[RenderedPost | None] = [None] * len(posts)
    with ThreadPoolExecutor(max_workers=concurrency) as executor:
        future_map = {executor.submit(renderer.render, post): idx for idx, post in enumerate(posts)}
        for future in as_completed(future_map):
            # Put result back to original index to keep output ordering stable.
            results_list[future_map[future]] = future.result()
            _advance(progress, render_task)

    if any(r is None for r in results_list):
        raise RuntimeError("Render results incomplete")
    return [r for r in results_list if r is not None]


def _advance(progress: Progress | None, task: int | None) -> None:
    if progress is not None and task is not None:
        progress.advance(task, 1)
