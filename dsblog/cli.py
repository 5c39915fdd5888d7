"""
Command-line interface for the blog builder.

Uses Typer to provide a CLI with options for the main configuration
settings. Values given on the command line override the YAML config file.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from .config import AppConfig, load_config
from .errors import BuildError
from .runner import run_build, run_check

app = typer.Typer(add_completion=False)
console = Console()


def _load(config: Path | None, log_level: str | None) -> AppConfig:
    cfg = load_config(str(config) if config else None)
    if log_level:
        cfg.logging.level = log_level
    return cfg


@app.command()
def build(
    source: Path = typer.Option(
        Path("content"), "--source", "-s", exists=True, file_okay=False, readable=True
    ),
    output: Path = typer.Option(Path("public"), "--output", "-o", file_okay=False),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, dir_okay=False),
    drafts: bool | None = typer.Option(None, "--drafts/--no-drafts", help="Include draft posts."),
    clean: bool | None = typer.Option(
        None, "--clean/--no-clean", help="Remove the output directory before building."
    ),
    progress: bool = typer.Option(True, "--progress/--no-progress"),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    log_format: str | None = typer.Option(
        None, "--log-format", help="Log file format: jsonl or plain."
    ),
    log_file: bool | None = typer.Option(
        None, "--log-file/--no-log-file", help="Enable or disable file logging."
    ),
):
    """Build the static site.

    Reads every Markdown post under SOURCE, checks it, renders it and
    writes per-post pages, an index, a feed and the static files to OUTPUT.

    Args:
        source: Directory of Markdown posts
        output: Directory for the generated site
        config: Optional path to YAML config file
        drafts: Include posts marked as drafts
        clean: Remove the output directory first
        progress: Whether to show progress bar
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: Log file format (jsonl, plain)
        log_file: Enable/disable file logging
    """
    cfg = _load(config, log_level)

    if drafts is not None:
        cfg.content.drafts = drafts
    if clean is not None:
        cfg.output.clean = clean
    if log_format:
        cfg.logging.format = log_format
    if log_file is not None:
        cfg.logging.file = log_file

    try:
        index_path = run_build(source, output, cfg, show_progress=progress, console=console)
    except BuildError as exc:
        console.print(f"[red]Build failed:[/red] {escape(str(exc))}", highlight=False, soft_wrap=True)
        raise typer.Exit(code=1) from exc
    console.print(f"Site generated: {index_path}")


@app.command()
def check(
    source: Path = typer.Option(
        Path("content"), "--source", "-s", exists=True, file_okay=False, readable=True
    ),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, dir_okay=False),
    drafts: bool | None = typer.Option(None, "--drafts/--no-drafts", help="Include draft posts."),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
):
    """Check every post and list all content errors without building."""
    cfg = _load(config, log_level)
    if drafts is not None:
        cfg.content.drafts = drafts
    # errors are printed below; keep the console log quiet
    cfg.logging.console = False

    errors = run_check(source, cfg)
    for error in errors:
        console.print(f"[red]{type(error).__name__}[/red] {escape(str(error))}", highlight=False, soft_wrap=True)
    if errors:
        console.print(f"{len(errors)} problem(s) found")
        raise typer.Exit(code=1)
    console.print("No problems found")


if __name__ == "__main__":
    app()
