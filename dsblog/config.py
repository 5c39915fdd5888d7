"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- SiteConfig: Site-wide metadata and template settings
- ContentConfig: Source discovery, excerpt marker and content checks
- RenderConfig: Markdown extensions and render concurrency
- OutputConfig: Output directory layout
- LoggingConfig: Logging behavior
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_LANGUAGES = [
    "asm",
    "bash",
    "c",
    "c++",
    "console",
    "cpp",
    "diff",
    "gas",
    "go",
    "html",
    "java",
    "javascript",
    "js",
    "json",
    "make",
    "nasm",
    "python",
    "pycon",
    "ruby",
    "rust",
    "sh",
    "shell",
    "text",
    "typescript",
    "x86asm",
    "yaml",
]


@dataclass
class SiteConfig:
    """Site-wide settings.

    Attributes:
        title: Site title shown in page headers and the feed
        base_url: Absolute site URL used for feed links
        author: Default author for the feed
        description: Short description shown on the index page
        feed_limit: Number of newest posts included in feed.xml
        templates_dir: Optional directory whose templates override the packaged ones
    """

    title: str = "Data Structures in the Wild"
    base_url: str = "http://localhost:8000"
    author: str = ""
    description: str = ""
    feed_limit: int = 20
    templates_dir: str | None = None


@dataclass
class ContentConfig:
    """Configuration for reading and checking posts.

    Attributes:
        drafts: Whether posts marked `draft: true` are built
        excerpt_marker: Marker separating the excerpt from the rest of the body
        static_dir: Directory of images and other static files (relative to source)
        languages: Recognised fence language tags ("plain" is always accepted)
        allow_untagged_fences: Whether fences without a language tag are accepted
    """

    drafts: bool = False
    excerpt_marker: str = "<!--more-->"
    static_dir: str = "static"
    languages: list[str] = field(default_factory=lambda: list(DEFAULT_LANGUAGES))
    allow_untagged_fences: bool = False


@dataclass
class RenderConfig:
    """Configuration for Markdown rendering.

    Attributes:
        extensions: Python-Markdown extensions enabled for every post
        concurrency: Number of worker threads rendering posts
    """

    extensions: list[str] = field(
        default_factory=lambda: ["fenced_code", "tables", "footnotes", "toc"]
    )
    concurrency: int = 1


@dataclass
class OutputConfig:
    """Configuration for output generation.

    Attributes:
        clean: Whether to remove the output directory before building
        posts_dir: Subdirectory holding one folder per post
    """

    clean: bool = False
    posts_dir: str = "posts"


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Name of the build log file written into the output directory
    """

    level: str = "INFO"
    console: bool = True
    file: bool = False
    format: str = "jsonl"
    filename: str = "build.jsonl"


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    site: SiteConfig = field(default_factory=SiteConfig)
    content: ContentConfig = field(default_factory=ContentConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return _merge_config(AppConfig(), raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = _asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            data[key].update(value)
        else:
            data[key] = value
    return _fromdict(data)


def _asdict(cfg: AppConfig) -> dict[str, Any]:
    """Convert AppConfig to nested dictionary."""
    return {
        "site": {
            "title": cfg.site.title,
            "base_url": cfg.site.base_url,
            "author": cfg.site.author,
            "description": cfg.site.description,
            "feed_limit": cfg.site.feed_limit,
            "templates_dir": cfg.site.templates_dir,
        },
        "content": {
            "drafts": cfg.content.drafts,
            "excerpt_marker": cfg.content.excerpt_marker,
            "static_dir": cfg.content.static_dir,
            "languages": list(cfg.content.languages),
            "allow_untagged_fences": cfg.content.allow_untagged_fences,
        },
        "render": {
            "extensions": list(cfg.render.extensions),
            "concurrency": cfg.render.concurrency,
        },
        "output": {
            "clean": cfg.output.clean,
            "posts_dir": cfg.output.posts_dir,
        },
        "logging": {
            "level": cfg.logging.level,
            "console": cfg.logging.console,
            "file": cfg.logging.file,
            "format": cfg.logging.format,
            "filename": cfg.logging.filename,
        },
    }


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(
        site=SiteConfig(**data["site"]),
        content=ContentConfig(**data["content"]),
        render=RenderConfig(**data["render"]),
        output=OutputConfig(**data["output"]),
        logging=LoggingConfig(**data["logging"]),
    )


def resolve_static_dir(cfg: AppConfig, source_dir: Path) -> Path:
    """Return the static directory, resolving relative paths against the source."""
    static_dir = Path(cfg.content.static_dir).expanduser()
    if not static_dir.is_absolute():
        static_dir = source_dir / static_dir
    return static_dir


def resolve_templates_dir(cfg: AppConfig, source_dir: Path) -> Path | None:
    """Return the override template directory, or None when not configured."""
    if not cfg.site.templates_dir:
        return None
    templates_dir = Path(cfg.site.templates_dir).expanduser()
    if not templates_dir.is_absolute():
        templates_dir = source_dir / templates_dir
    return templates_dir
