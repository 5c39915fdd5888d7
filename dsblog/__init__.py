"""
dsblog - static site builder for the data-structures blog.

This package turns a directory of Markdown posts (metadata header,
excerpt marker, fenced code samples, figure shortcodes) into a static
HTML site with per-post pages, an index and an Atom feed.

Main entry point is the CLI via `dsblog build` command.

Example:
    $ dsblog build -s content -o public
"""

__all__ = ["__version__", "load_post", "parse_document", "run_build", "slugify"]
__version__ = "0.1.0"

from .core.slug import slugify
from .input.loader import load_post, parse_document
from .runner import run_build
