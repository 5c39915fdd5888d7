"""
Core domain models.

This package contains data types and helpers that are
independent of any specific pipeline stage.
"""

from .slug import post_url, slug_from_path, slugify
from .types import CodeBlock, Post, RenderedPost

__all__ = [
    "Post",
    "CodeBlock",
    "RenderedPost",
    "slugify",
    "slug_from_path",
    "post_url",
]
