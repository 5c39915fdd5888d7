"""
Input parsing utilities.

This package contains code for reading Markdown posts and their headers.
"""

from .loader import load_post, load_posts, parse_document

__all__ = ["load_post", "load_posts", "parse_document"]
