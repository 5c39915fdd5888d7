"""
Markdown to HTML rendering.

This package contains the excerpt split, shortcode expansion, fence
scanning and asset discovery used to turn a Post into HTML.
"""

from .assets import AssetRef, find_assets
from .fences import iter_code_blocks, map_noncode
from .renderer import MarkdownRenderer, split_excerpt
from .shortcodes import ShortcodeRenderer, build_reference_index

__all__ = [
    "AssetRef",
    "MarkdownRenderer",
    "ShortcodeRenderer",
    "build_reference_index",
    "find_assets",
    "iter_code_blocks",
    "map_noncode",
    "split_excerpt",
]
