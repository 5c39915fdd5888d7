"""Output assembly helpers."""

from .site import SiteAssembler, clean_output_dir, copy_tree, link_neighbours, sort_pages

__all__ = [
    "SiteAssembler",
    "clean_output_dir",
    "copy_tree",
    "link_neighbours",
    "sort_pages",
]
