from datetime import datetime
from pathlib import Path

import pytest

from dsblog.core.types import Post, RenderedPost
from dsblog.errors import BuildError
from dsblog.output.site import clean_output_dir, copy_tree, link_neighbours, sort_pages


def _page(slug: str, day: int) -> RenderedPost:
    post = Post(
        title=slug.title(),
        date=datetime(2020, 1, day),
        body="",
        slug=slug,
        source_path=Path(f"{slug}.md"),
    )
    return RenderedPost(post=post, url=f"/posts/{slug}/", excerpt_html="", body_html="", summary_text="")


def test_sort_pages_newest_first_and_stable():
    pages = [_page("a", 1), _page("b", 3), _page("c", 1), _page("d", 2)]

    assert [p.post.slug for p in sort_pages(pages)] == ["b", "d", "a", "c"]


def test_link_neighbours():
    pages = sort_pages([_page("old", 1), _page("mid", 2), _page("new", 3)])

    link_neighbours(pages)

    newest, middle, oldest = pages
    assert newest.next is None and newest.prev is middle
    assert middle.next is newest and middle.prev is oldest
    assert oldest.next is middle and oldest.prev is None


def test_clean_output_dir_removes_previous_build(tmp_path):
    output = tmp_path / "public"
    (output / "posts" / "stale").mkdir(parents=True)
    (output / "posts" / "stale" / "index.html").write_text("old")

    clean_output_dir(output, tmp_path / "content")

    assert not output.exists()


def test_clean_output_dir_refuses_to_remove_source(tmp_path):
    source = tmp_path / "content"
    source.mkdir()

    with pytest.raises(BuildError, match="refusing to clean"):
        clean_output_dir(tmp_path, source)
    with pytest.raises(BuildError):
        clean_output_dir(source, source)
    assert source.exists()


def test_copy_tree_skips_unchanged_files(tmp_path):
    src = tmp_path / "static"
    (src / "images").mkdir(parents=True)
    (src / "images" / "a.png").write_bytes(b"one")
    (src / "robots.txt").write_text("User-agent: *\n")
    dst = tmp_path / "public"

    assert copy_tree(src, dst) == 2
    assert (dst / "images" / "a.png").read_bytes() == b"one"
    assert copy_tree(src, dst) == 0

    (src / "images" / "a.png").write_bytes(b"two")
    assert copy_tree(src, dst) == 1
    assert (dst / "images" / "a.png").read_bytes() == b"two"


def test_copy_tree_missing_source(tmp_path):
    assert copy_tree(tmp_path / "nope", tmp_path / "out") == 0
