"""Tests for the content loader."""

from datetime import date, datetime

import pytest

from dsblog.errors import ParseError
from dsblog.input.loader import coerce_date, load_post, load_posts, parse_document


def test_parse_bare_header_block():
    text = 'Title: "Test"\ndate: 2020-01-01\nSummary: A short one\n\nHello <!--more--> world\n'

    meta, body = parse_document(text)

    assert meta == {"title": "Test", "date": date(2020, 1, 1), "summary": "A short one"}
    assert body == "Hello <!--more--> world"


def test_parse_yaml_front_matter():
    text = "---\ntitle: Hash tables\ndate: 2021-03-04 10:30:00\n---\n\n# Probing\n\nBody text\n"

    meta, body = parse_document(text)

    assert meta["title"] == "Hash tables"
    assert meta["date"] == datetime(2021, 3, 4, 10, 30)
    assert body.startswith("# Probing")


def test_bare_header_keeps_values_with_colons():
    text = "Title: Linked lists: part 2\ndate: 2020-01-01\n\nbody"

    meta, _ = parse_document(text)

    assert meta["title"] == "Linked lists: part 2"


def test_bare_header_continuation_lines():
    text = "Title: Trees\ndate: 2020-01-01\nSummary: How Blink walks\n  the DOM tree\n\nbody"

    meta, _ = parse_document(text)

    assert meta["summary"] == "How Blink walks the DOM tree"


def test_header_normalizes_crlf_and_bom():
    text = "\ufeffTitle: Arrays\r\ndate: 2020-01-01\r\n\r\nbody\r\n"

    meta, body = parse_document(text)

    assert meta["title"] == "Arrays"
    assert body == "body"


def test_missing_header_is_parse_error():
    with pytest.raises(ParseError, match="missing metadata header"):
        parse_document("Just some prose without a header.\n\nMore prose.")


def test_malformed_yaml_header_is_parse_error(tmp_path):
    path = tmp_path / "broken.md"

    with pytest.raises(ParseError) as exc_info:
        parse_document("---\ntitle: [unclosed\ndate: 2020-01-01\n---\nbody\n", path)

    assert exc_info.value.path == path
    assert "broken.md" in str(exc_info.value)


def test_malformed_bare_header_line(tmp_path):
    path = tmp_path / "bad.md"

    with pytest.raises(ParseError, match="malformed header line 2"):
        parse_document("Title: Ok\nthis line is not a header\n\nbody", path)


def test_load_post_builds_post(write_post):
    path = write_post("2020-01-05-linked-lists.md", "Title: Linked lists\ndate: 2020-01-05\nTags: [c, kernel]\n\nbody\n")

    post = load_post(path)

    assert post.title == "Linked lists"
    assert post.date == datetime(2020, 1, 5)
    assert post.slug == "linked-lists"
    assert post.summary is None
    assert post.source_path == path
    assert post.extra == {"tags": ["c", "kernel"]}


def test_load_post_explicit_slug(write_post):
    path = write_post("whatever.md", "Title: X\ndate: 2020-01-01\nSlug: Intrusive Lists\n\nbody\n")

    assert load_post(path).slug == "intrusive-lists"


def test_load_post_page_bundle_slug(write_post):
    path = write_post("hash-tables/index.md", "Title: X\ndate: 2020-01-01\n\nbody\n")

    assert load_post(path).slug == "hash-tables"


def test_load_post_missing_date_names_file(write_post):
    path = write_post("undated.md", 'Title: "Test"\n\nHello\n')

    with pytest.raises(ParseError) as exc_info:
        load_post(path)

    assert exc_info.value.message == "missing date"
    assert exc_info.value.path == path
    assert str(exc_info.value).endswith("undated.md: missing date")


def test_load_post_empty_title(write_post):
    path = write_post("untitled.md", 'Title: ""\ndate: 2020-01-01\n\nHello\n')

    with pytest.raises(ParseError, match="missing title"):
        load_post(path)


def test_load_post_invalid_date(write_post):
    path = write_post("baddate.md", "Title: X\ndate: sometime in 2020\n\nHello\n")

    with pytest.raises(ParseError, match="invalid date"):
        load_post(path)


def test_coerce_date_variants():
    assert coerce_date(date(2020, 1, 1)) == datetime(2020, 1, 1)
    assert coerce_date("2020-01-01T10:00:00Z") == datetime(2020, 1, 1, 10, 0)
    assert coerce_date("2020-01-01T12:00:00+02:00") == datetime(2020, 1, 1, 10, 0)
    with pytest.raises(ParseError):
        coerce_date(2020)


def test_load_posts_skips_drafts(write_post, content_dir, cfg):
    write_post("a.md", "Title: A\ndate: 2020-01-01\n\nbody\n")
    write_post("b.md", "Title: B\ndate: 2020-01-02\ndraft: true\n\nbody\n")

    assert [p.title for p in load_posts(content_dir, cfg)] == ["A"]

    cfg.content.drafts = True
    assert [p.title for p in load_posts(content_dir, cfg)] == ["A", "B"]


def test_load_posts_ignores_static_dir(write_post, content_dir, cfg):
    write_post("a.md", "Title: A\ndate: 2020-01-01\n\nbody\n")
    write_post("static/README.md", "no header here")

    assert len(load_posts(content_dir, cfg)) == 1


def test_load_posts_rejects_duplicate_slugs(write_post, content_dir, cfg):
    write_post("2020-01-01-trees.md", "Title: A\ndate: 2020-01-01\n\nbody\n")
    write_post("2021-01-01-trees.md", "Title: B\ndate: 2021-01-01\n\nbody\n")

    with pytest.raises(ParseError, match="duplicate slug 'trees'"):
        load_posts(content_dir, cfg)


def test_load_posts_collects_errors_when_asked(write_post, content_dir, cfg):
    write_post("a.md", "Title: A\ndate: 2020-01-01\n\nbody\n")
    write_post("b.md", "Title: B\n\nbody\n")
    write_post("c.md", "date: 2020-01-01\n\nbody\n")

    errors = []
    posts = load_posts(content_dir, cfg, errors=errors)

    assert [p.title for p in posts] == ["A"]
    assert [e.path.name for e in errors] == ["b.md", "c.md"]


@pytest.mark.parametrize(
    "text",
    [
        "Title: X\ndate: 2020-13-45\n\nbody\n",
        "Title: X\ndate: 2020-02-30\n\nbody\n",
    ],
)
def test_load_post_out_of_range_bare_date(write_post, text):
    path = write_post("baddate.md", text)

    with pytest.raises(ParseError, match="invalid date") as exc_info:
        load_post(path)

    assert exc_info.value.path == path


def test_load_post_out_of_range_yaml_date(write_post):
    path = write_post("baddate.md", "---\ntitle: X\ndate: 2020-02-30\n---\nbody\n")

    with pytest.raises(ParseError, match="malformed metadata header") as exc_info:
        load_post(path)

    assert exc_info.value.path == path
    assert "baddate.md" in str(exc_info.value)


def test_load_post_rejects_non_utf8(content_dir):
    path = content_dir / "latin1.md"
    path.write_bytes(b"Title: Caf\xe9\ndate: 2020-01-01\n\nbody\n")

    with pytest.raises(ParseError, match="not valid UTF-8") as exc_info:
        load_post(path)

    assert exc_info.value.path == path


def test_load_posts_collects_bad_dates_and_encoding(write_post, content_dir, cfg):
    write_post("a.md", "Title: A\ndate: 2020-13-45\n\nbody\n")
    write_post("b.md", "---\ntitle: B\ndate: 2020-02-30\n---\nbody\n")
    (content_dir / "c.md").write_bytes(b"Title: Caf\xe9\ndate: 2020-01-01\n\nbody\n")
    write_post("d.md", "Title: D\n\nbody\n")

    errors = []
    posts = load_posts(content_dir, cfg, errors=errors)

    assert posts == []
    assert [e.path.name for e in errors] == ["a.md", "b.md", "c.md", "d.md"]
    assert all(isinstance(e, ParseError) for e in errors)
