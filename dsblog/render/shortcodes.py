"""Shortcode expansion.

Supported shortcodes (Hugo syntax, ``{{< ... >}}`` or ``{{% ... %}}``):

- ``{{< figure src="/images/list.png" caption="A circular list" alt="..." >}}``
  renders an image with a caption through ``shortcodes/figure.html``.
- ``{{< ref "hash-tables" >}}`` and ``{{< relref "hash-tables.md" >}}``
  resolve to the URL of another post, by slug or source file name.

Shortcodes inside fenced code blocks are left untouched.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from jinja2 import Environment

from ..core.slug import post_url
from ..core.types import Post
from ..errors import DanglingReferenceError
from ..templating import render_template
from .fences import map_noncode

logger = logging.getLogger(__name__)

SHORTCODE = re.compile(
    r"\{\{[<%]\s*(?P<name>[A-Za-z][\w-]*)(?P<args>.*?)\s*[>%]\}\}",
    re.DOTALL,
)
ARG = re.compile(
    r"""(?:(?P<key>[A-Za-z][\w-]*)=)?(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>[^\s"'=]+))"""
)
REF_NAMES = {"ref", "relref"}


@dataclass
class Shortcode:
    """A parsed shortcode invocation.

    Attributes:
        name: Shortcode name, e.g. "figure"
        args: Positional arguments in order
        kwargs: Named arguments
    """

    name: str
    args: list[str] = field(default_factory=list)
    kwargs: dict[str, str] = field(default_factory=dict)


def parse_shortcode(match: re.Match[str]) -> Shortcode:
    code = Shortcode(name=match.group("name"))
    for arg in ARG.finditer(match.group("args")):
        value = next(v for v in (arg.group("dq"), arg.group("sq"), arg.group("bare")) if v is not None)
        if arg.group("key"):
            code.kwargs[arg.group("key")] = value
        else:
            code.args.append(value)
    return code


def iter_shortcodes(md: str) -> list[Shortcode]:
    """Return every shortcode outside fenced code blocks."""
    found: list[Shortcode] = []

    def _collect(text: str) -> str:
        found.extend(parse_shortcode(m) for m in SHORTCODE.finditer(text))
        return text

    map_noncode(md, _collect)
    return found


def ref_target(code: Shortcode) -> str | None:
    """Return the target of a ref/relref shortcode."""
    if code.args:
        return code.args[0]
    return code.kwargs.get("path")


def build_reference_index(posts: list[Post], posts_dir: str = "posts") -> dict[str, str]:
    """Map every name a post can be referenced by to its URL.

    A post is reachable by slug, by source file name and by file stem.
    """
    index: dict[str, str] = {}
    for post in posts:
        url = post_url(post.slug, posts_dir)
        for key in (post.slug, post.source_path.name, post.source_path.stem):
            index.setdefault(key, url)
    return index


def normalize_ref(target: str) -> str:
    """Strip anchors and directory parts from a ref target."""
    target = target.split("#", 1)[0].strip().rstrip("/")
    return Path(target).name


class ShortcodeRenderer:
    """Expands shortcodes in a Markdown body.

    Args:
        env: Template environment providing ``shortcodes/*.html``
        references: Name to URL map from ``build_reference_index``
    """

    def __init__(self, env: Environment, references: dict[str, str]):
        self.env = env
        self.references = references

    def expand(self, md: str, source: Path | None = None) -> str:
        def _repl(match: re.Match[str]) -> str:
            code = parse_shortcode(match)
            if code.name in REF_NAMES:
                return self._ref(code, source)
            if code.name == "figure":
                return self._figure(code, source)
            logger.warning(f"Unknown shortcode '{code.name}' in {source}, left as is")
            return match.group(0)

        return map_noncode(md, lambda text: SHORTCODE.sub(_repl, text))

    def _ref(self, code: Shortcode, source: Path | None) -> str:
        target = ref_target(code) or ""
        anchor = ""
        if "#" in target:
            anchor = "#" + target.split("#", 1)[1]
        url = self.references.get(normalize_ref(target))
        if url is None:
            raise DanglingReferenceError(f"reference to unknown post '{target}'", source)
        return url + anchor

    def _figure(self, code: Shortcode, source: Path | None) -> str:
        html = render_template(
            self.env,
            "shortcodes/figure.html",
            source,
            src=code.kwargs.get("src", code.args[0] if code.args else ""),
            alt=code.kwargs.get("alt", code.kwargs.get("caption", "")),
            caption=code.kwargs.get("caption", ""),
            title=code.kwargs.get("title", ""),
            link=code.kwargs.get("link", ""),
            css_class=code.kwargs.get("class", ""),
            width=code.kwargs.get("width", ""),
        )
        # block HTML needs blank lines around it to pass through Markdown untouched
        return "\n\n" + " ".join(html.split()) + "\n\n"
