"""Fenced code block scanning.

Code samples are inert text: shortcodes, excerpt markers and link checks
must never look inside them. ``map_noncode`` applies a transformation to
everything outside the fences and passes the fences through verbatim.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Callable

from ..core.types import CodeBlock
from ..errors import FenceError

OPEN_FENCE = re.compile(r"^(?P<indent> {0,3})(?P<fence>`{3,}|~{3,})[ \t]*(?P<info>.*?)[ \t]*$")
PLAIN_LANGUAGE = "plain"


def split_segments(md: str) -> list[tuple[bool, str]]:
    """Split Markdown into (is_code, text) segments.

    Joining the texts gives back the input unchanged. An unterminated fence
    runs to the end of the document.
    """
    segments: list[tuple[bool, str]] = []
    buf: list[str] = []
    fence: str | None = None

    for line in md.splitlines(keepends=True):
        stripped = line.rstrip("\n")
        if fence is None:
            m = OPEN_FENCE.match(stripped)
            if m and not (m.group("fence")[0] == "`" and "`" in m.group("info")):
                if buf:
                    segments.append((False, "".join(buf)))
                buf = [line]
                fence = m.group("fence")
                continue
            buf.append(line)
            continue

        buf.append(line)
        if _closes(stripped, fence):
            segments.append((True, "".join(buf)))
            buf = []
            fence = None

    if buf:
        segments.append((fence is not None, "".join(buf)))
    return segments


def map_noncode(md: str, fn: Callable[[str], str]) -> str:
    """Apply ``fn`` to every part of ``md`` outside fenced code blocks."""
    return "".join(text if is_code else fn(text) for is_code, text in split_segments(md))


def iter_code_blocks(md: str, path: Path | None = None) -> list[CodeBlock]:
    """Return every fenced block in ``md``.

    Raises:
        FenceError: If a fence is never closed
    """
    blocks: list[CodeBlock] = []
    line_no = 1
    for is_code, text in split_segments(md):
        if is_code:
            lines = text.splitlines()
            m = OPEN_FENCE.match(lines[0])
            fence = m.group("fence") if m else "```"
            if len(lines) < 2 or not _closes(lines[-1], fence):
                raise FenceError(f"unterminated code fence at body line {line_no}", path)
            blocks.append(
                CodeBlock(
                    language=fence_language(m.group("info") if m else ""),
                    code="\n".join(lines[1:-1]),
                    line=line_no,
                )
            )
        line_no += text.count("\n")
    return blocks


def fence_language(info: str) -> str:
    """Extract the language tag from a fence info string.

    Handles ``python``, ``python title="x"`` and pandoc style ``{.python}``.
    """
    info = info.strip()
    if not info:
        return ""
    word = info.split()[0].strip("{}")
    return word.lstrip(".").lower()


def _closes(line: str, fence: str) -> bool:
    stripped = line.strip()
    return (
        len(line) - len(line.lstrip(" ")) <= 3
        and stripped.startswith(fence)
        and set(stripped) == {fence[0]}
    )
