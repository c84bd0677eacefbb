"""YAML frontmatter extraction for markdown files.

Frontmatter is the optional block between the first two `---` lines at
the top of a file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from harnex.errors import FrontmatterMalformed, IoFailure

FENCE = "---"


def split_lines(content: str) -> list[str]:
    """Split text into lines on `\\n`, dropping a trailing `\\r` and a final empty line."""
    parts = content.split("\n")
    if parts and parts[-1] == "":
        parts.pop()
    return [part[:-1] if part.endswith("\r") else part for part in parts]


def read_text(path: str | os.PathLike[str]) -> str:
    """Read a UTF-8 file, raising IoFailure on any error."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise IoFailure(path, exc) from exc


@dataclass(frozen=True)
class Frontmatter:
    """Location and text of a parsed frontmatter block."""

    begin_line: int
    end_line: int
    yaml_text: str
    body_start_line: int


def parse(content: str, source: str | os.PathLike[str]) -> Frontmatter | None:
    """Return the frontmatter of `content`, or None when it has none.

    Raises FrontmatterMalformed when the opening fence is never closed.
    """
    lines = split_lines(content)
    if not lines or lines[0] != FENCE:
        return None
    for offset, line in enumerate(lines[1:]):
        if line == FENCE:
            end_line = offset + 2
            return Frontmatter(
                begin_line=1,
                end_line=end_line,
                yaml_text="\n".join(lines[1 : offset + 1]),
                body_start_line=end_line + 1,
            )
    raise FrontmatterMalformed(source, "frontmatter `---` is not terminated")