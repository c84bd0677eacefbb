"""Findings emitted by validators: severity, location and message."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class Severity(Enum):
    """How serious a finding is; declared from most to least severe."""

    BLOCKER = "blocker"
    MAJOR = "major"
    MINOR = "minor"
    INFO = "info"

    def rank(self) -> int:
        """Sort key: 0 for the most severe, increasing as severity drops."""
        return list(Severity).index(self)


class Location:
    """A file, optionally narrowed to a 1-indexed line."""

    __match_args__ = ("path", "line")

    def __init__(self, path: str | os.PathLike[str], line: int | None = None) -> None:
        self.path = Path(path)
        self.line = line

    @classmethod
    def file(cls, path: str | os.PathLike[str]) -> Location:
        """Location covering a whole file."""
        return cls(path)

    @classmethod
    def line(cls, path: str | os.PathLike[str], line: int) -> Location:  # noqa: F811
        """Location pointing at one line of a file."""
        return cls(path, line)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Location):
            return NotImplemented
        return (self.path, self.line) == (other.path, other.line)

    def __hash__(self) -> int:
        return hash((self.path, self.line))

    def __repr__(self) -> str:
        return f"Location(path={self.path!r}, line={self.line!r})"


@dataclass
class Finding:
    """One problem reported by a validator."""

    slug: str
    severity: Severity
    location: Location
    message: str
    hint: str | None = None
    auto_fixable: bool = False
    fix_command: str | None = None