"""Validation of git commit message trailers against a closed policy.

Trailers are `Key: value` lines in the last paragraph of the message,
separated from the body by at least one blank line.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path

from harnex.findings import Finding, Location, Severity
from harnex.validate.frontmatter import read_text, split_lines

TRAILER_PATTERN = re.compile(r"([A-Za-z0-9][A-Za-z0-9-]*):\s*(.*)")


@dataclass
class TrailerDecl:
    """A trailer the policy knows about."""

    key: str
    allowed_values: list[str] | None = None
    required: bool = False


@dataclass
class CommitMsgPolicy:
    """The set of declared trailers."""

    trailers: list[TrailerDecl] = field(default_factory=list)


def collect_trailers(content: str) -> list[tuple[str, str, int]]:
    """Return `(key, value, line_number)` for each trailer in the last paragraph.

    A message with a single paragraph has no trailers.
    """
    lines = split_lines(content)
    end: int | None = None
    start: int | None = None
    for idx in reversed(range(len(lines))):
        if lines[idx].strip():
            if end is None:
                end = idx
        elif end is not None:
            start = idx + 1
            break
    if start is None or end is None:
        return []

    trailers = []
    for number, line in enumerate(lines[start : end + 1], start=start + 1):
        if line[:1].isspace():
            continue
        match = TRAILER_PATTERN.fullmatch(line)
        if match:
            trailers.append((match.group(1), match.group(2), number))
    return trailers


class CommitMsgValidator:
    """Checks trailer values and required-trailer presence."""

    def __init__(self, policy: CommitMsgPolicy) -> None:
        self.policy = policy

    def validate_file(self, path: str | os.PathLike[str]) -> list[Finding]:
        return self.validate_text(read_text(path), path)

    def validate_text(self, content: str, path: str | os.PathLike[str]) -> list[Finding]:
        path = Path(path)
        findings: list[Finding] = []
        declared = {}
        for decl in self.policy.trailers:
            declared.setdefault(decl.key, decl)
        seen = collect_trailers(content)

        for key, value, line_no in seen:
            decl = declared.get(key)
            if decl is None:
                continue
            if not value.strip():
                findings.append(
                    Finding(
                        slug="commit-msg-empty-trailer",
                        severity=Severity.MAJOR,
                        location=Location.line(path, line_no),
                        message=f"trailer '{key}:' has empty value",
                        hint=f"provide a non-empty value for the '{key}:' trailer",
                    )
                )
                continue
            if decl.allowed_values is not None and value not in decl.allowed_values:
                findings.append(
                    Finding(
                        slug="commit-msg-unknown-trailer-value",
                        severity=Severity.MAJOR,
                        location=Location.line(path, line_no),
                        message=f"trailer '{key}: {value}' value not in allowed set",
                        hint=f"allowed: {', '.join(decl.allowed_values)}",
                    )
                )

        present = {key for key, _, _ in seen}
        for decl in self.policy.trailers:
            if not decl.required or decl.key in present:
                continue
            allowed = (
                f" (allowed: {', '.join(decl.allowed_values)})"
                if decl.allowed_values is not None
                else ""
            )
            findings.append(
                Finding(
                    slug="commit-msg-missing-required-trailer",
                    severity=Severity.BLOCKER,
                    location=Location.file(path),
                    message=f"required trailer '{decl.key}:' not found in commit message",
                    hint=f"add a trailer line: '{decl.key}: <value>'{allowed}",
                )
            )

        return findings