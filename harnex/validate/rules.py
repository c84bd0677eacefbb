"""Validation of rule markdown files: length and `paths:` frontmatter."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from harnex.errors import FrontmatterMalformed
from harnex.findings import Finding, Location, Severity
from harnex.validate import frontmatter
from harnex.validate.frontmatter import read_text, split_lines


@dataclass
class RulesPolicy:
    """Limits applied to rule files."""

    max_lines: int = 200
    always_loaded_slugs: list[str] = field(default_factory=list)


def _load_mapping(text: str) -> dict[Any, Any]:
    """Parse YAML that must be a mapping; an empty document is an empty mapping."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ValueError(str(exc)) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"invalid type: {type(data).__name__}, expected a mapping")
    return data


class RuleValidator:
    """Checks a rule file against a RulesPolicy."""

    def __init__(self, policy: RulesPolicy) -> None:
        self.policy = policy

    def validate_file(self, path: str | os.PathLike[str]) -> list[Finding]:
        return self.validate_text(read_text(path), path)

    def validate_text(self, content: str, path: str | os.PathLike[str]) -> list[Finding]:
        path = Path(path)
        findings: list[Finding] = []
        slug = path.stem

        total_lines = len(split_lines(content))
        if total_lines > self.policy.max_lines:
            findings.append(
                Finding(
                    slug="rule-too-long",
                    severity=Severity.MAJOR,
                    location=Location.file(path),
                    message=f"{total_lines} lines exceeds max_lines={self.policy.max_lines}",
                    hint="split the rule or move detail to a referenced file",
                )
            )

        try:
            fm = frontmatter.parse(content, path)
        except FrontmatterMalformed as exc:
            findings.append(
                Finding(
                    slug="rule-frontmatter-malformed",
                    severity=Severity.BLOCKER,
                    location=Location.line(path, 1),
                    message=str(exc),
                    hint=exc.hint(),
                )
            )
            return findings

        always_loaded = slug in self.policy.always_loaded_slugs

        if fm is None:
            if not always_loaded:
                findings.append(
                    Finding(
                        slug="rule-missing-paths-frontmatter",
                        severity=Severity.MAJOR,
                        location=Location.file(path),
                        message="rule has no frontmatter and is not always-loaded",
                        hint=(
                            "add `paths:` frontmatter or list the slug in "
                            "[validate.rules].always_loaded_slugs"
                        ),
                    )
                )
            return findings

        try:
            data = _load_mapping(fm.yaml_text)
        except ValueError as exc:
            findings.append(
                Finding(
                    slug="rule-frontmatter-yaml-invalid",
                    severity=Severity.BLOCKER,
                    location=Location.line(path, fm.begin_line),
                    message=f"yaml parse: {exc}",
                    hint=(
                        "fix the YAML between the `---` fences; common causes: "
                        "unquoted strings with `:`, tab indentation, missing list `- ` prefix"
                    ),
                )
            )
            return findings

        if data.get("paths") is None and not always_loaded:
            findings.append(
                Finding(
                    slug="rule-missing-paths-frontmatter",
                    severity=Severity.MAJOR,
                    location=Location.line(path, fm.begin_line),
                    message="frontmatter lacks `paths:` key",
                    hint="add `paths: [...]` or list slug under always_loaded_slugs",
                )
            )
        return findings