"""Validation of skill definition files (`.claude/skills/*/SKILL.md`).

Checks the frontmatter contract: presence, YAML shape, name shape and
agreement with the directory, description budget, and the value shapes of
`user-invocable`, `context`, `allowed-tools`, `disallowed-tools`, `paths`,
`hooks` and `effort`. `agent` and `model` are free-form and never flagged.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from harnex.errors import FrontmatterMalformed
from harnex.findings import Finding, Location, Severity
from harnex.validate import frontmatter
from harnex.validate.frontmatter import read_text, split_lines
from harnex.validate.settings import KNOWN_HOOK_EVENTS

NAME_PATTERN = re.compile(r"[a-z0-9-]{1,64}")

SIDE_EFFECT_PATTERN = re.compile(r"\b(commit|deploy|delete|submit|send|publish|release)\b")

KNOWN_EFFORT_LEVELS: tuple[str, ...] = ("low", "medium", "high", "xhigh", "max")

KNOWN_SKILL_KEYS: tuple[str, ...] = (
    "name",
    "description",
    "when_to_use",
    "argument-hint",
    "arguments",
    "disable-model-invocation",
    "user-invocable",
    "allowed-tools",
    "disallowed-tools",
    "model",
    "effort",
    "context",
    "agent",
    "hooks",
    "paths",
    "shell",
)

_STRING_FIELDS = ("name", "description", "when_to_use", "context", "effort")
_BOOL_FIELDS = ("disable-model-invocation",)

_YAML_KIND_NAMES = {
    bool: "boolean",
    int: "integer",
    float: "floating point",
    list: "sequence",
    dict: "map",
}


@dataclass
class SkillsPolicy:
    """Limits and opt-in checks applied to skill files."""

    max_skill_md_lines: int = 500
    max_description_chars: int = 1536
    flag_side_effect_verbs: bool = False
    reject_unknown_keys: bool = False


def is_valid_glob(pattern: str) -> bool:
    """Return True when `pattern` is a well-formed glob.

    Rejects runs of three or more `*`, a `**` that is not a whole path
    component, and a `[` without a closing `]`.
    """
    chars = list(pattern)
    i = 0
    while i < len(chars):
        char = chars[i]
        if char == "*":
            start = i
            while i < len(chars) and chars[i] == "*":
                i += 1
            count = i - start
            if count > 2:
                return False
            if count == 2:
                if start > 0 and chars[start - 1] != "/":
                    return False
                if i < len(chars) and chars[i] != "/":
                    return False
            continue
        if char == "[":
            if i + 4 <= len(chars) and chars[i + 1] == "!":
                if "]" in chars[i + 3 :]:
                    i += chars[i + 3 :].index("]") + 4
                    continue
            elif i + 3 <= len(chars) and chars[i + 1] != "!":
                if "]" in chars[i + 2 :]:
                    i += chars[i + 2 :].index("]") + 3
                    continue
            return False
        i += 1
    return True


def _kind_name(value: Any) -> str:
    for kind, name in _YAML_KIND_NAMES.items():
        if isinstance(value, kind):
            return name
    return type(value).__name__


def _load_frontmatter(text: str) -> dict[Any, Any]:
    """Parse the frontmatter mapping and check the types of the typed fields."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ValueError(str(exc)) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"invalid type: {_kind_name(data)}, expected a mapping")
    for key in _STRING_FIELDS:
        value = data.get(key)
        if value is not None and not isinstance(value, str):
            raise ValueError(f"{key}: invalid type: {_kind_name(value)}, expected a string")
    for key in _BOOL_FIELDS:
        value = data.get(key)
        if value is not None and not isinstance(value, bool):
            raise ValueError(f"{key}: invalid type: {_kind_name(value)}, expected a boolean")
    return data


class SkillValidator:
    """Checks a SKILL.md file against a SkillsPolicy."""

    def __init__(self, policy: SkillsPolicy) -> None:
        self.policy = policy

    def validate_file(self, path: str | os.PathLike[str]) -> list[Finding]:
        return self.validate_text(read_text(path), path)

    def validate_text(self, content: str, path: str | os.PathLike[str]) -> list[Finding]:
        path = Path(path)
        findings: list[Finding] = []
        dir_name = path.parent.name

        total = len(split_lines(content))
        if total > self.policy.max_skill_md_lines:
            findings.append(
                Finding(
                    slug="skill-too-long",
                    severity=Severity.MAJOR,
                    location=Location.file(path),
                    message=(
                        f"{total} lines exceeds max_skill_md_lines="
                        f"{self.policy.max_skill_md_lines} (compaction budget ≈ 5000 tokens)"
                    ),
                    hint="move reference material to separate files under the skill directory",
                )
            )

        try:
            fm = frontmatter.parse(content, path)
        except FrontmatterMalformed as exc:
            findings.append(
                Finding(
                    slug="skill-frontmatter-malformed",
                    severity=Severity.BLOCKER,
                    location=Location.line(path, 1),
                    message=str(exc),
                    hint=exc.hint(),
                )
            )
            return findings
        if fm is None:
            findings.append(
                Finding(
                    slug="skill-missing-frontmatter",
                    severity=Severity.BLOCKER,
                    location=Location.file(path),
                    message="SKILL.md has no YAML frontmatter",
                    hint="add `---\\nname: …\\ndescription: …\\n---` at the top",
                )
            )
            return findings

        try:
            data = _load_frontmatter(fm.yaml_text)
        except ValueError as exc:
            findings.append(
                Finding(
                    slug="skill-frontmatter-yaml-invalid",
                    severity=Severity.BLOCKER,
                    location=Location.line(path, fm.begin_line),
                    message=f"yaml parse: {exc}",
                    hint=(
                        "fix the YAML between the `---` fences; SKILL.md requires `name`, "
                        "`description`, `when_to_use` at minimum "
                        "(see code.claude.com/docs/en/skills)"
                    ),
                )
            )
            return findings

        at = Location.line(path, fm.begin_line)

        def finding(slug: str, message: str, hint: str, severity: Severity = Severity.MAJOR):
            return Finding(slug=slug, severity=severity, location=at, message=message, hint=hint)

        if self.policy.reject_unknown_keys:
            for key in data:
                if isinstance(key, str) and key not in KNOWN_SKILL_KEYS:
                    findings.append(
                        finding(
                            "skill-unknown-frontmatter-key",
                            f"unknown frontmatter key '{key}' is not in the Claude Code skill "
                            "spec; Claude Code silently ignores it",
                            f"remove it or fix the typo — known keys: {', '.join(KNOWN_SKILL_KEYS)}",
                        )
                    )

        declared_name: str | None = data.get("name")
        effective_name = declared_name if declared_name is not None else dir_name
        if not NAME_PATTERN.fullmatch(effective_name):
            findings.append(
                finding(
                    "skill-name-shape",
                    f"name '{effective_name}' must match [a-z0-9-]{{1,64}} per Claude Code spec",
                    "lowercase letters, digits, hyphens only",
                    Severity.BLOCKER,
                )
            )
        if declared_name is not None and declared_name != dir_name:
            findings.append(
                finding(
                    "skill-name-mismatch",
                    f"frontmatter name '{declared_name}' does not match directory '{dir_name}'",
                    "align frontmatter name with the skill directory name",
                )
            )

        description: str = data.get("description") or ""
        when_to_use: str = data.get("when_to_use") or ""
        total_desc = len(description.encode("utf-8")) + len(when_to_use.encode("utf-8"))
        if total_desc > self.policy.max_description_chars:
            findings.append(
                finding(
                    "skill-description-over-budget",
                    f"description + when_to_use = {total_desc} chars exceeds "
                    f"max_description_chars={self.policy.max_description_chars} "
                    "(Claude Code listing budget caps at 1536)",
                    "tighten description; details belong in skill body",
                )
            )

        if self.policy.flag_side_effect_verbs and data.get("disable-model-invocation") is not True:
            text = f"{description} {when_to_use}".lower()
            if SIDE_EFFECT_PATTERN.search(text):
                findings.append(
                    finding(
                        "skill-side-effect-no-disable",
                        "skill description suggests side effects but lacks "
                        "`disable-model-invocation: true`",
                        "per Claude Code docs: set disable-model-invocation: true for skills "
                        "with side effects",
                        Severity.MINOR,
                    )
                )

        user_invocable = data.get("user-invocable")
        if user_invocable is not None and not isinstance(user_invocable, bool):
            findings.append(
                finding(
                    "skill-user-invocable-invalid",
                    "user-invocable must be a boolean (true or false)",
                    "set `user-invocable: true` or `user-invocable: false`",
                )
            )

        context = data.get("context")
        if context is not None and context != "fork":
            findings.append(
                finding(
                    "skill-context-invalid",
                    f"context '{context}' is not valid; only 'fork' is allowed",
                    "set `context: fork` or remove the field",
                )
            )

        findings.extend(
            self._check_tools(
                data.get("allowed-tools"),
                "allowed-tools",
                "use `allowed-tools: Bash(gh *) Read` (string) or `[Bash, Read]` (list)",
                finding,
            )
        )
        findings.extend(
            self._check_tools(
                data.get("disallowed-tools"),
                "disallowed-tools",
                "use `disallowed-tools: Agent` (string) or `[Agent, WebSearch]` (list)",
                finding,
            )
        )

        paths = data.get("paths")
        if paths is not None:
            findings.extend(self._check_paths(paths, finding))

        hooks = data.get("hooks")
        if hooks is not None:
            if isinstance(hooks, dict):
                for event in hooks:
                    if isinstance(event, str) and event not in KNOWN_HOOK_EVENTS:
                        findings.append(
                            finding(
                                "skill-hooks-unknown-event",
                                f"hook event '{event}' is not in the Claude Code spec /en/hooks",
                                f"known events: {', '.join(KNOWN_HOOK_EVENTS)}",
                            )
                        )
            else:
                findings.append(
                    finding(
                        "skill-hooks-invalid",
                        "hooks must be a mapping of event names to hook definitions",
                        "use `hooks: { PreToolUse: ... }` syntax",
                    )
                )

        effort = data.get("effort")
        if effort is not None and effort not in KNOWN_EFFORT_LEVELS:
            findings.append(
                finding(
                    "skill-effort-invalid",
                    f"effort '{effort}' is not valid; must be one of: "
                    f"{', '.join(KNOWN_EFFORT_LEVELS)}",
                    "set effort to low, medium, high, xhigh, or max",
                )
            )

        return findings

    @staticmethod
    def _check_tools(value: Any, field_name: str, shape_hint: str, finding) -> list[Finding]:
        slug = f"skill-{field_name}-invalid"
        if value is None or isinstance(value, str):
            return []
        if isinstance(value, list):
            return [
                finding(
                    slug,
                    f"{field_name}[{index}] is not a string",
                    f"each entry in {field_name} must be a tool name string",
                )
                for index, item in enumerate(value)
                if not isinstance(item, str)
            ]
        return [finding(slug, f"{field_name} must be a string or an array of strings", shape_hint)]

    @staticmethod
    def _check_paths(value: Any, finding) -> list[Finding]:
        def invalid_glob(pattern: str, label: str) -> Finding:
            return finding(
                "skill-paths-invalid",
                f"paths {label} '{pattern}' is not a valid glob pattern",
                "fix the glob syntax",
            )

        findings: list[Finding] = []
        if isinstance(value, list):
            for index, item in enumerate(value):
                if isinstance(item, str):
                    if not is_valid_glob(item):
                        findings.append(invalid_glob(item, f"[{index}]"))
                else:
                    findings.append(
                        finding(
                            "skill-paths-invalid",
                            f"paths[{index}] is not a string",
                            "each entry in paths must be a glob string",
                        )
                    )
        elif isinstance(value, str):
            for segment in (part.strip() for part in value.split(",")):
                if segment and not is_valid_glob(segment):
                    findings.append(invalid_glob(segment, f"segment '{segment}'"))
        else:
            findings.append(
                finding(
                    "skill-paths-invalid",
                    "paths must be a string or an array of glob strings",
                    'use `paths: "src/**/*.rs"` or `paths: ["src/**/*.rs"]`',
                )
            )
        return findings