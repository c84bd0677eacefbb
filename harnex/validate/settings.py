"""Validation of Claude Code `settings.json` files.

Checks that the JSON parses, hook event names are known, deny rules exist,
broad allow rules are covered by a deny, `defaultMode` and `skillOverrides`
hold valid values, and that no key silently ignored at project/local scope
is present there.
"""

from __future__ import annotations

import json
import os
from enum import Enum
from pathlib import Path
from typing import Any

from harnex.findings import Finding, Location, Severity
from harnex.validate.frontmatter import read_text

KNOWN_SKILL_OVERRIDE_VALUES: tuple[str, ...] = ("on", "name-only", "user-invocable-only", "off")

KNOWN_DEFAULT_MODE_VALUES: tuple[str, ...] = (
    "default",
    "acceptEdits",
    "plan",
    "auto",
    "dontAsk",
    "bypassPermissions",
)

KNOWN_PROJECT_SCOPE_NOOP_KEYS: tuple[str, ...] = (
    "autoMemoryDirectory",
    "autoMode",
    "useAutoModeDuringPlan",
    "skipDangerousModePermissionPrompt",
    "claudeMd",
)

KNOWN_HOOK_EVENTS: tuple[str, ...] = (
    "SessionStart",
    "SessionEnd",
    "Setup",
    "UserPromptSubmit",
    "UserPromptExpansion",
    "PreToolUse",
    "PostToolUse",
    "PostToolUseFailure",
    "PostToolBatch",
    "PermissionRequest",
    "PermissionDenied",
    "Stop",
    "StopFailure",
    "SubagentStart",
    "SubagentStop",
    "Notification",
    "MessageDisplay",
    "PreCompact",
    "PostCompact",
    "InstructionsLoaded",
    "ConfigChange",
    "CwdChanged",
    "FileChanged",
    "WorktreeCreate",
    "WorktreeRemove",
    "TaskCreated",
    "TaskCompleted",
    "TeammateIdle",
    "Elicitation",
    "ElicitationResult",
)

# Command bases that are too broad to allow without a matching deny.
DANGEROUS_ALLOW_BASES: tuple[str, ...] = ("rm", "rm -rf", "curl", "sudo")

_DEFAULT_MODE_HINT = (
    "set defaultMode to default, acceptEdits, plan, auto, dontAsk, or bypassPermissions"
)
_SKILL_OVERRIDE_HINT = "set to on, name-only, user-invocable-only, or off"


class SettingsScope(Enum):
    """Which settings file is being validated."""

    PROJECT = "project"
    LOCAL = "local"
    USER = "user"
    MANAGED = "managed"

    @classmethod
    def parse(cls, text: str) -> SettingsScope | None:
        """Return the scope named by `text`, or None when it names none."""
        for scope in cls:
            if scope.value == text:
                return scope
        return None

    def project_scope_noop_applies(self) -> bool:
        """True where user/managed-only settings are silently ignored."""
        return self in (SettingsScope.PROJECT, SettingsScope.LOCAL)


def bash_command_base(rule: str) -> str | None:
    """Reduce a `Bash(...)` rule to its command base; None for other rules.

    `Bash(cmd:*)`, `Bash(cmd *)` and `Bash(cmd)` all reduce to `cmd`.
    """
    if not (rule.startswith("Bash(") and rule.endswith(")")) or len(rule) < len("Bash()"):
        return None
    inner = rule[len("Bash(") : -1]
    return inner.rstrip("*").rstrip(":").strip()


def _string_items(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


class SettingsValidator:
    """Checks a settings.json document for structural and policy problems."""

    def validate_file(
        self, path: str | os.PathLike[str], scope: SettingsScope
    ) -> list[Finding]:
        return self.validate_text(read_text(path), path, scope)

    def validate_text(
        self, content: str, path: str | os.PathLike[str], scope: SettingsScope
    ) -> list[Finding]:
        path = Path(path)
        findings: list[Finding] = []
        try:
            parsed = json.loads(content)
        except json.JSONDecodeError as exc:
            findings.append(
                Finding(
                    slug="settings-json-invalid",
                    severity=Severity.BLOCKER,
                    location=Location.line(path, exc.lineno),
                    message=f"json parse: {exc}",
                    hint=(
                        "fix the JSON syntax; if the file is empty or corrupted, regenerate via "
                        "`harness policy permissions generate --profile baseline > "
                        ".claude/settings.json`"
                    ),
                )
            )
            return findings

        root: dict[str, Any] = parsed if isinstance(parsed, dict) else {}

        findings.extend(self._check_hooks(root, path))

        perms = root.get("permissions")
        perms = perms if isinstance(perms, dict) else None

        deny = perms.get("deny") if perms is not None else None
        if not isinstance(deny, list) or not deny:
            findings.append(
                Finding(
                    slug="settings-no-deny-rules",
                    severity=Severity.MINOR,
                    location=Location.file(path),
                    message="permissions.deny is missing or empty",
                    hint="seed it via `harness policy permissions generate`",
                    fix_command="harness policy permissions generate --profile baseline",
                )
            )

        if perms is not None:
            findings.extend(self._check_permissive(perms, path))
            if "defaultMode" in perms:
                findings.extend(self._check_default_mode(perms["defaultMode"], path, scope))

        if scope.project_scope_noop_applies():
            for key in KNOWN_PROJECT_SCOPE_NOOP_KEYS:
                if key in root:
                    findings.append(
                        Finding(
                            slug="settings-project-scope-noop-key",
                            severity=Severity.MAJOR,
                            location=Location.file(path),
                            message=(
                                f"'{key}' is silently ignored in project/local settings "
                                "(honored only in user/managed scope)"
                            ),
                            hint=f"remove '{key}' or move it to ~/.claude/settings.json",
                        )
                    )

        overrides = root.get("skillOverrides")
        if isinstance(overrides, dict):
            findings.extend(self._check_skill_overrides(overrides, path))

        return findings

    @staticmethod
    def _check_hooks(root: dict[str, Any], path: Path) -> list[Finding]:
        hooks = root.get("hooks")
        if not isinstance(hooks, dict):
            return []
        return [
            Finding(
                slug="settings-unknown-hook-event",
                severity=Severity.MAJOR,
                location=Location.file(path),
                message=f"hook event '{event}' is not in the Claude Code spec /en/hooks",
                hint=f"known events: {', '.join(KNOWN_HOOK_EVENTS)}",
            )
            for event in hooks
            if event not in KNOWN_HOOK_EVENTS
        ]

    @staticmethod
    def _check_permissive(perms: dict[str, Any], path: Path) -> list[Finding]:
        deny_bases = {bash_command_base(rule) for rule in _string_items(perms.get("deny"))}
        deny_bases.discard(None)
        findings = []
        for allow in _string_items(perms.get("allow")):
            base = bash_command_base(allow)
            if base is None or base not in DANGEROUS_ALLOW_BASES or base in deny_bases:
                continue
            findings.append(
                Finding(
                    slug="settings-overly-permissive",
                    severity=Severity.MINOR,
                    location=Location.file(path),
                    message=f"'{allow}' in permissions.allow without a corresponding deny",
                    hint="move this pattern to deny or scope it more tightly",
                )
            )
        return findings

    @staticmethod
    def _check_default_mode(mode: Any, path: Path, scope: SettingsScope) -> list[Finding]:
        if not isinstance(mode, str):
            return [
                Finding(
                    slug="settings-default-mode-invalid",
                    severity=Severity.MAJOR,
                    location=Location.file(path),
                    message="permissions.defaultMode must be a string",
                    hint=_DEFAULT_MODE_HINT,
                )
            ]
        if mode not in KNOWN_DEFAULT_MODE_VALUES:
            return [
                Finding(
                    slug="settings-default-mode-invalid",
                    severity=Severity.MAJOR,
                    location=Location.file(path),
                    message=(
                        f"permissions.defaultMode '{mode}' is not a valid mode; must be one of: "
                        f"{', '.join(KNOWN_DEFAULT_MODE_VALUES)}"
                    ),
                    hint=_DEFAULT_MODE_HINT,
                )
            ]
        if mode == "auto" and scope.project_scope_noop_applies():
            return [
                Finding(
                    slug="settings-project-scope-noop-value",
                    severity=Severity.MAJOR,
                    location=Location.file(path),
                    message=(
                        'permissions.defaultMode = "auto" is silently ignored in project/local '
                        "settings (honored only in user/managed scope)"
                    ),
                    hint="remove the key or move it to ~/.claude/settings.json",
                )
            ]
        return []

    @staticmethod
    def _check_skill_overrides(overrides: dict[str, Any], path: Path) -> list[Finding]:
        findings = []
        for skill_name, mode in overrides.items():
            if not isinstance(mode, str):
                message = f"skillOverrides['{skill_name}'] must be a string"
            elif mode not in KNOWN_SKILL_OVERRIDE_VALUES:
                message = (
                    f"skillOverrides['{skill_name}'] value '{mode}' is not valid; "
                    f"must be one of: {', '.join(KNOWN_SKILL_OVERRIDE_VALUES)}"
                )
            else:
                continue
            findings.append(
                Finding(
                    slug="settings-skill-override-invalid",
                    severity=Severity.MAJOR,
                    location=Location.file(path),
                    message=message,
                    hint=_SKILL_OVERRIDE_HINT,
                )
            )
        return findings