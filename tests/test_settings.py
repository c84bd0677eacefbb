import json
from pathlib import Path

import pytest

from harnex.errors import IoFailure
from harnex.findings import Location, Severity
from harnex.validate.settings import (
    SettingsScope,
    SettingsValidator,
    bash_command_base,
)

PATH = Path(".claude/settings.json")
DENY_OK = {"permissions": {"deny": ["Bash(sudo *)"]}}


def run(doc, scope=SettingsScope.PROJECT):
    text = doc if isinstance(doc, str) else json.dumps(doc)
    return SettingsValidator().validate_text(text, PATH, scope)


def slugs(findings):
    return [f.slug for f in findings]


@pytest.mark.parametrize("scope", list(SettingsScope))
def test_scope_parse_round_trips_every_variant(scope):
    assert SettingsScope.parse(scope.value) is scope


def test_scope_parse_rejects_unknown():
    assert SettingsScope.parse("unknown-scope") is None


def test_project_scope_noop_applies_on_project_and_local():
    assert SettingsScope.PROJECT.project_scope_noop_applies() is True
    assert SettingsScope.LOCAL.project_scope_noop_applies() is True
    assert SettingsScope.USER.project_scope_noop_applies() is False
    assert SettingsScope.MANAGED.project_scope_noop_applies() is False


@pytest.mark.parametrize(
    "rule, expected",
    [
        ("Bash(rm:*)", "rm"),
        ("Bash(rm *)", "rm"),
        ("Bash(rm)", "rm"),
        ("Bash(rm -rf *)", "rm -rf"),
        ("Bash(curl https://api *)", "curl https://api"),
        ("Read(./secrets)", None),
        ("Bash(rm", None),
    ],
)
def test_bash_command_base(rule, expected):
    assert bash_command_base(rule) == expected


def test_invalid_json_is_single_blocker():
    findings = run("{")
    assert slugs(findings) == ["settings-json-invalid"]
    assert findings[0].severity is Severity.BLOCKER
    assert findings[0].location == Location.line(PATH, 1)
    assert findings[0].message.startswith("json parse:")


def test_invalid_json_reports_line():
    findings = run('{\n"a": }')
    assert findings[0].location.line == 2


def test_empty_object_flags_missing_deny():
    findings = run({})
    assert slugs(findings) == ["settings-no-deny-rules"]
    assert findings[0].severity is Severity.MINOR
    assert findings[0].fix_command == "harness policy permissions generate --profile baseline"


def test_empty_deny_array_flagged():
    assert slugs(run({"permissions": {"deny": []}})) == ["settings-no-deny-rules"]


def test_clean_settings_have_no_findings():
    assert run(DENY_OK) == []


def test_unknown_hook_event_flagged():
    doc = {"hooks": {"PreToolUse": [], "PreToolUs": []}, **DENY_OK}
    findings = run(doc)
    assert slugs(findings) == ["settings-unknown-hook-event"]
    assert "PreToolUs" in findings[0].message


def test_dangerous_allow_without_deny_flagged():
    doc = {"permissions": {"allow": ["Bash(rm:*)"], "deny": ["Bash(sudo *)"]}}
    findings = run(doc)
    assert slugs(findings) == ["settings-overly-permissive"]
    assert "'Bash(rm:*)'" in findings[0].message


def test_dangerous_allow_covered_by_deny_of_other_spelling():
    doc = {"permissions": {"allow": ["Bash(rm *)"], "deny": ["Bash(rm:*)"]}}
    assert run(doc) == []


def test_scoped_allow_not_flagged():
    doc = {"permissions": {"allow": ["Bash(curl https://api *)"], "deny": ["Bash(sudo *)"]}}
    assert run(doc) == []


def test_default_mode_auto_noop_at_project_scope():
    doc = {"permissions": {"deny": ["Bash(sudo *)"], "defaultMode": "auto"}}
    assert slugs(run(doc, SettingsScope.PROJECT)) == ["settings-project-scope-noop-value"]
    assert run(doc, SettingsScope.USER) == []


def test_default_mode_invalid_value():
    doc = {"permissions": {"deny": ["Bash(sudo *)"], "defaultMode": "yolo"}}
    findings = run(doc)
    assert slugs(findings) == ["settings-default-mode-invalid"]
    assert "'yolo'" in findings[0].message


def test_default_mode_non_string():
    doc = {"permissions": {"deny": ["Bash(sudo *)"], "defaultMode": 3}}
    findings = run(doc)
    assert [f.message for f in findings] == ["permissions.defaultMode must be a string"]


def test_noop_keys_flagged_only_at_project_and_local():
    doc = {"autoMode": True, "claudeMd": "x", **DENY_OK}
    local = run(doc, SettingsScope.LOCAL)
    assert slugs(local) == ["settings-project-scope-noop-key"] * 2
    assert "'autoMode'" in local[0].message
    assert "'claudeMd'" in local[1].message
    assert run(doc, SettingsScope.MANAGED) == []


def test_skill_overrides_validated():
    doc = {"skillOverrides": {"a": "on", "b": "sometimes", "c": 1}, **DENY_OK}
    findings = run(doc)
    assert slugs(findings) == ["settings-skill-override-invalid"] * 2
    assert "'b'" in findings[0].message and "'sometimes'" in findings[0].message
    assert findings[1].message == "skillOverrides['c'] must be a string"


def test_validate_file_reads_from_disk(tmp_path):
    target = tmp_path / "settings.json"
    target.write_text("{}", encoding="utf-8")
    findings = SettingsValidator().validate_file(target, SettingsScope.PROJECT)
    assert slugs(findings) == ["settings-no-deny-rules"]
    assert findings[0].location.path == target


def test_validate_file_missing_raises(tmp_path):
    with pytest.raises(IoFailure):
        SettingsValidator().validate_file(tmp_path / "absent.json", SettingsScope.USER)