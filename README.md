# harnex

This package runs deterministic structural checks on Claude Code project
surfaces. It also keeps an append-only telemetry ledger whose event payloads
must match a closed schema.

## Install

```
pip install harnex
```

## Findings

Every validator returns a list of `harnex.findings.Finding` objects. Each
finding has these fields:

- `slug`, for example `rule-missing-paths-frontmatter`.
- `severity`, a `Severity` of `BLOCKER`, `MAJOR`, `MINOR` or `INFO`.
  `Severity.rank()` gives a sort key where 0 is the most severe.
- `location`, a `Location` that holds a `path` and an optional 1-indexed
  `line`. Build one with `Location.file(path)` or `Location.line(path, n)`.
- `message` and an optional `hint`.
- `auto_fixable` and `fix_command`.

Validators never modify the files they read. Each one has
`validate_text(content, path)` for text you already hold and
`validate_file(path)`, which reads the file as UTF-8. The settings validator
also takes a `scope` argument in both methods.

## Validators

- `harnex.validate.rules.RuleValidator(RulesPolicy(max_lines=200,
  always_loaded_slugs=[...]))` checks `.claude/rules/*.md` files. It reports
  files longer than `max_lines` and frontmatter that is unterminated or is not
  valid YAML. It also reports a missing `paths:` key, unless the file stem is
  listed in `always_loaded_slugs`.
- `harnex.validate.skills.SkillValidator(SkillsPolicy(...))` checks
  `.claude/skills/*/SKILL.md` files. It checks:
  - that frontmatter is present and is valid YAML;
  - the name shape (`[a-z0-9-]{1,64}`), and that the name matches the
    directory;
  - the combined length of `description` and `when_to_use` against
    `max_description_chars`, and the line count against `max_skill_md_lines`;
  - the values of `user-invocable`, `context`, `allowed-tools`,
    `disallowed-tools`, `paths`, `hooks` and `effort`.

  Two checks are off unless you turn them on. With `flag_side_effect_verbs`,
  the validator flags side-effect verbs when `disable-model-invocation: true`
  is not set. With `reject_unknown_keys`, it flags frontmatter keys that are
  not in `KNOWN_SKILL_KEYS`. `is_valid_glob(pattern)` is the glob check that
  the `paths` validation uses.
- `harnex.validate.settings.SettingsValidator()` checks `.claude/settings.json`
  for a given `SettingsScope` (`PROJECT`, `LOCAL`, `USER` or `MANAGED`;
  `SettingsScope.parse("project")` returns one from its name). It reports:
  - invalid JSON;
  - hook events that are not in `KNOWN_HOOK_EVENTS`;
  - a `permissions.deny` that is missing or empty;
  - broad `Bash(rm …)`, `Bash(curl …)` and `Bash(sudo …)` allow rules that
    have no matching deny;
  - invalid `defaultMode` values;
  - `skillOverrides` values that are not valid;
  - at project and local scope only, keys that have no effect there and
    `defaultMode: "auto"`.

  `bash_command_base(rule)` reduces a `Bash(...)` rule to its command. For
  example, `Bash(rm:*)`, `Bash(rm *)` and `Bash(rm)` all give `rm`.
- `harnex.validate.commit_msg.CommitMsgValidator(CommitMsgPolicy(trailers=[...]))`
  checks commit-message trailers. It only reads trailers in the last
  paragraph of the message. It reports empty values, values outside a
  trailer's `allowed_values`, and missing trailers that are marked
  `required`. `collect_trailers(content)` returns the
  `(key, value, line_number)` tuples it reads.
- `harnex.validate.frontmatter.parse(content, source)` returns a
  `Frontmatter` (`begin_line`, `end_line`, `yaml_text`, `body_start_line`).
  It returns `None` when the text does not start with a `---` line, and it
  raises `FrontmatterMalformed` when the block is never closed.

```python
from pathlib import Path
from harnex.validate.commit_msg import CommitMsgPolicy, CommitMsgValidator, TrailerDecl

policy = CommitMsgPolicy(trailers=[
    TrailerDecl(key="Nodex-Event", allowed_values=["rule-promoted"], required=True),
])
for finding in CommitMsgValidator(policy).validate_text(
    "feat: x\n\nNodex-Event: made-up\n", Path("COMMIT_EDITMSG")
):
    print(finding.severity, finding.slug, finding.message)
```

## Telemetry

You declare each event kind with a JSON-Schema-style payload schema. The
schema must have `type: object` and may use `required` and `properties`. Each
property may give a `type` and an `enum`. The supported types are `string`,
`integer`, `number` and `boolean`.

The schema is closed. The following cases raise `TelemetryPayloadInvalid`:

- a field that is not declared in the schema;
- a missing required field;
- a value of the wrong type;
- a value that is not in the `enum`.

A malformed schema raises `ConfigInvalid` when the appender is built, and an
undeclared kind raises `TelemetryKindUnknown`.

```python
from pathlib import Path
from harnex.telemetry.jsonl import JsonlStorage
from harnex.telemetry.query import (
    TelemetryAppender, TelemetryConfig, TelemetryKindDecl, TelemetryQuery,
)

cfg = TelemetryConfig(
    storage_dir=Path(".harness/telemetry"),
    kinds=[TelemetryKindDecl(name="skill-invoked", payload_schema={
        "type": "object",
        "required": ["skill"],
        "properties": {"skill": {"type": "string"}},
    })],
)
appender = TelemetryAppender(cfg, JsonlStorage(cfg.storage_dir, cfg.rotate_at_mb))
event = appender.append("skill-invoked", {"skill": "deploy"})

query = TelemetryQuery(JsonlStorage(cfg.storage_dir, cfg.rotate_at_mb))
print(query.count("skill-invoked", None))
summary = query.report([1, 7, 30, 90], None)
for kind in summary.kinds:
    print(kind.kind, kind.total, kind.last_n_days)
```

### Storage

`JsonlStorage` writes each kind to its own `<kind>.jsonl` file.

- Each line is one event, with `kind`, an RFC 3339 UTC `timestamp` and the
  `payload`.
- Appends hold a lock on a sibling `.lock` file.
- Once a file reaches the size threshold, the next append first renames the
  file with a timestamp suffix.
- Rotated files are never overwritten or deleted.

A kind name that is not a single path component raises `PathTraversal`, and
so does a ledger file that is a symlink. `JsonlStorage.scan()` yields events
from every `.jsonl` file in name order. It skips lines that are not valid
events, and it raises `IoFailure` on read errors.

`TelemetryQuery.count(kind, since)` counts one kind, optionally only events
at or after `since`. `TelemetryQuery.report(windows, kind_filter)` returns a
`TelemetrySummary`. It holds one `KindSummary` per kind, sorted by name, with
`total`, `first_seen`, `last_seen` and per-window counts over trailing days.

## What this package does not do

There is no command-line tool. There is also no loader for a project
configuration file. You build policies and `TelemetryConfig` objects in code
and pass them to the validators and to the telemetry classes. Nothing here
walks a project tree to find files to validate, and nothing fixes the
problems that the findings describe.