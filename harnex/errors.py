"""Exception types raised by the harness toolkit."""

from __future__ import annotations

import os
from pathlib import Path


class HarnexError(Exception):
    """Base class for every error the toolkit raises."""

    _hint: str | None = None

    def hint(self) -> str | None:
        """Return a short remediation hint, or None when there is none."""
        return self._hint


class IoFailure(HarnexError):
    """Reading or writing a file failed."""

    _hint = "check that the path exists and that its permissions allow the operation"

    def __init__(self, path: str | os.PathLike[str], source: BaseException) -> None:
        self.path = Path(path)
        self.source = source
        super().__init__(f"I/O failure on {self.path}: {source}")


class PathTraversal(HarnexError):
    """A computed path would escape the directory it must stay in."""

    _hint = "use a single path component without separators or `..`"

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)
        super().__init__(f"path escapes its root directory: {self.path}")


class ConfigInvalid(HarnexError):
    """Configuration failed validation."""

    _hint = "fix the configuration and load it again"

    def __init__(self, message: str, location: str | None = None) -> None:
        self.message = message
        self.location = location
        text = f"invalid config: {message}"
        if location is not None:
            text = f"{text} (at {location})"
        super().__init__(text)


class TelemetryPayloadInvalid(HarnexError):
    """A telemetry payload does not satisfy its kind's schema."""

    _hint = "make the payload match the kind's payload_schema"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"telemetry payload invalid: {message}")


class TelemetryKindUnknown(HarnexError):
    """A telemetry event names a kind that is not declared."""

    _hint = "declare the kind under [[telemetry.kinds]]"

    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"unknown telemetry kind '{kind}'")


class FrontmatterMalformed(HarnexError):
    """A markdown file's frontmatter block is structurally broken."""

    _hint = "close the frontmatter block with a line holding only `---`"

    def __init__(self, path: str | os.PathLike[str], message: str) -> None:
        self.path = Path(path)
        self.message = message
        super().__init__(f"{self.path}: malformed frontmatter: {message}")