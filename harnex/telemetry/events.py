"""Telemetry event records and storage backend names."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

_FRACTION = re.compile(r"\.(\d+)")


class StorageKind(Enum):
    """Closed set of telemetry storage backends."""

    JSONL = "jsonl"

    @classmethod
    def parse(cls, text: str) -> StorageKind | None:
        """Return the backend named by `text`, or None when it names none."""
        for kind in cls:
            if kind.value == text:
                return kind
        return None


def format_timestamp(ts: datetime) -> str:
    """Render a timestamp as RFC 3339 in UTC with a `Z` suffix."""
    ts = ts.astimezone(timezone.utc)
    text = ts.strftime("%Y-%m-%dT%H:%M:%S")
    if ts.microsecond:
        text += f".{ts.microsecond:06d}".rstrip("0")
    return text + "Z"


def parse_timestamp(text: str) -> datetime:
    """Parse an RFC 3339 timestamp with an offset, returning it in UTC."""
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        raise ValueError(f"timestamp '{text}' has no UTC offset")
    return parsed.astimezone(timezone.utc)


@dataclass
class Event:
    """A single recorded telemetry event."""

    kind: str
    timestamp: datetime
    payload: Any

    def to_dict(self) -> dict[str, Any]:
        """The JSON form stored on disk."""
        return {
            "kind": self.kind,
            "timestamp": format_timestamp(self.timestamp),
            "payload": self.payload,
        }

    @classmethod
    def from_dict(cls, data: Any) -> Event:
        """Build an event from its JSON form, raising ValueError when malformed."""
        if not isinstance(data, dict):
            raise ValueError("event must be a JSON object")
        missing = [key for key in ("kind", "timestamp", "payload") if key not in data]
        if missing:
            raise ValueError(f"missing field '{missing[0]}'")
        kind, timestamp = data["kind"], data["timestamp"]
        if not isinstance(kind, str):
            raise ValueError("event kind must be a string")
        if not isinstance(timestamp, str):
            raise ValueError("event timestamp must be a string")
        return cls(kind=kind, timestamp=parse_timestamp(timestamp), payload=data["payload"])