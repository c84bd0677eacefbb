"""Telemetry write and read sides: schema-checked appends and aggregate reports."""

from __future__ import annotations

import os
from collections import Counter
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from harnex.errors import TelemetryKindUnknown
from harnex.telemetry.events import Event
from harnex.telemetry.jsonl import JsonlStorage
from harnex.telemetry.schema import KindSchema

# Trailing-day windows used by `report` when none are given.
DEFAULT_REPORT_WINDOWS: tuple[int, ...] = (1, 7, 30, 90)


@dataclass
class TelemetryKindDecl:
    """A declared telemetry kind and its payload schema in JSON form."""

    name: str
    payload_schema: Any


@dataclass
class TelemetryConfig:
    """Telemetry settings: storage location, rotation size and declared kinds."""

    storage_dir: Path
    storage: str = "jsonl"
    rotate_at_mb: int = 10
    kinds: list[TelemetryKindDecl] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.storage_dir = Path(os.fspath(self.storage_dir))


class TelemetryAppender:
    """Validates payloads against their kind's schema, then stores them."""

    def __init__(self, config: TelemetryConfig, storage: JsonlStorage) -> None:
        self._schemas = {
            decl.name: KindSchema.from_value(decl.payload_schema) for decl in config.kinds
        }
        self._storage = storage

    def append(self, kind: str, payload: Any) -> Event:
        """Record an event of `kind` stamped now, returning it."""
        schema = self._schemas.get(kind)
        if schema is None:
            raise TelemetryKindUnknown(kind)
        schema.validate(payload)
        event = Event(kind=kind, timestamp=datetime.now(timezone.utc), payload=payload)
        self._storage.append(event)
        return event


@dataclass
class KindSummary:
    """Activity of one kind: totals, first/last sightings and window counts."""

    kind: str
    total: int
    first_seen: datetime | None
    last_seen: datetime | None
    last_n_days: dict[int, int]


@dataclass
class TelemetrySummary:
    """Per-kind summaries sorted by kind, and the windows they were counted over."""

    kinds: list[KindSummary]
    windows: list[int]


@dataclass
class _Accumulator:
    total: int = 0
    first: datetime | None = None
    last: datetime | None = None
    windows: Counter[int] = field(default_factory=Counter)


class TelemetryQuery:
    """Aggregate queries over the telemetry ledger."""

    def __init__(self, storage: JsonlStorage) -> None:
        self._storage = storage

    def scan_events(self) -> Iterator[Event]:
        """Yield every stored event in ledger order."""
        return self._storage.scan()

    def count(self, kind: str, since: datetime | None = None) -> int:
        """Count events of `kind`, only those at or after `since` when given."""
        return sum(
            1
            for event in self._storage.scan()
            if event.kind == kind and (since is None or event.timestamp >= since)
        )

    def report(
        self,
        windows: Iterable[int] = DEFAULT_REPORT_WINDOWS,
        kind_filter: str | None = None,
    ) -> TelemetrySummary:
        """Summarise activity per kind over trailing-day windows."""
        windows = list(windows)
        now = datetime.now(timezone.utc)
        cutoffs = [(w, now - timedelta(days=w)) for w in windows]
        accumulators: dict[str, _Accumulator] = {}

        for event in self._storage.scan():
            if kind_filter is not None and event.kind != kind_filter:
                continue
            acc = accumulators.setdefault(event.kind, _Accumulator())
            acc.total += 1
            ts = event.timestamp
            if acc.first is None or ts < acc.first:
                acc.first = ts
            if acc.last is None or ts > acc.last:
                acc.last = ts
            for window, cutoff in cutoffs:
                if ts >= cutoff:
                    acc.windows[window] += 1

        kinds = [
            KindSummary(
                kind=name,
                total=acc.total,
                first_seen=acc.first,
                last_seen=acc.last,
                last_n_days={w: acc.windows[w] for w in sorted(set(windows))},
            )
            for name, acc in sorted(accumulators.items())
        ]
        return TelemetrySummary(kinds=kinds, windows=windows)