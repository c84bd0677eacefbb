from datetime import datetime, timedelta, timezone

import pytest

from harnex.telemetry.events import Event, StorageKind


def test_storage_kind_parse_round_trips_every_variant():
    for kind in StorageKind:
        assert StorageKind.parse(kind.value) is kind


def test_storage_kind_parse_jsonl_and_unknown():
    assert StorageKind.parse("jsonl") is StorageKind.JSONL
    assert StorageKind.parse("sqlite") is None


def test_event_round_trip():
    ts = datetime(2024, 5, 6, 7, 8, 9, 123456, tzinfo=timezone.utc)
    event = Event(kind="skill-invoked", timestamp=ts, payload={"skill": "x", "outcome": "ok"})
    assert Event.from_dict(event.to_dict()) == event


def test_to_dict_uses_utc_z_suffix():
    ts = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    data = Event(kind="k", timestamp=ts, payload={}).to_dict()
    assert data["timestamp"] == "2024-01-02T03:04:05Z"
    assert data["kind"] == "k"


def test_to_dict_converts_offset_to_utc():
    offset = timezone(timedelta(hours=9))
    ts = datetime(2024, 1, 2, 12, 0, 0, tzinfo=offset)
    data = Event(kind="k", timestamp=ts, payload=None).to_dict()
    assert data["timestamp"].endswith("Z")
    assert Event.from_dict(data).timestamp == ts


def test_from_dict_accepts_nanosecond_fraction():
    event = Event.from_dict(
        {"kind": "k", "timestamp": "2024-01-02T03:04:05.123456789Z", "payload": {}}
    )
    assert event.timestamp.microsecond == 123456
    assert event.timestamp.tzinfo is not None and event.timestamp.utcoffset() == timedelta(0)


@pytest.mark.parametrize(
    "data",
    [
        {"kind": "k", "timestamp": "2024-01-02T03:04:05"},
        {"kind": "k", "timestamp": "2024-01-02T03:04:05", "payload": {}},
        {"kind": 3, "timestamp": "2024-01-02T03:04:05Z", "payload": {}},
        {"kind": "k", "timestamp": "yesterday", "payload": {}},
        ["k"],
    ],
)
def test_from_dict_rejects_malformed(data):
    with pytest.raises(ValueError):
        Event.from_dict(data)