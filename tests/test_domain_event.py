"""Tests for the event envelope parsed from broker messages."""

from __future__ import annotations

import json

import pytest

from notification_service.domain.entities import (
    DomainEvent,
    EventKind,
    MalformedEventError,
    routing_keys,
)


def test_from_json_reads_the_envelope():
    """Type, payload, timestamp and id are taken from the JSON body."""

    body = json.dumps(
        {
            "event_id": "evt-1",
            "event_type": "application.stage_changed",
            "timestamp": "2024-05-01T09:00:00Z",
            "payload": {"applicationId": "app-1", "new_stage": "interview"},
        }
    ).encode()

    event = DomainEvent.from_json(body)

    assert event.kind is EventKind.APPLICATION_STAGE_CHANGED
    assert event.event_id == "evt-1"
    assert event.timestamp == "2024-05-01T09:00:00Z"
    assert event.get("application_id", "applicationId") == "app-1"
    assert event.get("missing", default="fallback") == "fallback"


@pytest.mark.parametrize(
    "body",
    [
        b"not json",
        b"[]",
        json.dumps({"payload": {}}).encode(),
        json.dumps({"event_type": "chat.message.created", "payload": ["a"]}).encode(),
    ],
)
def test_from_json_rejects_malformed_bodies(body):
    with pytest.raises(MalformedEventError):
        DomainEvent.from_json(body)


def test_event_key_prefers_the_event_id():
    event = DomainEvent("placement.created", {"placement_id": "pl-1"}, event_id="evt-9")

    assert event.event_key == "evt-9"


def test_event_key_is_stable_for_identical_content():
    """Without an id the key is derived from the content, ignoring key order."""

    first = DomainEvent("placement.created", {"a": 1, "b": 2}, timestamp="t1")
    second = DomainEvent("placement.created", {"b": 2, "a": 1}, timestamp="t1")
    other = DomainEvent("placement.created", {"a": 1, "b": 2}, timestamp="t2")

    assert first.event_key == second.event_key
    assert first.event_key != other.event_key


def test_unrecognised_types_map_to_unknown():
    assert DomainEvent("something.new").kind is EventKind.UNKNOWN
    assert EventKind.from_event_type(None) is EventKind.UNKNOWN


def test_routing_keys_cover_every_known_kind():
    keys = routing_keys()

    assert "unknown" not in keys
    assert len(keys) == len(set(keys)) == len(EventKind) - 1
    assert "chat.message.created" in keys
