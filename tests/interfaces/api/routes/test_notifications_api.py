"""Integration tests for the in-app notification endpoints."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from main import create_app
from notification_service.domain.entities import NotificationLog
from notification_service.infrastructure.database import get_db
from notification_service.infrastructure.repositories import NotificationLogRepository

START = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture()
def client(session_factory):
    """Return a test client whose requests use the in-memory database."""

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app = create_app()
    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture()
def add_notification(session_factory):
    """Insert an in-app notification and return its id."""

    counter = {"minutes": 0}

    def add(user_id: str = "u-1", **overrides) -> str:
        counter["minutes"] += 1
        values = dict(
            id=None,
            event_type="placement.created",
            recipient_user_id=user_id,
            recipient_email=f"{user_id}@example.com",
            subject=f"Notification {counter['minutes']}",
            template="placement_created",
            channel="in_app",
            status="sent",
            created_at=START + timedelta(minutes=counter["minutes"]),
        )
        values.update(overrides)
        db = session_factory()
        try:
            return NotificationLogRepository(db).create(NotificationLog(**values)).id
        finally:
            db.close()

    return add


def test_list_returns_unread_first(client, add_notification):
    read_id = add_notification(read=True)
    unread_id = add_notification()
    add_notification(channel="email", status="pending")

    response = client.get("/notifications/u-1")

    assert response.status_code == 200
    data = response.json()["data"]
    assert [item["id"] for item in data] == [unread_id, read_id]
    assert data[0]["channel"] == "in_app"
    assert data[0]["read"] is False


def test_list_supports_unread_only_and_paging(client, add_notification):
    add_notification(read=True)
    first = add_notification()
    second = add_notification()

    unread = client.get("/notifications/u-1", params={"unreadOnly": "true"}).json()["data"]
    page = client.get("/notifications/u-1", params={"limit": 1, "offset": 1}).json()["data"]

    assert [item["id"] for item in unread] == [second, first]
    assert [item["id"] for item in page] == [first]


def test_limit_is_capped(client, add_notification):
    for _ in range(3):
        add_notification()

    response = client.get("/notifications/u-1", params={"limit": 500})

    assert response.status_code == 200
    assert len(response.json()["data"]) == 3


def test_invalid_paging_is_a_validation_error(client):
    response = client.get("/notifications/u-1", params={"limit": 0})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_unread_count(client, add_notification):
    add_notification()
    add_notification()
    add_notification(read=True)
    add_notification(dismissed=True)
    add_notification("u-2")

    response = client.get("/notifications/u-1/unread-count")

    assert response.status_code == 200
    assert response.json() == {"data": {"count": 2}}


def test_mark_read_requires_ownership(client, add_notification):
    notification_id = add_notification()

    forbidden = client.patch(f"/notifications/{notification_id}/read", json={"userId": "u-2"})
    allowed = client.patch(f"/notifications/{notification_id}/read", json={"userId": "u-1"})

    assert forbidden.status_code == 404
    assert forbidden.json()["error"]["code"] == "NOT_FOUND"
    assert allowed.status_code == 200
    assert allowed.json()["data"]["read"] is True
    assert allowed.json()["data"]["read_at"] is not None


def test_mutations_require_a_user_id(client, add_notification):
    notification_id = add_notification()

    response = client.patch(f"/notifications/{notification_id}/read", json={})

    assert response.status_code == 400
    body = response.json()
    assert body["error"]["code"] == "VALIDATION_ERROR"
    assert "userId" in body["error"]["message"]


def test_dismiss_removes_from_feed(client, add_notification):
    notification_id = add_notification()

    response = client.patch(f"/notifications/{notification_id}/dismiss", json={"userId": "u-1"})

    assert response.status_code == 200
    assert response.json()["data"]["dismissed"] is True
    assert client.get("/notifications/u-1").json()["data"] == []
    missing = client.patch("/notifications/does-not-exist/dismiss", json={"userId": "u-1"})
    assert missing.status_code == 404


def test_mark_all_read(client, add_notification):
    for _ in range(5):
        add_notification()
    add_notification(dismissed=True)
    add_notification(dismissed=True)

    response = client.patch("/notifications/mark-all-read", json={"userId": "u-1"})

    assert response.status_code == 200
    assert response.json() == {"data": {"success": True, "updated": 5}}
    assert client.get("/notifications/u-1/unread-count").json()["data"]["count"] == 0
