"""Tests for the health endpoint."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from main import create_app
from notification_service.infrastructure.messaging import ConnectionState


def _client(consumer) -> TestClient:
    app = create_app()
    app.state.consumer = consumer
    return TestClient(app)


def test_health_without_consumer():
    response = _client(None).get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "broker": {"connected": False, "state": "disabled"}}


def test_health_with_connected_consumer():
    consumer = SimpleNamespace(is_connected=lambda: True, state=ConnectionState.CONNECTED)

    response = _client(consumer).get("/health")

    assert response.status_code == 200
    assert response.json()["broker"] == {"connected": True, "state": "connected"}


def test_health_degrades_while_reconnecting():
    consumer = SimpleNamespace(is_connected=lambda: False, state=ConnectionState.RECONNECTING)

    response = _client(consumer).get("/health")

    assert response.status_code == 503
    assert response.json() == {
        "status": "degraded",
        "broker": {"connected": False, "state": "reconnecting"},
    }
