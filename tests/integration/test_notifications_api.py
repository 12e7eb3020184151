"""Integration tests for notification broadcasts and the WebSocket feed."""

from typing import Generator

import pytest
from fastapi.testclient import TestClient
from libs.common.notifications import Notifier, get_notifier
from starlette.websockets import WebSocketDisconnect
from tests.fakes import auth_headers_for, make_token

ADMIN = auth_headers_for("admin-1", "admin")
CUSTOMER = auth_headers_for("customer-1")


# ---------------------------------------------------------------------------
# POST /notifications
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_user_broadcast(store_client, fake_notifier):
    resp = await store_client.post(
        "/notifications", json={"message": "Sale starts now"}, headers=CUSTOMER
    )

    assert resp.status_code == 200
    assert resp.json() == {"message": "Notification sent to users", "delivered": 1}
    assert fake_notifier.user_messages == ["Sale starts now"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_blank_message_is_rejected(store_client, fake_notifier):
    resp = await store_client.post(
        "/notifications", json={"message": "   "}, headers=CUSTOMER
    )

    assert resp.status_code == 400
    assert fake_notifier.user_messages == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_broadcast_requires_admin(store_client, fake_notifier):
    resp = await store_client.post(
        "/notifications/admin", json={"message": "Stock count"}, headers=CUSTOMER
    )
    assert resp.status_code == 403

    resp = await store_client.post(
        "/notifications/admin", json={"message": "Stock count"}, headers=ADMIN
    )
    assert resp.status_code == 200
    assert fake_notifier.admin_messages == ["Stock count"]


# ---------------------------------------------------------------------------
# WebSocket feed
# ---------------------------------------------------------------------------


@pytest.fixture
def live_client() -> Generator[TestClient, None, None]:
    """TestClient whose requests and sockets share one real Notifier."""
    from services.store_service.app.main import app

    live = Notifier()
    app.dependency_overrides[get_notifier] = lambda: live
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.mark.integration
def test_admin_socket_receives_admin_and_user_notifications(live_client):
    token = make_token("admin-1", "admin")
    with live_client.websocket_connect(f"/notifications/ws?token={token}") as ws:
        assert ws.receive_json() == {"event": "connected", "user_id": "admin-1"}

        resp = live_client.post(
            "/notifications/admin", json={"message": "New order"}, headers=ADMIN
        )
        assert resp.json()["delivered"] == 1
        event = ws.receive_json()
        assert event["event"] == "admin-notification"
        assert event["message"] == "New order"
        assert event["timestamp"]

        live_client.post("/notifications", json={"message": "Sale"}, headers=CUSTOMER)
        event = ws.receive_json()
        assert (event["event"], event["message"]) == ("notification", "Sale")


@pytest.mark.integration
def test_guest_socket_only_receives_user_notifications(live_client):
    with live_client.websocket_connect("/notifications/ws") as ws:
        assert ws.receive_json() == {"event": "connected", "user_id": None}

        resp = live_client.post(
            "/notifications/admin", json={"message": "Admins only"}, headers=ADMIN
        )
        assert resp.json()["delivered"] == 0

        live_client.post("/notifications", json={"message": "Hello"}, headers=CUSTOMER)
        assert ws.receive_json()["message"] == "Hello"


@pytest.mark.integration
def test_socket_with_invalid_token_is_refused(live_client):
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with live_client.websocket_connect("/notifications/ws?token=not-a-jwt"):
            pass

    assert exc_info.value.code == 1008


@pytest.mark.integration
def test_disconnected_socket_is_unsubscribed(live_client):
    with live_client.websocket_connect("/notifications/ws") as ws:
        ws.receive_json()

    resp = live_client.post("/notifications", json={"message": "Anyone?"}, headers=CUSTOMER)
    assert resp.json()["delivered"] == 0
