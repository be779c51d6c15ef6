import pytest

from gatehunt import app, socketio
from gatehunt.events import NAMESPACE
from tests.factories import create_hunter


@pytest.fixture()
def ws(auth_client):
    # Socket.IO test client sharing the logged-in Flask session cookie
    test_client = socketio.test_client(app, namespace=NAMESPACE, flask_test_client=auth_client)
    yield test_client
    test_client.disconnect(namespace=NAMESPACE)


def _extract(event_name, received):
    return [p["args"][0] for p in received if p["name"] == event_name]


def test_watch_own_hunter_gets_snapshot(ws, user):
    hunter = create_hunter(user)
    ws.emit("watch_hunter", {"hunterId": hunter.id}, namespace=NAMESPACE)
    updates = _extract("hunter_update", ws.get_received(NAMESPACE))
    assert updates and updates[-1]["id"] == hunter.id


def test_watch_foreign_hunter_is_refused(ws, other_user):
    theirs = create_hunter(other_user, name="Theirs")
    ws.emit("watch_hunter", {"hunterId": theirs.id}, namespace=NAMESPACE)
    errors = _extract("error", ws.get_received(NAMESPACE))
    assert any(e["code"] == "forbidden" for e in errors)


def test_watch_rejects_bad_payload(ws):
    ws.emit("watch_hunter", {"hunterId": "1"}, namespace=NAMESPACE)
    errors = _extract("error", ws.get_received(NAMESPACE))
    assert any(e["code"] == "invalid_input" for e in errors)


def test_watchers_receive_progression_push(ws, auth_client, user):
    hunter = create_hunter(user, experience=120)
    ws.emit("watch_hunter", {"hunterId": hunter.id}, namespace=NAMESPACE)
    ws.get_received(NAMESPACE)
    auth_client.post(f"/api/hunters/{hunter.id}/gain-exp", json={"experienceGained": 10})
    updates = _extract("hunter_update", ws.get_received(NAMESPACE))
    assert any(u["level"] == 2 for u in updates)
