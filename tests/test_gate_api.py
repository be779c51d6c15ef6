import json

from gatehunt.models import ActiveGate
from tests.factories import create_gate, create_hunter


def test_locate_status_and_double_locate(auth_client, user):
    hunter = create_hunter(user)
    resp = auth_client.post("/api/gate/locate", json={"hunterId": hunter.id})
    assert resp.status_code == 201
    gate = resp.get_json()["gate"]
    assert gate["current_room_status"] == "pending"
    assert (gate["current_depth"], gate["current_room"]) == (1, 1)

    again = auth_client.post("/api/gate/locate", json={"hunterId": hunter.id})
    assert again.status_code == 409

    status = auth_client.get(f"/api/gate/status?hunterId={hunter.id}").get_json()
    assert status["activeGate"]["id"] == gate["id"]


def test_status_without_gate(auth_client, user):
    hunter = create_hunter(user)
    resp = auth_client.get(f"/api/gate/status?hunterId={hunter.id}")
    assert resp.status_code == 200
    assert resp.get_json() == {"activeGate": None}


def test_locate_rejects_bad_hunter_id(auth_client):
    assert auth_client.post("/api/gate/locate", json={"hunterId": "abc"}).status_code == 400
    assert auth_client.post("/api/gate/locate", json={"hunterId": 999}).status_code == 404


def test_full_run_over_http(auth_client, user):
    hunter = create_hunter(user)
    gate = create_gate(hunter, rooms_per_depth=[1, 1])
    gate_id = gate.id

    early = auth_client.put(f"/api/dungeons/{gate_id}/progress")
    assert early.status_code == 400
    assert early.get_json()["error"] == "room_not_cleared"

    assert auth_client.put(f"/api/dungeons/{gate_id}/clear-room").status_code == 200
    step = auth_client.put(f"/api/dungeons/{gate_id}/progress").get_json()
    assert step["status"] == "progressed"
    assert step["gate"]["current_depth"] == 2

    auth_client.put(f"/api/dungeons/{gate_id}/clear-room")
    done = auth_client.put(f"/api/dungeons/{gate_id}/progress").get_json()
    assert done["status"] == "cleared"

    assert auth_client.get(f"/api/dungeons/{gate_id}").status_code == 404
    assert auth_client.put(f"/api/dungeons/{gate_id}/clear-room").status_code == 404
    assert ActiveGate.query.count() == 0


def test_abandon_route(auth_client, user):
    hunter = create_hunter(user)
    create_gate(hunter)
    first = auth_client.post("/api/gate/abandon", json={"hunterId": hunter.id}).get_json()
    assert first["removed"] is True
    second = auth_client.post("/api/gate/abandon", json={"hunterId": hunter.id}).get_json()
    assert second["removed"] is False


def test_foreign_gate_is_forbidden(auth_client, other_user):
    theirs = create_hunter(other_user, name="Theirs")
    gate = create_gate(theirs)
    assert auth_client.get(f"/api/dungeons/{gate.id}").status_code == 403
    assert auth_client.put(f"/api/dungeons/{gate.id}/clear-room").status_code == 403
    assert auth_client.post("/api/gate/locate", json={"hunterId": theirs.id}).status_code == 403


def test_loot_roll_route(auth_client):
    resp = auth_client.post("/api/loot/roll", json={"enemyId": "unknown-beast"})
    assert resp.status_code == 200
    assert resp.get_json() == {"droppedItems": [], "droppedGold": 0}
    # keys keep insertion order rather than being sorted
    assert list(json.loads(resp.get_data(as_text=True))) == ["droppedItems", "droppedGold"]
    assert auth_client.post("/api/loot/roll", json={}).status_code == 400


def test_skill_catalog_route(client):
    all_skills = client.get("/api/skills").get_json()["skills"]
    d_only = client.get("/api/skills?rank=d").get_json()["skills"]
    assert any(s["id"] == "e-power-strike" for s in all_skills)
    assert d_only
    assert all(s["rank"] == "D" for s in d_only)
