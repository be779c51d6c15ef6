import threading

from gatehunt import db
from gatehunt.errors import InvalidInput
from gatehunt.models import Hunter
from gatehunt.services import hunter_service
from tests.factories import create_hunter


def test_create_and_list_hunters(auth_client):
    resp = auth_client.post("/api/hunters", json={"name": "  Jinwoo ", "class": "assassin"})
    assert resp.status_code == 201
    hunter = resp.get_json()["hunter"]
    assert hunter["name"] == "Jinwoo"
    assert hunter["class"] == "Assassin"
    assert (hunter["rank"], hunter["level"], hunter["stat_points"]) == ("E", 1, 0)
    assert hunter["agility"] == 17

    listed = auth_client.get("/api/hunters").get_json()["hunters"]
    assert [h["name"] for h in listed] == ["Jinwoo"]


def test_hunter_cap_and_validation(auth_client):
    assert auth_client.post("/api/hunters", json={"name": "A", "class": "Mage"}).status_code == 201
    assert auth_client.post("/api/hunters", json={"name": "B", "class": "Healer"}).status_code == 201
    third = auth_client.post("/api/hunters", json={"name": "C", "class": "Ranger"})
    assert third.status_code == 400
    assert third.get_json()["error"] == "hunter_limit"


def test_create_rejects_bad_input(auth_client):
    assert auth_client.post("/api/hunters", json={"name": "   ", "class": "Mage"}).status_code == 400
    bad_class = auth_client.post("/api/hunters", json={"name": "X", "class": "Bard"})
    assert bad_class.get_json()["error"] == "invalid_class"


def test_duplicate_name_conflicts(auth_client):
    auth_client.post("/api/hunters", json={"name": "Same", "class": "Mage"})
    resp = auth_client.post("/api/hunters", json={"name": "Same", "class": "Tanker"})
    assert resp.status_code == 409


def test_get_hunter_includes_derived(auth_client, user):
    hunter = create_hunter(user)
    data = auth_client.get(f"/api/hunters/{hunter.id}").get_json()["hunter"]
    assert data["derived"]["maxHP"] == 100 + hunter.vitality * 10 + 5
    assert data["derived"]["expNeededForNextLevel"] == 125


def test_foreign_hunter_is_forbidden(auth_client, other_user):
    theirs = create_hunter(other_user, name="Theirs")
    resp = auth_client.get(f"/api/hunters/{theirs.id}")
    assert resp.status_code == 403
    assert resp.get_json()["error"] == "forbidden"
    assert auth_client.get("/api/hunters/424242").status_code == 404


def test_gain_exp_route(auth_client, user):
    hunter = create_hunter(user, experience=100)
    resp = auth_client.post(f"/api/hunters/{hunter.id}/gain-exp", json={"experienceGained": 25})
    assert resp.status_code == 200
    assert resp.get_json() == {
        "levelUp": True,
        "newLevel": 2,
        "levelsGained": 1,
        "statPointsGained": 5,
        "skillPointsGained": 5,
    }
    bad = auth_client.post(f"/api/hunters/{hunter.id}/gain-exp", json={"experienceGained": -1})
    assert bad.status_code == 400


def test_allocate_stat_route(auth_client, user):
    hunter = create_hunter(user, stat_points=1)
    resp = auth_client.post(f"/api/hunters/{hunter.id}/allocate-stat", json={"statName": "vitality"})
    assert resp.status_code == 200
    assert resp.get_json()["hunter"]["stat_points"] == 0
    again = auth_client.post(f"/api/hunters/{hunter.id}/allocate-stat", json={"statName": "vitality"})
    assert again.status_code == 400
    assert again.get_json()["error"] == "insufficient_points"
    bad = auth_client.post(f"/api/hunters/{hunter.id}/allocate-stat", json={"statName": "luck"})
    assert bad.get_json()["error"] == "invalid_stat"


def test_combat_stats_route(auth_client, user):
    hunter = create_hunter(user)
    data = auth_client.get(f"/api/hunters/{hunter.id}/combat-stats").get_json()
    assert data["maxHp"] == 100 + hunter.vitality * 10 + 5
    assert data["attackPower"] == 10 + (hunter.strength * 3) // 2


def test_recover_mp_and_update_current_stats(auth_client, user):
    hunter = create_hunter(user, hunter_class="Mage", current_mp=0)
    resp = auth_client.post(f"/api/hunters/{hunter.id}/recover-mp")
    body = resp.get_json()
    # Mage INT 17: maxMP 137, 18.4% -> 25
    assert body["recoveredAmount"] == 25
    assert body["newCurrentMp"] == 25

    resp = auth_client.patch(f"/api/hunters/{hunter.id}/update-current-stats", json={"currentHp": 99999})
    assert resp.status_code == 200
    db.session.refresh(hunter)
    assert hunter.current_hp == 100 + hunter.vitality * 10 + 5

    bad = auth_client.patch(f"/api/hunters/{hunter.id}/update-current-stats", json={"currentMp": -1})
    assert bad.status_code == 400
    empty = auth_client.patch(f"/api/hunters/{hunter.id}/update-current-stats", json={})
    assert empty.status_code == 400


def test_currency_routes(auth_client, user):
    hunter = create_hunter(user, gold=10)
    ok = auth_client.post(f"/api/hunters/{hunter.id}/adjust-gold", json={"amount": 15})
    assert ok.get_json()["gold"] == 25
    broke = auth_client.post(f"/api/hunters/{hunter.id}/adjust-gold", json={"amount": -100})
    assert broke.status_code == 400
    assert broke.get_json()["error"] == "insufficient_funds"
    gems = auth_client.post(f"/api/hunters/{hunter.id}/adjust-diamonds", json={"amount": 2})
    assert gems.get_json()["diamonds"] == 2
    history = auth_client.get(f"/api/hunters/{hunter.id}/currency-history").get_json()["transactions"]
    assert len(history) == 2


def test_skill_routes(auth_client, user):
    hunter = create_hunter(user, skill_points=2)
    resp = auth_client.post(f"/api/hunters/{hunter.id}/unlock-skill", json={"skillId": "e-power-strike"})
    assert resp.status_code == 200
    assert resp.get_json()["hunter"]["unlocked_skills"] == ["e-power-strike"]
    resp = auth_client.post(f"/api/hunters/{hunter.id}/equip-skill", json={"skillId": "e-power-strike"})
    assert resp.get_json()["equippedSkills"] == ["e-power-strike"]
    resp = auth_client.post(f"/api/hunters/{hunter.id}/unequip-skill", json={"skillId": "e-power-strike"})
    assert resp.get_json()["equippedSkills"] == []
    bad = auth_client.post(f"/api/hunters/{hunter.id}/unlock-skill", json={"skillId": "ghost"})
    assert bad.status_code == 400


def test_add_loot_and_inventory_routes(auth_client, user):
    hunter = create_hunter(user)
    resp = auth_client.post(
        f"/api/hunters/{hunter.id}/add-loot",
        json={"items": [{"itemId": "goblin-ear", "quantity": 3}], "gold": 12},
    )
    assert resp.status_code == 200
    assert resp.get_json()["gold"] == 12
    items = auth_client.get(f"/api/hunters/{hunter.id}/inventory").get_json()["items"]
    assert [(i["item_id"], i["quantity"]) for i in items] == [("goblin-ear", 3)]


def test_delete_hunter(auth_client, user):
    hunter = create_hunter(user)
    hunter_id = hunter.id
    assert auth_client.delete(f"/api/hunters/{hunter_id}").status_code == 200
    assert db.session.get(Hunter, hunter_id) is None


def test_rename_hunter(auth_client, user):
    hunter = create_hunter(user)
    resp = auth_client.patch(f"/api/hunters/{hunter.id}", json={"name": "Renamed"})
    assert resp.get_json()["hunter"]["name"] == "Renamed"
    locked = auth_client.patch(f"/api/hunters/{hunter.id}", json={"gold": 9999})
    assert locked.status_code == 400


def test_oversized_integers_are_rejected(auth_client, user):
    hunter = create_hunter(user, gold=10)
    resp = auth_client.post(f"/api/hunters/{hunter.id}/gain-exp", json={"experienceGained": 2**63})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "invalid_input"
    for path in ("adjust-gold", "adjust-diamonds"):
        resp = auth_client.post(f"/api/hunters/{hunter.id}/{path}", json={"amount": 2**63})
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "invalid_input"
    resp = auth_client.post(f"/api/hunters/{hunter.id}/add-loot", json={"gold": 2**63})
    assert resp.status_code == 400
    assert auth_client.get(f"/api/hunters/{2**63}").status_code == 404

    db.session.refresh(hunter)
    assert (hunter.experience, hunter.gold, hunter.diamonds) == (0, 10, 0)


def test_concurrent_creates_respect_the_cap(test_app, user):
    create_hunter(user, name="First")
    user_id = user.id
    outcomes = []
    barrier = threading.Barrier(2)

    def worker(name):
        with test_app.app_context():
            barrier.wait()
            try:
                hunter_service.create_hunter(user_id, name, "Mage")
                outcomes.append("created")
            except InvalidInput as e:
                outcomes.append(e.code)
            finally:
                db.session.remove()

    threads = [threading.Thread(target=worker, args=(name,)) for name in ("Second", "Third")]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert sorted(outcomes) == ["created", "hunter_limit"]
    assert Hunter.query.filter_by(user_id=user_id).count() == 2
