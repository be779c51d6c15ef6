import random
from datetime import timedelta

import pytest

from gatehunt import db
from gatehunt.catalog.gates import GATE_TTL, GATE_TYPES
from gatehunt.catalog.enums import Rank
from gatehunt.errors import Conflict, Expired, Forbidden, NotFound, RoomNotCleared
from gatehunt.models import ActiveGate
from gatehunt.services import gate_service
from tests.factories import StubRng, create_gate, create_hunter


def test_generate_params_ranges():
    rng = random.Random(7)
    for _ in range(200):
        p = gate_service.generate_gate_params("D", rng)
        assert p["gate_type"] in GATE_TYPES[Rank.D]
        assert p["gate_rank"] == "D"
        assert 3 <= p["total_depth"] <= 6
        assert len(p["rooms_per_depth"]) == p["total_depth"]
        assert all(3 <= r <= 6 for r in p["rooms_per_depth"])


def test_generate_params_unknown_rank_falls_back_to_e():
    p = gate_service.generate_gate_params("Z", StubRng())
    assert p["gate_rank"] == "E"
    assert p["gate_type"] == GATE_TYPES[Rank.E][0]
    assert p["total_depth"] == 3
    assert p["rooms_per_depth"] == [3, 3, 3]


def test_locate_creates_pending_gate(user):
    hunter = create_hunter(user)
    gate = gate_service.locate_gate(user.id, hunter.id, rng=StubRng(ints=[4, 3, 5, 6, 3]))
    assert gate.current_depth == 1
    assert gate.current_room == 1
    assert gate.current_room_status == "pending"
    assert gate.total_depth == 4
    assert gate.rooms_per_depth == [3, 5, 6, 3]
    assert gate.expires_at - gate.created_at == GATE_TTL


def test_double_locate_conflicts(user):
    hunter = create_hunter(user)
    gate_service.locate_gate(user.id, hunter.id)
    with pytest.raises(Conflict):
        gate_service.locate_gate(user.id, hunter.id)
    assert ActiveGate.query.filter_by(hunter_id=hunter.id).count() == 1


def test_locate_replaces_expired_gate(user):
    hunter = create_hunter(user)
    create_gate(hunter, expired=True, current_room=2, current_room_status="cleared")
    gate = gate_service.locate_gate(user.id, hunter.id)
    assert not gate.is_expired(gate_service._now())
    assert (gate.current_room, gate.current_room_status) == (1, "pending")
    assert ActiveGate.query.filter_by(hunter_id=hunter.id).count() == 1


def test_locate_requires_ownership(user, other_user):
    hunter = create_hunter(user)
    with pytest.raises(Forbidden):
        gate_service.locate_gate(other_user.id, hunter.id)


def test_progress_while_pending_leaves_gate_unchanged(user):
    hunter = create_hunter(user)
    gate = create_gate(hunter)
    with pytest.raises(RoomNotCleared):
        gate_service.progress_gate(gate.id, user.id)
    db.session.refresh(gate)
    assert (gate.current_depth, gate.current_room, gate.current_room_status) == (1, 1, "pending")


def test_clear_then_progress_walks_rooms_and_depths(user):
    hunter = create_hunter(user)
    gate = create_gate(hunter, rooms_per_depth=[2, 1])

    gate_service.clear_room(gate.id, user.id)
    # idempotent
    gate_service.clear_room(gate.id, user.id)
    result = gate_service.progress_gate(gate.id, user.id)
    assert result["status"] == "progressed"
    assert (result["gate"]["current_depth"], result["gate"]["current_room"]) == (1, 2)
    assert result["gate"]["current_room_status"] == "pending"

    gate_service.clear_room(gate.id, user.id)
    result = gate_service.progress_gate(gate.id, user.id)
    assert (result["gate"]["current_depth"], result["gate"]["current_room"]) == (2, 1)

    gate_service.clear_room(gate.id, user.id)
    result = gate_service.progress_gate(gate.id, user.id)
    assert result["status"] == "cleared"
    assert gate_service.get_active_gate(hunter.id) is None
    assert ActiveGate.query.count() == 0


def test_replayed_progress_cannot_skip_rooms(user):
    hunter = create_hunter(user)
    gate = create_gate(hunter, rooms_per_depth=[3, 3, 3])
    gate_service.clear_room(gate.id, user.id)
    gate_service.progress_gate(gate.id, user.id)
    with pytest.raises(RoomNotCleared):
        gate_service.progress_gate(gate.id, user.id)
    db.session.refresh(gate)
    assert gate.current_room == 2


def test_expired_gate_reads_as_absent(user, monkeypatch):
    hunter = create_hunter(user)
    gate = create_gate(hunter, status="cleared")
    gate_id = gate.id
    later = gate_service._now() + GATE_TTL + timedelta(seconds=1)
    monkeypatch.setattr(gate_service, "_now", lambda: later)
    assert gate_service.get_active_gate(hunter.id) is None
    assert gate_service.get_gate(gate_id, user.id) is None
    assert db.session.get(ActiveGate, gate_id) is None


def test_mutations_on_expired_gate_report_expired(user, monkeypatch):
    hunter = create_hunter(user)
    gate = create_gate(hunter, status="cleared")
    later = gate_service._now() + GATE_TTL + timedelta(minutes=5)
    monkeypatch.setattr(gate_service, "_now", lambda: later)
    with pytest.raises(Expired):
        gate_service.progress_gate(gate.id, user.id)
    # the row is gone afterwards
    with pytest.raises(NotFound):
        gate_service.clear_room(gate.id, user.id)


def test_gate_ownership_on_mutations(user, other_user):
    hunter = create_hunter(user)
    gate = create_gate(hunter)
    with pytest.raises(Forbidden):
        gate_service.clear_room(gate.id, other_user.id)
    with pytest.raises(Forbidden):
        gate_service.progress_gate(gate.id, other_user.id)
    with pytest.raises(Forbidden):
        gate_service.get_gate(gate.id, other_user.id)


def test_abandon_is_idempotent(user):
    hunter = create_hunter(user)
    create_gate(hunter)
    assert gate_service.abandon_gate(user.id, hunter.id) is True
    assert gate_service.abandon_gate(user.id, hunter.id) is False
    assert gate_service.get_active_gate(hunter.id) is None


def test_purge_expired_gates_only_removes_expired(user):
    a = create_hunter(user, name="A")
    b = create_hunter(user, name="B")
    create_gate(a, expired=True)
    live = create_gate(b)
    assert gate_service.purge_expired_gates() == 1
    db.session.commit()
    assert [g.id for g in ActiveGate.query.all()] == [live.id]
