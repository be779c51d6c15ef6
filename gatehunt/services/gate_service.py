"""Gate run lifecycle.

States:
    Absent -> Active(pending) -> Active(cleared) -> Active(pending, next room) ... -> Completed
    Active(*) -> Absent on expiry or abandonment

A hunter has at most one gate row (unique ``hunter_id``). Expiry is lazy:
every reader deletes a row whose ``expires_at`` has passed and behaves as if
it were absent. Reads report absence (None); mutations addressed by gate id
report ``Expired``.

Room advancement is a conditional UPDATE keyed on the status/room/depth that
was read, so replaying a progress request cannot skip a room.
"""

from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError

from gatehunt import db
from gatehunt.catalog.enums import RoomStatus
from gatehunt.catalog.gates import GATE_TTL, MAX_DEPTH, MAX_ROOMS, MIN_DEPTH, MIN_ROOMS, gate_types_for
from gatehunt.errors import Conflict, Expired, Forbidden, NotFound, RoomNotCleared
from gatehunt.events import emit_gate_update
from gatehunt.logging_utils import get_logger
from gatehunt.models import ActiveGate, Hunter
from gatehunt.services.hunter_service import get_owned_hunter
from gatehunt.services.tx import commit
from gatehunt.services.validation import MAX_INT, is_int

log = get_logger("gate")


def _now():
    return datetime.now(timezone.utc).replace(tzinfo=None)


def generate_gate_params(rank, rng: random.Random | None = None) -> Dict[str, Any]:
    """Roll type and layout for a new gate of ``rank``.

    Unknown ranks roll from the E pool and produce an E gate.
    """
    rng = rng or random
    gate_rank, pool = gate_types_for(rank)
    total_depth = rng.randint(MIN_DEPTH, MAX_DEPTH)
    return {
        "gate_type": rng.choice(pool),
        "gate_rank": gate_rank.value,
        "total_depth": total_depth,
        "rooms_per_depth": [rng.randint(MIN_ROOMS, MAX_ROOMS) for _ in range(total_depth)],
    }


def purge_expired_gates(hunter_id=None, now=None) -> int:
    """Delete expired gate rows (for one hunter, or all). Returns rows removed.

    Does not commit; callers fold it into their own transaction.
    """
    now = now or _now()
    stmt = delete(ActiveGate).where(ActiveGate.expires_at < now)
    if hunter_id is not None:
        stmt = stmt.where(ActiveGate.hunter_id == hunter_id)
    res = db.session.execute(stmt.execution_options(synchronize_session="fetch"))
    if res.rowcount:
        log.info(event="gates_purged", hunter_id=hunter_id, count=res.rowcount)
    return res.rowcount or 0


def _drop(gate: ActiveGate, reason: str):
    hunter_id = gate.hunter_id
    db.session.delete(gate)
    commit("gate_delete", gate_id=gate.id)
    log.info(event="gate_removed", gate_id=gate.id, hunter_id=hunter_id, reason=reason)
    emit_gate_update(hunter_id, reason)


def locate_gate(user_id, hunter_id, rng: random.Random | None = None) -> ActiveGate:
    """Open a new gate for an owned hunter. ``Conflict`` while one is live."""
    hunter = get_owned_hunter(hunter_id, user_id)
    now = _now()
    purge_expired_gates(hunter.id, now)
    existing = ActiveGate.query.filter_by(hunter_id=hunter.id).first()
    if existing is not None:
        raise Conflict("Hunter already has an active gate.", code="gate_active", gate_id=existing.id)

    params = generate_gate_params(hunter.rank, rng)
    gate = ActiveGate(
        hunter_id=hunter.id,
        current_depth=1,
        current_room=1,
        current_room_status=RoomStatus.PENDING.value,
        created_at=now,
        expires_at=now + GATE_TTL,
        updated_at=now,
        **params,
    )
    db.session.add(gate)
    try:
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        raise Conflict("Hunter already has an active gate.", code="gate_active") from e
    log.info(
        event="gate_located",
        hunter_id=hunter.id,
        gate_id=gate.id,
        gate_type=gate.gate_type,
        gate_rank=gate.gate_rank,
        total_depth=gate.total_depth,
    )
    emit_gate_update(hunter.id, "located", gate)
    return gate


def get_active_gate(hunter_id) -> Optional[ActiveGate]:
    """Return the hunter's live gate, or None (expired rows are deleted)."""
    if purge_expired_gates(hunter_id):
        commit("gate_purge", hunter_id=hunter_id)
        emit_gate_update(hunter_id, "expired")
    return ActiveGate.query.filter_by(hunter_id=hunter_id).first()


def gate_status(user_id, hunter_id) -> Optional[ActiveGate]:
    hunter = get_owned_hunter(hunter_id, user_id)
    return get_active_gate(hunter.id)


def _owned_gate(gate_id, user_id) -> Optional[ActiveGate]:
    if not is_int(gate_id) or not 0 < gate_id <= MAX_INT:
        return None
    gate = db.session.get(ActiveGate, gate_id)
    if gate is None:
        return None
    hunter = db.session.get(Hunter, gate.hunter_id)
    if hunter is None or hunter.user_id != user_id:
        raise Forbidden("You do not own this gate.")
    return gate


def get_gate(gate_id, user_id) -> Optional[ActiveGate]:
    """Read a gate by id. Expired gates read as absent."""
    gate = _owned_gate(gate_id, user_id)
    if gate is None:
        return None
    if gate.is_expired(_now()):
        _drop(gate, "expired")
        return None
    return gate


def _live_gate_for_mutation(gate_id, user_id) -> ActiveGate:
    gate = _owned_gate(gate_id, user_id)
    if gate is None:
        raise NotFound("Gate not found.")
    if gate.is_expired(_now()):
        _drop(gate, "expired")
        raise Expired()
    return gate


def clear_room(gate_id, user_id) -> ActiveGate:
    """Mark the current room cleared. Clearing an already-cleared room is a no-op."""
    gate = _live_gate_for_mutation(gate_id, user_id)
    if gate.current_room_status == RoomStatus.CLEARED.value:
        return gate
    gate.current_room_status = RoomStatus.CLEARED.value
    gate.updated_at = _now()
    commit("clear_room", gate_id=gate.id)
    log.info(
        event="room_cleared",
        gate_id=gate.id,
        hunter_id=gate.hunter_id,
        depth=gate.current_depth,
        room=gate.current_room,
    )
    emit_gate_update(gate.hunter_id, "room_cleared", gate)
    return gate


def progress_gate(gate_id, user_id) -> Dict[str, Any]:
    """Advance past a cleared room.

    Returns ``{"status": "progressed", "gate": {...}}`` or, after the last room
    of the last depth, ``{"status": "cleared"}`` with the gate row deleted.
    """
    gate = _live_gate_for_mutation(gate_id, user_id)
    if gate.current_room_status != RoomStatus.CLEARED.value:
        raise RoomNotCleared()

    next_room = gate.current_room + 1
    next_depth = gate.current_depth
    if next_room > gate.rooms_at(gate.current_depth):
        next_depth += 1
        next_room = 1

    guard = (
        ActiveGate.id == gate.id,
        ActiveGate.current_room_status == RoomStatus.CLEARED.value,
        ActiveGate.current_depth == gate.current_depth,
        ActiveGate.current_room == gate.current_room,
    )
    if next_depth > gate.total_depth:
        res = db.session.execute(delete(ActiveGate).where(*guard).execution_options(synchronize_session=False))
        if res.rowcount != 1:
            db.session.rollback()
            raise RoomNotCleared()
        commit("gate_complete", gate_id=gate.id)
        db.session.expunge(gate)
        log.info(event="gate_completed", gate_id=gate.id, hunter_id=gate.hunter_id, gate_rank=gate.gate_rank)
        emit_gate_update(gate.hunter_id, "cleared")
        return {"status": "cleared", "gate_id": gate.id}

    res = db.session.execute(
        update(ActiveGate)
        .where(*guard)
        .values(
            current_depth=next_depth,
            current_room=next_room,
            current_room_status=RoomStatus.PENDING.value,
            updated_at=_now(),
        )
        .execution_options(synchronize_session=False)
    )
    if res.rowcount != 1:
        db.session.rollback()
        raise RoomNotCleared()
    commit("gate_progress", gate_id=gate.id)
    db.session.refresh(gate)
    log.info(event="gate_progressed", gate_id=gate.id, depth=gate.current_depth, room=gate.current_room)
    emit_gate_update(gate.hunter_id, "progressed", gate)
    return {"status": "progressed", "gate": gate.to_dict()}


def abandon_gate(user_id, hunter_id) -> bool:
    """Remove any gate the hunter has. Returns whether a row was deleted."""
    hunter = get_owned_hunter(hunter_id, user_id)
    res = db.session.execute(
        delete(ActiveGate).where(ActiveGate.hunter_id == hunter.id).execution_options(synchronize_session="fetch")
    )
    commit("gate_abandon", hunter_id=hunter.id)
    removed = bool(res.rowcount)
    log.info(event="gate_abandoned", hunter_id=hunter.id, removed=removed)
    if removed:
        emit_gate_update(hunter.id, "abandoned")
    return removed


__all__ = [
    "generate_gate_params",
    "purge_expired_gates",
    "locate_gate",
    "get_active_gate",
    "gate_status",
    "get_gate",
    "clear_room",
    "progress_gate",
    "abandon_gate",
]
