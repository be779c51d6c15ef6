"""Hunter roster service.

Creation from class templates, ownership-checked loading, whitelisted
updates, deletion, and the current HP/MP resource pool (rest recovery and
client-reported values after combat).
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from gatehunt import db
from gatehunt.catalog.classes import MAX_HUNTERS_PER_USER, get_class
from gatehunt.catalog.enums import Rank
from gatehunt.errors import Conflict, Forbidden, InvalidInput, NotFound
from gatehunt.events import emit_hunter_update
from gatehunt.logging_utils import get_logger
from gatehunt.models import ActiveGate, CurrencyTransaction, Hunter, InventoryItem, User
from gatehunt.services.stats import max_hp, max_mp, mp_recovery
from gatehunt.services.tx import commit
from gatehunt.services.validation import MAX_INT, is_int

log = get_logger("hunters")

NAME_MAX_LEN = 80
UPDATABLE_FIELDS = ("name",)


def _clean_name(raw) -> str:
    if not isinstance(raw, str) or not raw.strip():
        raise InvalidInput("Hunter name is required.", code="invalid_name")
    name = raw.strip()
    if len(name) > NAME_MAX_LEN:
        raise InvalidInput(f"Hunter name must be at most {NAME_MAX_LEN} characters.", code="invalid_name")
    return name


def load_hunter(hunter_id) -> Optional[Hunter]:
    if not is_int(hunter_id) or not 0 < hunter_id <= MAX_INT:
        return None
    return db.session.get(Hunter, hunter_id)


def get_owned_hunter(hunter_id, user_id) -> Hunter:
    """Return the hunter or raise ``NotFound`` / ``Forbidden``."""
    hunter = load_hunter(hunter_id)
    if hunter is None:
        raise NotFound("Hunter not found.")
    if hunter.user_id != user_id:
        raise Forbidden("You do not own this hunter.")
    return hunter


def list_hunters(user_id) -> List[Hunter]:
    return Hunter.query.filter_by(user_id=user_id).order_by(Hunter.id.asc()).all()


def create_hunter(user_id, name, hunter_class) -> Hunter:
    """Create a rank E, level 1 hunter from the class template.

    Limits: ``MAX_HUNTERS_PER_USER`` live hunters; names are unique per user.
    """
    clean = _clean_name(name)
    template = get_class(hunter_class)
    if template is None:
        raise InvalidInput("Invalid hunter class selected.", code="invalid_class")
    # Touching the user row holds its write lock until commit, so concurrent
    # creates for one user count and insert one after the other.
    db.session.execute(
        update(User)
        .where(User.id == user_id)
        .values(username=User.username)
        .execution_options(synchronize_session=False)
    )
    if Hunter.query.filter_by(user_id=user_id).count() >= MAX_HUNTERS_PER_USER:
        db.session.rollback()
        raise InvalidInput(f"Maximum number of hunters ({MAX_HUNTERS_PER_USER}) reached.", code="hunter_limit")

    hunter = Hunter(
        user_id=user_id,
        name=clean,
        hunter_class=template.name.value,
        rank=Rank.E.value,
        level=1,
        experience=0,
        stat_points=0,
        skill_points=0,
        unlocked_skills=[],
        equipped_skills=[],
        **template.base_stats(),
    )
    db.session.add(hunter)
    try:
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        raise Conflict("A hunter with this name already exists.", code="name_taken") from e
    log.info(event="hunter_created", user_id=user_id, hunter_id=hunter.id, hunter_class=hunter.hunter_class)
    return hunter


def update_hunter(hunter_id, user_id, fields: dict) -> Hunter:
    """Persist whitelisted profile fields. Progression columns are not writable here."""
    if not isinstance(fields, dict) or not fields:
        raise InvalidInput("No fields provided for update.")
    unknown = sorted(set(fields) - set(UPDATABLE_FIELDS))
    if unknown:
        raise InvalidInput("Field(s) not updatable.", code="invalid_field", fields=unknown)
    new_name = _clean_name(fields["name"]) if "name" in fields else None
    hunter = get_owned_hunter(hunter_id, user_id)
    if new_name is not None:
        hunter.name = new_name
    try:
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        raise Conflict("A hunter with this name already exists.", code="name_taken") from e
    emit_hunter_update(hunter)
    return hunter


def delete_hunter(hunter_id, user_id) -> None:
    hunter = get_owned_hunter(hunter_id, user_id)
    ActiveGate.query.filter_by(hunter_id=hunter.id).delete()
    InventoryItem.query.filter_by(hunter_id=hunter.id).delete()
    CurrencyTransaction.query.filter_by(hunter_id=hunter.id).delete()
    db.session.delete(hunter)
    commit("hunter_delete", hunter_id=hunter_id)
    log.info(event="hunter_deleted", user_id=user_id, hunter_id=hunter_id)


def recover_mp(hunter_id, user_id) -> dict:
    """Apply one rest tick of MP regeneration. Writes only when MP changes."""
    hunter = get_owned_hunter(hunter_id, user_id)
    result = mp_recovery(hunter.intelligence, hunter.level, hunter.current_mp)
    if result["recovered"] > 0:
        hunter.current_mp = result["new_mp"]
        commit("recover_mp", hunter_id=hunter.id)
        emit_hunter_update(hunter)
    return {
        "recoveredAmount": result["recovered"],
        "newCurrentMp": result["new_mp"],
        "maxMp": result["max_mp"],
    }


def update_current_resources(hunter_id, user_id, current_hp=None, current_mp=None) -> Hunter:
    """Store client-reported current HP/MP (e.g. after a fight).

    Each provided value must be a non-negative integer; values above the
    derived maximum are clamped. At least one value is required.
    """
    if current_hp is None and current_mp is None:
        raise InvalidInput("No valid fields provided for update (currentHp or currentMp).")
    if current_hp is not None and (not is_int(current_hp) or not 0 <= current_hp <= MAX_INT):
        raise InvalidInput("Invalid currentHp value. Must be a non-negative integer.", field="currentHp")
    if current_mp is not None and (not is_int(current_mp) or not 0 <= current_mp <= MAX_INT):
        raise InvalidInput("Invalid currentMp value. Must be a non-negative integer.", field="currentMp")
    hunter = get_owned_hunter(hunter_id, user_id)
    if current_hp is not None:
        hunter.current_hp = min(current_hp, max_hp(hunter.vitality, hunter.level))
    if current_mp is not None:
        hunter.current_mp = min(current_mp, max_mp(hunter.intelligence, hunter.level))
    commit("update_current_resources", hunter_id=hunter.id)
    emit_hunter_update(hunter)
    return hunter


__all__ = [
    "load_hunter",
    "get_owned_hunter",
    "list_hunters",
    "create_hunter",
    "update_hunter",
    "delete_hunter",
    "recover_mp",
    "update_current_resources",
]
