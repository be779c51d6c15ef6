"""Skill unlocking and equipping.

The predicates (``can_unlock``, ``can_equip``, ``unlock_requirements``) are
pure over anything exposing ``level``, ``rank``, ``hunter_class``,
``skill_points``, ``unlocked_skills`` and ``equipped_skills``. The persisted
mutations reassign the JSON lists and bump ``Hunter.version`` with a
compare-and-set update, so two concurrent edits cannot both land.

Rules:
    * equipped is always a subset of unlocked
    * at most MAX_EQUIPPED skills are equipped, all of them active
    * passive skills apply once unlocked and never occupy a slot
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import update

from gatehunt import db
from gatehunt.catalog.enums import HunterClass, rank_at_least
from gatehunt.catalog.skills import Skill, get_skill
from gatehunt.errors import (
    Conflict,
    GameError,
    InvalidInput,
    NotUnlocked,
    RequirementsNotMet,
    SlotsFull,
)
from gatehunt.events import emit_hunter_update
from gatehunt.logging_utils import get_logger
from gatehunt.models import Hunter
from gatehunt.services.hunter_service import get_owned_hunter
from gatehunt.services.tx import commit

log = get_logger("skills")

MAX_EQUIPPED = 4

_UNLOCK_MESSAGES = {
    "already_unlocked": "Skill already unlocked.",
    "level_too_low": "Hunter level is too low for this skill.",
    "insufficient_skill_points": "Not enough skill points.",
    "rank_too_low": "Hunter rank is too low for this skill.",
    "class_mismatch": "This skill is not available to the hunter's class.",
}


def unlock_requirements(hunter, skill: Skill) -> Optional[str]:
    """Return the first unmet unlock requirement as a reason code, or None."""
    if skill.id in (hunter.unlocked_skills or []):
        return "already_unlocked"
    if hunter.level < skill.level_requirement:
        return "level_too_low"
    if hunter.skill_points < skill.skill_point_cost:
        return "insufficient_skill_points"
    if not rank_at_least(hunter.rank, skill.rank):
        return "rank_too_low"
    if skill.class_requirement and HunterClass.parse(hunter.hunter_class) not in skill.class_requirement:
        return "class_mismatch"
    return None


def can_unlock(hunter, skill: Skill) -> bool:
    return unlock_requirements(hunter, skill) is None


def equip_blocker(hunter, skill: Skill) -> Optional[GameError]:
    """Return the error equipping ``skill`` would raise, or None when legal."""
    equipped = hunter.equipped_skills or []
    if not skill.is_active:
        return InvalidInput("Passive skills are always active and cannot be equipped.", code="not_active")
    if skill.id not in (hunter.unlocked_skills or []):
        return NotUnlocked()
    if skill.id in equipped:
        return Conflict("Skill already equipped.", code="already_equipped")
    if len(equipped) >= MAX_EQUIPPED:
        return SlotsFull()
    if not rank_at_least(hunter.rank, skill.rank):
        return RequirementsNotMet(_UNLOCK_MESSAGES["rank_too_low"], code="rank_too_low")
    return None


def can_equip(hunter, skill: Skill) -> bool:
    return equip_blocker(hunter, skill) is None


def _require_skill(skill_id) -> Skill:
    skill = get_skill(skill_id)
    if skill is None:
        raise InvalidInput("Invalid skill ID.", code="invalid_skill", skill_id=skill_id)
    return skill


def _save(hunter: Hunter, event: str, **values) -> Hunter:
    """Compare-and-set write keyed on ``hunter.version``."""
    stmt = (
        update(Hunter)
        .where(Hunter.id == hunter.id, Hunter.version == hunter.version)
        .values(version=Hunter.version + 1, **values)
        .execution_options(synchronize_session=False)
    )
    res = db.session.execute(stmt)
    if res.rowcount != 1:
        db.session.rollback()
        raise Conflict("Hunter was updated concurrently; retry.", code="concurrent_update")
    commit(event, hunter_id=hunter.id)
    db.session.refresh(hunter)
    emit_hunter_update(hunter)
    return hunter


def unlock_skill(user_id, hunter_id, skill_id) -> Hunter:
    skill = _require_skill(skill_id)
    hunter = get_owned_hunter(hunter_id, user_id)
    reason = unlock_requirements(hunter, skill)
    if reason is not None:
        raise RequirementsNotMet(_UNLOCK_MESSAGES[reason], code=reason)

    unlocked = list(hunter.unlocked_skills or []) + [skill.id]
    _save(
        hunter,
        "unlock_skill",
        unlocked_skills=unlocked,
        skill_points=Hunter.skill_points - skill.skill_point_cost,
    )
    log.info(event="skill_unlocked", hunter_id=hunter.id, skill_id=skill.id, skill_points=hunter.skill_points)
    return hunter


def equip_skill(user_id, hunter_id, skill_id) -> Hunter:
    skill = _require_skill(skill_id)
    hunter = get_owned_hunter(hunter_id, user_id)
    blocker = equip_blocker(hunter, skill)
    if blocker is not None:
        raise blocker
    equipped = list(hunter.equipped_skills or []) + [skill.id]
    _save(hunter, "equip_skill", equipped_skills=equipped)
    log.info(event="skill_equipped", hunter_id=hunter.id, skill_id=skill.id, slots_used=len(equipped))
    return hunter


def unequip_skill(user_id, hunter_id, skill_id) -> Hunter:
    skill = _require_skill(skill_id)
    hunter = get_owned_hunter(hunter_id, user_id)
    if not skill.is_active:
        raise InvalidInput("Passive skills cannot be unequipped.", code="not_active")
    equipped = list(hunter.equipped_skills or [])
    if skill.id not in equipped:
        raise Conflict("Skill is not equipped.", code="not_equipped")
    equipped.remove(skill.id)
    _save(hunter, "unequip_skill", equipped_skills=equipped)
    log.info(event="skill_unequipped", hunter_id=hunter.id, skill_id=skill.id)
    return hunter


__all__ = [
    "MAX_EQUIPPED",
    "unlock_requirements",
    "can_unlock",
    "equip_blocker",
    "can_equip",
    "unlock_skill",
    "equip_skill",
    "unequip_skill",
]
