"""Experience gain and stat point spending.

Both mutations are single conditional UPDATE statements so concurrent requests
against the same hunter cannot double-spend a point or lose an experience
grant; a lost race surfaces as ``Conflict`` (experience) or the normal
"no points" error (allocation).

Rewards per level gained:
    STAT_POINTS_PER_LEVEL   stat points
    SKILL_POINTS_PER_LEVEL  skill points
Multiple levels in one grant pay out in bulk.
"""

from __future__ import annotations

from sqlalchemy import update

from gatehunt import db
from gatehunt.catalog.enums import Stat
from gatehunt.errors import Conflict, InsufficientPoints, InvalidStat
from gatehunt.events import emit_hunter_update
from gatehunt.logging_utils import get_logger
from gatehunt.models import Hunter
from gatehunt.models.xp import level_from_exp
from gatehunt.services.hunter_service import get_owned_hunter
from gatehunt.services.stats import max_hp, max_mp
from gatehunt.services.tx import commit
from gatehunt.services.validation import require_positive_int, require_within_max

log = get_logger("progression")

STAT_POINTS_PER_LEVEL = 5
SKILL_POINTS_PER_LEVEL = 5


def _require_gain(gained) -> int:
    return require_positive_int(gained, "experienceGained")


def apply_experience(experience: int, stat_points: int, skill_points: int, gained: int) -> dict:
    """Pure experience application.

    Returns the new ``experience``, ``level``, ``stat_points`` and
    ``skill_points`` along with the level-up report fields.
    """
    _require_gain(gained)
    old_level = level_from_exp(experience)
    new_exp = require_within_max(experience + gained, "experience")
    new_level = level_from_exp(new_exp)
    levels_gained = max(0, new_level - old_level)
    stat_gain = levels_gained * STAT_POINTS_PER_LEVEL
    skill_gain = levels_gained * SKILL_POINTS_PER_LEVEL
    return {
        "experience": new_exp,
        "level": new_level,
        "stat_points": stat_points + stat_gain,
        "skill_points": skill_points + skill_gain,
        "level_up": levels_gained > 0,
        "new_level": new_level,
        "levels_gained": levels_gained,
        "stat_points_gained": stat_gain,
        "skill_points_gained": skill_gain,
    }


def gain_experience(hunter_id, user_id, gained) -> dict:
    """Grant experience to an owned hunter and pay out level-up rewards.

    On level-up current HP/MP are restored to the new maxima. The update is
    keyed on the experience value that was read, so a concurrent grant makes
    this one fail with ``Conflict`` rather than overwrite it.
    """
    _require_gain(gained)
    hunter = get_owned_hunter(hunter_id, user_id)
    result = apply_experience(hunter.experience, hunter.stat_points, hunter.skill_points, gained)

    values = {
        "experience": Hunter.experience + gained,
        "stat_points": Hunter.stat_points + result["stat_points_gained"],
        "skill_points": Hunter.skill_points + result["skill_points_gained"],
    }
    if result["level"] != hunter.level:
        values["level"] = result["level"]
    if result["level_up"]:
        values["current_hp"] = max_hp(hunter.vitality, result["level"])
        values["current_mp"] = max_mp(hunter.intelligence, result["level"])

    stmt = (
        update(Hunter)
        .where(Hunter.id == hunter.id, Hunter.experience == hunter.experience)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    res = db.session.execute(stmt)
    if res.rowcount != 1:
        db.session.rollback()
        raise Conflict("Hunter was updated concurrently; retry.", code="concurrent_update")
    commit("gain_experience", hunter_id=hunter.id)
    db.session.refresh(hunter)

    log.info(
        event="experience_gained",
        hunter_id=hunter.id,
        gained=gained,
        level=hunter.level,
        levels_gained=result["levels_gained"],
    )
    emit_hunter_update(hunter)
    return {
        "level_up": result["level_up"],
        "new_level": result["new_level"],
        "levels_gained": result["levels_gained"],
        "stat_points_gained": result["stat_points_gained"],
        "skill_points_gained": result["skill_points_gained"],
    }


def allocate_stat(hunter_id, user_id, stat_name) -> Hunter:
    """Spend one stat point on ``stat_name`` (strength, agility, ...)."""
    stat = Stat.parse(stat_name)
    if stat is None:
        raise InvalidStat(f"Invalid stat name: {stat_name!r}.")
    hunter = get_owned_hunter(hunter_id, user_id)
    if hunter.stat_points <= 0:
        raise InsufficientPoints()

    column = getattr(Hunter, stat.value)
    stmt = (
        update(Hunter)
        .where(Hunter.id == hunter.id, Hunter.stat_points > 0)
        .values({column: column + 1, Hunter.stat_points: Hunter.stat_points - 1})
        .execution_options(synchronize_session=False)
    )
    res = db.session.execute(stmt)
    if res.rowcount != 1:
        db.session.rollback()
        raise InsufficientPoints()
    commit("allocate_stat", hunter_id=hunter.id, stat=stat.value)
    db.session.refresh(hunter)
    log.info(event="stat_allocated", hunter_id=hunter.id, stat=stat.value, remaining=hunter.stat_points)
    emit_hunter_update(hunter)
    return hunter


__all__ = [
    "STAT_POINTS_PER_LEVEL",
    "SKILL_POINTS_PER_LEVEL",
    "apply_experience",
    "gain_experience",
    "allocate_stat",
]
