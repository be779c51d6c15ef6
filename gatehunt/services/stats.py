"""Derived stat formulas.

One canonical formula set serves the character sheet, the combat snapshot and
MP recovery. Inputs are plain attribute dicts so the functions stay usable
outside a request (tests, simulations).

Formulas (floor on every fractional term):
    maxHP       = 100 + VIT*10 + level*5
    maxMP       = 50 + INT*5 + level*2
    defense     = 5 + VIT*0.5
    critRate    = min(100, 5 + AGI*0.2)
    critDamage  = 150 + AGI
    speed       = 10 + AGI
    evasion     = min(75, 5 + AGI*0.15)
    precision   = min(100, 75 + PER*0.25)
    basicAttack = 10 + STR*1.5
    cooldownReduction = min(50, INT*0.5)
"""

from __future__ import annotations

import math
from typing import Any, Dict, Optional

from gatehunt.models.xp import level_progress

MP_RECOVERY_BASE = 0.15
MP_RECOVERY_PER_INT = 0.002
MP_RECOVERY_CAP = 0.5


def _attr(attrs: Dict[str, Any], key: str) -> int:
    return int(attrs.get(key) or 0)


def max_hp(vitality: int, level: int) -> int:
    return 100 + vitality * 10 + level * 5


def max_mp(intelligence: int, level: int) -> int:
    return 50 + intelligence * 5 + level * 2


def derive_stats(
    attrs: Dict[str, Any], level: int, current_hp: Optional[int] = None, current_mp: Optional[int] = None
) -> Dict[str, int]:
    """Return the derived stat block for base ``attrs`` at ``level``.

    ``current_hp`` / ``current_mp`` of None read as full; values above the
    maximum are clamped down to it.
    """
    strength = _attr(attrs, "strength")
    agility = _attr(attrs, "agility")
    perception = _attr(attrs, "perception")
    intelligence = _attr(attrs, "intelligence")
    vitality = _attr(attrs, "vitality")

    hp_cap = max_hp(vitality, level)
    mp_cap = max_mp(intelligence, level)
    hp = hp_cap if current_hp is None else min(int(current_hp), hp_cap)
    mp = mp_cap if current_mp is None else min(int(current_mp), mp_cap)
    return {
        "maxHP": hp_cap,
        "currentHP": hp,
        "maxMP": mp_cap,
        "currentMP": mp,
        "defense": 5 + math.floor(vitality * 0.5),
        "critRate": min(100, 5 + math.floor(agility * 0.2)),
        "critDamage": 150 + agility,
        "speed": 10 + agility,
        "evasion": min(75, 5 + math.floor(agility * 0.15)),
        "precision": min(100, 75 + math.floor(perception * 0.25)),
        "basicAttack": 10 + math.floor(strength * 1.5),
        "cooldownReduction": min(50, math.floor(intelligence * 0.5)),
    }


def hunter_stats(hunter) -> Dict[str, Any]:
    """Derived block plus experience progress for a persisted hunter."""
    derived = derive_stats(hunter.attributes(), hunter.level, hunter.current_hp, hunter.current_mp)
    progress = level_progress(hunter.experience)
    derived.update(
        expNeededForNextLevel=progress["exp_needed_for_next_level"],
        currentLevelStartExp=progress["current_level_start_exp"],
        expProgressInCurrentLevel=progress["exp_progress_in_current_level"],
        isMaxLevel=progress["is_max_level"],
    )
    return derived


def combat_stats(hunter) -> Dict[str, Any]:
    """Snapshot handed to the combat screen when an encounter starts."""
    derived = derive_stats(hunter.attributes(), hunter.level, hunter.current_hp, hunter.current_mp)
    progress = level_progress(hunter.experience)
    return {
        "id": hunter.id,
        "name": hunter.name,
        "level": hunter.level,
        "currentHp": derived["currentHP"],
        "maxHp": derived["maxHP"],
        "currentMp": derived["currentMP"],
        "maxMp": derived["maxMP"],
        "attackPower": derived["basicAttack"],
        "defense": derived["defense"],
        "currentExp": hunter.experience,
        "expToNextLevel": progress["exp_needed_for_next_level"],
    }


def mp_recovery(intelligence: int, level: int, current_mp: Optional[int]) -> Dict[str, int]:
    """Rest-based MP regeneration.

    Recovers ``floor(maxMP * min(0.15 + INT*0.002, 0.5))`` without exceeding
    maxMP. Returns ``{"max_mp", "new_mp", "recovered"}``.
    """
    cap = max_mp(int(intelligence or 0), int(level or 1))
    current = cap if current_mp is None else min(int(current_mp), cap)
    pct = min(MP_RECOVERY_BASE + int(intelligence or 0) * MP_RECOVERY_PER_INT, MP_RECOVERY_CAP)
    gained = math.floor(cap * pct)
    new_mp = min(current + gained, cap)
    return {"max_mp": cap, "new_mp": new_mp, "recovered": new_mp - current}


__all__ = ["derive_stats", "hunter_stats", "combat_stats", "mp_recovery", "max_hp", "max_mp"]
