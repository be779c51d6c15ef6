"""Static skill catalog.

Skills are reference data: hunters only store skill ids. Lookup goes through
``get_skill`` so unknown ids are rejected in one place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from gatehunt.catalog.enums import HunterClass, Rank, SkillType


@dataclass(frozen=True)
class DamageEffect:
    power: int
    kind: str = "damage"


@dataclass(frozen=True)
class HealEffect:
    amount: int
    kind: str = "heal"


@dataclass(frozen=True)
class BuffEffect:
    stat: str
    amount: int
    duration: Optional[int] = None  # turns; None = permanent (passives)
    kind: str = "buff"


SkillEffect = Union[DamageEffect, HealEffect, BuffEffect]


@dataclass(frozen=True)
class Skill:
    id: str
    name: str
    description: str
    type: SkillType
    rank: Rank
    level_requirement: int
    skill_point_cost: int
    effects: Tuple[SkillEffect, ...]
    class_requirement: Tuple[HunterClass, ...] = field(default_factory=tuple)
    cooldown: int = 0
    mana_cost: int = 0

    @property
    def is_active(self) -> bool:
        return self.type == SkillType.ACTIVE

    def to_dict(self) -> dict:
        effects = []
        for eff in self.effects:
            if isinstance(eff, DamageEffect):
                effects.append({"type": eff.kind, "power": eff.power})
            elif isinstance(eff, HealEffect):
                effects.append({"type": eff.kind, "amount": eff.amount})
            else:
                effects.append({"type": eff.kind, "stat": eff.stat, "amount": eff.amount, "duration": eff.duration})
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "type": self.type.value,
            "rank": self.rank.value,
            "levelRequirement": self.level_requirement,
            "skillPointCost": self.skill_point_cost,
            "classRequirement": [c.value for c in self.class_requirement] or None,
            "effects": effects,
            "cooldown": self.cooldown,
            "manaCost": self.mana_cost,
        }


_ALL = [
    # --- E rank ---
    Skill(
        "e-power-strike",
        "Power Strike",
        "A basic but forceful attack.",
        SkillType.ACTIVE,
        Rank.E,
        level_requirement=1,
        skill_point_cost=1,
        effects=(DamageEffect(10),),
        cooldown=2,
        mana_cost=5,
    ),
    Skill(
        "e-first-aid",
        "First Aid",
        "A minor healing technique.",
        SkillType.ACTIVE,
        Rank.E,
        level_requirement=1,
        skill_point_cost=1,
        effects=(HealEffect(15),),
        cooldown=3,
        mana_cost=8,
    ),
    Skill(
        "e-quick-shot",
        "Quick Shot",
        "A fast ranged attack with little wind-up.",
        SkillType.ACTIVE,
        Rank.E,
        level_requirement=1,
        skill_point_cost=1,
        effects=(DamageEffect(8),),
        cooldown=1,
        mana_cost=3,
    ),
    Skill(
        "e-shield-bash",
        "Shield Bash",
        "Slam the target, dealing light damage.",
        SkillType.ACTIVE,
        Rank.E,
        level_requirement=1,
        skill_point_cost=1,
        effects=(DamageEffect(6),),
        cooldown=2,
        mana_cost=4,
    ),
    Skill(
        "e-war-cry",
        "War Cry",
        "Briefly raises attack power.",
        SkillType.ACTIVE,
        Rank.E,
        level_requirement=1,
        skill_point_cost=1,
        effects=(BuffEffect("attackPower", 5, duration=3),),
        cooldown=5,
        mana_cost=6,
    ),
    Skill(
        "e-toughness",
        "Toughness",
        "Passively increases Vitality slightly.",
        SkillType.PASSIVE,
        Rank.E,
        level_requirement=2,
        skill_point_cost=2,
        effects=(BuffEffect("vitality", 1),),
    ),
    Skill(
        "e-quick-step",
        "Quick Step",
        "Passively increases Agility slightly.",
        SkillType.PASSIVE,
        Rank.E,
        level_requirement=2,
        skill_point_cost=2,
        effects=(BuffEffect("agility", 1),),
    ),
    # --- D rank ---
    Skill(
        "d-heavy-strike",
        "Heavy Strike",
        "A stronger attack that requires more focus.",
        SkillType.ACTIVE,
        Rank.D,
        level_requirement=5,
        skill_point_cost=3,
        effects=(DamageEffect(25),),
        cooldown=4,
        mana_cost=12,
    ),
    Skill(
        "d-meditation",
        "Meditation",
        "Passively increases Intelligence.",
        SkillType.PASSIVE,
        Rank.D,
        level_requirement=6,
        skill_point_cost=4,
        effects=(BuffEffect("intelligence", 2),),
    ),
    Skill(
        "d-shadow-step",
        "Shadow Step",
        "Vanish and strike from behind.",
        SkillType.ACTIVE,
        Rank.D,
        level_requirement=4,
        skill_point_cost=3,
        effects=(DamageEffect(18), BuffEffect("evasion", 10, duration=2)),
        class_requirement=(HunterClass.ASSASSIN,),
        cooldown=4,
        mana_cost=10,
    ),
    # --- E rank, class locked ---
    Skill(
        "e-mana-bolt",
        "Mana Bolt",
        "Condensed mana fired at a single target.",
        SkillType.ACTIVE,
        Rank.E,
        level_requirement=1,
        skill_point_cost=1,
        effects=(DamageEffect(12),),
        class_requirement=(HunterClass.MAGE, HunterClass.HEALER),
        cooldown=1,
        mana_cost=6,
    ),
]

SKILLS: dict[str, Skill] = {s.id: s for s in _ALL}


def get_skill(skill_id) -> Skill | None:
    if not isinstance(skill_id, str):
        return None
    return SKILLS.get(skill_id)


__all__ = ["DamageEffect", "HealEffect", "BuffEffect", "Skill", "SKILLS", "get_skill"]
