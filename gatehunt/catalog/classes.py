"""Hunter class templates.

Each class fixes the starting attribute spread for a new hunter. Attributes
after creation only change through stat point allocation.
"""

from __future__ import annotations

from dataclasses import dataclass

from gatehunt.catalog.enums import HunterClass

# Live hunters per user account
MAX_HUNTERS_PER_USER = 2


@dataclass(frozen=True)
class ClassDefinition:
    name: HunterClass
    description: str
    strength: int
    agility: int
    perception: int
    intelligence: int
    vitality: int

    def base_stats(self) -> dict:
        return {
            "strength": self.strength,
            "agility": self.agility,
            "perception": self.perception,
            "intelligence": self.intelligence,
            "vitality": self.vitality,
        }


HUNTER_CLASSES: dict[HunterClass, ClassDefinition] = {
    HunterClass.HEALER: ClassDefinition(
        HunterClass.HEALER,
        "Specialists in recovery and support magic.",
        strength=5,
        agility=8,
        perception=10,
        intelligence=15,
        vitality=12,
    ),
    HunterClass.FIGHTER: ClassDefinition(
        HunterClass.FIGHTER,
        "Masters of close combat who excel at dealing and taking damage.",
        strength=15,
        agility=10,
        perception=8,
        intelligence=5,
        vitality=12,
    ),
    HunterClass.MAGE: ClassDefinition(
        HunterClass.MAGE,
        "Controllers of arcane energy who cast powerful offensive spells.",
        strength=5,
        agility=8,
        perception=12,
        intelligence=17,
        vitality=8,
    ),
    HunterClass.ASSASSIN: ClassDefinition(
        HunterClass.ASSASSIN,
        "Swift and deadly hunters who excel at critical damage.",
        strength=10,
        agility=17,
        perception=12,
        intelligence=6,
        vitality=5,
    ),
    HunterClass.TANKER: ClassDefinition(
        HunterClass.TANKER,
        "Defensive specialists who absorb damage for the team.",
        strength=12,
        agility=5,
        perception=8,
        intelligence=5,
        vitality=20,
    ),
    HunterClass.RANGER: ClassDefinition(
        HunterClass.RANGER,
        "Masters of ranged combat who excel at precision and evasion.",
        strength=8,
        agility=12,
        perception=15,
        intelligence=8,
        vitality=7,
    ),
}


def get_class(raw) -> ClassDefinition | None:
    member = HunterClass.parse(raw)
    return HUNTER_CLASSES.get(member) if member else None


__all__ = ["MAX_HUNTERS_PER_USER", "ClassDefinition", "HUNTER_CLASSES", "get_class"]
