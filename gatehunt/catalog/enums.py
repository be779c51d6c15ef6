"""Closed enumerations shared by the rule modules and the persistence layer.

Stat names, ranks, classes and skill types are stored as plain strings in the
database; these enums are the single place that decides which strings are legal.
"""

from __future__ import annotations

from enum import Enum


class Stat(str, Enum):
    """Allocatable base attributes."""

    STRENGTH = "strength"
    AGILITY = "agility"
    PERCEPTION = "perception"
    INTELLIGENCE = "intelligence"
    VITALITY = "vitality"

    @classmethod
    def parse(cls, raw) -> "Stat | None":
        """Return the member whose value is exactly ``raw`` or None."""
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str):
            return None
        try:
            return cls(raw)
        except ValueError:
            return None


class Rank(str, Enum):
    """Hunter / gate / skill tier, ordered E < D < C < B < A < S."""

    E = "E"
    D = "D"
    C = "C"
    B = "B"
    A = "A"
    S = "S"

    @property
    def order(self) -> int:
        return RANK_ORDER.index(self)

    @classmethod
    def parse(cls, raw) -> "Rank | None":
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str):
            return None
        try:
            return cls(raw.strip().upper())
        except ValueError:
            return None


RANK_ORDER = [Rank.E, Rank.D, Rank.C, Rank.B, Rank.A, Rank.S]


def rank_at_least(have, need) -> bool:
    """True when rank ``have`` is the same tier as ``need`` or above.

    Unknown ranks on the hunter side never satisfy a requirement.
    """
    have_rank = Rank.parse(have)
    need_rank = Rank.parse(need)
    if have_rank is None or need_rank is None:
        return False
    return have_rank.order >= need_rank.order


class HunterClass(str, Enum):
    HEALER = "Healer"
    FIGHTER = "Fighter"
    MAGE = "Mage"
    ASSASSIN = "Assassin"
    TANKER = "Tanker"
    RANGER = "Ranger"

    @classmethod
    def parse(cls, raw) -> "HunterClass | None":
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str):
            return None
        wanted = raw.strip().lower()
        for member in cls:
            if member.value.lower() == wanted:
                return member
        return None


class SkillType(str, Enum):
    ACTIVE = "active"
    PASSIVE = "passive"


class RoomStatus(str, Enum):
    PENDING = "pending"
    CLEARED = "cleared"


__all__ = [
    "Stat",
    "Rank",
    "RANK_ORDER",
    "rank_at_least",
    "HunterClass",
    "SkillType",
    "RoomStatus",
]
