# Static game data (classes, skills, gate pools, loot tables)
from .enums import HunterClass, Rank, RoomStatus, SkillType, Stat  # noqa: F401 re-export

__all__ = ["HunterClass", "Rank", "RoomStatus", "SkillType", "Stat"]
