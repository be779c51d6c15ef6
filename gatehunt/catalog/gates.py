"""Gate generation tables and tunables."""

from datetime import timedelta

from gatehunt.catalog.enums import Rank

GATE_TTL = timedelta(hours=2)

# Inclusive bounds for randomized layout
MIN_DEPTH, MAX_DEPTH = 3, 6
MIN_ROOMS, MAX_ROOMS = 3, 6

# Flavor labels per rank; unknown ranks use the E pool.
GATE_TYPES: dict[Rank, list[str]] = {
    Rank.E: ["Goblin Dungeon", "Undead Dungeon", "Humanoid Dungeon", "Slime Cave"],
    Rank.D: ["Orc Encampment", "Lizardman Lair", "Giant Spider Nest"],
    Rank.C: ["Ice Elf Citadel", "Cursed Catacombs", "Wyvern Roost"],
    Rank.B: ["Demon Castle Outskirts", "Naga Temple", "Iron Golem Foundry"],
    Rank.A: ["Giant's Rift", "Ant Queen Hive"],
    Rank.S: ["Dragon's Nest", "Monarch's Domain"],
}
DEFAULT_GATE_RANK = Rank.E


def gate_types_for(rank) -> tuple[Rank, list[str]]:
    """Return ``(effective_rank, pool)`` falling back to the E pool."""
    parsed = Rank.parse(rank)
    if parsed is None or parsed not in GATE_TYPES:
        return DEFAULT_GATE_RANK, GATE_TYPES[DEFAULT_GATE_RANK]
    return parsed, GATE_TYPES[parsed]
