"""Static enemy loot tables.

Keyed by enemy id. Each entry rolls independently; ``GOLD_ITEM_ID`` entries
pay out gold instead of an inventory item.
"""

from __future__ import annotations

from dataclasses import dataclass

GOLD_ITEM_ID = "gold_pouch_small"


@dataclass(frozen=True)
class LootTableEntry:
    item_id: str
    drop_chance: float  # 0.0 - 1.0
    min_quantity: int
    max_quantity: int


LOOT_TABLES: dict[str, list[LootTableEntry]] = {
    "goblin-scout": [
        LootTableEntry(GOLD_ITEM_ID, 0.8, 5, 20),
        LootTableEntry("hp-potion-small", 0.3, 1, 2),
        LootTableEntry("goblin-ear", 0.5, 1, 1),
        LootTableEntry("rusty-sword", 0.05, 1, 1),
    ],
    "slime": [
        LootTableEntry(GOLD_ITEM_ID, 0.6, 2, 8),
        LootTableEntry("slime-gel", 0.7, 1, 3),
    ],
    "skeleton-soldier": [
        LootTableEntry(GOLD_ITEM_ID, 0.75, 8, 25),
        LootTableEntry("bone-fragment", 0.6, 1, 3),
        LootTableEntry("mp-potion-small", 0.2, 1, 1),
        LootTableEntry("rusty-sword", 0.1, 1, 1),
    ],
    "orc-warrior": [
        LootTableEntry(GOLD_ITEM_ID, 0.9, 20, 45),
        LootTableEntry("orc-tusk", 0.4, 1, 2),
        LootTableEntry("hp-potion-small", 0.35, 1, 2),
        LootTableEntry("iron-axe", 0.04, 1, 1),
    ],
}


def get_loot_table(enemy_id) -> list[LootTableEntry] | None:
    if not isinstance(enemy_id, str):
        return None
    return LOOT_TABLES.get(enemy_id)


__all__ = ["GOLD_ITEM_ID", "LootTableEntry", "LOOT_TABLES", "get_loot_table"]
