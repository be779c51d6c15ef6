"""Loot rolling and application.

``determine_loot`` turns an enemy id into drops using the static tables in
``gatehunt.catalog.loot_tables``. Each entry rolls independently:

    rng.random() < drop_chance  ->  quantity = rng.randint(min, max)

Entries for ``GOLD_ITEM_ID`` accumulate into ``dropped_gold`` instead of the
item list. Unknown enemies are normal (logged) and yield nothing.

``apply_loot`` credits a roll to a hunter: gold through the currency ledger
and items through the inventory primitive, all in one transaction. Either
everything lands or the call fails with nothing written.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from gatehunt import db
from gatehunt.catalog.loot_tables import GOLD_ITEM_ID, LootTableEntry, get_loot_table
from gatehunt.errors import Internal, InvalidInput
from gatehunt.events import emit_hunter_update
from gatehunt.inventory.utils import add_inventory_item, check_capacity
from gatehunt.logging_utils import get_logger
from gatehunt.models import Item
from gatehunt.services.currency_service import apply_currency_delta
from gatehunt.services.hunter_service import get_owned_hunter
from gatehunt.services.validation import require_non_negative_int, require_positive_int, require_within_max

log = get_logger("loot")


@dataclass
class LootResult:
    dropped_items: List[Dict[str, Any]] = field(default_factory=list)
    dropped_gold: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.dropped_items and self.dropped_gold == 0

    def to_dict(self) -> dict:
        return {"droppedItems": list(self.dropped_items), "droppedGold": self.dropped_gold}


def determine_loot(
    enemy_id,
    rng: random.Random | None = None,
    tables: Optional[Mapping[str, Sequence[LootTableEntry]]] = None,
) -> LootResult:
    rng = rng or random
    if tables is None:
        entries = get_loot_table(enemy_id)
    else:
        entries = tables.get(enemy_id) if isinstance(enemy_id, str) else None
    result = LootResult()
    if not entries:
        log.warn(event="loot_table_missing", enemy_id=enemy_id)
        return result

    for entry in entries:
        if rng.random() < entry.drop_chance:
            qty = rng.randint(entry.min_quantity, entry.max_quantity)
            if entry.item_id == GOLD_ITEM_ID:
                result.dropped_gold += qty
            else:
                result.dropped_items.append({"itemId": entry.item_id, "quantity": qty})
    log.debug(event="loot_rolled", enemy_id=enemy_id, items=len(result.dropped_items), gold=result.dropped_gold)
    return result


def _normalize_items(items) -> List[Dict[str, Any]]:
    """Validate the client item list; merge duplicate ids."""
    if items is None:
        return []
    if not isinstance(items, list):
        raise InvalidInput("items must be a list.", field="items")
    merged: Dict[str, int] = {}
    for raw in items:
        if not isinstance(raw, dict):
            raise InvalidInput("Each item needs an itemId and quantity.", field="items")
        item_id = raw.get("itemId", raw.get("item_id"))
        qty = raw.get("quantity")
        if not isinstance(item_id, str) or not item_id:
            raise InvalidInput("Each item needs an itemId and quantity.", field="items")
        require_positive_int(qty, "quantity")
        merged[item_id] = require_within_max(merged.get(item_id, 0) + qty, "quantity")
    return [{"itemId": k, "quantity": v} for k, v in merged.items()]


def apply_loot(user_id, hunter_id, items, gold=0) -> dict:
    """Credit ``items`` and ``gold`` to an owned hunter atomically.

    Everything is validated before the first write: quantities, catalog
    membership of every item id, non-negative gold, non-empty loot, and the
    integer ceiling on the resulting gold and stack sizes.
    """
    normalized = _normalize_items(items)
    gold = require_non_negative_int(0 if gold is None else gold, "gold")
    if not normalized and gold == 0:
        raise InvalidInput("No loot to add.", code="empty_loot")
    hunter = get_owned_hunter(hunter_id, user_id)
    require_within_max(hunter.gold + gold, "gold")

    catalog = {}
    for entry in normalized:
        item = db.session.get(Item, entry["itemId"])
        if item is None:
            raise InvalidInput(f"Unknown item: {entry['itemId']}.", code="unknown_item", item_id=entry["itemId"])
        check_capacity(hunter.id, item, entry["quantity"])
        catalog[item.id] = item

    try:
        if gold > 0:
            apply_currency_delta(hunter, gold, 0, reason="loot")
        for entry in normalized:
            add_inventory_item(hunter.id, catalog[entry["itemId"]], entry["quantity"])
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        log.error(event="apply_loot_failed", hunter_id=hunter.id, error=str(e))
        raise Internal("Failed to add loot; nothing was applied.") from e

    log.info(event="loot_applied", hunter_id=hunter.id, gold=gold, items=len(normalized))
    emit_hunter_update(hunter)
    return {"success": True, "gold": hunter.gold, "itemsAdded": normalized, "goldAdded": gold}


__all__ = ["LootResult", "determine_loot", "apply_loot"]
