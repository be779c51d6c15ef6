"""Hunter inventory actions: using consumables and dropping items.

Using a consumable spends one unit with a conditional UPDATE
(``quantity >= 1``) so two concurrent uses of the last potion cannot both
apply. Restores are clamped to the hunter's derived maxima.
"""

from __future__ import annotations

from sqlalchemy import delete, update

from gatehunt import db
from gatehunt.errors import Conflict, InvalidInput
from gatehunt.events import emit_hunter_update
from gatehunt.inventory.utils import get_inventory_row, list_inventory, remove_inventory_units
from gatehunt.logging_utils import get_logger
from gatehunt.models import InventoryItem
from gatehunt.services.hunter_service import get_owned_hunter
from gatehunt.services.stats import max_hp, max_mp
from gatehunt.services.tx import commit
from gatehunt.services.validation import parse_id, require_positive_int

log = get_logger("inventory")

CONSUMABLE_TYPE = "consumable"


def use_item(user_id, hunter_id, inventory_id) -> dict:
    """Consume one unit of a consumable and apply its restore effects."""
    inventory_id = parse_id(inventory_id, "inventoryId")
    hunter = get_owned_hunter(hunter_id, user_id)
    row = get_inventory_row(hunter.id, inventory_id)
    item = row.item
    effects = item.effects or {}
    if item.type != CONSUMABLE_TYPE or not effects:
        raise InvalidInput(f"{item.name} is not consumable.", code="not_consumable", item_id=item.id)

    hp_cap = max_hp(hunter.vitality, hunter.level)
    mp_cap = max_mp(hunter.intelligence, hunter.level)
    # None means full
    hp = hp_cap if hunter.current_hp is None else hunter.current_hp
    mp = mp_cap if hunter.current_mp is None else hunter.current_mp
    new_hp = max(hp, min(hp_cap, hp + int(effects.get("restoreHp", 0))))
    new_mp = max(mp, min(mp_cap, mp + int(effects.get("restoreMp", 0))))

    res = db.session.execute(
        update(InventoryItem)
        .where(InventoryItem.id == row.id, InventoryItem.quantity >= 1)
        .values(quantity=InventoryItem.quantity - 1)
        .execution_options(synchronize_session=False)
    )
    if res.rowcount != 1:
        db.session.rollback()
        raise Conflict("Item was already used up.", code="concurrent_update")
    db.session.execute(
        delete(InventoryItem)
        .where(InventoryItem.id == row.id, InventoryItem.quantity <= 0)
        .execution_options(synchronize_session=False)
    )
    hunter.current_hp = new_hp
    hunter.current_mp = new_mp
    db.session.expire(row)
    commit("use_item", hunter_id=hunter.id, inventory_id=inventory_id)

    log.info(event="item_used", hunter_id=hunter.id, item_id=item.id, hp=new_hp - hp, mp=new_mp - mp)
    emit_hunter_update(hunter)
    return {
        "success": True,
        "itemId": item.id,
        "restoredHp": new_hp - hp,
        "restoredMp": new_mp - mp,
        "currentHp": hunter.current_hp,
        "currentMp": hunter.current_mp,
        "inventory": list_inventory(hunter.id),
    }


def drop_item(user_id, hunter_id, inventory_id, quantity=1) -> dict:
    """Discard ``quantity`` units from one inventory row.

    Dropping at least the whole stack deletes the row.
    """
    inventory_id = parse_id(inventory_id, "inventoryId")
    quantity = require_positive_int(1 if quantity is None else quantity, "quantity")
    hunter = get_owned_hunter(hunter_id, user_id)
    row = get_inventory_row(hunter.id, inventory_id)
    item_id = row.item_id
    remaining = remove_inventory_units(row, quantity)
    commit("drop_item", hunter_id=hunter.id, inventory_id=inventory_id)
    log.info(event="item_dropped", hunter_id=hunter.id, item_id=item_id, quantity=quantity, remaining=remaining)
    return {"message": "Item dropped.", "remaining": remaining, "inventory": list_inventory(hunter.id)}


__all__ = ["use_item", "drop_item"]
