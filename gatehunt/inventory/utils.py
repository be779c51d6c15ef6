"""Inventory utilities for stacking.

Stackable catalog items keep a single row per (hunter, item) whose quantity
grows; non-stackable items get one row per unit so each can later carry its
own state (enchantments, durability).

Canonical listing format:
    [ {"id": 4, "item_id": "hp-potion-small", "quantity": 3, "item": {...}}, ... ]
"""
from __future__ import annotations

from typing import Any, Dict, List

from gatehunt import db
from gatehunt.errors import InvalidInput, NotFound
from gatehunt.models.models import InventoryItem, Item
from gatehunt.services.validation import require_within_max

# One grant may not create more single-unit rows than this
MAX_UNSTACKED_UNITS = 100


def check_capacity(hunter_id: int, item: Item, quantity: int) -> None:
    """Raise ``InvalidInput`` if adding ``quantity`` would overflow a stack
    or fan out into more than ``MAX_UNSTACKED_UNITS`` rows. Writes nothing."""
    if item.stackable:
        require_within_max(count_item(hunter_id, item.id) + quantity, "quantity")
    elif quantity > MAX_UNSTACKED_UNITS:
        raise InvalidInput(
            f"At most {MAX_UNSTACKED_UNITS} units of {item.id} per grant.",
            code="limit_exceeded",
            field="quantity",
            item_id=item.id,
        )


def add_inventory_item(hunter_id: int, item: Item, quantity: int) -> List[InventoryItem]:
    """Stage ``quantity`` units of ``item`` for ``hunter_id``. Caller commits.

    Returns the rows touched (one for stackables, ``quantity`` rows otherwise).
    """
    if quantity <= 0:
        return []
    if item.stackable:
        row = InventoryItem.query.filter_by(hunter_id=hunter_id, item_id=item.id).first()
        if row is None:
            row = InventoryItem(hunter_id=hunter_id, item_id=item.id, quantity=0)
            db.session.add(row)
        row.quantity = (row.quantity or 0) + quantity
        return [row]
    rows = [InventoryItem(hunter_id=hunter_id, item_id=item.id, quantity=1) for _ in range(quantity)]
    db.session.add_all(rows)
    return rows


def get_inventory_row(hunter_id: int, inventory_id) -> InventoryItem:
    """Return the hunter's inventory row or raise ``NotFound``."""
    row = db.session.get(InventoryItem, inventory_id)
    if row is None or row.hunter_id != hunter_id:
        raise NotFound("Item not found in inventory.")
    return row


def remove_inventory_units(row: InventoryItem, quantity: int) -> int:
    """Stage removal of up to ``quantity`` units from ``row``. Caller commits.

    The row is deleted when nothing would remain. Returns the units left.
    """
    if quantity >= row.quantity:
        db.session.delete(row)
        return 0
    row.quantity -= quantity
    return row.quantity


def list_inventory(hunter_id: int) -> List[Dict[str, Any]]:
    rows = InventoryItem.query.filter_by(hunter_id=hunter_id).order_by(InventoryItem.id.asc()).all()
    return [r.to_dict() for r in rows]


def count_item(hunter_id: int, item_id: str) -> int:
    """Total units of ``item_id`` held, across stacks and single rows."""
    rows = InventoryItem.query.filter_by(hunter_id=hunter_id, item_id=item_id).all()
    return sum(r.quantity for r in rows)
