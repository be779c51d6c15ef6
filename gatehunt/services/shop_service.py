"""Item shop.

Items with a ``price`` are for sale. A purchase debits gold through the
currency ledger (reason ``purchase``) and stages the inventory grant in the
same transaction, so a failed debit leaves the inventory untouched and a
failed write leaves the balance untouched.
"""

from __future__ import annotations

from typing import List

from sqlalchemy.exc import SQLAlchemyError

from gatehunt import db
from gatehunt.errors import Internal, InvalidInput
from gatehunt.events import emit_hunter_update
from gatehunt.inventory.utils import add_inventory_item, check_capacity, list_inventory
from gatehunt.logging_utils import get_logger
from gatehunt.models import Item
from gatehunt.services.currency_service import apply_currency_delta
from gatehunt.services.hunter_service import get_owned_hunter
from gatehunt.services.validation import require_positive_int, require_within_max

log = get_logger("shop")


def list_shop_items() -> List[Item]:
    return Item.query.filter(Item.price.isnot(None)).order_by(Item.price.asc(), Item.id.asc()).all()


def _for_sale(item_id) -> Item:
    if not isinstance(item_id, str) or not item_id.strip():
        raise InvalidInput("itemId is required.", field="itemId")
    item = db.session.get(Item, item_id.strip())
    if item is None:
        raise InvalidInput(f"Unknown item: {item_id}.", code="unknown_item", item_id=item_id)
    if item.price is None:
        raise InvalidInput(f"{item.name} is not sold in the shop.", code="not_for_sale", item_id=item.id)
    return item


def purchase_item(user_id, hunter_id, item_id, quantity=1) -> dict:
    """Buy ``quantity`` units of a shop item for an owned hunter.

    Raises ``InsufficientFunds`` when the hunter cannot pay; nothing is
    written in that case.
    """
    quantity = require_positive_int(1 if quantity is None else quantity, "quantity")
    item = _for_sale(item_id)
    cost = require_within_max(item.price * quantity, "cost")
    hunter = get_owned_hunter(hunter_id, user_id)
    check_capacity(hunter.id, item, quantity)

    try:
        # debit first: InsufficientFunds rolls back before the grant is staged
        apply_currency_delta(hunter, -cost, 0, reason="purchase")
        add_inventory_item(hunter.id, item, quantity)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        log.error(event="purchase_failed", hunter_id=hunter.id, item_id=item.id, error=str(e))
        raise Internal("Purchase failed; no gold was spent.") from e

    log.info(event="item_purchased", hunter_id=hunter.id, item_id=item.id, quantity=quantity, cost=cost)
    emit_hunter_update(hunter)
    return {
        "success": True,
        "itemId": item.id,
        "quantity": quantity,
        "cost": cost,
        "gold": hunter.gold,
        "inventory": list_inventory(hunter.id),
    }


__all__ = ["list_shop_items", "purchase_item"]
