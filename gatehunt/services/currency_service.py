"""Gold and diamond balances.

Balance changes are a single conditional UPDATE (``balance + delta >= 0``) so
concurrent spends cannot overdraw. Every change writes a ``CurrencyTransaction``
ledger row in the same transaction.
"""

from __future__ import annotations

from typing import List

from sqlalchemy import update

from gatehunt import db
from gatehunt.errors import InsufficientFunds, InvalidInput, NotFound
from gatehunt.events import emit_hunter_update
from gatehunt.logging_utils import get_logger
from gatehunt.models import CurrencyTransaction, Hunter
from gatehunt.services.hunter_service import get_owned_hunter, load_hunter
from gatehunt.services.tx import commit
from gatehunt.services.validation import MAX_INT, require_int, require_within_max

log = get_logger("currency")

HISTORY_DEFAULT_LIMIT = 50
HISTORY_MAX_LIMIT = 200


def apply_currency_delta(hunter: Hunter, gold_delta: int, diamond_delta: int, reason: str) -> CurrencyTransaction:
    """Apply deltas and stage the ledger row without committing.

    Raises ``InsufficientFunds`` when a balance would go negative and
    ``InvalidInput`` (limit_exceeded) when it would pass ``MAX_INT``.
    """
    require_within_max(hunter.gold + gold_delta, "gold")
    require_within_max(hunter.diamonds + diamond_delta, "diamonds")
    stmt = (
        update(Hunter)
        .where(
            Hunter.id == hunter.id,
            Hunter.gold + gold_delta >= 0,
            Hunter.diamonds + diamond_delta >= 0,
            Hunter.gold + gold_delta <= MAX_INT,
            Hunter.diamonds + diamond_delta <= MAX_INT,
        )
        .values(gold=Hunter.gold + gold_delta, diamonds=Hunter.diamonds + diamond_delta)
        .execution_options(synchronize_session=False)
    )
    res = db.session.execute(stmt)
    if res.rowcount != 1:
        db.session.rollback()
        db.session.refresh(hunter)
        # a concurrent credit can push the balance past the ceiling
        if hunter.gold + gold_delta >= 0 and hunter.diamonds + diamond_delta >= 0:
            raise InvalidInput(f"Balance would exceed {MAX_INT}.", code="limit_exceeded")
        raise InsufficientFunds(gold_delta=gold_delta, diamond_delta=diamond_delta)
    db.session.refresh(hunter)
    tx = CurrencyTransaction(
        hunter_id=hunter.id,
        gold_delta=gold_delta,
        diamond_delta=diamond_delta,
        gold_after=hunter.gold,
        diamonds_after=hunter.diamonds,
        reason=reason,
    )
    db.session.add(tx)
    return tx


def adjust_currency(hunter_id, gold_delta=0, diamond_delta=0, user_id=None, reason: str = "adjust") -> dict:
    """Atomically add (or subtract) gold/diamonds.

    ``user_id`` of None skips the ownership check (server-side rewards).
    Returns the new balances.
    """
    require_int(gold_delta, "gold_delta")
    require_int(diamond_delta, "diamond_delta")
    if gold_delta == 0 and diamond_delta == 0:
        raise InvalidInput("Amount must be non-zero.", field="amount")
    if user_id is None:
        hunter = load_hunter(hunter_id)
        if hunter is None:
            raise NotFound("Hunter not found.")
    else:
        hunter = get_owned_hunter(hunter_id, user_id)

    apply_currency_delta(hunter, gold_delta, diamond_delta, reason)
    commit("adjust_currency", hunter_id=hunter.id)
    log.info(
        event="currency_adjusted",
        hunter_id=hunter.id,
        gold_delta=gold_delta,
        diamond_delta=diamond_delta,
        gold=hunter.gold,
        diamonds=hunter.diamonds,
        reason=reason,
    )
    emit_hunter_update(hunter)
    return {"success": True, "hunter_id": hunter.id, "gold": hunter.gold, "diamonds": hunter.diamonds}


def currency_history(hunter_id, user_id, limit=HISTORY_DEFAULT_LIMIT) -> List[CurrencyTransaction]:
    """Newest-first ledger rows for an owned hunter."""
    hunter = get_owned_hunter(hunter_id, user_id)
    limit = max(1, min(int(limit), HISTORY_MAX_LIMIT))
    return (
        CurrencyTransaction.query.filter_by(hunter_id=hunter.id)
        .order_by(CurrencyTransaction.created_at.desc(), CurrencyTransaction.id.desc())
        .limit(limit)
        .all()
    )


__all__ = ["apply_currency_delta", "adjust_currency", "currency_history"]
