import pytest

from gatehunt import db
from gatehunt.errors import Forbidden, InsufficientFunds, InsufficientResource, InvalidInput
from gatehunt.models import CurrencyTransaction
from gatehunt.services.currency_service import adjust_currency, currency_history
from gatehunt.services.validation import MAX_INT
from tests.factories import create_hunter


def test_adjust_gold_and_ledger(user):
    hunter = create_hunter(user, gold=50)
    out = adjust_currency(hunter.id, gold_delta=25, user_id=user.id)
    assert out["gold"] == 75
    out = adjust_currency(hunter.id, gold_delta=-70, user_id=user.id, reason="shop")
    assert out["gold"] == 5
    rows = currency_history(hunter.id, user.id)
    assert [r.gold_delta for r in rows] == [-70, 25]
    assert rows[0].gold_after == 5
    assert rows[0].reason == "shop"


def test_overdraw_is_rejected_without_change(user):
    hunter = create_hunter(user, gold=10, diamonds=1)
    with pytest.raises(InsufficientFunds) as exc:
        adjust_currency(hunter.id, gold_delta=-11, user_id=user.id)
    assert isinstance(exc.value, InsufficientResource)
    with pytest.raises(InsufficientFunds):
        adjust_currency(hunter.id, diamond_delta=-2, user_id=user.id)
    db.session.refresh(hunter)
    assert (hunter.gold, hunter.diamonds) == (10, 1)
    assert CurrencyTransaction.query.count() == 0


def test_adjust_diamonds(user):
    hunter = create_hunter(user)
    out = adjust_currency(hunter.id, diamond_delta=3, user_id=user.id)
    assert out["diamonds"] == 3
    assert out["gold"] == 0


@pytest.mark.parametrize("amount", [0, 1.5, "5", True])
def test_adjust_currency_rejects_bad_amounts(user, amount):
    hunter = create_hunter(user)
    with pytest.raises(InvalidInput):
        adjust_currency(hunter.id, gold_delta=amount, user_id=user.id)


def test_adjust_currency_ownership(user, other_user):
    hunter = create_hunter(user, gold=5)
    with pytest.raises(Forbidden):
        adjust_currency(hunter.id, gold_delta=-5, user_id=other_user.id)
    with pytest.raises(Forbidden):
        currency_history(hunter.id, other_user.id)


def test_server_side_reward_skips_ownership(user):
    hunter = create_hunter(user)
    out = adjust_currency(hunter.id, gold_delta=7, reason="quest")
    assert out["gold"] == 7


@pytest.mark.parametrize("amount", [2**63, -(2**63), 2**31])
def test_adjust_currency_rejects_out_of_range_amounts(user, amount):
    hunter = create_hunter(user, gold=5)
    with pytest.raises(InvalidInput):
        adjust_currency(hunter.id, gold_delta=amount, user_id=user.id)
    db.session.refresh(hunter)
    assert hunter.gold == 5
    assert CurrencyTransaction.query.count() == 0


def test_balance_ceiling_is_enforced(user):
    hunter = create_hunter(user, gold=MAX_INT - 10, diamonds=MAX_INT)
    with pytest.raises(InvalidInput) as exc:
        adjust_currency(hunter.id, gold_delta=11, user_id=user.id)
    assert exc.value.code == "limit_exceeded"
    with pytest.raises(InvalidInput):
        adjust_currency(hunter.id, diamond_delta=1, user_id=user.id)
    assert adjust_currency(hunter.id, gold_delta=10, user_id=user.id)["gold"] == MAX_INT
    assert CurrencyTransaction.query.count() == 1
