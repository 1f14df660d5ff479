import random
from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

import pytest

from ledger.core.exceptions import StoreError
from ledger.schemas.transaction import CurrencyBalance, TransactionRead
from ledger.services.balances import (
    balances_from_rows,
    sum_all_balances,
    sum_balance,
    to_balance,
)

from helpers import USER_1, USER_2, create_transactions


# Test get_balance

@pytest.mark.asyncio
async def test_balance_credit_and_debit(store):
    """Test 10050 - 4250 = 5800."""
    await store.create("u1", 10050, "usd")
    await store.create("u1", -4250, "usd")

    assert await store.get_balance("u1", "usd") == 5800


@pytest.mark.asyncio
async def test_balance_no_transactions_is_zero(store):
    """Test an empty partition reports 0 rather than an error."""
    assert await store.get_balance(USER_1, "usd") == 0


@pytest.mark.asyncio
async def test_balance_negative(store):
    """Test a partition can go below zero."""
    await create_transactions(store, USER_1, [100, -350])

    assert await store.get_balance(USER_1, "usd") == -250


@pytest.mark.asyncio
async def test_balance_currency_isolation(store):
    """Test amounts in other currencies or for other users never contribute."""
    await create_transactions(store, USER_1, [1000, 2000, 3000], currencies=("usd", "eur"))
    await create_transactions(store, USER_2, [50_000])

    assert await store.get_balance(USER_1, "usd") == 4000
    assert await store.get_balance(USER_1, "eur") == 2000
    assert await store.get_balance(USER_1, "brl") == 0
    assert await store.get_balance(USER_2, "usd") == 50_000


@pytest.mark.asyncio
async def test_balance_is_exact_for_large_amounts(store):
    """Test sums beyond float precision stay exact."""
    amounts = [2**53, 1, 1, -(2**52), 10**15 + 7]
    await create_transactions(store, USER_1, amounts)

    assert await store.get_balance(USER_1, "usd") == sum(amounts)


@pytest.mark.asyncio
async def test_balance_independent_of_creation_order(store):
    """Test the same amounts in a different order give the same balance."""
    amounts = [random.randint(-100_000, 100_000) for _ in range(25)]
    shuffled = random.sample(amounts, len(amounts))

    await create_transactions(store, USER_1, amounts)
    await create_transactions(store, USER_2, shuffled)

    assert await store.get_balance(USER_1, "usd") == sum(amounts)
    assert await store.get_balance(USER_2, "usd") == sum(amounts)


# Test get_all_balances

@pytest.mark.asyncio
async def test_all_balances_one_entry_per_currency(store):
    """Test one balance per currency, ordered by currency code."""
    await create_transactions(
        store,
        USER_1,
        [10000, 5050, 7525, 2500, 20000],
        currencies=("usd", "usd", "eur", "eur", "gbp"),
    )

    balances = await store.get_all_balances(USER_1)

    assert balances == [
        CurrencyBalance(currency="eur", balance=10025),
        CurrencyBalance(currency="gbp", balance=20000),
        CurrencyBalance(currency="usd", balance=15050),
    ]


@pytest.mark.asyncio
async def test_all_balances_include_zero_net(store):
    """Test a currency netting to zero is still reported."""
    await create_transactions(store, USER_1, [500, -500], currencies=("usd",))
    await create_transactions(store, USER_1, [0], currencies=("loyalty_points",))

    balances = await store.get_all_balances(USER_1)

    assert balances == [
        CurrencyBalance(currency="loyalty_points", balance=0),
        CurrencyBalance(currency="usd", balance=0),
    ]


@pytest.mark.asyncio
async def test_all_balances_empty_user(store):
    """Test a user without history gets an empty list."""
    assert await store.get_all_balances(USER_1) == []


@pytest.mark.asyncio
async def test_all_balances_isolates_users(store):
    """Test other users' rows never leak into the result."""
    await create_transactions(store, USER_1, [100], currencies=("usd",))
    await create_transactions(store, USER_2, [200, 300], currencies=("usd", "eur"))

    assert await store.get_all_balances(USER_1) == [
        CurrencyBalance(currency="usd", balance=100)
    ]


@pytest.mark.asyncio
async def test_all_balances_match_single_balances(store):
    """Test every entry agrees with get_balance for that currency."""
    await create_transactions(
        store, USER_1, [7, -3, 11, 13, -17, 19], currencies=("usd", "eur", "btc")
    )

    for entry in await store.get_all_balances(USER_1):
        assert entry.balance == await store.get_balance(USER_1, entry.currency)


# Test pure helpers

def _record(user_id, amount, currency):
    return TransactionRead(
        id=uuid4(),
        user_id=user_id,
        amount=amount,
        currency=currency,
        timestamp=datetime.now(timezone.utc),
    )


def test_sum_helpers():
    """Test in-memory summation filters on user and currency."""
    rows = [
        _record("a", 5, "usd"),
        _record("a", -2, "usd"),
        _record("a", 9, "eur"),
        _record("b", 100, "usd"),
    ]

    assert sum_balance(rows, "a", "usd") == 3
    assert sum_balance(rows, "a", "brl") == 0
    assert sum_all_balances(rows, "a") == [
        CurrencyBalance(currency="eur", balance=9),
        CurrencyBalance(currency="usd", balance=3),
    ]
    assert sum_all_balances(rows, "c") == []


def test_to_balance():
    """Test aggregate results normalize to exact ints."""
    assert to_balance(None) == 0
    assert to_balance(42) == 42
    assert to_balance(Decimal("-9007199254740993")) == -9007199254740993

    with pytest.raises(StoreError):
        to_balance(Decimal("1.5"))


def test_balances_from_rows_sorts_by_codepoint():
    """Test rows are ordered by currency code regardless of input order."""
    rows = [
        SimpleNamespace(currency="usd", balance=Decimal("10")),
        SimpleNamespace(currency="a_b", balance=1),
        SimpleNamespace(currency="a1", balance=None),
    ]

    assert balances_from_rows(rows) == [
        CurrencyBalance(currency="a1", balance=0),
        CurrencyBalance(currency="a_b", balance=1),
        CurrencyBalance(currency="usd", balance=10),
    ]
