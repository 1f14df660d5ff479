"""
Balances derived from the transaction log.

Nothing here stores a balance: every figure is recomputed from the ledger
rows, either by the database's aggregation (SQL stores) or by summing
Python ints (in-memory store). Both paths are exact integer arithmetic, so
the result does not depend on summation order.
"""
from collections.abc import Iterable, Sequence
from decimal import Decimal

from sqlalchemy import Row, Select, func, select

from ledger.core.exceptions import StoreError
from ledger.models.transaction import Transaction
from ledger.schemas.transaction import CurrencyBalance, TransactionRead


def balance_query(user_id: str, currency: str) -> Select:
    """Build SUM(amount) over one (user_id, currency) partition, 0 when empty."""
    return select(func.coalesce(func.sum(Transaction.amount), 0)).where(
        Transaction.user_id == user_id,
        Transaction.currency == currency,
    )


def all_balances_query(user_id: str) -> Select:
    """Build one SUM(amount) row per currency the user has transacted in."""
    return (
        select(
            Transaction.currency,
            func.sum(Transaction.amount).label("balance"),
        )
        .where(Transaction.user_id == user_id)
        .group_by(Transaction.currency)
    )


def to_balance(total: int | Decimal | None) -> int:
    """
    Normalize an aggregate result to int.

    PostgreSQL returns NUMERIC (Decimal) for SUM(BIGINT); that is exact, so
    the conversion loses nothing.
    """
    if total is None:
        return 0
    if isinstance(total, Decimal) and total != total.to_integral_value():
        raise StoreError(f"non-integral balance aggregate: {total}")
    return int(total)


def balances_from_rows(rows: Sequence[Row]) -> list[CurrencyBalance]:
    """Turn (currency, balance) aggregate rows into CurrencyBalance, sorted by currency."""
    balances = [
        CurrencyBalance(currency=row.currency, balance=to_balance(row.balance))
        for row in rows
    ]
    # Codepoint order, independent of database collation
    return sorted(balances, key=lambda b: b.currency)


def sum_balance(
    transactions: Iterable[TransactionRead], user_id: str, currency: str
) -> int:
    return sum(
        t.amount for t in transactions if t.user_id == user_id and t.currency == currency
    )


def sum_all_balances(
    transactions: Iterable[TransactionRead], user_id: str
) -> list[CurrencyBalance]:
    totals: dict[str, int] = {}
    for t in transactions:
        if t.user_id != user_id:
            continue
        # A partition with history is reported even when it nets to zero
        totals[t.currency] = totals.get(t.currency, 0) + t.amount

    return [
        CurrencyBalance(currency=currency, balance=balance)
        for currency, balance in sorted(totals.items())
    ]
