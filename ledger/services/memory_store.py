"""In-process ledger store with the same contract as SqlAlchemyLedgerStore."""
import uuid
from datetime import datetime, timezone

from ledger.core.exceptions import TransactionNotFoundError
from ledger.schemas.transaction import CurrencyBalance, TransactionCreated, TransactionRead
from ledger.services.balances import sum_all_balances, sum_balance
from ledger.services.ledger_store import check_pagination, parse_transaction_id


class InMemoryLedgerStore:
    """
    Ledger store keeping rows in a list.

    Used by tests and local runs without a database. Each operation completes
    without awaiting, so rows are never observed half-written. Timeouts are
    accepted for contract compatibility; there is no I/O to bound.
    """

    def __init__(self):
        self._rows: list[TransactionRead] = []
        self._by_id: dict[uuid.UUID, TransactionRead] = {}

    async def create_schema(self) -> None:
        return None

    async def close(self) -> None:
        return None

    async def create(
        self, user_id: str, amount: int, currency: str, *, timeout: float | None = None
    ) -> TransactionCreated:
        timestamp = datetime.now(timezone.utc)
        # Timestamps never go backwards in insertion order, even if the clock does
        if self._rows and timestamp < self._rows[-1].timestamp:
            timestamp = self._rows[-1].timestamp

        record = TransactionRead(
            id=uuid.uuid4(),
            user_id=user_id,
            amount=amount,
            currency=currency,
            timestamp=timestamp,
        )
        self._rows.append(record)
        self._by_id[record.id] = record

        return TransactionCreated(id=record.id, timestamp=record.timestamp)

    async def get_by_id(
        self, transaction_id: str | uuid.UUID, *, timeout: float | None = None
    ) -> TransactionRead:
        record = self._by_id.get(parse_transaction_id(transaction_id))
        if record is None:
            raise TransactionNotFoundError()
        return record

    async def list_by_user(
        self,
        user_id: str,
        currency: str | None = None,
        limit: int = 0,
        offset: int = 0,
        *,
        timeout: float | None = None,
    ) -> list[TransactionRead]:
        check_pagination(offset)

        matching = [
            t
            for t in self._rows
            if t.user_id == user_id and (currency is None or t.currency == currency)
        ]
        matching.sort(key=lambda t: (t.timestamp, t.id), reverse=True)

        if limit > 0:
            return matching[offset : offset + limit]
        return matching[offset:]

    async def get_balance(
        self, user_id: str, currency: str, *, timeout: float | None = None
    ) -> int:
        return sum_balance(self._rows, user_id, currency)

    async def get_all_balances(
        self, user_id: str, *, timeout: float | None = None
    ) -> list[CurrencyBalance]:
        return sum_all_balances(self._rows, user_id)
