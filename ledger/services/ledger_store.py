"""
Append-only transaction log.

LedgerStore is the contract the HTTP layer depends on; SqlAlchemyLedgerStore
persists through SQLAlchemy's asyncio engine (PostgreSQL via asyncpg in
production) and InMemoryLedgerStore (see memory_store) keeps rows in a list.

Stores never validate request formats, never log and never retry: failures
are raised to the caller as LedgerError subclasses.
"""
import asyncio
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Protocol

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from ledger.core.exceptions import (
    InvalidIDError,
    InvalidPaginationError,
    StoreTimeoutError,
    StoreUnavailableError,
    TransactionNotFoundError,
)
from ledger.database import Base, create_ledger_engine
from ledger.models.transaction import Transaction
from ledger.schemas.transaction import CurrencyBalance, TransactionCreated, TransactionRead
from ledger.services.balances import (
    all_balances_query,
    balance_query,
    balances_from_rows,
    to_balance,
)


class LedgerStore(Protocol):
    """Create/read/list/aggregate capabilities over the transaction log."""

    async def create(
        self, user_id: str, amount: int, currency: str, *, timeout: float | None = None
    ) -> TransactionCreated:
        """Append one transaction; the store assigns its id and timestamp."""
        ...

    async def get_by_id(
        self, transaction_id: str | uuid.UUID, *, timeout: float | None = None
    ) -> TransactionRead:
        """Exact lookup. Raises InvalidIDError or TransactionNotFoundError."""
        ...

    async def list_by_user(
        self,
        user_id: str,
        currency: str | None = None,
        limit: int = 0,
        offset: int = 0,
        *,
        timeout: float | None = None,
    ) -> list[TransactionRead]:
        """Newest first, ties broken by id. limit <= 0 returns every matching row."""
        ...

    async def get_balance(
        self, user_id: str, currency: str, *, timeout: float | None = None
    ) -> int:
        """Exact sum of amounts in one currency partition, 0 when empty."""
        ...

    async def get_all_balances(
        self, user_id: str, *, timeout: float | None = None
    ) -> list[CurrencyBalance]:
        """One balance per currency the user has ever transacted in."""
        ...

    async def create_schema(self) -> None:
        ...

    async def close(self) -> None:
        ...


def parse_transaction_id(transaction_id: str | uuid.UUID) -> uuid.UUID:
    """Parse a transaction id, raising InvalidIDError for malformed input."""
    if isinstance(transaction_id, uuid.UUID):
        return transaction_id
    try:
        return uuid.UUID(transaction_id)
    except (TypeError, ValueError, AttributeError) as exc:
        raise InvalidIDError() from exc


def check_pagination(offset: int) -> None:
    if offset < 0:
        raise InvalidPaginationError()


class SqlAlchemyLedgerStore:
    """
    Ledger store persisted through an AsyncEngine.

    The store owns the engine's connection pool from construction until
    close(). Every operation runs under asyncio.timeout; expiry raises
    StoreTimeoutError and driver failures raise StoreUnavailableError. Task
    cancellation propagates as asyncio.CancelledError after the session has
    rolled back.
    """

    def __init__(self, engine: AsyncEngine, default_timeout: float | None = None):
        """
        Args:
            engine: Engine whose pool this store takes ownership of
            default_timeout: Seconds allowed per operation when the caller
                passes no timeout. None means no limit.
        """
        self._engine = engine
        self._sessionmaker = async_sessionmaker(
            engine, class_=AsyncSession, expire_on_commit=False
        )
        self._default_timeout = default_timeout

    @classmethod
    def from_url(
        cls, database_url: str | None = None, default_timeout: float | None = None
    ) -> "SqlAlchemyLedgerStore":
        return cls(create_ledger_engine(database_url), default_timeout=default_timeout)

    async def create_schema(self) -> None:
        """Create the transactions table and its index if they are missing."""
        async with self._guard("create_schema", None):
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        await self._engine.dispose()

    @asynccontextmanager
    async def _guard(self, operation: str, timeout: float | None) -> AsyncIterator[None]:
        if timeout is None:
            timeout = self._default_timeout
        try:
            async with asyncio.timeout(timeout):
                yield
        # TimeoutError subclasses OSError, so it must be caught first
        except TimeoutError as exc:
            raise StoreTimeoutError(f"{operation} timed out after {timeout}s") from exc
        except (SQLAlchemyError, OSError) as exc:
            raise StoreUnavailableError(f"{operation} failed: backing store unavailable") from exc

    @staticmethod
    async def _next_timestamp(session: AsyncSession) -> datetime:
        """
        Current UTC time, raised to the latest stored timestamp if the clock
        has stepped back, so timestamps never decrease in insertion order.
        """
        now = datetime.now(timezone.utc)
        latest = await session.scalar(select(func.max(Transaction.timestamp)))
        if latest is None:
            return now
        # SQLite hands back naive datetimes
        if latest.tzinfo is None:
            latest = latest.replace(tzinfo=timezone.utc)
        return max(now, latest)

    async def create(
        self, user_id: str, amount: int, currency: str, *, timeout: float | None = None
    ) -> TransactionCreated:
        transaction_id = uuid.uuid4()

        async with self._guard("create", timeout):
            async with self._sessionmaker() as session:
                # Commits on success, rolls back on any error or cancellation
                async with session.begin():
                    timestamp = await self._next_timestamp(session)
                    session.add(
                        Transaction(
                            id=transaction_id,
                            user_id=user_id,
                            amount=amount,
                            currency=currency,
                            timestamp=timestamp,
                        )
                    )

        return TransactionCreated(id=transaction_id, timestamp=timestamp)

    async def get_by_id(
        self, transaction_id: str | uuid.UUID, *, timeout: float | None = None
    ) -> TransactionRead:
        parsed_id = parse_transaction_id(transaction_id)

        async with self._guard("get_by_id", timeout):
            async with self._sessionmaker() as session:
                row = await session.get(Transaction, parsed_id)

        if row is None:
            raise TransactionNotFoundError()
        return TransactionRead.model_validate(row)

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

        query = select(Transaction).where(Transaction.user_id == user_id)
        if currency is not None:
            query = query.where(Transaction.currency == currency)
        query = query.order_by(Transaction.timestamp.desc(), Transaction.id.desc())
        if offset:
            query = query.offset(offset)
        if limit > 0:
            query = query.limit(limit)

        async with self._guard("list_by_user", timeout):
            async with self._sessionmaker() as session:
                result = await session.execute(query)
                rows = result.scalars().all()

        return [TransactionRead.model_validate(row) for row in rows]

    async def get_balance(
        self, user_id: str, currency: str, *, timeout: float | None = None
    ) -> int:
        async with self._guard("get_balance", timeout):
            async with self._sessionmaker() as session:
                total = await session.scalar(balance_query(user_id, currency))

        return to_balance(total)

    async def get_all_balances(
        self, user_id: str, *, timeout: float | None = None
    ) -> list[CurrencyBalance]:
        async with self._guard("get_all_balances", timeout):
            async with self._sessionmaker() as session:
                result = await session.execute(all_balances_query(user_id))
                rows = result.all()

        return balances_from_rows(rows)
