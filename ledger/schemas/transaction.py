from datetime import datetime, timezone
from uuid import UUID

from pydantic import BaseModel, StrictFloat, StrictInt, field_validator


def _as_utc(value: datetime) -> datetime:
    # Some backends (SQLite) hand back naive datetimes; the ledger stores UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class TransactionCreate(BaseModel):
    """Schema for creating a transaction. Format rules live in TransactionValidator."""

    user_id: str
    amount: StrictInt | StrictFloat  # Minor currency units, e.g. 10050 for 100.50
    currency: str


class TransactionCreated(BaseModel):
    """Identifier and creation time assigned by the store."""

    model_config = {"frozen": True}

    id: UUID
    timestamp: datetime

    @field_validator("timestamp")
    def ensure_utc(cls, v):
        return _as_utc(v)


class TransactionRead(BaseModel):
    """An immutable ledger entry as returned by the store."""

    model_config = {"from_attributes": True, "frozen": True}

    id: UUID
    user_id: str
    amount: int
    currency: str
    timestamp: datetime

    @field_validator("timestamp")
    def ensure_utc(cls, v):
        return _as_utc(v)


class TransactionListResponse(BaseModel):
    """Page of transactions, newest first."""

    transactions: list[TransactionRead]


class CurrencyBalance(BaseModel):
    """Balance of a single currency partition."""

    model_config = {"frozen": True}

    currency: str
    balance: int


class BalanceResponse(BaseModel):
    user_id: str
    currency: str
    balance: int


class AllBalancesResponse(BaseModel):
    user_id: str
    balances: list[CurrencyBalance]


class ErrorResponse(BaseModel):
    error: str
    code: str
