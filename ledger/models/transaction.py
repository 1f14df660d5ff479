from sqlalchemy import BigInteger, Column, DateTime, Index, String, Uuid
from sqlalchemy.sql import func

from ledger.database import Base


class Transaction(Base):
    __tablename__ = "transactions"
    __table_args__ = (
        # Serves both the filtered listing and the balance aggregation
        Index("ix_transactions_user_currency_timestamp", "user_id", "currency", "timestamp"),
        # Latest timestamp lookup on insert
        Index("ix_transactions_timestamp", "timestamp"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True)  # Generated by the store
    user_id = Column(String, nullable=False)
    amount = Column(BigInteger, nullable=False)  # Minor currency units (e.g. cents)
    currency = Column(String(32), nullable=False)  # Lowercase [a-z0-9_], max 32 chars
    timestamp = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
