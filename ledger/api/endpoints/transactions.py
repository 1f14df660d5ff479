from fastapi import APIRouter, Depends, Query, status

from ledger.core.dependencies import get_store, get_validator
from ledger.schemas.transaction import (
    TransactionCreate,
    TransactionCreated,
    TransactionListResponse,
    TransactionRead,
)
from ledger.services.ledger_store import LedgerStore
from ledger.services.validator import TransactionValidator

router = APIRouter()


@router.post("", response_model=TransactionCreated, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    transaction_data: TransactionCreate,
    store: LedgerStore = Depends(get_store),
    validator: TransactionValidator = Depends(get_validator),
):
    """
    Append a transaction to the ledger.

    - **user_id**: Owner of the transaction
    - **amount**: Signed integer in minor currency units (negative = debit)
    - **currency**: Lowercase code, letters/digits/underscore, max 32 chars
    """
    validator.validate_transaction_request(
        transaction_data.user_id, transaction_data.amount, transaction_data.currency
    )

    return await store.create(
        user_id=transaction_data.user_id,
        amount=validator.normalize_amount(transaction_data.amount),
        currency=transaction_data.currency,
    )


@router.get("", response_model=TransactionListResponse | TransactionRead)
async def list_transactions(
    transaction_id: str | None = Query(
        None, alias="id", description="Fetch this single transaction instead of listing"
    ),
    user_id: str = Query("", description="Owner of the transactions"),
    currency: str | None = Query(None, description="Only return this currency"),
    limit: int = Query(0, description="Page size; 0 or less returns every row"),
    offset: int = Query(0, description="Rows to skip; must not be negative"),
    store: LedgerStore = Depends(get_store),
    validator: TransactionValidator = Depends(get_validator),
):
    """
    List a user's transactions, newest first.

    Rows with equal timestamps are ordered by id, so consecutive
    limit/offset windows never overlap or skip rows. With **id** the single
    transaction is returned, as by `GET /transactions/{transaction_id}`.
    """
    if transaction_id is not None:
        return await store.get_by_id(transaction_id)

    validator.validate_user_id(user_id)
    if not currency:
        currency = None
    else:
        validator.validate_currency(currency)

    transactions = await store.list_by_user(
        user_id, currency=currency, limit=limit, offset=offset
    )
    return TransactionListResponse(transactions=transactions)


@router.get("/{transaction_id}", response_model=TransactionRead)
async def get_transaction(
    transaction_id: str,
    store: LedgerStore = Depends(get_store),
):
    """Get a single transaction by its id."""
    return await store.get_by_id(transaction_id)
