from functools import lru_cache

from fastapi import Request

from ledger.config import settings
from ledger.core.exceptions import StoreUnavailableError
from ledger.services.ledger_store import LedgerStore
from ledger.services.validator import TransactionValidator


async def get_store(request: Request) -> LedgerStore:
    """
    Get the ledger store opened by the application lifespan.

    Args:
        request: FastAPI request object; the store lives on app.state

    Returns:
        LedgerStore: The process-wide store

    Raises:
        StoreUnavailableError: If the application has not opened a store
    """
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise StoreUnavailableError("ledger store is not initialized")
    return store


@lru_cache
def get_validator() -> TransactionValidator:
    """Validator configured with the deployment's user ID policy."""
    return TransactionValidator(require_uuid_user_ids=settings.USER_ID_UUID_ONLY)
