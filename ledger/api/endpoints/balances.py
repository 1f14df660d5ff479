from fastapi import APIRouter, Depends, Query

from ledger.core.dependencies import get_store, get_validator
from ledger.schemas.transaction import AllBalancesResponse, BalanceResponse
from ledger.services.ledger_store import LedgerStore
from ledger.services.validator import TransactionValidator

router = APIRouter()


@router.get("", response_model=BalanceResponse | AllBalancesResponse)
async def get_balance(
    user_id: str = Query("", description="Owner of the balances"),
    currency: str | None = Query(None, description="Return only this currency's balance"),
    store: LedgerStore = Depends(get_store),
    validator: TransactionValidator = Depends(get_validator),
):
    """
    Get a user's balance.

    With **currency** returns that single balance (0 when the user never
    transacted in it). Without it returns one entry per currency the user
    has history in, ordered by currency code; zero balances are included.
    """
    validator.validate_user_id(user_id)

    if currency:
        validator.validate_currency(currency)
        balance = await store.get_balance(user_id, currency)
        return BalanceResponse(user_id=user_id, currency=currency, balance=balance)

    balances = await store.get_all_balances(user_id)
    return AllBalancesResponse(user_id=user_id, balances=balances)
