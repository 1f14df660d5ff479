"""Error taxonomy shared by the validator, the ledger stores and the HTTP layer.

Every error carries a stable ``code`` so callers can branch on the kind of
failure without matching on message text.
"""


class LedgerError(Exception):
    """Base class for all ledger failures."""

    code = "ledger_error"
    message = "ledger operation failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.message
        super().__init__(self.message)


# ===== VALIDATION =====


class TransactionValidationError(LedgerError):
    """Caller input was rejected before reaching the store."""

    code = "validation_error"
    message = "invalid transaction request"


class UserIDEmptyError(TransactionValidationError):
    code = "user_id_empty"
    message = "user_id cannot be empty"


class UserIDInvalidError(TransactionValidationError):
    code = "user_id_invalid"
    message = "user_id must be a valid UUID"


class CurrencyEmptyError(TransactionValidationError):
    code = "currency_empty"
    message = "currency cannot be empty"


class CurrencyInvalidError(TransactionValidationError):
    code = "currency_invalid"
    message = "currency must be lowercase alphanumeric or underscore and max 32 characters"


class AmountInvalidError(TransactionValidationError):
    code = "amount_invalid"
    message = "amount must be a finite integer number of minor currency units"


class UUIDInvalidError(TransactionValidationError):
    code = "uuid_invalid"
    message = "invalid UUID format"


# ===== LOOKUP / PAGINATION =====


class InvalidIDError(LedgerError):
    code = "invalid_id"
    message = "transaction id is not a valid UUID"


class TransactionNotFoundError(LedgerError):
    code = "not_found"
    message = "transaction not found"


class InvalidPaginationError(LedgerError):
    code = "invalid_pagination"
    message = "offset must not be negative"


# ===== BACKING STORE =====


class StoreError(LedgerError):
    """Environmental failure of the backing store. Never retried by the store."""

    code = "store_error"
    message = "backing store failure"


class StoreUnavailableError(StoreError):
    code = "store_unavailable"
    message = "backing store unavailable"


class StoreTimeoutError(StoreError):
    code = "timeout"
    message = "backing store operation timed out"
