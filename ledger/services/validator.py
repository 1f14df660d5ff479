"""Format rules for incoming transaction requests."""
import math
import re

from ledger.core.exceptions import (
    AmountInvalidError,
    CurrencyEmptyError,
    CurrencyInvalidError,
    UserIDEmptyError,
    UserIDInvalidError,
    UUIDInvalidError,
)

MAX_CURRENCY_LENGTH = 32
MIN_AMOUNT = -(2**63)
MAX_AMOUNT = 2**63 - 1


class TransactionValidator:
    """
    Stateless rule-checker for transaction requests.

    Matchers are compiled once per instance, so validators with different
    user ID policies can live side by side.
    """

    def __init__(self, require_uuid_user_ids: bool = True):
        """
        Args:
            require_uuid_user_ids: Reject user IDs that are not canonical
                lower-case UUIDs. When False any non-empty string is accepted.
        """
        self.require_uuid_user_ids = require_uuid_user_ids
        self._currency_regex = re.compile(r"[a-z0-9_]+")
        self._uuid_regex = re.compile(
            r"[a-f0-9]{8}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{12}"
        )

    def validate_transaction_request(
        self, user_id: str, amount: int | float, currency: str
    ) -> None:
        """
        Validate a transaction creation request.

        Checks run in order user_id, currency, amount; the first failure wins.

        Raises:
            TransactionValidationError: One of its subclasses naming the
                offending field.
        """
        self.validate_user_id(user_id)
        self.validate_currency(currency)
        self.validate_amount(amount)

    def validate_user_id(self, user_id: str) -> None:
        if not user_id:
            raise UserIDEmptyError()
        if self.require_uuid_user_ids and not self._uuid_regex.fullmatch(user_id):
            raise UserIDInvalidError()

    def validate_currency(self, currency: str) -> None:
        if not currency:
            raise CurrencyEmptyError()
        if len(currency) > MAX_CURRENCY_LENGTH:
            raise CurrencyInvalidError()
        if not self._currency_regex.fullmatch(currency):
            raise CurrencyInvalidError()

    def validate_amount(self, amount: int | float) -> None:
        # bool is an int subclass but never a meaningful amount
        if isinstance(amount, bool) or not isinstance(amount, (int, float)):
            raise AmountInvalidError()
        if isinstance(amount, float):
            if not math.isfinite(amount):
                raise AmountInvalidError()
            if not amount.is_integer():
                raise AmountInvalidError("amount must be a whole number of minor currency units")
        if not MIN_AMOUNT <= amount <= MAX_AMOUNT:
            raise AmountInvalidError("amount is outside the 64-bit integer range")

    def validate_uuid(self, value: str) -> None:
        if not self._uuid_regex.fullmatch(value):
            raise UUIDInvalidError()

    def normalize_amount(self, amount: int | float) -> int:
        """Return a validated amount as the integer stored in the ledger."""
        self.validate_amount(amount)
        return int(amount)
