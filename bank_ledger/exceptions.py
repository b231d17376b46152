"""Custom exception hierarchy for bank-ledger."""


class BankLedgerError(Exception):
    """Base exception for all bank-ledger errors."""


class EntityNotFoundError(BankLedgerError):
    """Raised when a referenced entity does not exist."""


class ReferentialIntegrityError(EntityNotFoundError):
    """Raised when a foreign key reference is violated."""


class CustomerNotFoundError(EntityNotFoundError):
    """Raised when a customer id does not reference an existing customer."""


class LoanNotFoundError(EntityNotFoundError):
    """Raised when a loan id does not reference an existing loan."""


class InvalidEntityStateError(BankLedgerError):
    """Raised when an entity is in an invalid state for the operation."""


class AccountNotEligibleError(InvalidEntityStateError):
    """Raised when an account cannot accept new transactions."""


class AccountNotFoundError(EntityNotFoundError, AccountNotEligibleError):
    """Raised when an account id does not reference an existing account.

    A missing account is also never eligible for mutation, so callers of
    the append path can catch either base.
    """


class DuplicateEntityError(BankLedgerError):
    """Raised when an entity id is already present in the store."""


class UnsupportedTransactionTypeError(BankLedgerError):
    """Raised when a transaction type has no balance rule."""


class InvalidAmountError(BankLedgerError):
    """Raised when a transaction amount is not a positive decimal."""


class ValidationError(BankLedgerError):
    """Raised when a report parameter is malformed."""


class ConfigurationError(BankLedgerError):
    """Raised when configuration is invalid or missing."""


class SinkError(BankLedgerError):
    """Raised when a sink operation fails."""
