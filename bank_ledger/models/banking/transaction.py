"""Transaction model for banking domain."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from bank_ledger.models.banking.enums import TransactionType


@dataclass(frozen=True)
class Transaction:
    """Append-only ledger entry.

    Frozen: a recorded transaction is never edited. Corrections are new,
    compensating transactions.
    """

    transaction_id: str
    account_id: str
    transaction_type: TransactionType
    amount: Decimal  # always positive, sign comes from the type
    timestamp: datetime
    method: str
    incremental_id: int = 0  # Store-assigned append sequence
