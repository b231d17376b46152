"""Account model for banking domain."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from bank_ledger.models.banking.enums import AccountStatus, AccountType


@dataclass
class Account:
    """Bank account entity.

    ``balance`` is a cached value owned by the balance maintainer. It always
    equals ``opening_balance`` plus the signed sum of the account's
    transactions. ``opening_balance`` defaults to the balance the account
    was registered with.
    """

    account_id: str
    customer_id: str
    account_type: AccountType
    balance: Decimal
    created_date: date
    status: AccountStatus
    opening_balance: Decimal | None = None
