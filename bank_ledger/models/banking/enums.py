"""Enumeration types for banking domain entities.

Values match the strings stored in the relational schema.
"""

from enum import Enum


class AccountType(str, Enum):
    SAVINGS = "Savings"
    CURRENT = "Current"


class AccountStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    FROZEN = "Frozen"
    CLOSED = "Closed"

    @property
    def accepts_transactions(self) -> bool:
        """Whether the ledger may append to an account in this status."""
        return self in (AccountStatus.ACTIVE, AccountStatus.INACTIVE)


class TransactionType(str, Enum):
    DEPOSIT = "Deposit"
    WITHDRAWAL = "Withdrawal"
    TRANSFER = "Transfer"
    FEE = "Fee"


class TransactionMethod(str, Enum):
    ONLINE = "Online"
    ATM = "ATM"
    BRANCH = "Branch"
    UPI = "UPI"
    CHEQUE = "Cheque"


class LoanType(str, Enum):
    HOME = "Home"
    PERSONAL = "Personal"
    AUTO = "Auto"
    EDUCATION = "Education"
    BUSINESS = "Business"


class LoanStatus(str, Enum):
    ACTIVE = "Active"
    CLOSED = "Closed"
    DEFAULTED = "Defaulted"
