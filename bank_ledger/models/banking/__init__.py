"""Banking domain models."""

from bank_ledger.models.banking.account import Account
from bank_ledger.models.banking.branch import Branch
from bank_ledger.models.banking.customer import Customer
from bank_ledger.models.banking.enums import (
    AccountStatus,
    AccountType,
    LoanStatus,
    LoanType,
    TransactionMethod,
    TransactionType,
)
from bank_ledger.models.banking.loan import Loan
from bank_ledger.models.banking.transaction import Transaction

__all__ = [
    "Account",
    "AccountStatus",
    "AccountType",
    "Branch",
    "Customer",
    "Loan",
    "LoanStatus",
    "LoanType",
    "Transaction",
    "TransactionMethod",
    "TransactionType",
]
