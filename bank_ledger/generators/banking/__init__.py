"""Banking domain generators."""

from bank_ledger.generators.banking.account import AccountGenerator
from bank_ledger.generators.banking.branch import BranchGenerator
from bank_ledger.generators.banking.customer import CustomerGenerator
from bank_ledger.generators.banking.loan import LoanGenerator
from bank_ledger.generators.banking.transaction import TransactionGenerator, TransactionRequest

__all__ = [
    "AccountGenerator",
    "BranchGenerator",
    "CustomerGenerator",
    "LoanGenerator",
    "TransactionGenerator",
    "TransactionRequest",
]
