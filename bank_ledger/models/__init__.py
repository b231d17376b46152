"""Domain and report models for bank-ledger."""

from bank_ledger.models.banking import (
    Account,
    AccountStatus,
    AccountType,
    Branch,
    Customer,
    Loan,
    LoanStatus,
    LoanType,
    Transaction,
    TransactionMethod,
    TransactionType,
)
from bank_ledger.models.reports import (
    AccountActivityRow,
    BranchFlowRow,
    CustomerSummaryRow,
    LoanTypeAverageRow,
    MonthlyInterestRow,
    MultiAccountRow,
    OverdraftRow,
    ReconciliationResult,
    StatementLine,
    StatementTotals,
)

__all__ = [
    "Account",
    "AccountActivityRow",
    "AccountStatus",
    "AccountType",
    "Branch",
    "BranchFlowRow",
    "Customer",
    "CustomerSummaryRow",
    "Loan",
    "LoanStatus",
    "LoanType",
    "LoanTypeAverageRow",
    "MonthlyInterestRow",
    "MultiAccountRow",
    "OverdraftRow",
    "ReconciliationResult",
    "StatementLine",
    "StatementTotals",
    "Transaction",
    "TransactionMethod",
    "TransactionType",
]
