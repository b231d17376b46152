"""Read-only row types produced by the reporting layer."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from bank_ledger.models.banking.enums import LoanType, TransactionType


@dataclass(frozen=True)
class CustomerSummaryRow:
    customer_id: str
    full_name: str
    total_accounts: int
    total_balance: Decimal
    active_loans: int


@dataclass(frozen=True)
class BranchFlowRow:
    """Deposit and withdrawal totals attributed to one branch.

    ``branch_id`` is None for the unattributed bucket: traffic on accounts
    whose owner has no home branch.
    """

    branch_id: str | None
    branch_name: str
    total_deposits: Decimal
    total_withdrawals: Decimal


@dataclass(frozen=True)
class OverdraftRow:
    customer_id: str
    full_name: str
    overdraft_count: int


@dataclass(frozen=True)
class MonthlyInterestRow:
    month: date  # First day of the month
    estimated_interest: Decimal


@dataclass(frozen=True)
class AccountActivityRow:
    account_id: str
    transaction_count: int
    total_amount: Decimal


@dataclass(frozen=True)
class MultiAccountRow:
    customer_id: str
    full_name: str
    num_accounts: int


@dataclass(frozen=True)
class LoanTypeAverageRow:
    loan_type: LoanType
    average_loan_amount: Decimal


@dataclass(frozen=True)
class StatementLine:
    transaction_id: str
    account_id: str
    transaction_type: TransactionType
    amount: Decimal
    timestamp: datetime
    method: str


@dataclass(frozen=True)
class StatementTotals:
    transaction_count: int
    total_deposits: Decimal
    total_withdrawals: Decimal
    net_change: Decimal


@dataclass(frozen=True)
class ReconciliationResult:
    """Stored balance of an account compared with its replayed history."""

    account_id: str
    stored_balance: Decimal
    expected_balance: Decimal

    @property
    def discrepancy(self) -> Decimal:
        return self.stored_balance - self.expected_balance

    @property
    def is_consistent(self) -> bool:
        return self.discrepancy == 0
