"""Derived, read-only summaries over accounts, transactions and loans.

Every report is recomputed from the store on each call. Reports take no
account locks, so a report running next to appends may mix balances from
before and after an in-flight append on another account.
"""

import logging
from collections import Counter, defaultdict
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from bank_ledger.config import ReportingConfig
from bank_ledger.exceptions import ValidationError
from bank_ledger.models.banking import (
    Account,
    AccountStatus,
    AccountType,
    Branch,
    Customer,
    Loan,
    LoanStatus,
    Transaction,
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
)
from bank_ledger.reports.periods import month_start, trailing_window
from bank_ledger.store.base import BankStore

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")
CENT = Decimal("0.01")
UNATTRIBUTED_BRANCH = "Unattributed"


def _positive_int(name: str, value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValidationError(f"{name} must be an integer >= 1, got {value!r}")
    return value


class AggregationEngine:
    """Point-in-time reports over the banking store.

    Parameters
    ----------
    store : BankStore
        Store to read from. Never written.
    config : ReportingConfig | None
        Defaults for windows and thresholds.
    """

    def __init__(self, store: BankStore, config: ReportingConfig | None = None) -> None:
        self.store = store
        self.config = config or ReportingConfig()

    def customer_summary(self) -> list[CustomerSummaryRow]:
        """Account count, total balance and active loans for every customer.

        Customers without accounts are included with zero aggregates.
        Rows are ordered by customer id.
        """
        accounts_by_customer: dict[str, list[Account]] = defaultdict(list)
        for account in self.store.list_accounts():
            accounts_by_customer[account.customer_id].append(account)

        active_loans = Counter(
            loan.account_id
            for loan in self.store.list_loans()
            if loan.status == LoanStatus.ACTIVE
        )

        rows = []
        for customer in sorted(self.store.list_customers(), key=lambda c: c.customer_id):
            accounts = accounts_by_customer.get(customer.customer_id, [])
            rows.append(
                CustomerSummaryRow(
                    customer_id=customer.customer_id,
                    full_name=customer.full_name,
                    total_accounts=len(accounts),
                    total_balance=sum((a.balance for a in accounts), ZERO),
                    active_loans=sum(active_loans[a.account_id] for a in accounts),
                )
            )
        logger.debug(
            "Customer summary: %d rows",
            len(rows),
            extra={"report": "customer_summary", "rows": len(rows)},
        )
        return rows

    def branch_flow(self) -> list[BranchFlowRow]:
        """Deposit and withdrawal totals per branch.

        A transaction counts toward the home branch of the customer owning
        its account. Traffic that cannot be attributed that way is reported
        in one trailing row with ``branch_id=None``. Branch rows are ordered
        by total deposits (descending), then branch id.
        """
        branches = self.store.list_branches()
        customers = {c.customer_id: c for c in self.store.list_customers()}
        owners = {a.account_id: a.customer_id for a in self.store.list_accounts()}

        totals: dict[str | None, list[Decimal]] = {b.branch_id: [ZERO, ZERO] for b in branches}
        for transaction in self.store.list_transactions():
            if transaction.transaction_type not in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL):
                continue
            owner = customers.get(owners.get(transaction.account_id, ""))
            branch_id = owner.home_branch_id if owner else None
            if branch_id not in totals:
                branch_id = None

            bucket = totals.setdefault(branch_id, [ZERO, ZERO])
            if transaction.transaction_type == TransactionType.DEPOSIT:
                bucket[0] += transaction.amount
            else:
                bucket[1] += transaction.amount

        rows = [
            BranchFlowRow(
                branch_id=b.branch_id,
                branch_name=b.branch_name,
                total_deposits=totals[b.branch_id][0],
                total_withdrawals=totals[b.branch_id][1],
            )
            for b in branches
        ]
        rows.sort(key=lambda r: (-r.total_deposits, r.branch_id))

        if None in totals:
            deposits, withdrawals = totals[None]
            logger.warning(
                "Branch flow: deposits %s / withdrawals %s belong to customers without a home branch",
                deposits,
                withdrawals,
                extra={"report": "branch_flow"},
            )
            rows.append(BranchFlowRow(None, UNATTRIBUTED_BRANCH, deposits, withdrawals))
        return rows

    def dormant_accounts(
        self,
        reference_date: date | datetime | None = None,
        window: timedelta | int | None = None,
    ) -> list[str]:
        """Ids of accounts with no transaction in the trailing window.

        Parameters
        ----------
        reference_date : date | datetime | None
            End of the window (default: now).
        window : timedelta | int | None
            Window length, or a number of days (default from config).
        """
        start, end = trailing_window(
            reference_date if reference_date is not None else datetime.now(),
            window if window is not None else self.config.dormant_window,
        )
        recent = {
            t.account_id for t in self.store.list_transactions() if start <= t.timestamp <= end
        }
        dormant = sorted(a.account_id for a in self.store.list_accounts() if a.account_id not in recent)
        logger.debug(
            "Dormant accounts between %s and %s: %d",
            start,
            end,
            len(dormant),
            extra={"report": "dormant_accounts", "rows": len(dormant)},
        )
        return dormant

    def overdraft_frequency(self) -> list[OverdraftRow]:
        """Customers holding at least one account with a negative balance.

        Ordered by overdraft count (descending), then customer id.
        """
        counts = Counter(a.customer_id for a in self.store.list_accounts() if a.balance < 0)
        customers = {c.customer_id: c for c in self.store.list_customers()}
        rows = [
            OverdraftRow(
                customer_id=customer_id,
                full_name=customers[customer_id].full_name if customer_id in customers else "",
                overdraft_count=count,
            )
            for customer_id, count in counts.items()
        ]
        rows.sort(key=lambda r: (-r.overdraft_count, r.customer_id))
        return rows

    def top_balances(self, n: int | None = None) -> list[CustomerSummaryRow]:
        """The ``n`` customers with the highest total balance.

        Ties are broken by customer id, ascending.

        Raises
        ------
        ValidationError
            If ``n`` is smaller than 1.
        """
        n = _positive_int("n", n if n is not None else self.config.top_n)
        rows = sorted(self.customer_summary(), key=lambda r: (-r.total_balance, r.customer_id))
        return rows[:n]

    def monthly_loan_interest_estimate(self) -> list[MonthlyInterestRow]:
        """Simple monthly interest of active loans, grouped by start month.

        Each month's estimate is ``sum(loan_amount * interest_rate) / 1200``
        rounded half-up to cents. Ordered by month.
        """
        by_month: dict[date, Decimal] = defaultdict(Decimal)
        for loan in self.store.list_loans():
            if loan.status != LoanStatus.ACTIVE:
                continue
            by_month[month_start(loan.start_date)] += Decimal(loan.loan_amount) * Decimal(loan.interest_rate)

        return [
            MonthlyInterestRow(
                month=month,
                estimated_interest=(weighted / 100 / 12).quantize(CENT, rounding=ROUND_HALF_UP),
            )
            for month, weighted in sorted(by_month.items())
        ]

    def large_transactions(self, threshold: Decimal | int | None = None) -> list[Transaction]:
        """Transactions above ``threshold``, largest first."""
        limit = Decimal(threshold) if threshold is not None else self.config.large_transaction_threshold
        matches = [t for t in self.store.list_transactions() if t.amount > limit]
        matches.sort(key=lambda t: (-t.amount, t.incremental_id))
        return matches

    def multi_account_customers(self, min_accounts: int | None = None) -> list[MultiAccountRow]:
        """Customers owning at least ``min_accounts`` accounts."""
        minimum = _positive_int(
            "min_accounts",
            min_accounts if min_accounts is not None else self.config.multi_account_min,
        )
        rows = [
            MultiAccountRow(r.customer_id, r.full_name, r.total_accounts)
            for r in self.customer_summary()
            if r.total_accounts >= minimum
        ]
        rows.sort(key=lambda r: (-r.num_accounts, r.customer_id))
        return rows

    def account_activity(
        self,
        reference_date: date | datetime | None = None,
        window: timedelta | int | None = None,
    ) -> list[AccountActivityRow]:
        """Transaction count and gross amount per account inside the window.

        Only accounts with activity appear. Ordered by total amount
        (descending), then account id.
        """
        start, end = trailing_window(
            reference_date if reference_date is not None else datetime.now(),
            window if window is not None else self.config.activity_window,
        )
        counts: Counter[str] = Counter()
        amounts: dict[str, Decimal] = defaultdict(lambda: ZERO)
        for transaction in self.store.list_transactions():
            if start <= transaction.timestamp <= end:
                counts[transaction.account_id] += 1
                amounts[transaction.account_id] += transaction.amount

        rows = [AccountActivityRow(aid, counts[aid], amounts[aid]) for aid in counts]
        rows.sort(key=lambda r: (-r.total_amount, r.account_id))
        return rows

    def savings_borrowers(self) -> list[Customer]:
        """Customers with a loan drawn against one of their savings accounts."""
        savings = {
            a.account_id: a.customer_id
            for a in self.store.list_accounts()
            if a.account_type == AccountType.SAVINGS
        }
        borrower_ids = {
            savings[loan.account_id] for loan in self.store.list_loans() if loan.account_id in savings
        }
        return sorted(
            (c for c in self.store.list_customers() if c.customer_id in borrower_ids),
            key=lambda c: c.customer_id,
        )

    def average_loan_by_type(self) -> list[LoanTypeAverageRow]:
        """Average loan amount per loan type, rounded half-up to cents."""
        grouped: dict[str, list[Decimal]] = defaultdict(list)
        types = {}
        for loan in self.store.list_loans():
            key = getattr(loan.loan_type, "value", loan.loan_type)
            types[key] = loan.loan_type
            grouped[key].append(Decimal(loan.loan_amount))

        return [
            LoanTypeAverageRow(
                loan_type=types[key],
                average_loan_amount=(sum(amounts, ZERO) / len(amounts)).quantize(
                    CENT, rounding=ROUND_HALF_UP
                ),
            )
            for key, amounts in sorted(grouped.items())
        ]

    def active_accounts(self) -> list[Account]:
        """Accounts in Active status, ordered by id."""
        return sorted(
            (a for a in self.store.list_accounts() if a.status == AccountStatus.ACTIVE),
            key=lambda a: a.account_id,
        )

    def active_loans(self) -> list[Loan]:
        """Loans in Active status, ordered by id."""
        return sorted(
            (loan for loan in self.store.list_loans() if loan.status == LoanStatus.ACTIVE),
            key=lambda loan: loan.loan_id,
        )

    def branches_in_city(self, city: str) -> list[Branch]:
        """Branches located in ``city`` (case-insensitive)."""
        wanted = city.strip().casefold()
        return sorted(
            (b for b in self.store.list_branches() if b.city.strip().casefold() == wanted),
            key=lambda b: b.branch_id,
        )
