"""Monthly customer statements rebuilt from the transaction history."""

import logging
from datetime import date, datetime
from decimal import Decimal

from bank_ledger.models.banking import TransactionType
from bank_ledger.models.reports import StatementLine, StatementTotals
from bank_ledger.reports.periods import month_bounds
from bank_ledger.store.base import BankStore

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


class StatementGenerator:
    """Builds a customer's statement for one calendar month.

    Statements come from the ledger only and never consult or touch stored
    balances.
    """

    def __init__(self, store: BankStore) -> None:
        self.store = store

    def generate_statement(
        self,
        customer_id: str,
        period_month: date | datetime | str,
    ) -> list[StatementLine]:
        """Transactions on any of the customer's accounts within a month.

        Parameters
        ----------
        customer_id : str
            Customer whose accounts are scanned.
        period_month : date | datetime | str
            Month to cover; a date, datetime or ``"YYYY-MM"`` string. The
            day of month is ignored.

        Returns
        -------
        list[StatementLine]
            Lines ordered by timestamp, then append order. Empty when the
            customer had no activity in the month.

        Raises
        ------
        CustomerNotFoundError
            If the customer does not exist.
        ValidationError
            If ``period_month`` is malformed.
        """
        start, end = month_bounds(period_month)
        self.store.get_customer(customer_id)

        transactions = [
            t
            for account in self.store.get_customer_accounts(customer_id)
            for t in self.store.get_account_transactions(account.account_id)
            if start <= t.timestamp < end
        ]
        transactions.sort(key=lambda t: (t.timestamp, t.incremental_id))

        logger.debug(
            "Statement for customer %s, %s: %d line(s)",
            customer_id,
            start.strftime("%Y-%m"),
            len(transactions),
            extra={"report": "statement", "rows": len(transactions)},
        )
        return [
            StatementLine(
                transaction_id=t.transaction_id,
                account_id=t.account_id,
                transaction_type=t.transaction_type,
                amount=t.amount,
                timestamp=t.timestamp,
                method=t.method,
            )
            for t in transactions
        ]

    def statement_totals(
        self,
        customer_id: str,
        period_month: date | datetime | str,
    ) -> StatementTotals:
        """Deposit, withdrawal and net totals of a monthly statement."""
        lines = self.generate_statement(customer_id, period_month)
        deposits = sum(
            (line.amount for line in lines if line.transaction_type == TransactionType.DEPOSIT), ZERO
        )
        withdrawals = sum(
            (line.amount for line in lines if line.transaction_type == TransactionType.WITHDRAWAL), ZERO
        )
        return StatementTotals(
            transaction_count=len(lines),
            total_deposits=deposits,
            total_withdrawals=withdrawals,
            net_change=deposits - withdrawals,
        )
