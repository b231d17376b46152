"""Loan model for banking domain."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from bank_ledger.models.banking.enums import LoanStatus, LoanType


@dataclass
class Loan:
    """Loan contract entity."""

    loan_id: str
    account_id: str
    loan_type: LoanType
    loan_amount: Decimal
    interest_rate: Decimal  # Annual rate in percent (e.g., 8.5)
    start_date: date
    end_date: date | None
    status: LoanStatus
