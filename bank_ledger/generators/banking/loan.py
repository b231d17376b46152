"""Loan generator for banking domain."""

import random
from datetime import timedelta
from decimal import Decimal

from bank_ledger.generators.base import BaseGenerator
from bank_ledger.models.banking import Loan, LoanStatus, LoanType


class LoanGenerator(BaseGenerator):
    """Generate synthetic loans against accounts."""

    LOAN_TYPES = list(LoanType)
    LOAN_TYPE_WEIGHTS = [0.20, 0.35, 0.20, 0.15, 0.10]

    # Annual interest rate ranges (percent) and principal ranges by loan type
    INTEREST_RATES = {
        LoanType.HOME: (8.0, 9.5),
        LoanType.PERSONAL: (10.5, 16.0),
        LoanType.AUTO: (8.5, 11.0),
        LoanType.EDUCATION: (8.0, 12.0),
        LoanType.BUSINESS: (11.0, 15.0),
    }
    PRINCIPAL_RANGES = {
        LoanType.HOME: (1_500_000, 9_000_000),
        LoanType.PERSONAL: (50_000, 1_000_000),
        LoanType.AUTO: (300_000, 1_500_000),
        LoanType.EDUCATION: (200_000, 2_000_000),
        LoanType.BUSINESS: (500_000, 5_000_000),
    }
    TERM_YEARS = {
        LoanType.HOME: (10, 25),
        LoanType.PERSONAL: (1, 5),
        LoanType.AUTO: (3, 7),
        LoanType.EDUCATION: (5, 10),
        LoanType.BUSINESS: (3, 10),
    }

    STATUSES = list(LoanStatus)
    STATUS_WEIGHTS = [0.75, 0.20, 0.05]

    def generate(self, account_id: str, loan_type: LoanType | None = None) -> Loan:
        """Generate a single loan.

        Parameters
        ----------
        account_id : str
            Account the loan is drawn against.
        loan_type : LoanType | None
            Loan type (default: weighted random).

        Returns
        -------
        Loan
            Generated loan.
        """
        loan_type = loan_type or random.choices(self.LOAN_TYPES, weights=self.LOAN_TYPE_WEIGHTS, k=1)[0]

        low, high = self.INTEREST_RATES[loan_type]
        rate = Decimal(str(round(random.uniform(low, high), 2)))
        low, high = self.PRINCIPAL_RANGES[loan_type]
        principal = Decimal(random.randrange(low, high, 5_000))

        start_date = self.fake.date_between(start_date="-3y", end_date="today")
        years = random.randint(*self.TERM_YEARS[loan_type])
        end_date = start_date + timedelta(days=365 * years)

        return Loan(
            loan_id=self.fake.uuid4(),
            account_id=account_id,
            loan_type=loan_type,
            loan_amount=principal,
            interest_rate=rate,
            start_date=start_date,
            end_date=end_date,
            status=random.choices(self.STATUSES, weights=self.STATUS_WEIGHTS, k=1)[0],
        )
