"""Account generator for banking domain."""

import random
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterator

from bank_ledger.generators.base import BaseGenerator
from bank_ledger.models.banking import Account, AccountStatus, AccountType


class AccountGenerator(BaseGenerator):
    """Generate synthetic bank accounts.

    Accounts are always generated Active so that their history can be
    appended through the ledger; scenarios close or freeze them afterwards.
    """

    ACCOUNT_TYPES = list(AccountType)
    ACCOUNT_TYPE_WEIGHTS = [0.65, 0.35]

    def generate(self, customer_id: str, opened_after: date | None = None) -> Account:
        """Generate a single account for a customer.

        Parameters
        ----------
        customer_id : str
            Customer ID to associate with the account.
        opened_after : date | None
            Earliest opening date (default: one year ago).

        Returns
        -------
        Account
            Generated account.
        """
        opened_after = opened_after or date.today() - timedelta(days=365)
        account_type = random.choices(self.ACCOUNT_TYPES, weights=self.ACCOUNT_TYPE_WEIGHTS, k=1)[0]

        # Savings accounts typically hold more than current accounts
        ceiling = 250_000 if account_type == AccountType.SAVINGS else 80_000
        balance = Decimal(str(round(random.uniform(0, ceiling), 2)))

        return Account(
            account_id=self.fake.uuid4(),
            customer_id=customer_id,
            account_type=account_type,
            balance=balance,
            created_date=self.fake.date_between(start_date=opened_after, end_date="today"),
            status=AccountStatus.ACTIVE,
        )

    def generate_for_customer(
        self,
        customer_id: str,
        opened_after: date | None = None,
    ) -> Iterator[Account]:
        """Generate zero to three accounts for a customer."""
        # A few customers are registered but never open an account
        num_accounts = random.choices([0, 1, 2, 3], weights=[0.05, 0.55, 0.3, 0.1], k=1)[0]
        for _ in range(num_accounts):
            yield self.generate(customer_id, opened_after)
