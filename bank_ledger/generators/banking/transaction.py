"""Transaction request generator for banking domain."""

import random
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Iterator

from bank_ledger.generators.base import BaseGenerator
from bank_ledger.models.banking import TransactionMethod, TransactionType


@dataclass(frozen=True)
class TransactionRequest:
    """Arguments for one ``Ledger.append_transaction`` call.

    Generators never build ``Transaction`` records themselves: ids, append
    order and balances belong to the ledger.
    """

    account_id: str
    transaction_type: TransactionType
    amount: Decimal
    timestamp: datetime
    method: str


class TransactionGenerator(BaseGenerator):
    """Generate synthetic deposits and withdrawals."""

    TRANSACTION_TYPES = [TransactionType.DEPOSIT, TransactionType.WITHDRAWAL]
    TRANSACTION_WEIGHTS = [0.45, 0.55]

    METHODS = list(TransactionMethod)
    METHOD_WEIGHTS = [0.35, 0.20, 0.10, 0.30, 0.05]

    def generate(self, account_id: str, timestamp: datetime | None = None) -> TransactionRequest:
        """Generate a single transaction request.

        Parameters
        ----------
        account_id : str
            Account the transaction targets.
        timestamp : datetime | None
            Transaction time (default: random time in the last 90 days).

        Returns
        -------
        TransactionRequest
            Generated request.
        """
        if timestamp is None:
            timestamp = datetime.now() - timedelta(
                days=random.randint(0, 90),
                hours=random.randint(0, 23),
                minutes=random.randint(0, 59),
            )

        tx_type = random.choices(self.TRANSACTION_TYPES, weights=self.TRANSACTION_WEIGHTS, k=1)[0]

        # Pareto distribution: many small amounts, a few very large ones
        amount = min(random.paretovariate(1.3) * 500, 200_000)

        return TransactionRequest(
            account_id=account_id,
            transaction_type=tx_type,
            amount=Decimal(str(round(amount, 2))),
            timestamp=timestamp.replace(microsecond=0),
            method=random.choices(self.METHODS, weights=self.METHOD_WEIGHTS, k=1)[0].value,
        )

    def generate_for_account(
        self,
        account_id: str,
        start_date: datetime,
        end_date: datetime,
        avg_transactions_per_day: float = 0.5,
    ) -> Iterator[TransactionRequest]:
        """Generate requests for an account over a time period, in time order."""
        current_date = start_date

        while current_date < end_date:
            num_transactions = max(0, int(random.expovariate(1 / avg_transactions_per_day)))

            times = sorted(
                current_date.replace(
                    hour=self._weighted_hour(),
                    minute=random.randint(0, 59),
                    second=random.randint(0, 59),
                )
                for _ in range(num_transactions)
            )
            for timestamp in times:
                if timestamp < end_date:
                    yield self.generate(account_id, timestamp)

            current_date += timedelta(days=1)

    def _weighted_hour(self) -> int:
        """Generate hour weighted toward banking hours."""
        if random.random() < 0.7:
            return random.randint(9, 17)
        return random.choice(list(range(0, 9)) + list(range(18, 24)))
