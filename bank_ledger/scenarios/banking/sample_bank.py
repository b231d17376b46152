"""Sample bank scenario: a small retail bank with a replayed history."""

import logging
import random
from datetime import datetime, time, timedelta

from bank_ledger.generators.banking import (
    AccountGenerator,
    BranchGenerator,
    CustomerGenerator,
    LoanGenerator,
    TransactionGenerator,
    TransactionRequest,
)
from bank_ledger.ledger import Ledger
from bank_ledger.models.banking import Account, AccountStatus
from bank_ledger.store.banking import BankDataStore
from bank_ledger.store.base import BankStore

logger = logging.getLogger(__name__)


class SampleBankScenario:
    """Generate branches, customers, accounts and loans, then replay history.

    Every balance change after account opening goes through
    ``Ledger.append_transaction``, so the generated store satisfies the
    ledger invariant by construction. Some customers are left without a
    home branch to exercise the unattributed branch flow bucket, and a few
    accounts are closed once their history has been replayed.
    """

    def __init__(
        self,
        num_branches: int = 5,
        num_customers: int = 50,
        loan_penetration: float = 0.30,
        unbranched_rate: float = 0.10,
        closed_rate: float = 0.05,
        history_days: int = 120,
        avg_transactions_per_day: float = 0.3,
        seed: int | None = None,
        store: BankStore | None = None,
    ) -> None:
        """Initialize sample bank scenario.

        Parameters
        ----------
        num_branches : int
            Number of branches to generate.
        num_customers : int
            Number of customers to generate.
        loan_penetration : float
            Share of accounts with a loan.
        unbranched_rate : float
            Share of customers without a home branch.
        closed_rate : float
            Share of accounts closed after their history is replayed.
        history_days : int
            Length of the replayed transaction history.
        avg_transactions_per_day : float
            Average transactions per account per day.
        seed : int | None
            Random seed for reproducibility.
        store : BankStore | None
            Store to populate (default: a new in-memory store).
        """
        self.num_branches = num_branches
        self.num_customers = num_customers
        self.loan_penetration = loan_penetration
        self.unbranched_rate = unbranched_rate
        self.closed_rate = closed_rate
        self.history_days = history_days
        self.avg_transactions_per_day = avg_transactions_per_day
        self.seed = seed

        if seed is not None:
            random.seed(seed)

        self.store = store if store is not None else BankDataStore()
        self.ledger = Ledger(self.store)
        self._branch_gen = BranchGenerator(seed=seed)
        self._customer_gen = CustomerGenerator(seed=seed)
        self._account_gen = AccountGenerator(seed=seed)
        self._loan_gen = LoanGenerator(seed=seed)
        self._transaction_gen = TransactionGenerator(seed=seed)

    def generate(self) -> BankStore:
        """Generate all data for the scenario.

        Returns
        -------
        BankStore
            Store containing all generated data.
        """
        logger.info(
            "Starting sample bank scenario: %d branches, %d customers",
            self.num_branches,
            self.num_customers,
        )

        branch_ids = []
        for branch in self._branch_gen.generate_batch(self.num_branches):
            self.store.add_branch(branch)
            branch_ids.append(branch.branch_id)

        accounts = []
        for _ in range(self.num_customers):
            home_branch = None
            if branch_ids and random.random() >= self.unbranched_rate:
                home_branch = random.choice(branch_ids)
            customer = self._customer_gen.generate(home_branch)
            self.store.add_customer(customer)

            for account in self._account_gen.generate_for_customer(
                customer.customer_id, customer.registration_date
            ):
                self.store.add_account(account)
                accounts.append(account)
                if random.random() < self.loan_penetration:
                    self.store.add_loan(self._loan_gen.generate(account.account_id))

        appended = self._replay_history(accounts)

        closed = [a.account_id for a in accounts if random.random() < self.closed_rate]
        for account_id in closed:
            self.store.set_account_status(account_id, AccountStatus.CLOSED)

        logger.info(
            "Generated sample bank: %d branches, %d customers, %d accounts, "
            "%d loans, %d transactions, %d closed accounts",
            len(branch_ids),
            self.num_customers,
            len(accounts),
            len(self.store.list_loans()),
            appended,
            len(closed),
        )
        return self.store

    def _replay_history(self, accounts: list[Account]) -> int:
        """Append generated transactions for every account in time order."""
        end = datetime.now().replace(microsecond=0)
        start = (end - timedelta(days=self.history_days)).replace(hour=0, minute=0, second=0)

        requests: list[TransactionRequest] = []
        for account in accounts:
            opened = datetime.combine(account.created_date, time.min)
            requests.extend(
                self._transaction_gen.generate_for_account(
                    account.account_id, max(start, opened), end, self.avg_transactions_per_day
                )
            )
        requests.sort(key=lambda r: r.timestamp)

        for request in requests:
            self.ledger.append_transaction(
                request.account_id,
                request.transaction_type,
                request.amount,
                request.timestamp,
                request.method,
            )
        return len(requests)
