"""In-memory banking store with referential integrity and per-account locking."""

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterator

from bank_ledger.exceptions import (
    AccountNotFoundError,
    CustomerNotFoundError,
    DuplicateEntityError,
    LoanNotFoundError,
    ReferentialIntegrityError,
)
from bank_ledger.models.banking import (
    Account,
    AccountStatus,
    Branch,
    Customer,
    Loan,
    LoanStatus,
    Transaction,
)
from bank_ledger.store.base import AccountUnit, BankStore

CENT = Decimal("0.01")


@dataclass
class BankDataStore(BankStore):
    """In-memory store for banking entities with relationship tracking.

    Appends on the same account serialize on that account's lock; appends on
    different accounts only share the short registry lock used to publish a
    committed unit. Readers take no account lock.
    """

    # Primary entities
    customers: dict[str, Customer] = field(default_factory=dict)
    branches: dict[str, Branch] = field(default_factory=dict)
    accounts: dict[str, Account] = field(default_factory=dict)
    loans: dict[str, Loan] = field(default_factory=dict)

    # Ledger
    transactions: list[Transaction] = field(default_factory=list)

    # Relationship indexes
    _customer_accounts: dict[str, list[str]] = field(default_factory=dict)
    _account_transactions: dict[str, list[int]] = field(default_factory=dict)
    _account_loans: dict[str, list[str]] = field(default_factory=dict)

    _account_locks: dict[str, threading.Lock] = field(default_factory=dict)
    _registry_lock: threading.Lock = field(default_factory=threading.Lock)
    _sequence: int = 0

    def add_customer(self, customer: Customer) -> None:
        """Add a customer to the store."""
        if customer.customer_id in self.customers:
            raise DuplicateEntityError(f"Customer {customer.customer_id} already exists")
        if customer.home_branch_id and customer.home_branch_id not in self.branches:
            raise ReferentialIntegrityError(f"Branch {customer.home_branch_id} not found")

        self.customers[customer.customer_id] = customer
        self._customer_accounts[customer.customer_id] = []

    def add_branch(self, branch: Branch) -> None:
        """Add a branch to the store."""
        if branch.branch_id in self.branches:
            raise DuplicateEntityError(f"Branch {branch.branch_id} already exists")
        self.branches[branch.branch_id] = branch

    def add_account(self, account: Account) -> None:
        """Add an account to the store.

        The store keeps its own copy. The registered balance becomes the
        opening balance unless one is given explicitly.
        """
        if account.customer_id not in self.customers:
            raise ReferentialIntegrityError(f"Customer {account.customer_id} not found")
        if account.account_id in self.accounts:
            raise DuplicateEntityError(f"Account {account.account_id} already exists")

        balance = Decimal(account.balance).quantize(CENT, rounding=ROUND_HALF_UP)
        account = replace(
            account,
            balance=balance,
            opening_balance=balance if account.opening_balance is None else account.opening_balance,
        )

        with self._registry_lock:
            self.accounts[account.account_id] = account
            self._customer_accounts[account.customer_id].append(account.account_id)
            self._account_transactions[account.account_id] = []
            self._account_loans[account.account_id] = []
            self._account_locks[account.account_id] = threading.Lock()

    def add_loan(self, loan: Loan) -> None:
        """Add a loan to the store."""
        if loan.account_id not in self.accounts:
            raise ReferentialIntegrityError(f"Account {loan.account_id} not found")
        if loan.loan_id in self.loans:
            raise DuplicateEntityError(f"Loan {loan.loan_id} already exists")

        self.loans[loan.loan_id] = loan
        self._account_loans[loan.account_id].append(loan.loan_id)

    def update_customer_contact(
        self,
        customer_id: str,
        email: str | None = None,
        phone: str | None = None,
        address: str | None = None,
    ) -> Customer:
        """Update the mutable contact fields of a customer."""
        customer = self.get_customer(customer_id)
        if email is not None:
            customer.email = email
        if phone is not None:
            customer.phone = phone
        if address is not None:
            customer.address = address
        return customer

    def set_account_status(self, account_id: str, status: AccountStatus) -> None:
        """Change an account's status, waiting for in-flight appends."""
        lock = self._lock_for(account_id)
        with lock:
            self.accounts[account_id].status = AccountStatus(status)

    def set_loan_status(self, loan_id: str, status: LoanStatus) -> None:
        """Change a loan's status."""
        self.get_loan(loan_id).status = LoanStatus(status)

    @contextmanager
    def account_unit(self, account_id: str) -> Iterator[AccountUnit]:
        """Lock an account and yield an atomic unit on it.

        Recorded transactions and the staged balance are published together
        when the block exits cleanly. Any exception discards both.
        """
        lock = self._lock_for(account_id)
        with lock:
            unit = AccountUnit(replace(self.accounts[account_id]))
            yield unit
            unit.ensure_complete()
            self._commit(unit)

    def _commit(self, unit: AccountUnit) -> None:
        account = self.accounts[unit.account.account_id]
        with self._registry_lock:
            for transaction in unit.pending:
                self._sequence += 1
                idx = len(self.transactions)
                self.transactions.append(replace(transaction, incremental_id=self._sequence))
                self._account_transactions[account.account_id].append(idx)
            account.balance = unit.balance

    def _lock_for(self, account_id: str) -> threading.Lock:
        lock = self._account_locks.get(account_id)
        if lock is None:
            raise AccountNotFoundError(f"Account {account_id} not found")
        return lock

    # Query methods
    def get_customer(self, customer_id: str) -> Customer:
        """Get a customer by id."""
        try:
            return self.customers[customer_id]
        except KeyError:
            raise CustomerNotFoundError(f"Customer {customer_id} not found") from None

    def get_account(self, account_id: str) -> Account:
        """Get an account by id."""
        try:
            return replace(self.accounts[account_id])
        except KeyError:
            raise AccountNotFoundError(f"Account {account_id} not found") from None

    def get_loan(self, loan_id: str) -> Loan:
        """Get a loan by id."""
        try:
            return self.loans[loan_id]
        except KeyError:
            raise LoanNotFoundError(f"Loan {loan_id} not found") from None

    def list_customers(self) -> list[Customer]:
        return list(self.customers.values())

    def list_branches(self) -> list[Branch]:
        return list(self.branches.values())

    def list_accounts(self) -> list[Account]:
        return [replace(a) for a in self.accounts.values()]

    def list_loans(self) -> list[Loan]:
        return list(self.loans.values())

    def list_transactions(self) -> list[Transaction]:
        return list(self.transactions)

    def get_customer_accounts(self, customer_id: str) -> list[Account]:
        """Get all accounts for a customer."""
        account_ids = self._customer_accounts.get(customer_id, [])
        return [replace(self.accounts[aid]) for aid in list(account_ids)]

    def get_account_transactions(self, account_id: str) -> list[Transaction]:
        """Get all transactions for an account, in append order."""
        indices = self._account_transactions.get(account_id, [])
        return [self.transactions[i] for i in list(indices)]

    def get_account_loans(self, account_id: str) -> list[Loan]:
        """Get all loans drawn against an account."""
        loan_ids = self._account_loans.get(account_id, [])
        return [self.loans[lid] for lid in list(loan_ids)]
