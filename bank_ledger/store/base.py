"""Store interface shared by the in-memory and PostgreSQL backends."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from decimal import Decimal

from bank_ledger.exceptions import InvalidEntityStateError, ReferentialIntegrityError
from bank_ledger.models.banking import (
    Account,
    AccountStatus,
    Branch,
    Customer,
    Loan,
    LoanStatus,
    Transaction,
)


class AccountUnit:
    """Atomic write unit scoped to a single locked account.

    A unit buffers the transactions recorded against its account and the
    balance written for them. The owning store persists both together when
    the unit exits cleanly and discards both otherwise. Each recorded
    transaction must be matched by exactly one balance write.
    """

    def __init__(self, account: Account) -> None:
        self.account = account
        self._pending: list[Transaction] = []
        self._balance = account.balance
        self._balance_writes = 0

    @property
    def balance(self) -> Decimal:
        """Current balance including writes made inside this unit."""
        return self._balance

    @property
    def pending(self) -> list[Transaction]:
        return list(self._pending)

    def record(self, transaction: Transaction) -> None:
        """Stage a transaction for the locked account."""
        if transaction.account_id != self.account.account_id:
            raise ReferentialIntegrityError(
                f"Transaction {transaction.transaction_id} references account "
                f"{transaction.account_id}, unit holds {self.account.account_id}"
            )
        self._pending.append(transaction)

    def set_balance(self, value: Decimal) -> None:
        """Stage the new balance for the most recently recorded transaction."""
        if self._balance_writes >= len(self._pending):
            raise InvalidEntityStateError(
                f"Balance of account {self.account.account_id} already applied "
                "for every recorded transaction"
            )
        self._balance = value
        self._balance_writes += 1

    def ensure_complete(self) -> None:
        """Refuse to persist a transaction whose balance was never applied."""
        if self._balance_writes != len(self._pending):
            raise InvalidEntityStateError(
                f"Account {self.account.account_id}: {len(self._pending)} transaction(s) "
                f"recorded but {self._balance_writes} balance update(s) applied"
            )


class BankStore(ABC):
    """Entity store contract consumed by the ledger and the reports."""

    # Administrative writes
    @abstractmethod
    def add_customer(self, customer: Customer) -> None: ...

    @abstractmethod
    def add_branch(self, branch: Branch) -> None: ...

    @abstractmethod
    def add_account(self, account: Account) -> None: ...

    @abstractmethod
    def add_loan(self, loan: Loan) -> None: ...

    @abstractmethod
    def set_account_status(self, account_id: str, status: AccountStatus) -> None: ...

    @abstractmethod
    def set_loan_status(self, loan_id: str, status: LoanStatus) -> None: ...

    # Ledger write path
    @abstractmethod
    def account_unit(self, account_id: str) -> AbstractContextManager[AccountUnit]:
        """Lock an account and open an atomic unit on it.

        Raises
        ------
        AccountNotFoundError
            If the account does not exist.
        """

    # Reads
    @abstractmethod
    def get_customer(self, customer_id: str) -> Customer: ...

    @abstractmethod
    def get_account(self, account_id: str) -> Account: ...

    @abstractmethod
    def get_loan(self, loan_id: str) -> Loan: ...

    @abstractmethod
    def list_customers(self) -> list[Customer]: ...

    @abstractmethod
    def list_branches(self) -> list[Branch]: ...

    @abstractmethod
    def list_accounts(self) -> list[Account]: ...

    @abstractmethod
    def list_loans(self) -> list[Loan]: ...

    @abstractmethod
    def list_transactions(self) -> list[Transaction]: ...

    @abstractmethod
    def get_customer_accounts(self, customer_id: str) -> list[Account]: ...

    @abstractmethod
    def get_account_transactions(self, account_id: str) -> list[Transaction]: ...

    @abstractmethod
    def get_account_loans(self, account_id: str) -> list[Loan]: ...

    def summary(self) -> dict[str, int]:
        """Return summary counts of all entities."""
        return {
            "customers": len(self.list_customers()),
            "branches": len(self.list_branches()),
            "accounts": len(self.list_accounts()),
            "loans": len(self.list_loans()),
            "transactions": len(self.list_transactions()),
        }
