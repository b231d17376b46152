"""PostgreSQL binding of the banking store.

Each operation opens its own connection, so one store instance can be
shared by concurrent callers. The ledger write path holds a row lock on
the account (``SELECT ... FOR UPDATE``) for the lifetime of the unit, which
serializes appends on the same account and leaves other accounts free.
"""

import logging
from contextlib import contextmanager
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterator

import psycopg
from psycopg import errors
from psycopg.rows import dict_row

from bank_ledger.exceptions import (
    AccountNotFoundError,
    CustomerNotFoundError,
    DuplicateEntityError,
    InvalidAmountError,
    LoanNotFoundError,
    ReferentialIntegrityError,
)
from bank_ledger.models.banking import (
    Account,
    AccountStatus,
    AccountType,
    Branch,
    Customer,
    Loan,
    LoanStatus,
    LoanType,
    Transaction,
    TransactionType,
)
from bank_ledger.store.base import AccountUnit, BankStore

logger = logging.getLogger(__name__)

SCHEMA_DDL = [
    """
    CREATE TABLE IF NOT EXISTS branches (
        branch_id VARCHAR(64) PRIMARY KEY,
        branch_name VARCHAR(100),
        address VARCHAR(255),
        city VARCHAR(50),
        manager_name VARCHAR(100)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS customers (
        customer_id VARCHAR(64) PRIMARY KEY,
        first_name VARCHAR(50),
        last_name VARCHAR(50),
        email VARCHAR(100),
        phone VARCHAR(20),
        address VARCHAR(255),
        date_of_birth DATE,
        registration_date DATE,
        home_branch_id VARCHAR(64) REFERENCES branches(branch_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS accounts (
        account_id VARCHAR(64) PRIMARY KEY,
        customer_id VARCHAR(64) NOT NULL REFERENCES customers(customer_id),
        account_type VARCHAR(20),
        balance NUMERIC(15,2) NOT NULL,
        opening_balance NUMERIC(15,2) NOT NULL,
        created_date DATE,
        status VARCHAR(20)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS transactions (
        transaction_id VARCHAR(64) PRIMARY KEY,
        account_id VARCHAR(64) NOT NULL REFERENCES accounts(account_id),
        transaction_type VARCHAR(20),
        amount NUMERIC(15,2) NOT NULL CHECK (amount > 0),
        transaction_date TIMESTAMP,
        method VARCHAR(50),
        incremental_id BIGINT GENERATED ALWAYS AS IDENTITY
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS loans (
        loan_id VARCHAR(64) PRIMARY KEY,
        account_id VARCHAR(64) NOT NULL REFERENCES accounts(account_id),
        loan_type VARCHAR(50),
        loan_amount NUMERIC(15,2),
        interest_rate NUMERIC(5,2),
        start_date DATE,
        end_date DATE,
        status VARCHAR(20)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_account_customer ON accounts(customer_id)",
    "CREATE INDEX IF NOT EXISTS idx_transaction_account ON transactions(account_id)",
    "CREATE INDEX IF NOT EXISTS idx_loan_account ON loans(account_id)",
]

TRANSACTION_COLUMNS = (
    "transaction_id, account_id, transaction_type, amount, transaction_date, method, incremental_id"
)


class PostgresBankStore(BankStore):
    """Banking store backed by PostgreSQL through psycopg."""

    def __init__(self, connection_string: str) -> None:
        """Initialize the store.

        Parameters
        ----------
        connection_string : str
            PostgreSQL connection string.
        """
        self.connection_string = connection_string

    def _connect(self) -> psycopg.Connection:
        return psycopg.connect(self.connection_string, row_factory=dict_row)

    def create_tables(self) -> None:
        """Create tables and indexes if they do not exist."""
        with self._connect() as conn:
            with conn.cursor() as cur:
                for statement in SCHEMA_DDL:
                    cur.execute(statement)
        logger.info("Banking schema ensured")

    def truncate_tables(self) -> None:
        """Remove all rows from every banking table."""
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute("TRUNCATE transactions, loans, accounts, customers, branches")
        logger.info("Banking tables truncated")

    def _insert(self, sql: str, params: tuple[Any, ...], entity: str, entity_id: str) -> None:
        try:
            with self._connect() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, params)
        except errors.UniqueViolation as e:
            raise DuplicateEntityError(f"{entity} {entity_id} already exists") from e
        except errors.ForeignKeyViolation as e:
            raise ReferentialIntegrityError(f"{entity} {entity_id}: {e}") from e

    def add_customer(self, customer: Customer) -> None:
        """Insert a customer."""
        self._insert(
            "INSERT INTO customers (customer_id, first_name, last_name, email, phone, address, "
            "date_of_birth, registration_date, home_branch_id) "
            "VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)",
            (
                customer.customer_id,
                customer.first_name,
                customer.last_name,
                customer.email,
                customer.phone,
                customer.address,
                customer.date_of_birth,
                customer.registration_date,
                customer.home_branch_id,
            ),
            "Customer",
            customer.customer_id,
        )

    def add_branch(self, branch: Branch) -> None:
        """Insert a branch."""
        self._insert(
            "INSERT INTO branches (branch_id, branch_name, address, city, manager_name) "
            "VALUES (%s, %s, %s, %s, %s)",
            (branch.branch_id, branch.branch_name, branch.address, branch.city, branch.manager_name),
            "Branch",
            branch.branch_id,
        )

    def add_account(self, account: Account) -> None:
        """Insert an account; its balance doubles as the opening balance by default."""
        balance = Decimal(account.balance).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        opening = account.opening_balance if account.opening_balance is not None else balance
        self._insert(
            "INSERT INTO accounts (account_id, customer_id, account_type, balance, "
            "opening_balance, created_date, status) VALUES (%s, %s, %s, %s, %s, %s, %s)",
            (
                account.account_id,
                account.customer_id,
                AccountType(account.account_type).value,
                balance,
                opening,
                account.created_date,
                AccountStatus(account.status).value,
            ),
            "Account",
            account.account_id,
        )

    def add_loan(self, loan: Loan) -> None:
        """Insert a loan."""
        self._insert(
            "INSERT INTO loans (loan_id, account_id, loan_type, loan_amount, interest_rate, "
            "start_date, end_date, status) VALUES (%s, %s, %s, %s, %s, %s, %s, %s)",
            (
                loan.loan_id,
                loan.account_id,
                LoanType(loan.loan_type).value,
                loan.loan_amount,
                loan.interest_rate,
                loan.start_date,
                loan.end_date,
                LoanStatus(loan.status).value,
            ),
            "Loan",
            loan.loan_id,
        )

    def set_account_status(self, account_id: str, status: AccountStatus) -> None:
        """Change an account's status under its row lock."""
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "UPDATE accounts SET status = %s WHERE account_id = %s",
                    (AccountStatus(status).value, account_id),
                )
                if cur.rowcount == 0:
                    raise AccountNotFoundError(f"Account {account_id} not found")

    def set_loan_status(self, loan_id: str, status: LoanStatus) -> None:
        """Change a loan's status."""
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "UPDATE loans SET status = %s WHERE loan_id = %s",
                    (LoanStatus(status).value, loan_id),
                )
                if cur.rowcount == 0:
                    raise LoanNotFoundError(f"Loan {loan_id} not found")

    @contextmanager
    def account_unit(self, account_id: str) -> Iterator[AccountUnit]:
        """Lock the account row and yield an atomic unit on it.

        The staged transactions and balance are written in the same database
        transaction that holds the row lock; any exception rolls both back.
        """
        with self._connect() as conn:
            with conn.transaction():
                with conn.cursor() as cur:
                    cur.execute(
                        "SELECT * FROM accounts WHERE account_id = %s FOR UPDATE",
                        (account_id,),
                    )
                    row = cur.fetchone()
                    if row is None:
                        raise AccountNotFoundError(f"Account {account_id} not found")

                    unit = AccountUnit(_account_from_row(row))
                    yield unit
                    unit.ensure_complete()
                    self._write_unit(cur, unit)

    def _write_unit(self, cur: Any, unit: AccountUnit) -> None:
        account_id = unit.account.account_id
        try:
            for transaction in unit.pending:
                cur.execute(
                    "INSERT INTO transactions (transaction_id, account_id, "
                    "transaction_type, amount, transaction_date, method) "
                    "VALUES (%s, %s, %s, %s, %s, %s)",
                    (
                        transaction.transaction_id,
                        transaction.account_id,
                        transaction.transaction_type.value,
                        transaction.amount,
                        transaction.timestamp,
                        transaction.method,
                    ),
                )
            cur.execute(
                "UPDATE accounts SET balance = %s WHERE account_id = %s",
                (unit.balance, account_id),
            )
        except errors.UniqueViolation as e:
            raise DuplicateEntityError(
                f"Transaction on account {account_id} already exists: {e}"
            ) from e
        except errors.NumericValueOutOfRange as e:
            raise InvalidAmountError(f"Amount or balance out of range on account {account_id}") from e

    def _fetch_all(self, sql: str, params: tuple[Any, ...] = ()) -> list[dict[str, Any]]:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                return cur.fetchall()

    def _fetch_one(self, sql: str, params: tuple[Any, ...]) -> dict[str, Any] | None:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                return cur.fetchone()

    def get_customer(self, customer_id: str) -> Customer:
        row = self._fetch_one("SELECT * FROM customers WHERE customer_id = %s", (customer_id,))
        if row is None:
            raise CustomerNotFoundError(f"Customer {customer_id} not found")
        return _customer_from_row(row)

    def get_account(self, account_id: str) -> Account:
        row = self._fetch_one("SELECT * FROM accounts WHERE account_id = %s", (account_id,))
        if row is None:
            raise AccountNotFoundError(f"Account {account_id} not found")
        return _account_from_row(row)

    def get_loan(self, loan_id: str) -> Loan:
        row = self._fetch_one("SELECT * FROM loans WHERE loan_id = %s", (loan_id,))
        if row is None:
            raise LoanNotFoundError(f"Loan {loan_id} not found")
        return _loan_from_row(row)

    def list_customers(self) -> list[Customer]:
        rows = self._fetch_all("SELECT * FROM customers ORDER BY customer_id")
        return [_customer_from_row(r) for r in rows]

    def list_branches(self) -> list[Branch]:
        rows = self._fetch_all("SELECT * FROM branches ORDER BY branch_id")
        return [Branch(**r) for r in rows]

    def list_accounts(self) -> list[Account]:
        rows = self._fetch_all("SELECT * FROM accounts ORDER BY account_id")
        return [_account_from_row(r) for r in rows]

    def list_loans(self) -> list[Loan]:
        rows = self._fetch_all("SELECT * FROM loans ORDER BY loan_id")
        return [_loan_from_row(r) for r in rows]

    def list_transactions(self) -> list[Transaction]:
        rows = self._fetch_all(
            f"SELECT {TRANSACTION_COLUMNS} FROM transactions ORDER BY incremental_id"  # noqa: S608
        )
        return [_transaction_from_row(r) for r in rows]

    def get_customer_accounts(self, customer_id: str) -> list[Account]:
        rows = self._fetch_all(
            "SELECT * FROM accounts WHERE customer_id = %s ORDER BY account_id", (customer_id,)
        )
        return [_account_from_row(r) for r in rows]

    def get_account_transactions(self, account_id: str) -> list[Transaction]:
        rows = self._fetch_all(
            f"SELECT {TRANSACTION_COLUMNS} FROM transactions "  # noqa: S608
            "WHERE account_id = %s ORDER BY incremental_id",
            (account_id,),
        )
        return [_transaction_from_row(r) for r in rows]

    def get_account_loans(self, account_id: str) -> list[Loan]:
        rows = self._fetch_all(
            "SELECT * FROM loans WHERE account_id = %s ORDER BY loan_id", (account_id,)
        )
        return [_loan_from_row(r) for r in rows]


def _customer_from_row(row: dict[str, Any]) -> Customer:
    return Customer(
        customer_id=row["customer_id"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        email=row["email"],
        phone=row["phone"],
        address=row["address"],
        date_of_birth=row["date_of_birth"],
        registration_date=row["registration_date"],
        home_branch_id=row.get("home_branch_id"),
    )


def _account_from_row(row: dict[str, Any]) -> Account:
    return Account(
        account_id=row["account_id"],
        customer_id=row["customer_id"],
        account_type=AccountType(row["account_type"]),
        balance=row["balance"],
        created_date=row["created_date"],
        status=AccountStatus(row["status"]),
        opening_balance=row["opening_balance"],
    )


def _loan_from_row(row: dict[str, Any]) -> Loan:
    return Loan(
        loan_id=row["loan_id"],
        account_id=row["account_id"],
        loan_type=LoanType(row["loan_type"]),
        loan_amount=row["loan_amount"],
        interest_rate=row["interest_rate"],
        start_date=row["start_date"],
        end_date=row["end_date"],
        status=LoanStatus(row["status"]),
    )


def _transaction_from_row(row: dict[str, Any]) -> Transaction:
    return Transaction(
        transaction_id=row["transaction_id"],
        account_id=row["account_id"],
        transaction_type=TransactionType(row["transaction_type"]),
        amount=row["amount"],
        timestamp=row["transaction_date"],
        method=row["method"],
        incremental_id=row["incremental_id"],
    )
