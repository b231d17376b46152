"""Pytest configuration and fixtures."""

from datetime import date
from decimal import Decimal
from typing import Callable

import pytest

from bank_ledger.ledger import Ledger
from bank_ledger.models.banking import (
    Account,
    AccountStatus,
    AccountType,
    Branch,
    Customer,
    Loan,
    LoanStatus,
    LoanType,
)
from bank_ledger.reports import AggregationEngine, StatementGenerator
from bank_ledger.store.banking import BankDataStore


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def make_customer() -> Callable[..., Customer]:
    """Factory for customers with sensible defaults."""

    def _make(
        customer_id: str,
        first_name: str = "Test",
        last_name: str = "Customer",
        home_branch_id: str | None = None,
    ) -> Customer:
        return Customer(
            customer_id=customer_id,
            first_name=first_name,
            last_name=last_name,
            email=f"{customer_id.lower()}@example.in",
            phone="+91 98200 00000",
            address="12 Marine Drive, Mumbai",
            date_of_birth=date(1985, 6, 1),
            registration_date=date(2020, 1, 15),
            home_branch_id=home_branch_id,
        )

    return _make


@pytest.fixture
def make_account() -> Callable[..., Account]:
    """Factory for accounts with sensible defaults."""

    def _make(
        account_id: str,
        customer_id: str,
        balance: str | Decimal = "0.00",
        account_type: AccountType = AccountType.SAVINGS,
        status: AccountStatus = AccountStatus.ACTIVE,
    ) -> Account:
        return Account(
            account_id=account_id,
            customer_id=customer_id,
            account_type=account_type,
            balance=Decimal(balance),
            created_date=date(2023, 1, 1),
            status=status,
        )

    return _make


@pytest.fixture
def make_loan() -> Callable[..., Loan]:
    """Factory for loans with sensible defaults."""

    def _make(
        loan_id: str,
        account_id: str,
        loan_amount: str,
        interest_rate: str,
        start_date: date,
        status: LoanStatus = LoanStatus.ACTIVE,
        loan_type: LoanType = LoanType.PERSONAL,
    ) -> Loan:
        return Loan(
            loan_id=loan_id,
            account_id=account_id,
            loan_type=loan_type,
            loan_amount=Decimal(loan_amount),
            interest_rate=Decimal(interest_rate),
            start_date=start_date,
            end_date=None,
            status=status,
        )

    return _make


@pytest.fixture
def store() -> BankDataStore:
    """Create a fresh store for each test."""
    return BankDataStore()


@pytest.fixture
def bank(
    store: BankDataStore,
    make_customer: Callable[..., Customer],
    make_account: Callable[..., Account],
    make_loan: Callable[..., Loan],
) -> BankDataStore:
    """Small bank used across report tests.

    - C1 (home B1): A1 Savings 1000.00, A2 Current 0.00; active home loan.
    - C2 (home B2): no accounts.
    - C3 (no home branch): A3 Savings 500.00; one active, one closed loan.
    """
    store.add_branch(Branch("B1", "Mumbai Fort", "1 Hornby Road", "Mumbai", "R. Kulkarni"))
    store.add_branch(Branch("B2", "Pune Camp", "4 MG Road", "Pune", "S. Joshi"))

    store.add_customer(make_customer("C1", "Asha", "Rao", home_branch_id="B1"))
    store.add_customer(make_customer("C2", "Vikram", "Shah", home_branch_id="B2"))
    store.add_customer(make_customer("C3", "Meera", "Iyer"))

    store.add_account(make_account("A1", "C1", "1000.00"))
    store.add_account(make_account("A2", "C1", "0.00", account_type=AccountType.CURRENT))
    store.add_account(make_account("A3", "C3", "500.00"))

    store.add_loan(
        make_loan("L1", "A1", "1200000.00", "8.50", date(2024, 3, 15), loan_type=LoanType.HOME)
    )
    store.add_loan(make_loan("L2", "A3", "100000.00", "12.00", date(2024, 3, 2)))
    store.add_loan(
        make_loan(
            "L3", "A3", "500000.00", "9.00", date(2024, 1, 10),
            status=LoanStatus.CLOSED, loan_type=LoanType.AUTO,
        )
    )
    return store


@pytest.fixture
def ledger(bank: BankDataStore) -> Ledger:
    """Ledger over the sample bank."""
    return Ledger(bank)


@pytest.fixture
def engine(bank: BankDataStore) -> AggregationEngine:
    """Aggregation engine over the sample bank."""
    return AggregationEngine(bank)


@pytest.fixture
def statements(bank: BankDataStore) -> StatementGenerator:
    """Statement generator over the sample bank."""
    return StatementGenerator(bank)
