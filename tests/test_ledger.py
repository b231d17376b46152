"""Tests for the ledger write path and the balance maintainer."""

import random
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from bank_ledger.exceptions import (
    AccountNotEligibleError,
    AccountNotFoundError,
    EntityNotFoundError,
    InvalidAmountError,
    InvalidEntityStateError,
    UnsupportedTransactionTypeError,
    ValidationError,
)
from bank_ledger.ledger import (
    MAX_AMOUNT,
    BalanceMaintainer,
    Ledger,
    normalize_amount,
    normalize_transaction_type,
    signed_amount,
)
from bank_ledger.models.banking import AccountStatus, Transaction, TransactionType
from bank_ledger.reports import AggregationEngine, StatementGenerator
from bank_ledger.store.banking import BankDataStore
from bank_ledger.store.base import AccountUnit


class ExplodingMaintainer(BalanceMaintainer):
    """Fails after the transaction is recorded, before the balance is written."""

    def apply_transaction(self, unit: AccountUnit, transaction: Transaction) -> Decimal:
        raise RuntimeError("injected fault")


class ForgetfulMaintainer(BalanceMaintainer):
    """Returns without writing the balance."""

    def apply_transaction(self, unit: AccountUnit, transaction: Transaction) -> Decimal:
        return unit.balance


class DoubleApplyMaintainer(BalanceMaintainer):
    """Writes the balance twice for one transaction."""

    def apply_transaction(self, unit: AccountUnit, transaction: Transaction) -> Decimal:
        super().apply_transaction(unit, transaction)
        return super().apply_transaction(unit, transaction)


class SlowMaintainer(BalanceMaintainer):
    """Widens the read-modify-write window to expose lost updates."""

    def apply_transaction(self, unit: AccountUnit, transaction: Transaction) -> Decimal:
        current = unit.balance
        time.sleep(0.001)
        unit.set_balance(current + signed_amount(transaction))
        return unit.balance


class TestNormalization:
    """Tests for input normalization helpers."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            (TransactionType.DEPOSIT, TransactionType.DEPOSIT),
            ("Deposit", TransactionType.DEPOSIT),
            ("deposit", TransactionType.DEPOSIT),
            ("WITHDRAWAL", TransactionType.WITHDRAWAL),
            (" Withdrawal ", TransactionType.WITHDRAWAL),
        ],
    )
    def test_transaction_type(self, value: object, expected: TransactionType) -> None:
        assert normalize_transaction_type(value) == expected

    @pytest.mark.parametrize("value", ["Refund", "", 3, None])
    def test_unknown_transaction_type(self, value: object) -> None:
        with pytest.raises(UnsupportedTransactionTypeError):
            normalize_transaction_type(value)

    @pytest.mark.parametrize(
        "value, expected",
        [
            (Decimal("200"), Decimal("200.00")),
            (15, Decimal("15.00")),
            ("10.005", Decimal("10.01")),
            (0.1, Decimal("0.10")),
            ("9999999999999.99", MAX_AMOUNT),
        ],
    )
    def test_amount(self, value: object, expected: Decimal) -> None:
        assert normalize_amount(value) == expected

    @pytest.mark.parametrize(
        "value",
        [0, -5, "-0.01", "0.004", "abc", Decimal("NaN"), Decimal("Infinity"), True, "1e13", 10**20],
    )
    def test_invalid_amount(self, value: object) -> None:
        with pytest.raises(InvalidAmountError):
            normalize_amount(value)


class TestAppendTransaction:
    """Tests for Ledger.append_transaction."""

    def test_deposit_increases_balance(self, ledger: Ledger, bank: BankDataStore) -> None:
        ledger.append_transaction("A1", TransactionType.DEPOSIT, Decimal("200"))

        assert bank.get_account("A1").balance == Decimal("1200.00")

    def test_withdrawal_decreases_balance(self, ledger: Ledger, bank: BankDataStore) -> None:
        ledger.append_transaction("A1", "Withdrawal", "250.50")

        assert bank.get_account("A1").balance == Decimal("749.50")

    def test_returns_recorded_transaction_id(self, ledger: Ledger, bank: BankDataStore) -> None:
        ts = datetime(2024, 3, 5, 10, 30)
        tx_id = ledger.append_transaction("A1", "Deposit", 75, ts, method="ATM")

        recorded = bank.get_account_transactions("A1")
        assert len(recorded) == 1
        assert recorded[0].transaction_id == tx_id
        assert recorded[0].amount == Decimal("75.00")
        assert recorded[0].timestamp == ts
        assert recorded[0].method == "ATM"

    def test_custom_id_factory(self, bank: BankDataStore) -> None:
        ids = iter(["T-1", "T-2"])
        ledger = Ledger(bank, id_factory=lambda: next(ids))

        assert ledger.append_transaction("A1", "Deposit", 1) == "T-1"
        assert ledger.append_transaction("A1", "Deposit", 1) == "T-2"

    def test_default_timestamp_is_now(self, ledger: Ledger, bank: BankDataStore) -> None:
        before = datetime.now()
        ledger.append_transaction("A1", "Deposit", 1)
        after = datetime.now()

        recorded = bank.get_account_transactions("A1")[0]
        assert before <= recorded.timestamp <= after

    def test_rejects_non_datetime_timestamp(self, ledger: Ledger, bank: BankDataStore) -> None:
        with pytest.raises(ValidationError):
            ledger.append_transaction("A1", "Deposit", 1, timestamp="2024-03-01")

        assert bank.list_transactions() == []

    def test_aware_timestamp_stored_as_local_time(self, ledger: Ledger, bank: BankDataStore) -> None:
        ts = datetime(2024, 3, 5, 10, 30, tzinfo=timezone(timedelta(hours=5, minutes=30)))

        ledger.append_transaction("A1", "Deposit", 75, ts)

        recorded = bank.get_account_transactions("A1")[0]
        assert recorded.timestamp.tzinfo is None
        assert recorded.timestamp == ts.astimezone().replace(tzinfo=None)

    def test_aware_and_naive_timestamps_report_together(
        self, ledger: Ledger, bank: BankDataStore
    ) -> None:
        ledger.append_transaction("A1", "Deposit", 10, datetime(2024, 3, 5, 9, 0))
        ledger.append_transaction("A3", "Deposit", 20, datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc))
        engine = AggregationEngine(bank)

        assert engine.dormant_accounts(date(2024, 3, 31), 90) == ["A2"]
        assert [r.account_id for r in engine.account_activity(date(2024, 3, 31), 90)] == ["A3", "A1"]
        assert len(StatementGenerator(bank).generate_statement("C1", "2024-03")) == 1
        assert engine.dormant_accounts(datetime(2024, 3, 31, tzinfo=timezone.utc), 90) == ["A2"]

    def test_overdraft_scenario(self, ledger: Ledger, bank: BankDataStore) -> None:
        """Deposit then overdraw: overdraft allowed and reported."""
        ledger.append_transaction("A1", "Deposit", 200)
        assert bank.get_account("A1").balance == Decimal("1200.00")

        ledger.append_transaction("A1", "Withdrawal", 1500)
        assert bank.get_account("A1").balance == Decimal("-300.00")

        overdrafts = AggregationEngine(bank).overdraft_frequency()
        assert [(r.customer_id, r.overdraft_count) for r in overdrafts] == [("C1", 1)]

    def test_missing_account(self, ledger: Ledger, bank: BankDataStore) -> None:
        with pytest.raises(AccountNotFoundError) as exc_info:
            ledger.append_transaction("A404", "Deposit", 10)

        assert isinstance(exc_info.value, AccountNotEligibleError)
        assert isinstance(exc_info.value, EntityNotFoundError)
        assert bank.list_transactions() == []

    @pytest.mark.parametrize("status", [AccountStatus.CLOSED, AccountStatus.FROZEN])
    def test_ineligible_account(
        self, ledger: Ledger, bank: BankDataStore, status: AccountStatus
    ) -> None:
        bank.set_account_status("A1", status)

        with pytest.raises(AccountNotEligibleError, match=status.value):
            ledger.append_transaction("A1", "Deposit", 10)

        assert bank.get_account("A1").balance == Decimal("1000.00")
        assert bank.get_account_transactions("A1") == []

    def test_inactive_account_accepts_transactions(self, ledger: Ledger, bank: BankDataStore) -> None:
        bank.set_account_status("A1", AccountStatus.INACTIVE)

        ledger.append_transaction("A1", "Deposit", 10)

        assert bank.get_account("A1").balance == Decimal("1010.00")

    @pytest.mark.parametrize("tx_type", ["Transfer", TransactionType.FEE])
    def test_type_without_balance_rule(
        self, ledger: Ledger, bank: BankDataStore, tx_type: object
    ) -> None:
        with pytest.raises(UnsupportedTransactionTypeError):
            ledger.append_transaction("A1", tx_type, 10)

        assert bank.list_transactions() == []
        assert bank.get_account("A1").balance == Decimal("1000.00")

    @pytest.mark.parametrize("amount", [0, -10, "abc"])
    def test_invalid_amount(self, ledger: Ledger, bank: BankDataStore, amount: object) -> None:
        with pytest.raises(InvalidAmountError):
            ledger.append_transaction("A1", "Deposit", amount)

        assert bank.list_transactions() == []

    def test_rejections_are_logged(
        self, ledger: Ledger, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level("WARNING", logger="bank_ledger.ledger"):
            with pytest.raises(AccountNotFoundError):
                ledger.append_transaction("A404", "Deposit", 10)

        assert "A404" in caplog.text


class TestAtomicity:
    """A failed append never leaves a transaction without its balance update."""

    def test_fault_after_record_leaves_nothing(self, bank: BankDataStore) -> None:
        ledger = Ledger(bank, maintainer=ExplodingMaintainer())

        with pytest.raises(RuntimeError, match="injected fault"):
            ledger.append_transaction("A1", "Deposit", 200)

        assert bank.get_account_transactions("A1") == []
        assert bank.get_account("A1").balance == Decimal("1000.00")
        assert Ledger(bank).reconcile("A1").is_consistent

    def test_missing_balance_update_is_refused(self, bank: BankDataStore) -> None:
        ledger = Ledger(bank, maintainer=ForgetfulMaintainer())

        with pytest.raises(InvalidEntityStateError, match="balance update"):
            ledger.append_transaction("A1", "Deposit", 200)

        assert bank.list_transactions() == []
        assert bank.get_account("A1").balance == Decimal("1000.00")

    def test_double_apply_is_refused(self, bank: BankDataStore) -> None:
        ledger = Ledger(bank, maintainer=DoubleApplyMaintainer())

        with pytest.raises(InvalidEntityStateError, match="already applied"):
            ledger.append_transaction("A1", "Deposit", 200)

        assert bank.list_transactions() == []
        assert bank.get_account("A1").balance == Decimal("1000.00")

    def test_ledger_usable_after_failure(self, bank: BankDataStore) -> None:
        with pytest.raises(RuntimeError):
            Ledger(bank, maintainer=ExplodingMaintainer()).append_transaction("A1", "Deposit", 1)

        Ledger(bank).append_transaction("A1", "Deposit", 5)

        assert bank.get_account("A1").balance == Decimal("1005.00")
        assert len(bank.get_account_transactions("A1")) == 1


class TestConcurrency:
    """Concurrent appends never lose updates."""

    def test_concurrent_deposits_same_account(self, bank: BankDataStore) -> None:
        ledger = Ledger(bank, maintainer=SlowMaintainer())
        n, amount = 40, Decimal("12.50")
        barrier = threading.Barrier(8)

        def deposit(_: int) -> str:
            try:
                barrier.wait(timeout=1)
            except threading.BrokenBarrierError:
                pass
            return ledger.append_transaction("A1", "Deposit", amount)

        with ThreadPoolExecutor(max_workers=8) as executor:
            ids = list(executor.map(deposit, range(n)))

        assert len(set(ids)) == n
        assert bank.get_account("A1").balance == Decimal("1000.00") + n * amount
        assert len(bank.get_account_transactions("A1")) == n

    @pytest.mark.parametrize("run_seed", [1, 7, 2024])
    def test_balance_invariant_random_interleavings(
        self, bank: BankDataStore, run_seed: int
    ) -> None:
        """Random deposits/withdrawals across accounts keep every balance in sync."""
        rng = random.Random(run_seed)
        ledger = Ledger(bank)
        operations = [
            (
                rng.choice(["A1", "A2", "A3"]),
                rng.choice([TransactionType.DEPOSIT, TransactionType.WITHDRAWAL]),
                Decimal(rng.randint(1, 500_000)) / 100,
            )
            for _ in range(300)
        ]

        with ThreadPoolExecutor(max_workers=6) as executor:
            list(executor.map(lambda op: ledger.append_transaction(*op), operations))

        for account in bank.list_accounts():
            history = bank.get_account_transactions(account.account_id)
            expected = account.opening_balance + sum(
                (signed_amount(t) for t in history), Decimal("0")
            )
            assert account.balance == expected

        assert all(r.is_consistent for r in ledger.reconcile_all())
        assert len(bank.list_transactions()) == 300

    def test_incremental_ids_are_unique_and_ordered(self, bank: BankDataStore) -> None:
        ledger = Ledger(bank)
        with ThreadPoolExecutor(max_workers=4) as executor:
            list(
                executor.map(
                    lambda i: ledger.append_transaction(f"A{i % 3 + 1}", "Deposit", 1), range(30)
                )
            )

        sequence = [t.incremental_id for t in bank.list_transactions()]
        assert sequence == list(range(1, 31))


class TestReconciliation:
    """Tests for balance reconciliation."""

    def test_reconcile_after_appends(self, ledger: Ledger) -> None:
        ledger.append_transaction("A1", "Deposit", 200)
        ledger.append_transaction("A1", "Withdrawal", 50)

        result = ledger.reconcile("A1")

        assert result.stored_balance == Decimal("1150.00")
        assert result.expected_balance == Decimal("1150.00")
        assert result.discrepancy == 0
        assert result.is_consistent

    def test_reconcile_detects_drift(
        self, ledger: Ledger, bank: BankDataStore, caplog: pytest.LogCaptureFixture
    ) -> None:
        ledger.append_transaction("A2", "Deposit", 40)
        # corrupt the stored row directly; public reads only hand out copies
        bank.accounts["A2"] = replace(bank.accounts["A2"], balance=Decimal("999.00"))

        result = ledger.reconcile("A2")
        assert result.discrepancy == Decimal("959.00")
        assert not result.is_consistent

        with caplog.at_level("ERROR", logger="bank_ledger.ledger"):
            results = ledger.reconcile_all()
        assert [r.account_id for r in results] == ["A1", "A2", "A3"]
        assert "A2" in caplog.text

    def test_reconcile_missing_account(self, ledger: Ledger) -> None:
        with pytest.raises(AccountNotFoundError):
            ledger.reconcile("A404")
