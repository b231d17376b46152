"""Append-only transaction ledger and the balance maintainer.

Every transaction enters the system through :meth:`Ledger.append_transaction`.
The transaction is recorded and the owning account's balance is updated by
:class:`BalanceMaintainer` inside one locked account unit, so the two
changes are published together or not at all.
"""

import logging
import uuid
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Callable

from bank_ledger.exceptions import (
    AccountNotEligibleError,
    BankLedgerError,
    InvalidAmountError,
    UnsupportedTransactionTypeError,
    ValidationError,
)
from bank_ledger.models.banking import AccountStatus, Transaction, TransactionType
from bank_ledger.models.reports import ReconciliationResult
from bank_ledger.reports.periods import to_naive_local
from bank_ledger.store.base import AccountUnit, BankStore

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
# Largest value a NUMERIC(15, 2) column holds.
MAX_AMOUNT = Decimal("9999999999999.99")

# Balance sign per transaction type; types absent here have no balance rule.
BALANCE_SIGNS: dict[TransactionType, int] = {
    TransactionType.DEPOSIT: 1,
    TransactionType.WITHDRAWAL: -1,
}


def normalize_transaction_type(value: TransactionType | str) -> TransactionType:
    """Resolve a transaction type from an enum member, value or name."""
    if isinstance(value, TransactionType):
        return value
    if isinstance(value, str):
        key = value.strip().lower()
        for member in TransactionType:
            if key in (member.value.lower(), member.name.lower()):
                return member
    raise UnsupportedTransactionTypeError(f"Unsupported transaction type: {value!r}")


def normalize_amount(value: Any) -> Decimal:
    """Convert an amount to a positive decimal with two places.

    Raises
    ------
    InvalidAmountError
        If the value is not numeric, not finite, not positive once rounded
        to cents, or above ``MAX_AMOUNT``.
    """
    if isinstance(value, bool):
        raise InvalidAmountError(f"Invalid amount: {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        raise InvalidAmountError(f"Invalid amount: {value!r}") from None

    if not amount.is_finite():
        raise InvalidAmountError(f"Invalid amount: {value!r}")
    amount = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    if amount <= 0:
        raise InvalidAmountError(f"Amount must be positive, got {value!r}")
    if amount > MAX_AMOUNT:
        raise InvalidAmountError(f"Amount {value!r} exceeds the maximum of {MAX_AMOUNT}")
    return amount


def signed_amount(transaction: Transaction) -> Decimal:
    """Return the balance delta a transaction contributes."""
    sign = BALANCE_SIGNS.get(transaction.transaction_type)
    if sign is None:
        raise UnsupportedTransactionTypeError(
            f"Transaction type {transaction.transaction_type.value} has no balance rule"
        )
    return transaction.amount * sign


class BalanceMaintainer:
    """Keeps an account's stored balance equal to its ledger.

    The only component that writes balances. Called exactly once per
    recorded transaction, inside the unit that recorded it.
    """

    def apply_transaction(self, unit: AccountUnit, transaction: Transaction) -> Decimal:
        """Apply one recorded transaction to the unit's balance.

        Parameters
        ----------
        unit : AccountUnit
            Locked unit on the transaction's account.
        transaction : Transaction
            Transaction already recorded in ``unit``.

        Returns
        -------
        Decimal
            The new balance. Overdrafts are allowed.
        """
        new_balance = unit.balance + signed_amount(transaction)
        unit.set_balance(new_balance)
        return new_balance


class Ledger:
    """Public write path and consistency checks for the transaction ledger."""

    def __init__(
        self,
        store: BankStore,
        maintainer: BalanceMaintainer | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        """Initialize the ledger.

        Parameters
        ----------
        store : BankStore
            Entity store holding accounts and transactions.
        maintainer : BalanceMaintainer | None
            Balance maintainer (default: a new instance).
        id_factory : Callable[[], str] | None
            Transaction id factory (default: random UUID hex).
        """
        self.store = store
        self.maintainer = maintainer or BalanceMaintainer()
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)

    def append_transaction(
        self,
        account_id: str,
        transaction_type: TransactionType | str,
        amount: Decimal | int | str,
        timestamp: datetime | None = None,
        method: str = "Online",
    ) -> str:
        """Record a transaction and update the account balance atomically.

        Parameters
        ----------
        account_id : str
            Account the transaction belongs to.
        transaction_type : TransactionType | str
            Deposit or Withdrawal.
        amount : Decimal | int | str
            Positive amount; the sign comes from the type.
        timestamp : datetime | None
            When the transaction happened (default: now). Aware values are
            stored as naive local time.
        method : str
            Channel used (Online, ATM, Branch, ...).

        Returns
        -------
        str
            Id of the recorded transaction.

        Raises
        ------
        AccountNotFoundError
            If the account does not exist.
        AccountNotEligibleError
            If the account status forbids new transactions.
        UnsupportedTransactionTypeError
            If the type has no balance rule.
        InvalidAmountError
            If the amount is not positive.
        """
        tx_type = normalize_transaction_type(transaction_type)
        value = normalize_amount(amount)
        if timestamp is None:
            timestamp = datetime.now()
        elif not isinstance(timestamp, datetime):
            raise ValidationError(f"Timestamp must be a datetime, got {timestamp!r}")
        else:
            timestamp = to_naive_local(timestamp)

        transaction = Transaction(
            transaction_id=self._id_factory(),
            account_id=account_id,
            transaction_type=tx_type,
            amount=value,
            timestamp=timestamp,
            method=method,
        )

        try:
            with self.store.account_unit(account_id) as unit:
                status = AccountStatus(unit.account.status)
                if not status.accepts_transactions:
                    raise AccountNotEligibleError(
                        f"Account {account_id} is {status.value} and cannot accept transactions"
                    )
                unit.record(transaction)
                new_balance = self.maintainer.apply_transaction(unit, transaction)
        except BankLedgerError as e:
            logger.warning(
                "Rejected %s of %s on account %s: %s",
                tx_type.value,
                value,
                account_id,
                e,
                extra={"account_id": account_id, "error": type(e).__name__},
            )
            raise

        logger.debug(
            "Recorded %s %s of %s on account %s, balance now %s",
            transaction.transaction_id,
            tx_type.value,
            value,
            account_id,
            new_balance,
            extra={
                "account_id": account_id,
                "transaction_id": transaction.transaction_id,
                "balance": new_balance,
            },
        )
        return transaction.transaction_id

    def reconcile(self, account_id: str) -> ReconciliationResult:
        """Compare an account's stored balance with its replayed history.

        Meaningful once in-flight appends on the account have completed.
        """
        account = self.store.get_account(account_id)
        expected = account.opening_balance or Decimal("0")
        for transaction in self.store.get_account_transactions(account_id):
            expected += signed_amount(transaction)
        return ReconciliationResult(
            account_id=account_id,
            stored_balance=account.balance,
            expected_balance=expected,
        )

    def reconcile_all(self) -> list[ReconciliationResult]:
        """Reconcile every account, ordered by account id."""
        results = [
            self.reconcile(account.account_id)
            for account in sorted(self.store.list_accounts(), key=lambda a: a.account_id)
        ]
        drifted = [r.account_id for r in results if not r.is_consistent]
        if drifted:
            logger.error(
                "Balance drift detected on %d account(s): %s",
                len(drifted),
                drifted,
                extra={"account_ids": drifted},
            )
        return results
