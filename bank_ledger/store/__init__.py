"""Entity stores for maintaining banking relationships."""

from bank_ledger.store.banking import BankDataStore
from bank_ledger.store.base import AccountUnit, BankStore
from bank_ledger.store.postgres import PostgresBankStore

__all__ = ["AccountUnit", "BankDataStore", "BankStore", "PostgresBankStore"]
