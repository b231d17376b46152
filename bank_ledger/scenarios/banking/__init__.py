"""Banking scenarios for sample ledger data."""

from bank_ledger.scenarios.banking.sample_bank import SampleBankScenario

__all__ = ["SampleBankScenario"]
