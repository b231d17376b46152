"""Scenarios for generating realistic banking data sets."""

from bank_ledger.scenarios.banking import SampleBankScenario

__all__ = ["SampleBankScenario"]
