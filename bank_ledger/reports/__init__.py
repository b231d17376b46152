"""Read-only reports over the banking ledger."""

from bank_ledger.reports.aggregation import AggregationEngine
from bank_ledger.reports.statement import StatementGenerator

__all__ = ["AggregationEngine", "StatementGenerator"]
