#!/usr/bin/env python3
"""Seed a sample bank and run the ledger reports.

This script generates a sample bank, replays its transaction history
through the ledger, checks every account balance against its history and
writes all reports:

- In memory by default, or in PostgreSQL with --postgres-url.
- To the console by default, or to JSON files with --output-dir.
"""

import argparse
import logging
import sys
import time
from datetime import datetime
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from bank_ledger.config import LedgerConfig
from bank_ledger.ledger import Ledger
from bank_ledger.logging import setup_logging
from bank_ledger.reports import AggregationEngine, StatementGenerator
from bank_ledger.scenarios import SampleBankScenario
from bank_ledger.sinks import ConsoleSink, JsonFileSink
from bank_ledger.store import PostgresBankStore

logger = logging.getLogger(__name__)


def run_reports(
    engine: AggregationEngine,
    statements: StatementGenerator,
    sink: ConsoleSink | JsonFileSink,
    reference_date: datetime,
    city: str | None = None,
) -> None:
    """Compute every report and write it to the sink."""
    reports = {
        "customer_summary": engine.customer_summary,
        "branch_flow": engine.branch_flow,
        "dormant_accounts": lambda: engine.dormant_accounts(reference_date),
        "overdraft_frequency": engine.overdraft_frequency,
        "top_balances": engine.top_balances,
        "monthly_loan_interest": engine.monthly_loan_interest_estimate,
        "large_transactions": engine.large_transactions,
        "multi_account_customers": engine.multi_account_customers,
        "account_activity": lambda: engine.account_activity(reference_date),
        "savings_borrowers": engine.savings_borrowers,
        "average_loan_by_type": engine.average_loan_by_type,
    }
    if city:
        reports["branches_in_city"] = lambda: engine.branches_in_city(city)

    for name, compute in reports.items():
        t0 = time.perf_counter()
        rows = compute()
        logger.info("%s: %d rows in %.3fs", name, len(rows), time.perf_counter() - t0)
        sink.write_batch(name, rows)

    # Statement of the largest customer for the reference month
    top = engine.top_balances(1)
    if top:
        customer_id = top[0].customer_id
        month = reference_date.strftime("%Y-%m")
        sink.write_batch(f"statement_{month}", statements.generate_statement(customer_id, month))
        sink.write_batch(
            f"statement_totals_{month}", [statements.statement_totals(customer_id, month)]
        )


def main() -> None:
    """Main entry point."""
    config = LedgerConfig.from_env()

    parser = argparse.ArgumentParser(description="Seed a sample bank and run the ledger reports")
    parser.add_argument(
        "--customers",
        type=int,
        default=50,
        help="Number of customers to generate (default: 50)",
    )
    parser.add_argument(
        "--branches",
        type=int,
        default=5,
        help="Number of branches to generate (default: 5)",
    )
    parser.add_argument(
        "--history-days",
        type=int,
        default=120,
        help="Days of transaction history to replay (default: 120)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=config.seed if config.seed is not None else 42,
        help="Random seed for reproducibility (default: 42)",
    )
    parser.add_argument(
        "--postgres-url",
        type=str,
        default=None,
        help="PostgreSQL connection string (default: in-memory store)",
    )
    parser.add_argument(
        "--truncate",
        action="store_true",
        help="Truncate PostgreSQL tables before seeding",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Write reports as JSON files to this directory (default: console)",
    )
    parser.add_argument(
        "--city",
        type=str,
        default=None,
        help="Also list the branches in this city",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=config.log_level,
        help="Log level (default: INFO)",
    )

    args = parser.parse_args()
    setup_logging(level=args.log_level, format_type=config.log_format)

    store = None
    if args.postgres_url:
        store = PostgresBankStore(args.postgres_url)
        store.create_tables()
        if args.truncate:
            store.truncate_tables()

    logger.info("=" * 60)
    logger.info("Bank Ledger - Sample Reports")
    logger.info("=" * 60)
    logger.info("Customers: %d, Branches: %d", args.customers, args.branches)
    logger.info("Seed: %d", args.seed)
    logger.info("Store: %s", "PostgreSQL" if store else "in-memory")
    logger.info("=" * 60)

    t0 = time.perf_counter()
    scenario = SampleBankScenario(
        num_branches=args.branches,
        num_customers=args.customers,
        history_days=args.history_days,
        seed=args.seed,
        store=store,
    )
    store = scenario.generate()
    logger.info("Seeded %s in %.1fs", store.summary(), time.perf_counter() - t0)

    ledger = Ledger(store)
    drifted = [r for r in ledger.reconcile_all() if not r.is_consistent]
    if drifted:
        logger.error("Reconciliation failed for %d account(s)", len(drifted))
        sys.exit(1)
    logger.info("Reconciliation: ALL OK")

    if args.output_dir:
        sink: ConsoleSink | JsonFileSink = JsonFileSink(args.output_dir, pretty=config.output.pretty_json)
    else:
        sink = ConsoleSink(pretty=False, max_records=10)

    engine = AggregationEngine(store, config.reporting)
    statements = StatementGenerator(store)
    try:
        run_reports(engine, statements, sink, datetime.now(), args.city)
    finally:
        sink.close()


if __name__ == "__main__":
    main()
