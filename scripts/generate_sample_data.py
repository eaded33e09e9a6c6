#!/usr/bin/env python3
"""Generate a sample medical loan portfolio.

Runs the loan portfolio scenario through the ledger and writes borrowers,
wallets, loans, EMI payments and ledger events to the selected sinks.
"""

import argparse
import logging
from dataclasses import replace
from datetime import date
from pathlib import Path

from emi_ledger.config import LedgerConfig, PolicyConfig
from emi_ledger.exceptions import ConfigurationError
from emi_ledger.logging import setup_logging
from emi_ledger.scenarios import LoanPortfolioScenario
from emi_ledger.sinks import ConsoleSink, JsonFileSink, KafkaSink
from emi_ledger.sinks.kafka import RELIABLE

logger = logging.getLogger(__name__)


def print_summary(summary: dict, output_dir: Path | None) -> None:
    """Print generation summary."""
    print("\n" + "=" * 60)
    print("Summary")
    print("=" * 60)
    for name, value in summary.items():
        if isinstance(value, dict):
            print(f"{name}:")
            for key, count in value.items():
                print(f"  {key + ':':24}{count}")
        else:
            print(f"{name + ':':26}{value}")
    if output_dir is not None:
        print(f"\nAll files saved to: {output_dir}")
    print("=" * 60)


def main() -> None:
    """Main entry point."""
    config = LedgerConfig.from_env()

    parser = argparse.ArgumentParser(description="Generate a sample medical loan portfolio")
    parser.add_argument(
        "--borrowers",
        type=int,
        default=50,
        help="Number of borrowers to generate (default: 50)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=config.seed if config.seed is not None else 42,
        help="Random seed for reproducibility (default: 42 or $SEED)",
    )
    parser.add_argument(
        "--as-of",
        type=date.fromisoformat,
        default=None,
        help="Simulation date, YYYY-MM-DD (default: today)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=config.output.json_output_dir,
        help="Directory for JSON output (default: $OUTPUT_DIR or ./output)",
    )
    parser.add_argument(
        "--shortfall-policy",
        choices=["reject", "carry_interest"],
        default=config.policy.shortfall.value,
        help="Handling of payments below accrued interest",
    )
    parser.add_argument(
        "--due-date-policy",
        choices=["calendar_month", "fixed_30_day"],
        default=config.policy.due_dates.value,
        help="How installment due dates advance",
    )
    parser.add_argument(
        "--console",
        action="store_true",
        help="Also print records to stdout",
    )
    parser.add_argument(
        "--kafka",
        action="store_true",
        help=f"Also publish to Kafka at {config.kafka.bootstrap_servers}",
    )
    parser.add_argument(
        "--log-level",
        default=config.log_level,
        help="Log level (default: INFO or $LOG_LEVEL)",
    )
    args = parser.parse_args()

    setup_logging(args.log_level)

    try:
        config.policy = PolicyConfig.from_names(args.shortfall_policy, args.due_date_policy)
    except ConfigurationError as exc:
        parser.error(str(exc))
    config.seed = args.seed

    sinks: list = [JsonFileSink(args.output_dir, pretty=config.output.pretty_json)]
    if args.console:
        sinks.append(ConsoleSink(pretty=False, max_records=5))
    if args.kafka:
        sinks.append(
            KafkaSink(replace(RELIABLE, bootstrap_servers=config.kafka.bootstrap_servers, acks=config.kafka.acks))
        )

    scenario = LoanPortfolioScenario(
        num_borrowers=args.borrowers,
        seed=args.seed,
        as_of=args.as_of,
        config=config,
    )
    scenario.generate()
    scenario.export(sinks)
    logger.info("Exported portfolio to %d sinks: %s", len(sinks), scenario.outcomes)
    for sink in sinks:
        sink.close()

    print_summary(scenario.get_portfolio_summary(), args.output_dir)


if __name__ == "__main__":
    main()
