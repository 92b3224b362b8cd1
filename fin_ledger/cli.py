"""Command line entry point for local ledgers.

Usage:
    fin-ledger seed --user-id demo --transactions 80 --seed 42
    fin-ledger seed --publish kafka
    fin-ledger summary --data-dir ./ledger-data
    fin-ledger health --json
"""

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path

from fin_ledger.config import LedgerConfig
from fin_ledger.exceptions import LedgerError
from fin_ledger.generators.financial import seed_ledger
from fin_ledger.ledger.lifecycle import TransactionService
from fin_ledger.logging import setup_logging
from fin_ledger.reports import dashboard_metrics, financial_health, open_statement
from fin_ledger.sinks.console import ConsoleSink
from fin_ledger.sinks.json_file import JsonLedgerRepository
from fin_ledger.sinks.kafka import KafkaSink
from fin_ledger.sinks.serialization import to_dict
from fin_ledger.store.ledger import LedgerStore

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fin-ledger", description="Personal finance ledger")
    parser.add_argument("--data-dir", type=Path, help="Ledger directory (default: $LEDGER_DATA_DIR)")
    parser.add_argument("--log-level", help="Log level (default: $LOG_LEVEL)")
    parser.add_argument("--today", type=date.fromisoformat, help="Reference date, YYYY-MM-DD")

    subparsers = parser.add_subparsers(dest="command", required=True)

    seed = subparsers.add_parser("seed", help="Populate the ledger with demo data")
    seed.add_argument("--user-id", default="demo-user")
    seed.add_argument("--accounts", type=int, default=2)
    seed.add_argument("--cards", type=int, default=1)
    seed.add_argument("--goals", type=int, default=2)
    seed.add_argument("--transactions", type=int, default=50)
    seed.add_argument("--seed", type=int, help="Random seed (default: $SEED)")
    seed.add_argument("--fresh", action="store_true", help="Discard the existing ledger first")
    seed.add_argument(
        "--publish",
        choices=["console", "kafka"],
        help="Publish ledger events while seeding (kafka uses $KAFKA_BOOTSTRAP_SERVERS)",
    )

    summary = subparsers.add_parser("summary", help="Show balances and this month's cash flow")
    summary.add_argument("--json", action="store_true", help="Print JSON instead of text")

    health = subparsers.add_parser("health", help="Score the month's finances")
    health.add_argument("--json", action="store_true", help="Print JSON instead of text")

    return parser


def cmd_seed(args: argparse.Namespace, config: LedgerConfig, repo: JsonLedgerRepository) -> int:
    store = LedgerStore() if args.fresh else repo.load()
    publisher = None
    if args.publish == "console":
        publisher = ConsoleSink(pretty=False)
    elif args.publish == "kafka":
        publisher = KafkaSink(config.kafka)

    service = TransactionService(store, config=config, publisher=publisher)
    try:
        counts = seed_ledger(
            service,
            args.user_id,
            accounts=args.accounts,
            cards=args.cards,
            goals=args.goals,
            transactions=args.transactions,
            seed=args.seed if args.seed is not None else config.seed,
            today=args.today,
        )
    finally:
        if publisher is not None:
            publisher.close()
    repo.save(store)
    print(f"Seeded {repo.data_dir}: " + ", ".join(f"{k}={v}" for k, v in counts.items()))
    return 0


def cmd_summary(args: argparse.Namespace, config: LedgerConfig, repo: JsonLedgerRepository) -> int:
    store = repo.load()
    metrics = dashboard_metrics(store, args.today)
    statements = [open_statement(store, card_id, args.today) for card_id in store.credit_cards]

    if args.json:
        payload = {
            "ledger": store.summary(),
            "metrics": to_dict(metrics),
            "statements": [
                {**to_dict(s), "total": str(s.total), "transactions": len(s.transactions)}
                for s in statements
            ],
        }
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return 0

    print(f"Accounts: {len(store.accounts)}  Cards: {len(store.credit_cards)}  "
          f"Goals: {len(store.goals)}  Transactions: {len(store.transactions)}")
    print(f"Total balance:      {metrics.total_balance:>12}")
    print(f"Available credit:   {metrics.total_credit_limit:>12}")
    print(f"Monthly income:     {metrics.monthly_income:>12}")
    print(f"Monthly expenses:   {metrics.monthly_expenses:>12}")
    print(f"Net cash flow:      {metrics.net_cash_flow:>12}")
    for statement in statements:
        print(
            f"Card {statement.card_id}: {statement.total} "
            f"({statement.start} to {statement.closing}, due {statement.due})"
        )
    for goal in store.goals.values():
        print(f"{goal.icon} {goal.name}: {goal.current_amount}/{goal.target_amount} ({goal.progress_percent}%)")
    return 0


def cmd_health(args: argparse.Namespace, config: LedgerConfig, repo: JsonLedgerRepository) -> int:
    health = financial_health(repo.load(), args.today)

    if args.json:
        print(json.dumps(to_dict(health), indent=2, ensure_ascii=False))
        return 0

    print(f"Status: {health.status.value} (score {health.score}/100)")
    for recommendation in health.recommendations:
        print(f"- {recommendation}")
    return 0


COMMANDS = {
    "seed": cmd_seed,
    "summary": cmd_summary,
    "health": cmd_health,
}


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = LedgerConfig.from_env()
    except LedgerError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    setup_logging(args.log_level or config.log_level, config.log_format)
    repo = JsonLedgerRepository(args.data_dir or config.storage.data_dir, pretty=config.storage.pretty_json)

    try:
        return COMMANDS[args.command](args, config, repo)
    except LedgerError as exc:
        logger.error("%s failed: %s", args.command, exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
