"""
SplitSettle command line
- Show each member's net balance, the payments that settle the group and
  the raw pairwise debts behind them.
- Optionally export an Excel report or move expenses in/out of CSV.

Run:
  split-settle ledger.json [--excel report.xlsx]
"""
from __future__ import annotations
import argparse
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from computations import filter_expenses_by_date, settle
from config import LedgerFormatError, load_group, save_group
from csv_handler import export_expenses_to_csv, import_expenses_from_csv, merge_expenses
from excel_export import export_settlement_excel
from models import UNKNOWN_RAISE, LedgerValidationError, REMAINDER_WARN
from utils import parse_date

logger = logging.getLogger("split_settle")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="split-settle", description="Settle shared group expenses")
    parser.add_argument("ledger", help="Ledger JSON file")
    parser.add_argument("--start", type=parse_date, help="First expense date (YYYY-MM-DD)")
    parser.add_argument("--end", type=parse_date, help="Last expense date (YYYY-MM-DD)")
    parser.add_argument("--excel", metavar="OUT", help="Write an Excel settlement report")
    parser.add_argument("--import-csv", metavar="CSV", help="Append expenses from CSV and save the ledger")
    parser.add_argument("--export-csv", metavar="CSV", help="Write the ledger's expenses to CSV")
    parser.add_argument(
        "--strict", action="store_true",
        help="Fail on unknown participants and report dropped sub-unit transfers"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    args = build_parser().parse_args(argv)

    try:
        group = load_group(args.ledger)
        # --strict only affects this run, the ledger keeps its own policy
        policy = group.policy
        if args.strict:
            policy = replace(policy, unknown_participants=UNKNOWN_RAISE, subunit_remainders=REMAINDER_WARN)

        if args.import_csv:
            imported = import_expenses_from_csv(args.import_csv)
            group = replace(group, expenses=merge_expenses(group.expenses, imported))
            save_group(group, args.ledger)
            logger.info("Imported %d expenses from %s", len(imported), args.import_csv)

        if args.export_csv:
            export_expenses_to_csv(group.expenses, args.export_csv)
            logger.info("Exported %d expenses to %s", len(group.expenses), args.export_csv)

        exps = filter_expenses_by_date(group.expenses, args.start, args.end)
        result = settle(exps, group.members, policy)

        if args.excel:
            export_settlement_excel(group, args.excel, args.start, args.end, policy)
            logger.info("Excel report written to %s", args.excel)
    except (OSError, LedgerFormatError, LedgerValidationError) as exc:
        logger.error("%s", exc)
        return 1

    names = group.member_names()
    print("Balances:")
    for member_id, amount in result.balances.items():
        print(f"  {names[member_id]}: {amount:+.2f}")
    print("Transfers:")
    if not result.transactions:
        print("  (all settled)")
    for t in result.transactions:
        print(f"  {names.get(t.from_id, t.from_id)} -> {names.get(t.to_id, t.to_id)}: {t.amount}")
    print("Raw debts:")
    for line in result.raw_debts:
        print(f"  {line}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
