"""
main.py – CLI for inspecting the sheet rows behind the dashboard.

Usage
-----
Print normalised rows (first tab, SHEET_ID from .env):
    python -m building_ops.main rows
    python -m building_ops.main rows --gid 123456789 --month 6 --year 2025
    python -m building_ops.main rows --json

Monthly sums of one field for the last N months:
    python -m building_ops.main months --field total_waste_kg --count 6

Common options:
    --sheet-id ID   (overrides SHEET_ID)
    --verbose
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date

from rich.console import Console
from rich.table import Table

from building_ops.aggregation import (
    landfill_waste_of,
    month_bucket_sums,
    month_keys_back,
    total_waste_of,
)
from building_ops.config import get_config
from building_ops.constants import NUMERIC_FIELDS
from building_ops.row_source import RowSourceError, fetch_rows

console = Console()

# Derived fields go through the fallback-then-sum rollup
_ROLLUPS = {
    "total_waste_kg": total_waste_of,
    "landfill_waste_kg": landfill_waste_of,
}


# ─────────────────────────────────────────────────────────────
# Sub-commands
# ─────────────────────────────────────────────────────────────

def cmd_rows(args: argparse.Namespace) -> int:
    """Fetch rows and print them as a table (or JSON with --json)."""
    try:
        records = fetch_rows(
            sheet_id=args.sheet_id, gid=args.gid, month=args.month, year=args.year,
        )
    except RowSourceError as exc:
        console.print(f"[red]Error:[/] {exc}")
        return 1

    if args.limit is not None:
        records = records[: args.limit]

    if args.json:
        print(json.dumps([r.to_dict() for r in records], ensure_ascii=False, indent=2))
        return 0

    table = Table(title=f"Sheet rows ({len(records)})", show_lines=False)
    table.add_column("Date")
    table.add_column("Floor")
    table.add_column("Submitted by")
    for name in NUMERIC_FIELDS:
        table.add_column(name, justify="right")
    for r in records:
        table.add_row(
            r.date,
            r.floor,
            r.submitted_by,
            *(f"{r.value(name):,.2f}" for name in NUMERIC_FIELDS),
        )
    console.print(table)
    return 0


def cmd_months(args: argparse.Namespace) -> int:
    """Print month-bucket sums of one field for the last --count months."""
    try:
        records = fetch_rows(sheet_id=args.sheet_id, gid=args.gid)
    except RowSourceError as exc:
        console.print(f"[red]Error:[/] {exc}")
        return 1

    keys = month_keys_back(date.today(), args.count)
    value = _ROLLUPS.get(args.field, args.field)
    sums = month_bucket_sums(records, keys, value)

    table = Table(title=f"{args.field} by month")
    table.add_column("Month")
    table.add_column(args.field, justify="right")
    for key, total in sums.items():
        table.add_row(key, f"{total:,.2f}")
    console.print(table)
    return 0


# ─────────────────────────────────────────────────────────────
# Argument parsing
# ─────────────────────────────────────────────────────────────

def _build_shared_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--sheet-id",
        dest="sheet_id",
        default=None,
        help="Google Sheet id (default: SHEET_ID from environment)",
    )
    parser.add_argument(
        "--gid",
        default=None,
        help="Sheet tab gid (default: SHEET_GID or the first tab)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Log fetch and row-drop details",
    )


def build_parser() -> argparse.ArgumentParser:
    """Construct and return the top-level argument parser."""
    root = argparse.ArgumentParser(
        prog="python -m building_ops.main",
        description="Building operations sheet – inspection CLI.",
    )
    sub = root.add_subparsers(dest="command", required=True)

    # ── rows ───────────────────────────────────────────────────
    p_rows = sub.add_parser("rows", help="Fetch and print normalised rows.")
    p_rows.add_argument("--month", type=int, default=None, help="Month filter (1-12)")
    p_rows.add_argument("--year", type=int, default=None, help="Year filter, e.g. 2025")
    p_rows.add_argument("--limit", type=int, default=None, help="Print at most N rows")
    p_rows.add_argument("--json", action="store_true", default=False, help="Print JSON")
    _build_shared_args(p_rows)

    # ── months ─────────────────────────────────────────────────
    p_months = sub.add_parser("months", help="Monthly sums of one field.")
    p_months.add_argument(
        "--field",
        default="total_waste_kg",
        choices=NUMERIC_FIELDS,
        help="Numeric field to sum (default: total_waste_kg)",
    )
    p_months.add_argument(
        "--count",
        type=int,
        default=12,
        help="Number of calendar months ending this month (default 12)",
    )
    _build_shared_args(p_months)

    return root


# ─────────────────────────────────────────────────────────────
# Entry point
# ─────────────────────────────────────────────────────────────

def main(argv: list[str] | None = None) -> None:
    """Parse arguments and dispatch to the correct sub-command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    config = get_config()
    if args.gid is None:
        args.gid = config.sheet_gid
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    dispatch = {
        "rows": cmd_rows,
        "months": cmd_months,
    }
    handler = dispatch.get(args.command)
    if handler is None:
        parser.print_help()
        sys.exit(1)

    sys.exit(handler(args))


if __name__ == "__main__":
    main()
