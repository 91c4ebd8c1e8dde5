#!/usr/bin/env python3
"""
FPL Live Table CLI

Scores a mini-league snapshot bundle (bootstrap, fixtures, live stats,
standings and every manager's picks/history, already fetched) and writes the
live table as JSON.

Usage:
    python live_table.py snapshots/gw22.json
    python live_table.py snapshots/gw22.json --month 2025-01 --view gameweek
    python live_table.py snapshots/gw22.json --output out/gw22_table.json
    python live_table.py snapshots/gw22.json --trace substitutions --trace bonus
"""

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path

from fpl_live import RankingView, default_month, gameweeks_for_month, load_snapshot, run_engine
from fpl_live.config import get_default_view
from fpl_live.logging_config import DECISION_MODULES, setup_logging
from fpl_live.utils import save_json


def main():
    parser = argparse.ArgumentParser(description="FPL mini-league live table")
    parser.add_argument(
        "snapshot",
        help="Path to snapshot bundle JSON",
    )
    parser.add_argument(
        "--month", "-m",
        default=None,
        help="Month to rank (YYYY-MM); defaults to the current month",
    )
    parser.add_argument(
        "--view",
        choices=[v.value for v in RankingView],
        default=None,
        help="Sort by period or gameweek points (defaults to league config)",
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Output path for the live table JSON",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log everything at DEBUG",
    )
    parser.add_argument(
        "--trace",
        action="append",
        choices=DECISION_MODULES,
        default=[],
        help="Log one module's decisions (bonus, substitutions, standings); repeatable",
    )
    parser.add_argument(
        "--log-file",
        action="store_true",
        help="Also write a log file under ./logs",
    )

    args = parser.parse_args()

    logger = setup_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        log_to_file=args.log_file,
        trace_modules=args.trace,
    )

    try:
        snapshot = load_snapshot(args.snapshot)
    except (FileNotFoundError, json.JSONDecodeError, ValueError) as e:
        logger.error(f"Could not load snapshot: {e}")
        sys.exit(1)

    if args.view:
        view = RankingView(args.view)
    else:
        try:
            view = get_default_view()
        except (FileNotFoundError, ValueError) as e:
            logger.warning(f"No usable league config ({e}); using period view")
            view = RankingView.PERIOD
    month = args.month or default_month(snapshot.fixtures, date.today())
    period = gameweeks_for_month(snapshot.fixtures, month) if month else [snapshot.gameweek]

    result = run_engine(snapshot, period_gameweeks=period, view=view)

    print(f"\nGameweek {result.gameweek} - {month or 'no month'} ({view.value} view)")
    print("=" * 60)
    for position, row in enumerate(result.standings, 1):
        roster = result.rosters[row.manager_id]
        move = f"+{row.rank_delta}" if row.rank_delta > 0 else str(row.rank_delta)
        print(
            f"  {position:>2}. {row.entry_name:<28} "
            f"{row.period_points:>5} (GW {row.gameweek_points:>3}, "
            f"{roster.played}/{roster.max_countable} played) {move}"
        )

    if args.output:
        output_path = Path(args.output)
        save_json(output_path, result)
        print(f"\nLive table saved to {output_path}")


if __name__ == "__main__":
    main()
