"""
Print every report (or the ones named on the command line) as plain tables.

Usage:

    python scripts/run_reports.py
    python scripts/run_reports.py wins_by_qb_passing_yards wins_by_points_allowed
"""

import logging
import sys

from nfl_wins.db import SessionLocal
from nfl_wins.services.reports import REPORTS, run_report


def _print_result(result) -> None:
    print(f"# {result.title} ({result.name})")
    widths = [
        max([len(c)] + [len(str(row[c])) for row in result.rows])
        for c in result.columns
    ]
    print("  ".join(c.ljust(w) for c, w in zip(result.columns, widths)))
    for row in result.rows:
        print("  ".join(str(row[c]).ljust(w) for c, w in zip(result.columns, widths)))
    print()


def main(names: list[str]) -> int:
    unknown = [n for n in names if n not in REPORTS]
    if unknown:
        print(f"Unknown report(s): {', '.join(unknown)}")
        print(f"Available: {', '.join(REPORTS)}")
        return 2

    db = SessionLocal()
    try:
        for name in names or list(REPORTS):
            _print_result(run_report(db, name))
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.WARNING)
    raise SystemExit(main(sys.argv[1:]))
