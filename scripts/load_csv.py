"""
Load a directory of CSV exports into the database.

Usage:

    # DATABASE_URL must point at a database created with scripts/init_db.py
    python scripts/load_csv.py data/

The directory may contain any of players.csv, teams.csv, seasons.csv,
player_team_seasons.csv, player_stats.csv and team_stats.csv. Rows that
violate a key or reference a missing player/team/season are skipped and
listed at the end; everything else is committed.
"""

import argparse
import logging

from nfl_wins.db import SessionLocal
from nfl_wins.services.loader import load_directory


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("directory", help="folder holding the table CSVs")
    args = parser.parse_args()

    db = SessionLocal()
    try:
        summary = load_directory(db, args.directory)
        db.commit()
    finally:
        db.close()

    for table, count in summary.inserted.items():
        print(f"{table}: {count} rows")
    for err in summary.errors:
        print(f"rejected {err['file']}:{err['line']}: {err['error']}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    main()
