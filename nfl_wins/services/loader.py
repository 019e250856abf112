# services/loader.py
"""
CSV loader for the season tables.

Reads one CSV per table from a directory, in foreign-key order:

    players.csv, teams.csv, seasons.csv,
    player_team_seasons.csv, player_stats.csv, team_stats.csv

Headers are the table's column names; empty cells load as NULL. Missing
files are skipped. Rows rejected by the insertion layer are collected in
`LoadSummary.errors` and the load carries on with the next row. A file that
is not UTF-8 is recorded there as a whole (line None) and skipped. Integer
columns accept "13.0" but reject "13.5".

After loading, the invariants the schema cannot enforce are audited and
reported as warnings:
    - PlayerStats rows with no PlayerTeamSeason mapping (invisible to team reports)
    - TeamStats rows whose W/L/T record disagrees with win_loss_perc

Nothing is committed here; the caller decides.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from sqlalchemy import and_, select
from sqlalchemy.orm import Session

from nfl_wins.db.crud import (
    IntegrityViolation,
    add_player,
    add_player_stats,
    add_player_team_season,
    add_season,
    add_team,
    add_team_stats,
)
from nfl_wins.models import PLAYER_STAT_FIELDS, TEAM_STAT_FIELDS, PlayerStats, PlayerTeamSeason, TeamStats

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------

FLOAT_COLUMNS = {"win_loss_perc", "mov", "exp_pts_tot"}
TEXT_COLUMNS = {"name", "position"}

# W/L% is published to three decimals.
WIN_PERC_TOLERANCE = 0.001


@dataclass
class LoadSummary:
    inserted: Dict[str, int] = field(default_factory=dict)
    errors: List[Dict[str, object]] = field(default_factory=list)
    unmapped_player_stats: List[Tuple[int, int]] = field(default_factory=list)
    inconsistent_records: List[Tuple[int, int]] = field(default_factory=list)


def _coerce(column: str, raw: Optional[str]):
    if raw is None:
        return None
    raw = raw.strip()
    if raw == "":
        return None
    if column in TEXT_COLUMNS:
        return raw
    if column in FLOAT_COLUMNS:
        return float(raw)
    try:
        return int(raw)
    except ValueError:
        value = float(raw)  # spreadsheet exports write "13.0"
    if not value.is_integer():
        raise ValueError(f"{column}: {raw!r} is not a whole number")
    return int(value)


def _row(record: Dict[str, str], columns) -> Dict[str, object]:
    return {c: _coerce(c, record.get(c)) for c in columns if c in record}


def _player(db: Session, rec):
    r = _row(rec, ("player_id", "name", "position"))
    return add_player(db, r["player_id"], r.get("name"), r.get("position"))

def _team(db: Session, rec):
    r = _row(rec, ("team_id", "name"))
    return add_team(db, r["name"], team_id=r.get("team_id"))

def _season(db: Session, rec):
    return add_season(db, _row(rec, ("season_year",))["season_year"])

def _player_team_season(db: Session, rec):
    r = _row(rec, ("player_id", "season_year", "team_id"))
    return add_player_team_season(db, r["player_id"], r["season_year"], r["team_id"])

def _player_stats(db: Session, rec):
    r = _row(rec, ("player_id", "season_year") + PLAYER_STAT_FIELDS)
    return add_player_stats(db, r.pop("player_id"), r.pop("season_year"), **r)

def _team_stats(db: Session, rec):
    r = _row(rec, ("team_id", "season_year") + TEAM_STAT_FIELDS)
    return add_team_stats(db, r.pop("team_id"), r.pop("season_year"), **r)


# Foreign-key order: referenced tables first.
TABLE_FILES: Tuple[Tuple[str, str, Callable], ...] = (
    ("Player", "players.csv", _player),
    ("Team", "teams.csv", _team),
    ("Season", "seasons.csv", _season),
    ("PlayerTeamSeason", "player_team_seasons.csv", _player_team_season),
    ("PlayerStats", "player_stats.csv", _player_stats),
    ("TeamStats", "team_stats.csv", _team_stats),
)


def load_file(db: Session, path: Path, insert: Callable, table: str, summary: LoadSummary) -> int:
    count = 0
    try:
        # utf-8-sig drops the BOM Excel puts in front of the first header
        text = path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as e:
        summary.errors.append({"file": path.name, "line": None, "error": f"not UTF-8: {e}"})
        summary.inserted[table] = 0
        log.warning(f"loader: {table} <- {path.name}: unreadable, skipped")
        return 0
    reader = csv.DictReader(io.StringIO(text, newline=""))
    # line 1 is the header
    for line, rec in enumerate(reader, start=2):
        try:
            insert(db, rec)
        except (IntegrityViolation, KeyError, ValueError) as e:
            summary.errors.append({"file": path.name, "line": line, "error": str(e) or repr(e)})
            continue
        count += 1
    summary.inserted[table] = count
    log.info(f"loader: {table} <- {path.name}: {count} rows")
    return count


def load_directory(db: Session, directory) -> LoadSummary:
    directory = Path(directory)
    summary = LoadSummary()
    for table, filename, insert in TABLE_FILES:
        path = directory / filename
        if not path.exists():
            log.info(f"loader: {filename} not found in {directory}, skipping {table}")
            continue
        load_file(db, path, insert, table, summary)

    if summary.errors:
        log.warning(f"loader: {len(summary.errors)} rows rejected")

    summary.unmapped_player_stats = unmapped_player_stats(db)
    if summary.unmapped_player_stats:
        log.warning(
            f"loader: {len(summary.unmapped_player_stats)} PlayerStats rows have no team mapping "
            "and will not appear in team-level reports"
        )
    summary.inconsistent_records = inconsistent_records(db)
    for team_id, season_year in summary.inconsistent_records:
        log.warning(f"loader: team_id={team_id} season={season_year}: W/L/T does not match win_loss_perc")
    return summary


# ---------------------------------------------------------------------
# Audits
# ---------------------------------------------------------------------

def unmapped_player_stats(db: Session) -> List[Tuple[int, int]]:
    stmt = (
        select(PlayerStats.player_id, PlayerStats.season_year)
        .outerjoin(
            PlayerTeamSeason,
            and_(
                PlayerStats.player_id == PlayerTeamSeason.player_id,
                PlayerStats.season_year == PlayerTeamSeason.season_year,
            ),
        )
        .where(PlayerTeamSeason.player_id.is_(None))
        .order_by(PlayerStats.season_year, PlayerStats.player_id)
    )
    return [(r.player_id, r.season_year) for r in db.execute(stmt)]


def record_matches_percentage(wins, losses, ties, win_loss_perc) -> bool:
    """True when (wins + ties/2) / games agrees with win_loss_perc, or when there is nothing to compare."""
    if win_loss_perc is None or wins is None or losses is None:
        return True
    ties = ties or 0
    games = wins + losses + ties
    if games == 0:
        return True
    expected = (wins + 0.5 * ties) / games
    return abs(expected - win_loss_perc) <= WIN_PERC_TOLERANCE


def inconsistent_records(db: Session) -> List[Tuple[int, int]]:
    stmt = select(
        TeamStats.team_id, TeamStats.season_year,
        TeamStats.wins, TeamStats.losses, TeamStats.ties, TeamStats.win_loss_perc,
    ).order_by(TeamStats.season_year, TeamStats.team_id)
    return [
        (r.team_id, r.season_year)
        for r in db.execute(stmt)
        if not record_matches_percentage(r.wins, r.losses, r.ties, r.win_loss_perc)
    ]
