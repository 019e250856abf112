from typing import Optional, Dict, Any, Iterable
from sqlalchemy.orm import Session
from sqlalchemy import select
from nfl_wins.models import (
    Player, Team, Season, PlayerTeamSeason, PlayerStats, TeamStats,
    PLAYER_STAT_FIELDS, TEAM_STAT_FIELDS,
)

# The dataset is append-only: every helper here inserts exactly one row or
# raises. Nothing is updated in place. Callers own the commit.

class IntegrityViolation(Exception):
    """A row was rejected before reaching the database."""

class ForeignKeyError(IntegrityViolation):
    pass

class DuplicateKeyError(IntegrityViolation):
    pass


def _require(db: Session, model, **key):
    if None in key.values() or db.get(model, key) is None:
        desc = ", ".join(f"{k}={v}" for k, v in key.items())
        raise ForeignKeyError(f"{model.__tablename__} ({desc}) does not exist")

def _reject_duplicate(db: Session, model, **key):
    if None in key.values():
        raise ValueError(f"{model.__tablename__} key cannot be NULL: {key}")
    if db.get(model, key) is not None:
        desc = ", ".join(f"{k}={v}" for k, v in key.items())
        raise DuplicateKeyError(f"{model.__tablename__} ({desc}) already exists")

def _check_fields(stats: Dict[str, Any], allowed: Iterable[str]):
    unknown = sorted(set(stats) - set(allowed))
    if unknown:
        raise ValueError(f"unknown stat columns: {', '.join(unknown)}")

def _insert(db: Session, row):
    db.add(row)
    db.flush()
    return row

# ----- Players -----
def add_player(db: Session, player_id: int, name: Optional[str], position: Optional[str]) -> Player:
    _reject_duplicate(db, Player, player_id=player_id)
    return _insert(db, Player(player_id=player_id, name=name, position=position))

# ----- Teams -----
def add_team(db: Session, name: str, team_id: Optional[int] = None) -> Team:
    if not name:
        raise ValueError("Team name is required")
    if team_id is not None:
        _reject_duplicate(db, Team, team_id=team_id)
    clash = db.execute(select(Team).where(Team.name == name)).scalar_one_or_none()
    if clash:
        raise DuplicateKeyError(f"Team name {name!r} already taken by team_id={clash.team_id}")
    return _insert(db, Team(team_id=team_id, name=name))

# ----- Seasons -----
def add_season(db: Session, season_year: int) -> Season:
    _reject_duplicate(db, Season, season_year=season_year)
    return _insert(db, Season(season_year=season_year))

def get_or_create_season(db: Session, season_year: int) -> Season:
    s = db.get(Season, season_year)
    if s:
        return s
    return _insert(db, Season(season_year=season_year))

# ----- Player <-> team mapping -----
def add_player_team_season(db: Session, player_id: int, season_year: int, team_id: int) -> PlayerTeamSeason:
    _require(db, Player, player_id=player_id)
    _require(db, Season, season_year=season_year)
    _require(db, Team, team_id=team_id)
    _reject_duplicate(db, PlayerTeamSeason, player_id=player_id, season_year=season_year)
    return _insert(db, PlayerTeamSeason(player_id=player_id, season_year=season_year, team_id=team_id))

# ----- Season stat lines -----
def add_player_stats(db: Session, player_id: int, season_year: int, **stats) -> PlayerStats:
    _check_fields(stats, PLAYER_STAT_FIELDS)
    _require(db, Player, player_id=player_id)
    _require(db, Season, season_year=season_year)
    _reject_duplicate(db, PlayerStats, player_id=player_id, season_year=season_year)
    return _insert(db, PlayerStats(player_id=player_id, season_year=season_year, **stats))

def add_team_stats(db: Session, team_id: int, season_year: int, **stats) -> TeamStats:
    _check_fields(stats, TEAM_STAT_FIELDS)
    _require(db, Team, team_id=team_id)
    _require(db, Season, season_year=season_year)
    _reject_duplicate(db, TeamStats, team_id=team_id, season_year=season_year)
    return _insert(db, TeamStats(team_id=team_id, season_year=season_year, **stats))
