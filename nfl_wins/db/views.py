"""
Derived views over the season tables.

LeadingReceivers: one row per (team, season), the player with the most
receiving yards on that team that season. The select is built once here and
used two ways:

- reports join it as a subquery, so they never depend on the view existing;
- `create_schema` compiles the same select into `CREATE VIEW LeadingReceivers`
  for anything that queries the database directly.

Ties on receiving yards go to the lowest player_id.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy import and_, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from nfl_wins.db import Base
from nfl_wins.models import Player, PlayerStats, PlayerTeamSeason

log = logging.getLogger(__name__)

LEADING_RECEIVERS_VIEW = "LeadingReceivers"

# PlayerStats rows that belong to a team-season (inner join on the mapping).
PLAYER_TEAM_JOIN = and_(
    PlayerStats.player_id == PlayerTeamSeason.player_id,
    PlayerStats.season_year == PlayerTeamSeason.season_year,
)


def rank_within_team_season(stat):
    """ROW_NUMBER() of `stat` (descending) inside each team-season, lowest player_id first on ties."""
    return func.row_number().over(
        partition_by=(PlayerTeamSeason.team_id, PlayerStats.season_year),
        order_by=(stat.desc(), PlayerStats.player_id.asc()),
    )


def leading_receivers_select() -> Select:
    ranked = (
        select(
            PlayerTeamSeason.team_id,
            PlayerStats.season_year,
            PlayerStats.player_id,
            PlayerStats.receiving_yards,
            rank_within_team_season(PlayerStats.receiving_yards).label("rn"),
        )
        .select_from(PlayerStats)
        .join(PlayerTeamSeason, PLAYER_TEAM_JOIN)
        .where(PlayerStats.receiving_yards.is_not(None))
        .subquery("ranked")
    )
    return (
        select(
            ranked.c.team_id,
            ranked.c.season_year,
            ranked.c.player_id,
            Player.name.label("player_name"),
            Player.position,
            ranked.c.receiving_yards,
        )
        .select_from(ranked)
        .join(Player, ranked.c.player_id == Player.player_id)
        .where(ranked.c.rn == 1)
    )


def leading_receivers(
    db: Session,
    season_year: Optional[int] = None,
    team_id: Optional[int] = None,
) -> List[Dict[str, object]]:
    lr = leading_receivers_select().subquery("lr")
    stmt = select(lr).order_by(lr.c.season_year, lr.c.team_id)
    if season_year is not None:
        stmt = stmt.where(lr.c.season_year == season_year)
    if team_id is not None:
        stmt = stmt.where(lr.c.team_id == team_id)
    return [dict(r) for r in db.execute(stmt).mappings()]


def view_ddl(dialect) -> Tuple[str, str]:
    """(DROP, CREATE) statements for LeadingReceivers in `dialect`, name quoted like the tables it reads."""
    name = dialect.identifier_preparer.quote(LEADING_RECEIVERS_VIEW)
    body = leading_receivers_select().compile(
        dialect=dialect, compile_kwargs={"literal_binds": True}
    )
    return f"DROP VIEW IF EXISTS {name}", f"CREATE VIEW {name} AS {body}"


def create_views(bind: Engine) -> None:
    drop, create = view_ddl(bind.dialect)
    with bind.begin() as conn:
        conn.exec_driver_sql(drop)
        conn.exec_driver_sql(create)
    log.info(f"views: created {LEADING_RECEIVERS_VIEW}")


def create_schema(bind: Engine) -> None:
    """Create all tables (if missing) and (re)create the derived views."""
    Base.metadata.create_all(bind)
    create_views(bind)
