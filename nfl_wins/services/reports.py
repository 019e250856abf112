# services/reports.py
"""
Win-correlation reports.

Every report is a single read-only SELECT. Apart from the top-10 passing
ranking they all follow one template:

    1. produce one row per team-season (or per player on a team-season)
       carrying a `category` label and a numeric `value`;
    2. AVG(value) GROUP BY category.

Step 1 is exposed as `Report.bucket_rows()` so the bucket membership can be
inspected on its own. A bucket with no rows simply produces no output row.

Thresholds are fixed constants; reports take no parameters.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy import and_, case, func, select
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from nfl_wins.db.views import PLAYER_TEAM_JOIN, leading_receivers_select
from nfl_wins.models import Player, PlayerStats, PlayerTeamSeason, Season, Team, TeamStats

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------

QB, RB, WR, TE = "QB", "RB", "WR", "TE"

TOP_PASSING_LIMIT = 10
WINNING_SEASON_WINS = 10          # "playoff team" proxy
QB_PASSING_YARDS = 3000
RB_RUSHING_YARDS = 1000           # strictly greater than
WR_RECEIVING_YARDS = 1200
WR_CORPS_RECEIVING_YARDS = 3000
TE_RECEIVING_YARDS = 1000
POINTS_ALLOWED = 300              # strictly fewer than
DEFENDER_TACKLES = 100

AVG_PRECISION = 4

# TeamStats row of the team a player was mapped to that season.
TEAM_SEASON_OF_PLAYER = and_(
    TeamStats.team_id == PlayerTeamSeason.team_id,
    TeamStats.season_year == PlayerTeamSeason.season_year,
)


class UnknownReportError(KeyError):
    pass


# ---------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------

def _bucket(condition, yes: str, no: str):
    # NULL comparisons fall through to the "no" label, same as SQL CASE
    return case((condition, yes), else_=no)

def _winning(yes: str = "10+ Wins", no: str = "Under 10 Wins"):
    return _bucket(TeamStats.wins >= WINNING_SEASON_WINS, yes, no)

def _per_team_season(aggregate, name: str, position: Optional[str] = None):
    """One row per team-season: (team_id, season_year, leading) over its players."""
    stmt = (
        select(
            PlayerTeamSeason.team_id,
            PlayerStats.season_year,
            aggregate.label("leading"),
        )
        .select_from(PlayerStats)
        .join(PlayerTeamSeason, PLAYER_TEAM_JOIN)
    )
    if position is not None:
        stmt = stmt.join(Player, PlayerStats.player_id == Player.player_id).where(Player.position == position)
    return stmt.group_by(PlayerTeamSeason.team_id, PlayerStats.season_year).subquery(name)

def _wins_by_leading(sub, condition: Callable[[Any], Any], yes: str, no: str) -> Select:
    return (
        select(
            _bucket(condition(sub.c.leading), yes, no).label("category"),
            TeamStats.wins.label("value"),
        )
        .select_from(TeamStats)
        .join(sub, and_(sub.c.team_id == TeamStats.team_id, sub.c.season_year == TeamStats.season_year))
    )

def _player_rows(category, measure, position: Optional[str] = None) -> Select:
    """One row per player on a team-season: (category of the team-season, player's measure)."""
    stmt = (
        select(category.label("category"), measure.label("value"))
        .select_from(TeamStats)
        .join(PlayerTeamSeason, TEAM_SEASON_OF_PLAYER)
        .join(PlayerStats, PLAYER_TEAM_JOIN)
        .join(Player, PlayerStats.player_id == Player.player_id)
    )
    if position is not None:
        stmt = stmt.where(Player.position == position)
    return stmt

def _wins_by_leading_receiver(position: str, threshold: int, yes: str, no: str) -> Select:
    lr = leading_receivers_select().subquery("lr")
    return (
        select(
            _bucket(lr.c.receiving_yards >= threshold, yes, no).label("category"),
            TeamStats.wins.label("value"),
        )
        .select_from(TeamStats)
        .join(lr, and_(lr.c.team_id == TeamStats.team_id, lr.c.season_year == TeamStats.season_year))
        .where(lr.c.position == position)
    )

def _team_rows(category, measure) -> Select:
    return select(category.label("category"), measure.label("value")).select_from(TeamStats)


# ---------------------------------------------------------------------
# Report definitions
# ---------------------------------------------------------------------

def top_passing_qb_seasons() -> Select:
    return (
        select(
            Player.name.label("player_name"),
            PlayerStats.passing_yards,
            Season.season_year,
            Team.name.label("team_name"),
            TeamStats.wins,
        )
        .select_from(PlayerStats)
        .join(Player, PlayerStats.player_id == Player.player_id)
        .join(PlayerTeamSeason, PLAYER_TEAM_JOIN)
        .join(Team, PlayerTeamSeason.team_id == Team.team_id)
        .join(Season, PlayerStats.season_year == Season.season_year)
        .join(TeamStats, and_(TeamStats.team_id == Team.team_id, TeamStats.season_year == Season.season_year))
        .where(Player.position == QB, PlayerStats.passing_yards.is_not(None))
        .order_by(PlayerStats.passing_yards.desc(), PlayerStats.player_id, PlayerStats.season_year)
        .limit(TOP_PASSING_LIMIT)
    )

def wins_by_qb_passing_yards() -> Select:
    sub = _per_team_season(func.max(PlayerStats.passing_yards), "ps_max", position=QB)
    return _wins_by_leading(
        sub, lambda v: v >= QB_PASSING_YARDS, "3000+ Yard QB", "Under 3000 Yard QB",
    )

def qb_touchdowns_by_playoff_status() -> Select:
    return _player_rows(_winning("Playoff Team", "Non-Playoff Team"), PlayerStats.touchdowns, position=QB)

def wins_by_rb_rushing_yards() -> Select:
    # A team-season counts once even if two RBs share the top rushing total.
    sub = _per_team_season(func.max(PlayerStats.rushing_yards), "rb_max", position=RB)
    return _wins_by_leading(
        sub, lambda v: v > RB_RUSHING_YARDS, "1000+ Yard Rusher", "Under 1000 Yard Rusher",
    )

def rb_rushing_by_playoff_status() -> Select:
    return _player_rows(_winning("Playoff Team", "Non-Playoff Team"), PlayerStats.rushing_yards, position=RB)

def wins_by_leading_wr_yards() -> Select:
    return _wins_by_leading_receiver(WR, WR_RECEIVING_YARDS, "1200+ Yard WR", "Under 1200 Yard WR")

def wins_by_wr_corps_yards() -> Select:
    sub = _per_team_season(func.sum(PlayerStats.receiving_yards), "wr_yds", position=WR)
    return _wins_by_leading(
        sub, lambda v: v >= WR_CORPS_RECEIVING_YARDS,
        "3000+ WR Receiving Yards", "Under 3000 WR Receiving Yards",
    )

def wins_by_leading_te_yards() -> Select:
    return _wins_by_leading_receiver(TE, TE_RECEIVING_YARDS, "1000+ Yard TE", "Under 1000 Yard TE")

def te_receiving_by_win_total() -> Select:
    return _player_rows(_winning(), PlayerStats.receiving_yards, position=TE)

def wins_by_points_allowed() -> Select:
    return _team_rows(
        _bucket(TeamStats.points_opp < POINTS_ALLOWED, "Allowed Under 300 Points", "Allowed 300+ Points"),
        TeamStats.wins,
    )

def turnovers_by_win_total() -> Select:
    return _team_rows(_winning(), TeamStats.turnovers)

def wins_by_leading_tackler() -> Select:
    sub = _per_team_season(func.max(PlayerStats.tackles), "def_tackles")
    return _wins_by_leading(
        sub, lambda v: v >= DEFENDER_TACKLES, "100+ Tackle Defender", "Under 100 Tackle Defender",
    )

def tackles_by_win_total() -> Select:
    return _player_rows(_winning(), PlayerStats.tackles)

def qb_interceptions_by_win_total() -> Select:
    return _player_rows(_winning(), PlayerStats.interceptions, position=QB)


# ---------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class Report:
    name: str
    title: str
    columns: Tuple[str, ...]
    build: Callable[[], Select]
    bucketed: bool = True

    def bucket_rows(self) -> Select:
        if not self.bucketed:
            raise ValueError(f"{self.name} is a ranking, not a bucketed report")
        return self.build()

    def statement(self) -> Select:
        if not self.bucketed:
            return self.build()
        category, value = self.columns
        src = self.build().subquery("bucketed")
        return (
            select(src.c.category.label(category), func.avg(src.c.value).label(value))
            .group_by(src.c.category)
            .order_by(src.c.category)
        )


@dataclass
class ReportResult:
    name: str
    title: str
    columns: List[str]
    rows: List[Dict[str, Any]] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "title": self.title, "columns": self.columns, "rows": self.rows}


_DEFINITIONS = (
    Report("top_passing_qb_seasons", "Top 10 passing-yard QB seasons with team wins",
           ("player_name", "passing_yards", "season_year", "team_name", "wins"),
           top_passing_qb_seasons, bucketed=False),
    Report("wins_by_qb_passing_yards", "Average wins with vs. without a 3000-yard QB",
           ("qb_category", "avg_wins"), wins_by_qb_passing_yards),
    Report("qb_touchdowns_by_playoff_status", "Average QB passing TDs on playoff vs. non-playoff teams",
           ("team_type", "avg_passing_tds"), qb_touchdowns_by_playoff_status),
    Report("wins_by_rb_rushing_yards", "Average wins by leading rusher over 1000 yards",
           ("rusher_category", "avg_wins"), wins_by_rb_rushing_yards),
    Report("rb_rushing_by_playoff_status", "Average RB rushing yards on playoff vs. non-playoff teams",
           ("team_type", "avg_rushing_yards"), rb_rushing_by_playoff_status),
    Report("wins_by_leading_wr_yards", "Average wins with vs. without a 1200+ yard leading WR",
           ("receiver_category", "avg_wins"), wins_by_leading_wr_yards),
    Report("wins_by_wr_corps_yards", "Average wins with vs. without 3000+ total WR receiving yards",
           ("receiving_category", "avg_wins"), wins_by_wr_corps_yards),
    Report("wins_by_leading_te_yards", "Average wins with vs. without a 1000+ yard leading TE",
           ("te_category", "avg_wins"), wins_by_leading_te_yards),
    Report("te_receiving_by_win_total", "Average TE receiving yards for 10+ win teams vs. the rest",
           ("team_category", "avg_te_receiving_yards"), te_receiving_by_win_total),
    Report("wins_by_points_allowed", "Average wins allowing under 300 vs. 300+ points",
           ("defense_category", "avg_wins"), wins_by_points_allowed),
    Report("turnovers_by_win_total", "Average turnovers for 10+ win teams vs. the rest",
           ("team_category", "avg_turnovers_committed"), turnovers_by_win_total),
    Report("wins_by_leading_tackler", "Average wins with vs. without a 100+ tackle defender",
           ("defender_category", "avg_wins"), wins_by_leading_tackler),
    Report("tackles_by_win_total", "Average tackles per player for 10+ win teams vs. the rest",
           ("team_category", "avg_tackles_per_player"), tackles_by_win_total),
    Report("qb_interceptions_by_win_total", "Average QB interceptions for 10+ win teams vs. the rest",
           ("team_category", "avg_qb_interceptions"), qb_interceptions_by_win_total),
)

REPORTS: Dict[str, Report] = {r.name: r for r in _DEFINITIONS}


# ---------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------

def _plain(value):
    if isinstance(value, Decimal):
        value = float(value)
    if isinstance(value, float):
        return round(value, AVG_PRECISION)
    return value

def run_report(db: Session, name: str) -> ReportResult:
    report = REPORTS.get(name)
    if report is None:
        raise UnknownReportError(name)
    rows = [
        {col: _plain(r[col]) for col in report.columns}
        for r in db.execute(report.statement()).mappings()
    ]
    log.info(f"reports: {name} returned {len(rows)} rows")
    return ReportResult(name=report.name, title=report.title, columns=list(report.columns), rows=rows)

def run_all_reports(db: Session) -> List[ReportResult]:
    return [run_report(db, name) for name in REPORTS]
