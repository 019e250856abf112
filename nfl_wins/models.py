# nfl_wins/models.py
from sqlalchemy import Float, ForeignKey, Integer, PrimaryKeyConstraint, String
from sqlalchemy.orm import Mapped, mapped_column
from nfl_wins.db import Base

# Table and column names are part of the reporting interface; keep them as-is.

# PLAYERS
class Player(Base):
    __tablename__ = "Player"
    player_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str | None] = mapped_column(String(100))
    position: Mapped[str | None] = mapped_column(String(20))  # QB, RB, WR, TE, ...

# TEAMS
class Team(Base):
    __tablename__ = "Team"
    team_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str | None] = mapped_column(String(100), unique=True)

# SEASONS
class Season(Base):
    __tablename__ = "Season"
    season_year: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)

# PLAYER_TEAM_SEASON (one team per player per season)
class PlayerTeamSeason(Base):
    __tablename__ = "PlayerTeamSeason"
    player_id: Mapped[int] = mapped_column(ForeignKey("Player.player_id"), primary_key=True)
    season_year: Mapped[int] = mapped_column(ForeignKey("Season.season_year"), primary_key=True)
    team_id: Mapped[int | None] = mapped_column(ForeignKey("Team.team_id"))

# PLAYER_STATS (season aggregates)
class PlayerStats(Base):
    __tablename__ = "PlayerStats"
    player_id: Mapped[int] = mapped_column(ForeignKey("Player.player_id"), primary_key=True)
    season_year: Mapped[int] = mapped_column(ForeignKey("Season.season_year"), primary_key=True)

    passing_yards: Mapped[int | None] = mapped_column(Integer)
    rushing_yards: Mapped[int | None] = mapped_column(Integer)
    receiving_yards: Mapped[int | None] = mapped_column(Integer)
    touchdowns: Mapped[int | None] = mapped_column(Integer)
    interceptions: Mapped[int | None] = mapped_column(Integer)
    tackles: Mapped[int | None] = mapped_column(Integer)
    field_goals: Mapped[int | None] = mapped_column(Integer)

# TEAM_STATS (season aggregates)
class TeamStats(Base):
    __tablename__ = "TeamStats"
    season_year: Mapped[int] = mapped_column(ForeignKey("Season.season_year"))
    team_id: Mapped[int] = mapped_column(ForeignKey("Team.team_id"))

    wins: Mapped[int | None] = mapped_column(Integer)
    losses: Mapped[int | None] = mapped_column(Integer)
    ties: Mapped[int | None] = mapped_column(Integer)
    win_loss_perc: Mapped[float | None] = mapped_column(Float)
    points: Mapped[int | None] = mapped_column(Integer)
    points_opp: Mapped[int | None] = mapped_column(Integer)
    points_diff: Mapped[int | None] = mapped_column(Integer)
    mov: Mapped[float | None] = mapped_column(Float)  # margin of victory
    turnovers: Mapped[int | None] = mapped_column(Integer)
    total_yards: Mapped[int | None] = mapped_column(Integer)
    pass_yds: Mapped[int | None] = mapped_column(Integer)
    rush_yds: Mapped[int | None] = mapped_column(Integer)
    penalties: Mapped[int | None] = mapped_column(Integer)
    exp_pts_tot: Mapped[float | None] = mapped_column(Float)

    __table_args__ = (
        PrimaryKeyConstraint("team_id", "season_year"),
    )

# Stat columns accepted by the insertion layer and the CSV loader.
PLAYER_STAT_FIELDS = (
    "passing_yards", "rushing_yards", "receiving_yards", "touchdowns",
    "interceptions", "tackles", "field_goals",
)
TEAM_STAT_FIELDS = (
    "wins", "losses", "ties", "win_loss_perc", "points", "points_opp",
    "points_diff", "mov", "turnovers", "total_yards", "pass_yds", "rush_yds",
    "penalties", "exp_pts_tot",
)
