"""
Shared fixtures.

Each test gets a fresh in-memory SQLite database with the tables and the
LeadingReceivers view created through `create_schema`. The `league` fixture
seeds a small 2011 season:

    Saints   13-3   Brees 6404 / Graham (TE) leads receiving / Vilma 58 tackles
    Giants    9-7   Manning 6152 / Cruz (WR) leads receiving / WR corps 3028
    Browns   4-12   McCoy 2733 / Hillis 1177 rushing / D. Jackson 158 tackles
    49ers    13-3   team stats only, no players on file
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from nfl_wins.db import crud
from nfl_wins.db.views import create_schema

SAINTS, GIANTS, BROWNS, NINERS = 1, 2, 3, 4

PLAYERS = [
    # player_id, name, position, team_id, stats
    (1, "Drew Brees", "QB", SAINTS, dict(passing_yards=6404, rushing_yards=86, touchdowns=46, interceptions=14)),
    (4, "Chase Daniel", "QB", SAINTS, dict(passing_yards=84, touchdowns=1, interceptions=0)),
    (2, "Eli Manning", "QB", GIANTS, dict(passing_yards=6152, rushing_yards=15, touchdowns=29, interceptions=16)),
    (3, "Colt McCoy", "QB", BROWNS, dict(passing_yards=2733, rushing_yards=212, touchdowns=14, interceptions=11)),
    (10, "Darren Sproles", "RB", SAINTS, dict(rushing_yards=603, receiving_yards=710, touchdowns=9)),
    (11, "Ahmad Bradshaw", "RB", GIANTS, dict(rushing_yards=659, receiving_yards=267, touchdowns=11)),
    (13, "Brandon Jacobs", "RB", GIANTS, dict(rushing_yards=571, receiving_yards=128, touchdowns=8)),
    (12, "Peyton Hillis", "RB", BROWNS, dict(rushing_yards=1177, receiving_yards=130, touchdowns=3)),
    (20, "Marques Colston", "WR", SAINTS, dict(receiving_yards=1143, touchdowns=8)),
    (21, "Victor Cruz", "WR", GIANTS, dict(receiving_yards=1536, touchdowns=9)),
    (22, "Hakeem Nicks", "WR", GIANTS, dict(receiving_yards=1492, touchdowns=7)),
    (23, "Greg Little", "WR", BROWNS, dict(receiving_yards=709, touchdowns=2)),
    (30, "Jimmy Graham", "TE", SAINTS, dict(receiving_yards=1310, touchdowns=11)),
    (31, "Ben Watson", "TE", BROWNS, dict(receiving_yards=410, touchdowns=2)),
    (40, "D'Qwell Jackson", "LB", BROWNS, dict(tackles=158)),
    (41, "Jonathan Vilma", "LB", SAINTS, dict(tackles=58)),
    (42, "Michael Boley", "LB", GIANTS, dict(tackles=92)),
]

TEAM_STATS = [
    # team_id, wins, losses, win_loss_perc, points, points_opp, turnovers
    (SAINTS, 13, 3, 0.813, 547, 339, 19),
    (GIANTS, 9, 7, 0.563, 394, 400, 24),
    (BROWNS, 4, 12, 0.25, 218, 307, 27),
    (NINERS, 13, 3, 0.813, 380, 229, 10),
]


def seed_league(db, season_year=2011):
    crud.add_team(db, "New Orleans Saints", team_id=SAINTS)
    crud.add_team(db, "New York Giants", team_id=GIANTS)
    crud.add_team(db, "Cleveland Browns", team_id=BROWNS)
    crud.add_team(db, "San Francisco 49ers", team_id=NINERS)
    crud.add_season(db, season_year)

    for player_id, name, position, team_id, stats in PLAYERS:
        crud.add_player(db, player_id, name, position)
        crud.add_player_team_season(db, player_id, season_year, team_id)
        crud.add_player_stats(db, player_id, season_year, **stats)

    for team_id, wins, losses, perc, points, points_opp, turnovers in TEAM_STATS:
        crud.add_team_stats(
            db, team_id, season_year,
            wins=wins, losses=losses, ties=0, win_loss_perc=perc,
            points=points, points_opp=points_opp, points_diff=points - points_opp,
            turnovers=turnovers,
        )
    db.commit()


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_schema(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def league(db):
    seed_league(db)
    return db
