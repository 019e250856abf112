from nfl_wins.db import SessionLocal
from nfl_wins.models import Team
from nfl_wins.db.crud import add_team

# Franchise names as they appear in season-by-season team stats, including
# names used before relocations / rebrands.
TEAMS = [
    "Arizona Cardinals", "Atlanta Falcons", "Baltimore Ravens", "Buffalo Bills",
    "Carolina Panthers", "Chicago Bears", "Cincinnati Bengals", "Cleveland Browns",
    "Dallas Cowboys", "Denver Broncos", "Detroit Lions", "Green Bay Packers",
    "Houston Texans", "Indianapolis Colts", "Jacksonville Jaguars", "Kansas City Chiefs",
    "Las Vegas Raiders", "Los Angeles Chargers", "Los Angeles Rams", "Miami Dolphins",
    "Minnesota Vikings", "New England Patriots", "New Orleans Saints", "New York Giants",
    "New York Jets", "Philadelphia Eagles", "Pittsburgh Steelers", "San Francisco 49ers",
    "Seattle Seahawks", "Tampa Bay Buccaneers", "Tennessee Titans", "Washington Commanders",
    # legacy names
    "Oakland Raiders", "San Diego Chargers", "St. Louis Rams",
    "Washington Redskins", "Washington Football Team",
]

db = SessionLocal()
try:
    for name in TEAMS:
        if db.query(Team).filter_by(name=name).one_or_none():
            continue
        add_team(db, name)
    db.commit()
finally:
    db.close()
