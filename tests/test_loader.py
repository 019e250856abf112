"""
CSV loader: foreign-key ordering, per-row rejection, post-load audits.
"""

import logging
from textwrap import dedent

import pytest

from nfl_wins.db import crud
from nfl_wins.models import PlayerStats, Team, TeamStats
from nfl_wins.services.loader import (
    _coerce,
    inconsistent_records,
    load_directory,
    record_matches_percentage,
    unmapped_player_stats,
)


def _write(directory, name, body):
    (directory / name).write_text(dedent(body).lstrip(), encoding="utf-8")


@pytest.fixture
def csv_dir(tmp_path):
    _write(tmp_path, "players.csv", """
        player_id,name,position
        1,Drew Brees,QB
        2,Eli Manning,QB
        30,Jimmy Graham,TE
    """)
    _write(tmp_path, "teams.csv", """
        team_id,name
        1,New Orleans Saints
        2,New York Giants
    """)
    _write(tmp_path, "seasons.csv", """
        season_year
        2011
    """)
    _write(tmp_path, "player_team_seasons.csv", """
        player_id,season_year,team_id
        1,2011,1
        2,2011,2
        30,2011,7
    """)
    _write(tmp_path, "player_stats.csv", """
        player_id,season_year,passing_yards,rushing_yards,receiving_yards,touchdowns,interceptions,tackles,field_goals
        1,2011,6404,86,,46,14,,
        2,2011,6152,15,,29,16,,
        30,2011,,,1310,11,,,
    """)
    _write(tmp_path, "team_stats.csv", """
        season_year,team_id,wins,losses,ties,win_loss_perc,points,points_opp,turnovers
        2011,1,13,3,0,0.813,547,339,19
        2011,2,9,7,0,0.700,394,400,24
    """)
    return tmp_path


def test_loads_in_foreign_key_order(db, csv_dir):
    summary = load_directory(db, csv_dir)
    db.commit()

    assert summary.inserted == {
        "Player": 3,
        "Team": 2,
        "Season": 1,
        "PlayerTeamSeason": 2,
        "PlayerStats": 3,
        "TeamStats": 2,
    }
    assert db.get(Team, 1).name == "New Orleans Saints"
    brees = db.get(PlayerStats, {"player_id": 1, "season_year": 2011})
    assert brees.passing_yards == 6404
    assert brees.receiving_yards is None
    assert db.get(TeamStats, {"team_id": 1, "season_year": 2011}).win_loss_perc == pytest.approx(0.813)


def test_rejected_rows_are_reported_and_skipped(db, csv_dir):
    summary = load_directory(db, csv_dir)
    assert len(summary.errors) == 1
    err = summary.errors[0]
    assert err["file"] == "player_team_seasons.csv"
    assert err["line"] == 4
    assert "Team" in err["error"]


def test_audits_flag_unmapped_stats_and_bad_records(db, csv_dir, caplog):
    with caplog.at_level(logging.WARNING, logger="nfl_wins.services.loader"):
        summary = load_directory(db, csv_dir)

    # Graham's team mapping was rejected, so his stat line has no team
    assert summary.unmapped_player_stats == [(30, 2011)]
    # Giants went 9-7 but the file says .700
    assert summary.inconsistent_records == [(2, 2011)]
    assert "no team mapping" in caplog.text
    assert "win_loss_perc" in caplog.text


def test_missing_files_are_skipped(db, tmp_path):
    _write(tmp_path, "seasons.csv", """
        season_year
        2011
        2012
    """)
    summary = load_directory(db, tmp_path)
    assert summary.inserted == {"Season": 2}
    assert summary.errors == []


def test_duplicate_rows_rejected(db, tmp_path):
    _write(tmp_path, "teams.csv", """
        team_id,name
        1,Chicago Bears
        2,Chicago Bears
    """)
    summary = load_directory(db, tmp_path)
    assert summary.inserted == {"Team": 1}
    assert summary.errors[0]["line"] == 3


def test_byte_order_mark_is_ignored(db, tmp_path):
    (tmp_path / "seasons.csv").write_bytes("season_year\n2011\n".encode("utf-8-sig"))
    summary = load_directory(db, tmp_path)
    assert summary.inserted == {"Season": 1}
    assert summary.errors == []


def test_fractional_stat_is_rejected_not_truncated(db, tmp_path):
    _write(tmp_path, "players.csv", """
        player_id,name,position
        1,Drew Brees,QB
    """)
    _write(tmp_path, "seasons.csv", """
        season_year
        2011
    """)
    _write(tmp_path, "player_stats.csv", """
        player_id,season_year,passing_yards
        1,2011,6404.9
    """)
    summary = load_directory(db, tmp_path)
    assert summary.inserted["PlayerStats"] == 0
    assert summary.errors[0]["file"] == "player_stats.csv"
    assert "passing_yards" in summary.errors[0]["error"]
    assert db.get(PlayerStats, {"player_id": 1, "season_year": 2011}) is None


@pytest.mark.parametrize("raw,expected", [("13", 13), ("13.0", 13), (" 7 ", 7), ("", None)])
def test_whole_numbers_accepted(raw, expected):
    assert _coerce("wins", raw) == expected


def test_undecodable_file_is_reported_and_load_continues(db, tmp_path):
    _write(tmp_path, "teams.csv", """
        team_id,name
        1,New Orleans Saints
    """)
    (tmp_path / "seasons.csv").write_bytes(b"season_year\n2011\n\xff\xfe\n")
    summary = load_directory(db, tmp_path)
    assert summary.inserted == {"Team": 1, "Season": 0}
    [err] = summary.errors
    assert (err["file"], err["line"]) == ("seasons.csv", None)
    assert "UTF-8" in err["error"]


def test_unmapped_player_stats_direct(league):
    assert unmapped_player_stats(league) == []
    crud.add_player(league, 99, "Practice Squad", "WR")
    crud.add_player_stats(league, 99, 2011, receiving_yards=12)
    assert unmapped_player_stats(league) == [(99, 2011)]


def test_seeded_league_records_are_consistent(league):
    assert inconsistent_records(league) == []


@pytest.mark.parametrize(
    "wins,losses,ties,perc,ok",
    [
        (13, 3, 0, 0.813, True),
        (8, 7, 1, 0.531, True),
        (9, 7, 0, 0.700, False),
        (0, 0, 0, 0.0, True),
        (10, 6, None, 0.625, True),
        (10, 6, 0, None, True),
    ],
)
def test_record_matches_percentage(wins, losses, ties, perc, ok):
    assert record_matches_percentage(wins, losses, ties, perc) is ok
