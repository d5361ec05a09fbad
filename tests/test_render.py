import io
from dataclasses import replace

import pytest
from rich.console import Console

from nflwatch import live, replay
from nflwatch.client import DecodeError, InvalidInput, NetworkError, UnexpectedStatus
from nflwatch.models import (
    Drive,
    Game,
    GameReplay,
    GameStats,
    GameStatus,
    GameSummary,
    Play,
    PlayerStatCategory,
    PlayerStatLine,
    ReplayPlay,
    Team,
    TeamStats,
)
from nflwatch.render import (
    Theme,
    describe_error,
    field_position,
    plays_start_row,
    render_live,
    render_replay,
    render_scoreboard,
    render_stats,
    theme_for,
    truncate,
)

PLAIN = Theme.plain()


def _text(renderable) -> str:
    console = Console(record=True, width=120, file=io.StringIO())
    console.print(renderable)
    return console.export_text()


def _game(status=GameStatus.IN_PROGRESS, status_text="Q2 10:00"):
    return Game(
        id="401",
        home_team=Team("New England Patriots", "NE", 14),
        away_team=Team("Buffalo Bills", "BUF", 10),
        status=status,
        status_text=status_text,
    )


def test_scoreboard_lists_games():
    out = _text(render_scoreboard([_game(), _game(GameStatus.FINAL, "")], PLAIN))
    assert "Buffalo Bills" in out
    assert "New England Patriots" in out
    assert "Q2 10:00" in out
    assert "Final" in out


def test_empty_scoreboard_message():
    out = _text(render_scoreboard([], PLAIN))
    assert "No NFL games are currently scheduled." in out


@pytest.mark.parametrize("exc, expected", [
    (NetworkError("dial tcp: connection refused"), "unavailable"),
    (NetworkError("timed out"), "check your internet connection"),
    (NetworkError("reset by peer"), "Unable to reach"),
    (DecodeError("failed to parse response: bad"), "invalid data"),
    (UnexpectedStatus(503), "HTTP 503"),
    (RuntimeError("boom"), "unexpected error"),
])
def test_describe_error(exc, expected):
    assert expected in describe_error(exc)


def test_describe_error_passes_invalid_input_through():
    exc = InvalidInput("invalid game ID: expected numeric value")
    assert describe_error(exc) == "invalid game ID: expected numeric value"


def test_field_position_defaults_to_midfield():
    assert field_position(0) == field_position(50) == 25
    assert field_position(100) == 0
    assert field_position(1) == 49


def test_truncate():
    assert truncate("short", 10) == "short"
    assert truncate("a\nb", 10) == "a b"
    assert truncate("x" * 20, 10) == "x" * 9 + "…"


def test_theme_for():
    assert theme_for("light") == Theme.light()
    assert theme_for("dark") == Theme.dark()
    assert theme_for("light", plain=True) == PLAIN
    assert not PLAIN.icons


def _stats():
    passing = PlayerStatCategory(
        category="passing",
        labels=("C/ATT", "YDS"),
        players=(PlayerStatLine("Josh Allen", "QB", ("20/30", "250")),),
    )
    return GameStats(
        game=_game(GameStatus.FINAL, ""),
        home_stats=TeamStats("Patriots", "NE", {"totalYards": "301", "turnovers": "2"}),
        away_stats=TeamStats("Bills", "BUF", {"totalYards": "355"}, (passing,)),
    )


def test_stats_view():
    out = _text(render_stats(_stats(), PLAIN))
    assert "TEAM STATS" in out
    assert "Total Yards" in out
    assert "355" in out and "301" in out
    assert "Turnovers" in out
    assert "Rushing Yards" not in out
    assert "BUF PASSING" in out
    assert "Josh Allen (QB)" in out


def _live_state(**changes):
    plays = (
        Play(id="3", text="J.Allen pass deep right to S.Diggs for 45 yards, TOUCHDOWN. " * 3,
             period=2, clock="10:00", scoring_play=True),
        Play(id="2", text="J.Cook up the middle for 4 yards", period=2, clock="10:40"),
    )
    summary = GameSummary(
        game=_game(),
        current_play=Play(id="3", possession="BUF"),
        recent_plays=plays,
        situation="1st & 10 at NE 25",
        yards_to_endzone=25,
    )
    state = live.LiveState(game_id="401", phase=live.Phase.READY, summary=summary)
    return replace(state, **changes)


def test_live_view_shows_game_and_plays():
    out = _text(render_live(_live_state(), PLAIN))
    assert "BUF 10  @  NE 14" in out
    assert "1st & 10 at NE 25" in out
    assert "BUF ball" in out
    assert "J.Cook up the middle" in out
    assert "…" in out
    assert "Auto-refreshing every 10s" in out


def test_live_view_expanded_play_is_full_length():
    out = _text(render_live(_live_state(expanded=0), PLAIN))
    assert "…" not in out


def test_live_view_banners():
    assert "SCORE!" in _text(render_live(_live_state(celebrate_serial=1), PLAIN))
    out = _text(render_live(_live_state(turnover_serial=1), PLAIN))
    assert "CHANGE OF POSSESSION" in out


def test_live_view_keeps_data_under_error():
    out = _text(render_live(_live_state(error=NetworkError("timed out")), PLAIN))
    assert "BUF 10  @  NE 14" in out
    assert "check your internet connection" in out


def test_live_view_loading_and_error_screens():
    loading = live.LiveState(game_id="401")
    assert "Loading game data..." in _text(render_live(loading, PLAIN))

    failed = replace(loading, error=UnexpectedStatus(500))
    out = _text(render_live(failed, PLAIN))
    assert "HTTP 500" in out
    assert "Press q to quit." in out

    empty = replace(loading, phase=live.Phase.READY)
    assert "No game data available." in _text(render_live(empty, PLAIN))


def _replay_state(**changes):
    plays = (
        ReplayPlay(id="1", text="Kickoff", period=1, clock="15:00", drive_id="a"),
        ReplayPlay(id="2", text="J.Allen 5 yd run, TOUCHDOWN", period=1, clock="12:01",
                   away_score=7, scoring_play=True, down="1st & Goal at NE 5",
                   possession="BUF", yards_to_endzone=5, drive_id="a"),
    )
    drives = (Drive(id="a", description="2 plays, 75 yards", team="BUF", start_index=0, end_index=1),)
    state = replay.ReplayState(
        game_id="401",
        phase=replay.Phase.READY,
        replay=GameReplay(game=_game(GameStatus.FINAL, ""), plays=plays, drives=drives),
    )
    return replace(state, **changes)


def test_replay_view_at_scoring_play():
    out = _text(render_replay(_replay_state(play_index=1), PLAIN))
    assert "BUF 7  @  NE 0" in out
    assert "Q1 12:01" in out
    assert "[REPLAY]" in out
    assert "Play 2/2" in out
    assert "DRIVE: BUF 2 plays, 75 yards" in out
    assert "1st & Goal at NE 5" in out
    assert "SCORE! J.Allen 5 yd run, TOUCHDOWN" in out
    assert "auto [OFF]" in out


def test_replay_view_shows_auto_speed():
    out = _text(render_replay(_replay_state(auto_play=True, auto_speed=3), PLAIN))
    assert "auto [ON (3s)]" in out
    assert "Play 1/2" in out


def test_replay_view_edge_screens():
    loading = replay.ReplayState(game_id="401")
    assert "Loading game data..." in _text(render_replay(loading, PLAIN))

    failed = replace(loading, error=NetworkError("connection refused"))
    assert "unavailable" in _text(render_replay(failed, PLAIN))

    empty = replace(_replay_state(), replay=GameReplay(game=_game()))
    assert "No play data available" in _text(render_replay(empty, PLAIN))


def _row_of(out, needle):
    return next(i for i, line in enumerate(out.splitlines()) if needle in line)


@pytest.mark.parametrize("changes", [
    {},
    {"celebrate_serial": 1},
    {"turnover_serial": 1},
])
def test_click_on_rendered_play_row_expands_it(changes):
    state = _live_state(**changes)
    out = _text(render_live(state, PLAIN))
    row = _row_of(out, "J.Allen pass deep")

    assert plays_start_row(state, PLAIN) == row
    clicked, _ = live.update(state, live.Click(row, plays_start_row(state, PLAIN)), 0.0)
    assert (clicked.selected, clicked.expanded) == (0, 0)

    second = _row_of(out, "J.Cook up the middle")
    clicked, _ = live.update(state, live.Click(second, plays_start_row(state, PLAIN)), 0.0)
    assert (clicked.selected, clicked.expanded) == (1, 1)


def test_plays_start_row_without_situation():
    state = _live_state()
    state = replace(state, summary=replace(state.summary, situation=""))
    out = _text(render_live(state, Theme.dark()))
    assert plays_start_row(state, Theme.dark()) == _row_of(out, "J.Allen pass deep")


def test_default_click_offset_matches_plain_layout():
    state = _live_state()
    assert plays_start_row(state, PLAIN) == live.PLAYS_START_ROW
