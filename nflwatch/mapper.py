"""Convert raw ESPN scoreboard/summary payloads into domain objects.

Everything here is pure: no I/O, no global state. Missing or malformed fields
fall back to zero values instead of failing the whole conversion.
"""

from datetime import datetime
from typing import Any, Optional

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

RECENT_PLAYS_LIMIT = 5


def _safe_int(value: Any) -> int:
    """int(value), or 0 when it cannot be parsed."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _obj(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _parse_time(value: Any) -> Optional[datetime]:
    """Parse an ESPN ISO timestamp such as ``2024-12-01T18:00Z``."""
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def map_status(state: Any) -> GameStatus:
    """Map ESPN ``status.type.state`` to a GameStatus."""
    if state == "in":
        return GameStatus.IN_PROGRESS
    if state == "post":
        return GameStatus.FINAL
    return GameStatus.SCHEDULED


def _teams(competitors: list) -> tuple[Team, Team]:
    """Return (home, away) teams. Anything not flagged home lands in the away slot."""
    home = away = Team()
    for comp in competitors:
        comp = _obj(comp)
        team_info = _obj(comp.get("team"))
        team = Team(
            name=team_info.get("displayName") or "",
            abbreviation=team_info.get("abbreviation") or "",
            score=_safe_int(comp.get("score")),
        )
        if comp.get("homeAway") == "home":
            home = team
        else:
            away = team
    return home, away


def _game(game_id: Any, date: Any, status: Any, competitors: list) -> Game:
    status_type = _obj(_obj(status).get("type"))
    home, away = _teams(competitors)
    return Game(
        id=str(game_id or ""),
        home_team=home,
        away_team=away,
        status=map_status(status_type.get("state")),
        status_text=status_type.get("shortDetail") or "",
        start_time=_parse_time(date),
    )


def to_games(scoreboard: dict) -> list[Game]:
    """Build one Game per scoreboard event that has at least one competition."""
    games = []
    for event in _list(_obj(scoreboard).get("events")):
        event = _obj(event)
        competitions = _list(event.get("competitions"))
        if not competitions:
            continue
        competitors = _list(_obj(competitions[0]).get("competitors"))
        games.append(_game(event.get("id"), event.get("date"), event.get("status"), competitors))
    return games


def _header_game(summary: dict) -> Optional[Game]:
    header = _obj(summary.get("header"))
    competitions = _list(header.get("competitions"))
    if not competitions:
        return None
    comp = _obj(competitions[0])
    return _game(
        header.get("id"),
        comp.get("date"),
        comp.get("status"),
        _list(comp.get("competitors")),
    )


def _play_fields(play: dict) -> dict:
    """Keyword arguments shared by Play and ReplayPlay."""
    return {
        "id": str(play.get("id") or ""),
        "text": play.get("text") or "",
        "type": _obj(play.get("type")).get("text") or "",
        "clock": _obj(play.get("clock")).get("displayValue") or "",
        "period": _safe_int(_obj(play.get("period")).get("number")),
        "home_score": _safe_int(play.get("homeScore")),
        "away_score": _safe_int(play.get("awayScore")),
        "scoring_play": bool(play.get("scoringPlay")),
    }


def to_game_summary(summary: dict) -> Optional[GameSummary]:
    """Build a GameSummary from the current drive of a summary payload.

    Returns None when the header has no competition to describe.
    """
    summary = _obj(summary)
    game = _header_game(summary)
    if game is None:
        return None

    current = _obj(_obj(summary.get("drives")).get("current"))
    plays = [_obj(p) for p in _list(current.get("plays"))]
    if not plays:
        return GameSummary(game=game)

    last = plays[-1]
    end = _obj(last.get("end"))
    current_play = Play(
        **_play_fields(last),
        down=end.get("downDistanceText") or "",
        possession=_obj(current.get("team")).get("abbreviation") or "",
        yards_to_endzone=_safe_int(end.get("yardsToEndzone")),
    )

    recent = []
    for play in reversed(plays):
        if len(recent) >= RECENT_PLAYS_LIMIT:
            break
        recent.append(Play(**_play_fields(play)))

    return GameSummary(
        game=game,
        current_play=current_play,
        recent_plays=tuple(recent),
        situation=current_play.down,
        yards_to_endzone=current_play.yards_to_endzone,
    )


def to_game_replay(summary: dict) -> Optional[GameReplay]:
    """Flatten every completed drive into one chronological play list.

    Each Drive records the inclusive index range of its plays; an empty drive
    gets ``end_index == start_index - 1``.
    """
    summary = _obj(summary)
    game = _header_game(summary)
    if game is None:
        return None

    plays: list[ReplayPlay] = []
    drives: list[Drive] = []
    for drive in _list(_obj(summary.get("drives")).get("previous")):
        drive = _obj(drive)
        drive_id = str(drive.get("id") or "")
        team = _obj(drive.get("team")).get("abbreviation") or ""
        start_index = len(plays)
        for play in _list(drive.get("plays")):
            play = _obj(play)
            end = _obj(play.get("end"))
            plays.append(ReplayPlay(
                **_play_fields(play),
                down=end.get("downDistanceText") or "",
                possession=team,
                yards_to_endzone=_safe_int(end.get("yardsToEndzone")),
                drive_id=drive_id,
            ))
        drives.append(Drive(
            id=drive_id,
            description=drive.get("description") or "",
            team=team,
            start_index=start_index,
            end_index=len(plays) - 1,
        ))

    return GameReplay(game=game, plays=tuple(plays), drives=tuple(drives))


def _player_categories(groups: list) -> list[PlayerStatCategory]:
    categories = []
    for group in groups:
        group = _obj(group)
        players = []
        for entry in _list(group.get("athletes")):
            entry = _obj(entry)
            athlete = _obj(entry.get("athlete"))
            players.append(PlayerStatLine(
                name=athlete.get("displayName") or "",
                position=_position(athlete.get("position")),
                stats=tuple(str(s) for s in _list(entry.get("stats"))),
            ))
        categories.append(PlayerStatCategory(
            category=group.get("name") or "",
            labels=tuple(str(label) for label in _list(group.get("labels"))),
            players=tuple(players),
        ))
    return categories


def _position(value: Any) -> str:
    # The summary endpoint sometimes nests the position object.
    if isinstance(value, dict):
        return value.get("abbreviation") or ""
    return value or ""


def to_game_stats(summary: dict) -> Optional[GameStats]:
    """Split the boxscore into home/away TeamStats by team abbreviation.

    A boxscore entry whose abbreviation is not the home team's is attributed
    to the away team.
    """
    summary = _obj(summary)
    game = _header_game(summary)
    if game is None:
        return None

    home_abbr = game.home_team.abbreviation
    totals = {"home": {}, "away": {}}
    players: dict[str, list[PlayerStatCategory]] = {"home": [], "away": []}

    boxscore = _obj(summary.get("boxscore"))
    for team_box in _list(boxscore.get("teams")):
        team_box = _obj(team_box)
        side = "home" if _obj(team_box.get("team")).get("abbreviation") == home_abbr else "away"
        for stat in _list(team_box.get("statistics")):
            stat = _obj(stat)
            totals[side][stat.get("name") or ""] = str(stat.get("displayValue") or "")

    for player_box in _list(boxscore.get("players")):
        player_box = _obj(player_box)
        side = "home" if _obj(player_box.get("team")).get("abbreviation") == home_abbr else "away"
        players[side].extend(_player_categories(_list(player_box.get("statistics"))))

    return GameStats(
        game=game,
        home_stats=TeamStats(
            team_name=game.home_team.name,
            team_abbr=home_abbr,
            totals=totals["home"],
            player_stats=tuple(players["home"]),
        ),
        away_stats=TeamStats(
            team_name=game.away_team.name,
            team_abbr=game.away_team.abbreviation,
            totals=totals["away"],
            player_stats=tuple(players["away"]),
        ),
    )
