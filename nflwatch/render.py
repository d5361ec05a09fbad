"""Stateless rich renderers for scoreboards, stats and the watch/replay views.

Every function takes the data plus an explicit Theme; nothing here keeps state.
"""

from dataclasses import dataclass
from typing import Optional

from rich import box
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from nflwatch.client import DecodeError, InvalidInput, NetworkError, UnexpectedStatus
from nflwatch.live import PLAYS_START_ROW, LiveState, Phase as LivePhase
from nflwatch.models import Game, GameStats, GameStatus, TeamStats
from nflwatch.replay import Phase as ReplayPhase, ReplayState

FIELD_WIDTH = 50
PLAY_TEXT_WIDTH = 50

TEAM_STAT_LABELS = [
    ("totalYards", "Total Yards"),
    ("netPassingYards", "Passing Yards"),
    ("rushingYards", "Rushing Yards"),
    ("firstDowns", "First Downs"),
    ("thirdDownEff", "3rd Down"),
    ("turnovers", "Turnovers"),
    ("possession", "Possession"),
]
PLAYER_CATEGORIES = ["passing", "rushing", "receiving"]


@dataclass(frozen=True)
class Theme:
    border: str = ""
    team: str = ""
    score: str = ""
    score_flash: str = ""
    live: str = ""
    final: str = ""
    scheduled: str = ""
    situation: str = ""
    play: str = ""
    new_play: str = ""
    scoring: str = ""
    selected: str = ""
    dim: str = ""
    error: str = ""
    banner: str = ""
    icons: bool = True
    table_box: box.Box = box.ROUNDED

    @classmethod
    def dark(cls) -> "Theme":
        return cls(
            border="bright_blue",
            team="bold bright_white",
            score="bold yellow",
            score_flash="bold white on red",
            live="bold red",
            final="green",
            scheduled="grey50",
            situation="bold dark_orange",
            play="grey85",
            new_play="bold green",
            scoring="bold yellow on dark_green",
            selected="on grey23",
            dim="dim",
            error="bold red",
            banner="bold magenta",
        )

    @classmethod
    def light(cls) -> "Theme":
        return cls(
            border="blue",
            team="bold black",
            score="bold dark_orange3",
            score_flash="bold white on red",
            live="bold red",
            final="dark_green",
            scheduled="grey37",
            situation="bold dark_orange3",
            play="black",
            new_play="bold green4",
            scoring="bold black on yellow",
            selected="on grey85",
            dim="grey50",
            error="bold red",
            banner="bold purple",
        )

    @classmethod
    def plain(cls) -> "Theme":
        return cls(icons=False, table_box=box.ASCII)


def theme_for(name: str, plain: bool = False) -> Theme:
    if plain:
        return Theme.plain()
    return Theme.light() if name == "light" else Theme.dark()


def truncate(text: str, limit: int) -> str:
    text = text.replace("\n", " ")
    if len(text) <= limit:
        return text
    return text[:limit - 1] + "…"


def describe_error(exc: BaseException) -> str:
    """Translate a client error into a message for the user."""
    if isinstance(exc, InvalidInput):
        return str(exc)
    msg = str(exc).lower()
    if "connection refused" in msg:
        return "NFL data service is unavailable. Please try again later."
    if isinstance(exc, NetworkError) and ("timed out" in msg or "timeout" in msg):
        return "Unable to connect to NFL data service. Please check your internet connection."
    if isinstance(exc, NetworkError):
        return "Unable to reach NFL data service. Please check your internet connection."
    if isinstance(exc, DecodeError) or "parse" in msg or "json" in msg:
        return "Received invalid data from NFL service. Please try again."
    if isinstance(exc, UnexpectedStatus):
        return f"NFL data service returned HTTP {exc.status}. Please try again later."
    return "An unexpected error occurred. Please try again."


def render_error(exc: BaseException, theme: Theme) -> Text:
    prefix = "✗ " if theme.icons else "Error: "
    return Text(prefix + describe_error(exc), style=theme.error)


def _status_text(game: Game, theme: Theme) -> Text:
    status = game.display_status
    if game.status is GameStatus.IN_PROGRESS:
        return Text(("● " if theme.icons else "") + status, style=theme.live)
    if game.status is GameStatus.FINAL:
        return Text(("✓ " if theme.icons else "") + status, style=theme.final)
    return Text(status, style=theme.scheduled)


def render_scoreboard(games: list[Game], theme: Theme) -> RenderableType:
    if not games:
        return Text("No NFL games are currently scheduled.", style=theme.scheduled)

    table = Table(title="NFL Scores", box=theme.table_box, border_style=theme.border)
    table.add_column("Away", style=theme.team)
    table.add_column("", justify="right", style=theme.score)
    table.add_column("", justify="center")
    table.add_column("Home", style=theme.team)
    table.add_column("", justify="right", style=theme.score)
    table.add_column("Status")

    for game in games:
        table.add_row(
            truncate(game.away_team.name, 24),
            str(game.away_team.score),
            "@",
            truncate(game.home_team.name, 24),
            str(game.home_team.score),
            _status_text(game, theme),
        )
    return table


def render_game_choices(games: list[Game], title: str, theme: Theme) -> Table:
    """Numbered game list for the interactive pickers."""
    table = Table(title=title, box=theme.table_box, border_style=theme.border)
    table.add_column("#", width=3)
    table.add_column("Matchup")
    table.add_column("Score", style=theme.score)
    table.add_column("Status")

    for i, game in enumerate(games, 1):
        matchup = f"{game.away_team.abbreviation} @ {game.home_team.abbreviation}"
        if game.status is GameStatus.SCHEDULED:
            score = "-"
        else:
            score = f"{game.away_team.score} - {game.home_team.score}"
        table.add_row(str(i), matchup, score, _status_text(game, theme))
    return table


def _player_table(team: TeamStats, category: str, theme: Theme) -> Optional[Table]:
    cat = team.category(category)
    if cat is None or not cat.players:
        return None
    table = Table(title=f"{team.team_abbr} {category.upper()}", box=theme.table_box,
                  border_style=theme.border, title_justify="left")
    table.add_column("Player", style=theme.team)
    for label in cat.labels:
        table.add_column(label, justify="right")
    for player in cat.players:
        name = f"{player.name} ({player.position})" if player.position else player.name
        values = list(player.stats) + [""] * (len(cat.labels) - len(player.stats))
        table.add_row(name, *values[:len(cat.labels)])
    return table


def render_stats(stats: GameStats, theme: Theme) -> Group:
    g = stats.game
    header = Text()
    header.append(f"{g.away_team.name} ", style=theme.team)
    header.append(str(g.away_team.score), style=theme.score)
    header.append("  @  ")
    header.append(f"{g.home_team.name} ", style=theme.team)
    header.append(str(g.home_team.score), style=theme.score)
    header.append(f"  -  {g.display_status}", style=theme.dim)

    totals = Table(title="TEAM STATS", box=theme.table_box, border_style=theme.border, title_justify="left")
    totals.add_column("")
    totals.add_column(stats.away_stats.team_abbr or "Away", justify="right")
    totals.add_column(stats.home_stats.team_abbr or "Home", justify="right")
    for key, label in TEAM_STAT_LABELS:
        away = stats.away_stats.totals.get(key, "")
        home = stats.home_stats.totals.get(key, "")
        if away or home:
            totals.add_row(label, away, home)

    parts: list[RenderableType] = [Panel(header, box=theme.table_box, border_style=theme.border), totals]
    for category in PLAYER_CATEGORIES:
        for team in (stats.away_stats, stats.home_stats):
            table = _player_table(team, category, theme)
            if table is not None:
                parts.append(table)
    return Group(*parts)


def field_position(yards_to_endzone: int, width: int = FIELD_WIDTH) -> int:
    """Column of the ball on a ``width`` wide strip; 0 yards means unknown (midfield)."""
    yards = yards_to_endzone or 50
    yards = max(0, min(100, yards))
    return min(width - 1, int((100 - yards) / 100 * width))


def render_field(yards_to_endzone: int, possession: str, theme: Theme) -> Text:
    col = field_position(yards_to_endzone)
    ball = "🏈" if theme.icons else "o"
    strip = Text("  |", style=theme.border)
    strip.append("-" * col)
    strip.append(ball, style=theme.score)
    strip.append("-" * (FIELD_WIDTH - col - 1))
    strip.append("|", style=theme.border)
    if possession:
        strip.append(f"  {possession} ball", style=theme.situation)
    return strip


def _score_line(game: Game, away: int, home: int, status: Text, theme: Theme, flash: bool = False) -> Text:
    score_style = theme.score_flash if flash else theme.score
    line = Text("  ")
    line.append(game.away_team.abbreviation, style=theme.team)
    line.append(" ")
    line.append(str(away), style=score_style)
    line.append("  @  ")
    line.append(game.home_team.abbreviation, style=theme.team)
    line.append(" ")
    line.append(str(home), style=score_style)
    line.append("   ")
    line.append_text(status)
    return line


def _rule(theme: Theme) -> Text:
    return Text("━" * 62 if theme.icons else "=" * 62, style=theme.border)


def _live_head(state: LiveState, theme: Theme) -> list[Text]:
    """Lines above the plays list, ending with the plays header."""
    summary = state.summary
    g = summary.game
    rule = _rule(theme)
    parts = [
        rule,
        _score_line(g, g.away_team.score, g.home_team.score, _status_text(g, theme), theme,
                    flash=state.celebrating),
        rule,
    ]

    if state.celebrating:
        parts.append(Text("  SCORE!", style=theme.banner))
    elif state.turnover:
        parts.append(Text("  CHANGE OF POSSESSION", style=theme.banner))

    possession = summary.current_play.possession if summary.current_play else ""
    parts.append(render_field(summary.yards_to_endzone, possession, theme))

    if summary.situation:
        parts.append(Text("\n  SITUATION", style=theme.dim))
        parts.append(Text(f"  {summary.situation}", style=theme.situation))

    parts.append(Text("\n  PLAYS (up/down to select, enter to expand)", style=theme.dim))
    return parts


def plays_start_row(state: LiveState, theme: Theme) -> int:
    """Row of the first play line in ``render_live`` output, for click mapping."""
    if state.summary is None:
        return PLAYS_START_ROW
    return sum(part.plain.count("\n") + 1 for part in _live_head(state, theme))


def render_live(state: LiveState, theme: Theme) -> RenderableType:
    summary = state.summary
    if summary is None:
        if state.error is not None:
            return Group(render_error(state.error, theme), Text("Press q to quit.", style=theme.dim))
        if state.phase is LivePhase.LOADING:
            return Text("Loading game data...", style=theme.dim)
        return Text("No game data available.\n\nPress q to quit.", style=theme.dim)

    parts: list[RenderableType] = list(_live_head(state, theme))
    for i, play in enumerate(summary.recent_plays):
        expanded = i == state.expanded
        line = Text("  ")
        line.append(f"Q{play.period} {play.clock:>5}", style=theme.dim)
        line.append(" │ " if theme.icons else " | ")
        text = play.text.replace("\n", " ")
        shown = text if expanded else truncate(text, PLAY_TEXT_WIDTH)
        if play.scoring_play:
            line.append(shown, style=theme.scoring)
        elif i == 0 and state.flash_play:
            line.append(("► " if theme.icons else "> ") + shown, style=theme.new_play)
        else:
            line.append(shown, style=theme.play)
        if i == state.selected:
            line.stylize(theme.selected)
        parts.append(line)

    if state.error is not None:
        parts.append(render_error(state.error, theme))

    parts.append(_rule(theme))
    parts.append(Text("  Press q to quit • Auto-refreshing every 10s", style=theme.dim))
    return Group(*parts)


def render_replay(state: ReplayState, theme: Theme) -> RenderableType:
    if state.error is not None:
        return Group(render_error(state.error, theme), Text("Press q to quit.", style=theme.dim))
    if state.replay is None and state.phase is ReplayPhase.LOADING:
        return Text("Loading game data...", style=theme.dim)
    play = state.current_play
    if play is None:
        return Text("No play data available for this game.\n\nPress q to quit.", style=theme.dim)

    g = state.replay.game
    rule = _rule(theme)
    badge = Text(f"Q{play.period} {play.clock}  ")
    badge.append("▶ REPLAY" if theme.icons else "[REPLAY]", style=theme.banner)

    total = state.play_count
    filled = int((state.play_index + 1) / total * FIELD_WIDTH)
    progress = Text(f"\n  Play {state.play_index + 1}/{total}  [")
    progress.append("█" * filled if theme.icons else "#" * filled, style=theme.border)
    progress.append("░" * (FIELD_WIDTH - filled) if theme.icons else "." * (FIELD_WIDTH - filled), style=theme.dim)
    progress.append("]")

    parts: list[RenderableType] = [
        rule,
        _score_line(g, play.away_score, play.home_score, badge, theme),
        rule,
        progress,
        render_field(play.yards_to_endzone, play.possession, theme),
    ]

    drive = state.replay.drive_for(state.play_index)
    if drive is not None and drive.description:
        parts.append(Text(f"  DRIVE: {drive.team} {drive.description}", style=theme.dim))
    if play.down:
        parts.append(Text("\n  SITUATION", style=theme.dim))
        parts.append(Text(f"  {play.down}", style=theme.situation))

    parts.append(Text("\n  PLAY", style=theme.dim))
    if play.scoring_play:
        text = f"🏈 {play.text} 🎉" if theme.icons else f"SCORE! {play.text}"
        parts.append(Text(f"  {text}", style=theme.scoring))
    else:
        parts.append(Text(f"  {play.text}", style=theme.play))

    auto = f"ON ({state.auto_speed}s)" if state.auto_play else "OFF"
    parts.append(rule)
    parts.append(Text(
        f"  ←/→: prev/next • SPACE: auto [{auto}] • +/-: speed • HOME/END: jump • q: quit"
        if theme.icons else
        f"  left/right: prev/next | SPACE: auto [{auto}] | +/-: speed | HOME/END: jump | q: quit",
        style=theme.dim,
    ))
    return Group(*parts)
