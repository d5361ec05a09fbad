"""nflwatch - NFL scores, live play-by-play and replays in the terminal.

Usage: nflwatch [--plain] [--watch | --replay | --stats] [--game ID] [--dates RANGE]
"""

import argparse
import logging
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from textual.logging import TextualHandler

from nflwatch.client import ESPNClient, NFLWatchError, validate_game_id
from nflwatch.config import Settings, load_settings
from nflwatch.models import Game
from nflwatch.render import Theme, render_error, render_game_choices, render_scoreboard, render_stats, theme_for
from nflwatch.service import ScoreService
from nflwatch.tui import LiveApp, ReplayApp

logger = logging.getLogger(__name__)


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="nflwatch",
        description="Display NFL scores, watch live games and replay finished ones.",
        epilog=(
            "examples:\n"
            "  nflwatch                             current NFL scores\n"
            "  nflwatch --dates 20241201-20241208   games from Dec 1-8, 2024\n"
            "  nflwatch --watch                     pick a live game to follow\n"
            "  nflwatch --replay --game 401671789   replay a finished game\n"
            "  nflwatch --stats                     box score for a game"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--watch", action="store_true", help="Watch a live game with play-by-play updates")
    mode.add_argument("--replay", action="store_true", help="Replay a completed game play-by-play")
    mode.add_argument("--stats", action="store_true", help="Show game statistics (box score)")
    parser.add_argument("--game", default="", help="Game ID to watch, replay or show stats for")
    parser.add_argument("--dates", default="", help="Date or range: YYYYMMDD or YYYYMMDD-YYYYMMDD")
    parser.add_argument("--plain", action="store_true", help="Disable colors and icons")
    parser.add_argument("--debug", action="store_true", help="Verbose logging to stderr")
    return parser.parse_args(argv)


def _setup_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _run_app(app) -> None:
    """Run a textual app with logging routed through textual, not the screen."""
    root = logging.getLogger()
    previous = root.handlers[:]
    root.handlers = [TextualHandler()]
    try:
        app.run()
    finally:
        root.handlers = previous


def select_game(console: Console, games: list[Game], title: str, theme: Theme) -> Optional[Game]:
    """Print a numbered game list and read the user's choice. None on bad input."""
    console.print(render_game_choices(games, title, theme))
    choice = console.input("Enter number: ").strip()
    try:
        idx = int(choice) - 1
    except ValueError:
        return None
    if 0 <= idx < len(games):
        return games[idx]
    return None


def _fail(console: Console, exc: NFLWatchError, theme: Theme) -> int:
    logger.debug("Request failed", exc_info=exc)
    console.print(render_error(exc, theme))
    return 1


def run_scoreboard(service: ScoreService, console: Console, err: Console, dates: str, theme: Theme) -> int:
    try:
        with console.status("Fetching games..."):
            games = service.get_scores(dates)
    except NFLWatchError as exc:
        return _fail(err, exc, theme)
    console.print(render_scoreboard(games, theme))
    return 0


def _pick(console: Console, games: list[Game], title: str, empty_message: str, theme: Theme) -> tuple[Optional[str], int]:
    if not games:
        console.print(empty_message)
        return None, 0
    game = select_game(console, games, title, theme)
    if game is None:
        console.print("Invalid selection.")
        return None, 1
    return game.id, 0


def _date_title(base: str, dates: str) -> str:
    return f"{base} ({dates})" if dates else base


def run_watch(service: ScoreService, console: Console, err: Console, game_id: str,
              theme: Theme, settings: Settings) -> int:
    if not game_id:
        try:
            games = service.get_live_games()
        except NFLWatchError as exc:
            return _fail(err, exc, theme)
        game_id, code = _pick(console, games, "Live games",
                              "No live games available right now. Try again during game time.", theme)
        if game_id is None:
            return code

    try:
        validate_game_id(game_id)
    except NFLWatchError as exc:
        return _fail(err, exc, theme)
    _run_app(LiveApp(service, game_id, theme, light=settings.theme == "light"))
    return 0


def run_replay(service: ScoreService, console: Console, err: Console, game_id: str, dates: str,
               theme: Theme, settings: Settings) -> int:
    if not game_id:
        try:
            games = service.get_completed_games(dates)
        except NFLWatchError as exc:
            return _fail(err, exc, theme)
        game_id, code = _pick(console, games, _date_title("Select a completed game to replay", dates),
                              "No completed games available for replay.", theme)
        if game_id is None:
            return code

    try:
        validate_game_id(game_id)
    except NFLWatchError as exc:
        return _fail(err, exc, theme)
    _run_app(ReplayApp(service, game_id, theme, light=settings.theme == "light", speed=settings.replay_speed))
    return 0


def run_stats(service: ScoreService, console: Console, err: Console, game_id: str, dates: str, theme: Theme) -> int:
    try:
        if not game_id:
            games = service.get_scores(dates)
            game_id, code = _pick(console, games, _date_title("Select a game to view stats", dates),
                                  "No games available.", theme)
            if game_id is None:
                return code
        with console.status("Fetching stats..."):
            stats = service.get_game_stats(game_id)
    except NFLWatchError as exc:
        return _fail(err, exc, theme)

    if stats is None:
        console.print("No game data available.")
        return 1
    console.print(render_stats(stats, theme))
    return 0


def main(argv: Optional[list[str]] = None, service: Optional[ScoreService] = None) -> int:
    args = _parse_args(argv)
    _setup_logging(args.debug)

    settings = load_settings()
    plain = args.plain or settings.plain
    theme = theme_for(settings.theme, plain)
    console = Console(no_color=plain, emoji=not plain, highlight=False)
    err = Console(stderr=True, no_color=plain, highlight=False)

    if service is None:
        service = ScoreService(ESPNClient(settings.base_url, settings.timeout))

    if args.stats:
        return run_stats(service, console, err, args.game, args.dates, theme)
    if args.replay:
        return run_replay(service, console, err, args.game, args.dates, theme, settings)
    if args.watch:
        return run_watch(service, console, err, args.game, theme, settings)
    return run_scoreboard(service, console, err, args.dates, theme)


if __name__ == "__main__":
    sys.exit(main())
