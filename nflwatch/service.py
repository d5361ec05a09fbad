"""Score service: thin orchestration over the ESPN client."""

import logging
from typing import Optional

from nflwatch.client import ESPNClient
from nflwatch.models import Game, GameReplay, GameStats, GameStatus, GameSummary

logger = logging.getLogger(__name__)


class ScoreService:
    """Fetch-and-filter operations. Client errors propagate unchanged."""

    def __init__(self, client: Optional[ESPNClient] = None):
        self.client = client or ESPNClient()

    def get_scores(self, dates: str = "") -> list[Game]:
        """All scoreboard games for the current week or the given dates."""
        return self.client.fetch_scoreboard(dates)

    def _by_status(self, status: GameStatus, dates: str = "") -> list[Game]:
        games = [g for g in self.get_scores(dates) if g.status is status]
        logger.debug("%d %s games", len(games), status)
        return games

    def get_live_games(self) -> list[Game]:
        """Current-week games that are in progress, in scoreboard order."""
        return self._by_status(GameStatus.IN_PROGRESS)

    def get_completed_games(self, dates: str = "") -> list[Game]:
        """Finished games for the current week or the given dates, for replay."""
        return self._by_status(GameStatus.FINAL, dates)

    def get_game_summary(self, game_id: str) -> Optional[GameSummary]:
        """Current score, latest play and recent plays of one game."""
        return self.client.fetch_summary(game_id)

    def get_game_replay(self, game_id: str) -> Optional[GameReplay]:
        """Every completed play of one game, in order, with drive ranges."""
        return self.client.fetch_replay(game_id)

    def get_game_stats(self, game_id: str) -> Optional[GameStats]:
        """Box score for one game."""
        return self.client.fetch_stats(game_id)
