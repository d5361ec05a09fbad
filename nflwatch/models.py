"""Domain model for NFL games, plays, drives and box score statistics."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional


class GameStatus(Enum):
    SCHEDULED = "Scheduled"
    IN_PROGRESS = "In Progress"
    FINAL = "Final"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Team:
    name: str = ""
    abbreviation: str = ""
    score: int = 0


@dataclass(frozen=True)
class Game:
    id: str = ""
    home_team: Team = field(default_factory=Team)
    away_team: Team = field(default_factory=Team)
    status: GameStatus = GameStatus.SCHEDULED
    status_text: str = ""
    start_time: Optional[datetime] = None

    @property
    def display_status(self) -> str:
        """Status text from the API, or the enum's display string when empty."""
        return self.status_text or str(self.status)


@dataclass(frozen=True)
class Play:
    id: str = ""
    text: str = ""
    type: str = ""
    clock: str = ""
    period: int = 0
    home_score: int = 0
    away_score: int = 0
    scoring_play: bool = False
    down: str = ""
    possession: str = ""
    # 0 means unknown; renderers treat it as midfield.
    yards_to_endzone: int = 0


@dataclass(frozen=True)
class GameSummary:
    game: Game
    current_play: Optional[Play] = None
    recent_plays: tuple[Play, ...] = ()  # newest first, at most 5
    situation: str = ""
    yards_to_endzone: int = 0


@dataclass(frozen=True)
class ReplayPlay(Play):
    drive_id: str = ""


@dataclass(frozen=True)
class Drive:
    id: str = ""
    description: str = ""
    team: str = ""
    start_index: int = 0
    end_index: int = -1

    @property
    def play_count(self) -> int:
        return max(0, self.end_index - self.start_index + 1)

    def contains(self, index: int) -> bool:
        return self.start_index <= index <= self.end_index


@dataclass(frozen=True)
class GameReplay:
    game: Game
    plays: tuple[ReplayPlay, ...] = ()  # chronological
    drives: tuple[Drive, ...] = ()

    def drive_for(self, index: int) -> Optional[Drive]:
        """Return the drive whose play range contains ``index``."""
        for drive in self.drives:
            if drive.contains(index):
                return drive
        return None


@dataclass(frozen=True)
class PlayerStatLine:
    name: str
    position: str
    stats: tuple[str, ...] = ()


@dataclass(frozen=True)
class PlayerStatCategory:
    category: str
    labels: tuple[str, ...] = ()
    players: tuple[PlayerStatLine, ...] = ()


@dataclass(frozen=True)
class TeamStats:
    team_name: str = ""
    team_abbr: str = ""
    totals: Mapping[str, str] = field(default_factory=dict)
    player_stats: tuple[PlayerStatCategory, ...] = ()

    def __post_init__(self):
        # read-only view over a private copy
        object.__setattr__(self, "totals", MappingProxyType(dict(self.totals)))

    def category(self, name: str) -> Optional[PlayerStatCategory]:
        for cat in self.player_stats:
            if cat.category == name:
                return cat
        return None


@dataclass(frozen=True)
class GameStats:
    game: Game
    home_stats: TeamStats = field(default_factory=TeamStats)
    away_stats: TeamStats = field(default_factory=TeamStats)
