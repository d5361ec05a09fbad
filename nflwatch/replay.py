"""Replay scrubber state machine for completed games.

Same shape as ``nflwatch.live``: ``update(state, event, now)`` returns the next
state and a list of effects. The play list is fetched exactly once, on Start.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Union

from nflwatch.models import GameReplay, ReplayPlay

MIN_SPEED = 1
MAX_SPEED = 5
DEFAULT_SPEED = 2

QUIT_KEYS = {"q", "escape", "ctrl+c"}
NEXT_KEYS = {"right", "l", "n"}
PREV_KEYS = {"left", "h", "p"}
HOME_KEYS = {"home", "0"}
END_KEYS = {"end", "dollar_sign", "$"}
AUTO_KEYS = {"space"}
FASTER_KEYS = {"plus", "equals_sign", "+", "="}
SLOWER_KEYS = {"minus", "underscore", "-", "_"}


class Phase(Enum):
    LOADING = "loading"
    READY = "ready"


# Events

@dataclass(frozen=True)
class Start:
    pass


@dataclass(frozen=True)
class ReplayLoaded:
    replay: Optional[GameReplay]


@dataclass(frozen=True)
class FetchFailed:
    error: Exception


@dataclass(frozen=True)
class Key:
    key: str


@dataclass(frozen=True)
class AutoTick:
    serial: int


Event = Union[Start, ReplayLoaded, FetchFailed, Key, AutoTick]


# Effects

@dataclass(frozen=True)
class FetchReplay:
    game_id: str


@dataclass(frozen=True)
class ScheduleAt:
    at: float
    event: Event


@dataclass(frozen=True)
class Quit:
    pass


Effect = Union[FetchReplay, ScheduleAt, Quit]


def clamp_speed(speed: int) -> int:
    return max(MIN_SPEED, min(MAX_SPEED, speed))


@dataclass(frozen=True)
class ReplayState:
    game_id: str
    phase: Phase = Phase.LOADING
    replay: Optional[GameReplay] = None
    error: Optional[Exception] = None
    play_index: int = 0
    auto_play: bool = False
    # seconds between auto-advanced plays
    auto_speed: int = DEFAULT_SPEED
    auto_serial: int = 0
    fetched: bool = False

    @property
    def play_count(self) -> int:
        return len(self.replay.plays) if self.replay else 0

    @property
    def last_index(self) -> int:
        return max(0, self.play_count - 1)

    @property
    def current_play(self) -> Optional[ReplayPlay]:
        if not self.play_count:
            return None
        return self.replay.plays[self.play_index]

    @property
    def at_end(self) -> bool:
        return self.play_index >= self.last_index


def init(game_id: str, now: float, speed: int = DEFAULT_SPEED) -> tuple[ReplayState, list[Effect]]:
    state = ReplayState(game_id=game_id, auto_speed=clamp_speed(speed))
    return update(state, Start(), now)


def _schedule_auto(state: ReplayState, now: float) -> tuple[ReplayState, list[Effect]]:
    serial = state.auto_serial + 1
    state = replace(state, auto_serial=serial)
    return state, [ScheduleAt(now + state.auto_speed, AutoTick(serial))]


def _move(state: ReplayState, index: int) -> ReplayState:
    return replace(state, play_index=max(0, min(state.last_index, index)))


def _on_key(state: ReplayState, key: str, now: float) -> tuple[ReplayState, list[Effect]]:
    if key in QUIT_KEYS:
        return state, [Quit()]
    if key in NEXT_KEYS:
        return _move(state, state.play_index + 1), []
    if key in PREV_KEYS:
        return _move(state, state.play_index - 1), []
    if key in HOME_KEYS:
        return _move(state, 0), []
    if key in END_KEYS:
        return _move(state, state.last_index), []
    if key in FASTER_KEYS:
        return replace(state, auto_speed=clamp_speed(state.auto_speed - 1)), []
    if key in SLOWER_KEYS:
        return replace(state, auto_speed=clamp_speed(state.auto_speed + 1)), []
    if key in AUTO_KEYS:
        if state.auto_play:
            return replace(state, auto_play=False), []
        return _schedule_auto(replace(state, auto_play=True), now)
    return state, []


def _on_auto_tick(state: ReplayState, event: AutoTick, now: float) -> tuple[ReplayState, list[Effect]]:
    if event.serial != state.auto_serial:
        return state, []
    if not state.auto_play or state.at_end:
        return replace(state, auto_play=False), []

    state = _move(state, state.play_index + 1)
    if state.at_end:
        return replace(state, auto_play=False), []
    return _schedule_auto(state, now)


def update(state: ReplayState, event: Event, now: float) -> tuple[ReplayState, list[Effect]]:
    """Apply one event. ``now`` is the caller's monotonic clock, in seconds."""
    if isinstance(event, Start):
        if state.fetched:
            return state, []
        return replace(state, fetched=True), [FetchReplay(state.game_id)]

    if isinstance(event, ReplayLoaded):
        return replace(state, phase=Phase.READY, replay=event.replay, play_index=0), []

    if isinstance(event, FetchFailed):
        return replace(state, error=event.error), []

    if isinstance(event, Key):
        return _on_key(state, event.key, now)

    if isinstance(event, AutoTick):
        return _on_auto_tick(state, event, now)

    raise TypeError(f"unknown replay event: {event!r}")
