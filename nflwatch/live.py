"""Live game view state machine.

``update(state, event, now)`` is pure: it returns the next state plus a list of
effects (fetch, schedule, quit) for the caller to carry out. The textual app in
``nflwatch.tui`` is the only place that touches real timers and threads.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Union

from nflwatch.models import GameSummary

POLL_INTERVAL = 10.0
CELEBRATE_SECONDS = 5.0
TURNOVER_SECONDS = 3.0
FLASH_SECONDS = 1.0

# Screen row of the first play line with no banner and a situation shown:
# rule, score, rule, field, situation(3), plays header(2). The app passes the
# exact row from render.plays_start_row with each click.
PLAYS_START_ROW = 9

QUIT_KEYS = {"q", "escape", "ctrl+c"}
UP_KEYS = {"up", "k"}
DOWN_KEYS = {"down", "j"}
TOGGLE_KEYS = {"enter", "space"}


class Phase(Enum):
    LOADING = "loading"
    READY = "ready"


class Signal(Enum):
    CELEBRATE = "celebrate"
    TURNOVER = "turnover"
    FLASH = "flash"


SIGNAL_SECONDS = {
    Signal.CELEBRATE: CELEBRATE_SECONDS,
    Signal.TURNOVER: TURNOVER_SECONDS,
    Signal.FLASH: FLASH_SECONDS,
}


# Events

@dataclass(frozen=True)
class Start:
    pass


@dataclass(frozen=True)
class Tick:
    pass


@dataclass(frozen=True)
class SummaryLoaded:
    seq: int
    summary: Optional[GameSummary]


@dataclass(frozen=True)
class FetchFailed:
    seq: int
    error: Exception


@dataclass(frozen=True)
class Key:
    key: str


@dataclass(frozen=True)
class Click:
    row: int
    plays_row: int = PLAYS_START_ROW


@dataclass(frozen=True)
class ClearSignal:
    signal: Signal
    serial: int


Event = Union[Start, Tick, SummaryLoaded, FetchFailed, Key, Click, ClearSignal]


# Effects

@dataclass(frozen=True)
class FetchSummary:
    game_id: str
    seq: int


@dataclass(frozen=True)
class ScheduleAt:
    at: float
    event: Event


@dataclass(frozen=True)
class Quit:
    pass


Effect = Union[FetchSummary, ScheduleAt, Quit]


@dataclass(frozen=True)
class LiveState:
    game_id: str
    phase: Phase = Phase.LOADING
    summary: Optional[GameSummary] = None
    prev_summary: Optional[GameSummary] = None
    error: Optional[Exception] = None
    last_play_id: str = ""
    last_possession: str = ""
    # serial of the raise that turned each signal on; 0 means off
    celebrate_serial: int = 0
    turnover_serial: int = 0
    flash_serial: int = 0
    serial: int = 0
    selected: int = -1
    expanded: int = -1
    seq: int = 0
    applied_seq: int = 0
    next_tick_at: float = 0.0

    @property
    def celebrating(self) -> bool:
        return self.celebrate_serial != 0

    @property
    def turnover(self) -> bool:
        return self.turnover_serial != 0

    @property
    def flash_play(self) -> bool:
        return self.flash_serial != 0

    @property
    def play_count(self) -> int:
        return len(self.summary.recent_plays) if self.summary else 0


_SERIAL_FIELD = {
    Signal.CELEBRATE: "celebrate_serial",
    Signal.TURNOVER: "turnover_serial",
    Signal.FLASH: "flash_serial",
}


def init(game_id: str, now: float) -> tuple[LiveState, list[Effect]]:
    return update(LiveState(game_id=game_id), Start(), now)


def detect_signal(
    prev: Optional[GameSummary],
    current: Optional[GameSummary],
    last_play_id: str,
    last_possession: str,
) -> Optional[Signal]:
    """Pick at most one signal for a poll: score, then possession, then new play."""
    if prev is None or current is None:
        return None

    if (current.game.home_team.score != prev.game.home_team.score
            or current.game.away_team.score != prev.game.away_team.score):
        return Signal.CELEBRATE

    play = current.current_play
    if play is None:
        return None
    if last_possession and play.possession != last_possession:
        return Signal.TURNOVER
    if play.id != last_play_id:
        return Signal.FLASH
    return None


def _raise_signal(state: LiveState, signal: Signal, now: float) -> tuple[LiveState, Effect]:
    serial = state.serial + 1
    state = replace(state, serial=serial, **{_SERIAL_FIELD[signal]: serial})
    return state, ScheduleAt(now + SIGNAL_SECONDS[signal], ClearSignal(signal, serial))


def _poll(state: LiveState) -> tuple[LiveState, list[Effect]]:
    seq = state.seq + 1
    return replace(state, seq=seq), [FetchSummary(state.game_id, seq)]


def _on_summary(state: LiveState, event: SummaryLoaded, now: float) -> tuple[LiveState, list[Effect]]:
    if event.seq <= state.applied_seq:
        return state, []

    prev = state.summary
    current = event.summary
    signal = detect_signal(prev, current, state.last_play_id, state.last_possession)

    state = replace(
        state,
        phase=Phase.READY,
        summary=current,
        prev_summary=prev,
        error=None,
        applied_seq=event.seq,
    )

    effects: list[Effect] = []
    if signal is not None:
        state, effect = _raise_signal(state, signal, now)
        effects.append(effect)

    if current is not None and current.current_play is not None:
        state = replace(
            state,
            last_play_id=current.current_play.id,
            last_possession=current.current_play.possession,
        )

    count = state.play_count
    if state.selected >= count:
        state = replace(state, selected=-1)
    if state.expanded >= count:
        state = replace(state, expanded=-1)
    return state, effects


def _toggle(state: LiveState, index: int) -> LiveState:
    if 0 <= index < state.play_count:
        return replace(state, expanded=-1 if state.expanded == index else index)
    return state


def _on_key(state: LiveState, key: str) -> tuple[LiveState, list[Effect]]:
    count = state.play_count
    if key in QUIT_KEYS:
        if state.expanded >= 0:
            return replace(state, expanded=-1), []
        return state, [Quit()]
    if key in UP_KEYS and count:
        selected = state.selected - 1 if state.selected > 0 else count - 1
        return replace(state, selected=selected), []
    if key in DOWN_KEYS and count:
        selected = state.selected + 1 if state.selected < count - 1 else 0
        return replace(state, selected=selected), []
    if key in TOGGLE_KEYS:
        return _toggle(state, state.selected), []
    return state, []


def update(state: LiveState, event: Event, now: float) -> tuple[LiveState, list[Effect]]:
    """Apply one event. ``now`` is the caller's monotonic clock, in seconds."""
    if isinstance(event, Start):
        state, effects = _poll(state)
        next_tick = now + POLL_INTERVAL
        return replace(state, next_tick_at=next_tick), effects + [ScheduleAt(next_tick, Tick())]

    if isinstance(event, Tick):
        # Stay on the 10s grid, skipping deadlines already missed.
        state, effects = _poll(state)
        next_tick = state.next_tick_at + POLL_INTERVAL
        while next_tick <= now:
            next_tick += POLL_INTERVAL
        return replace(state, next_tick_at=next_tick), effects + [ScheduleAt(next_tick, Tick())]

    if isinstance(event, SummaryLoaded):
        return _on_summary(state, event, now)

    if isinstance(event, FetchFailed):
        if event.seq <= state.applied_seq:
            return state, []
        return replace(state, error=event.error, applied_seq=event.seq), []

    if isinstance(event, ClearSignal):
        field_name = _SERIAL_FIELD[event.signal]
        if getattr(state, field_name) == event.serial:
            return replace(state, **{field_name: 0}), []
        return state, []

    if isinstance(event, Key):
        return _on_key(state, event.key)

    if isinstance(event, Click):
        index = event.row - event.plays_row
        if 0 <= index < state.play_count:
            return _toggle(replace(state, selected=index), index), []
        return state, []

    raise TypeError(f"unknown live event: {event!r}")
