"""Textual apps that drive the live and replay state machines.

The apps own no view logic: they feed key/mouse/timer/fetch events into
``live.update`` / ``replay.update`` and carry out the effects that come back.
"""

import logging
import time
from functools import partial
from typing import Callable

from textual import events, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Static

from nflwatch import live, replay
from nflwatch.client import NFLWatchError
from nflwatch.render import Theme, plays_start_row, render_live, render_replay
from nflwatch.service import ScoreService

logger = logging.getLogger(__name__)


class _ViewApp(App):
    CSS = """
    #view { padding: 0 1; }
    """
    # textual quits on ctrl+c by default; route it through the view instead
    BINDINGS = [Binding("ctrl+c", "view_quit", "Quit", show=False, priority=True)]

    def __init__(self, service: ScoreService, game_id: str, view_theme: Theme, light: bool = False):
        super().__init__()
        self.service = service
        self.game_id = game_id
        self.view_theme = view_theme
        self.light = light
        self.view_state = None

    def compose(self) -> ComposeResult:
        yield Static("", id="view")

    def on_mount(self) -> None:
        if self.light:
            self.screen.styles.background = "white"
            self.screen.styles.color = "black"
        state, effects = self.initial_state(time.monotonic())
        self.view_state = state
        self._perform(effects)
        self._redraw()

    def initial_state(self, now: float):
        raise NotImplementedError

    def transition(self, event, now: float):
        raise NotImplementedError

    def render_state(self):
        raise NotImplementedError

    def apply(self, event) -> None:
        """Feed one event through the state machine and run its effects."""
        self.view_state, effects = self.transition(event, time.monotonic())
        self._perform(effects)
        self._redraw()

    def _schedule(self, at: float, event) -> None:
        delay = max(0.0, at - time.monotonic())
        self.set_timer(delay, partial(self.apply, event))

    def _perform(self, effects: list) -> None:
        for effect in effects:
            self.perform(effect)

    def perform(self, effect) -> None:
        raise NotImplementedError

    def _redraw(self) -> None:
        self.query_one("#view", Static).update(self.render_state())

    def _report(self, event_factory: Callable, fn: Callable) -> None:
        """Run ``fn`` (in a worker thread) and post its outcome as one event."""
        try:
            result = fn()
        except NFLWatchError as exc:
            logger.warning("Fetch for game %s failed: %s", self.game_id, exc)
            self.call_from_thread(self.apply, event_factory(error=exc))
        else:
            self.call_from_thread(self.apply, event_factory(result=result))

    def on_key(self, event: events.Key) -> None:
        self.apply(self.key_event(event.key))

    def action_view_quit(self) -> None:
        self.apply(self.key_event("ctrl+c"))

    def key_event(self, key: str):
        raise NotImplementedError


class LiveApp(_ViewApp):
    """Watch a live game, refreshing every ``live.POLL_INTERVAL`` seconds."""

    def initial_state(self, now: float):
        return live.init(self.game_id, now)

    def transition(self, event, now: float):
        return live.update(self.view_state, event, now)

    def render_state(self):
        return render_live(self.view_state, self.view_theme)

    def key_event(self, key: str):
        return live.Key(key)

    def perform(self, effect) -> None:
        if isinstance(effect, live.FetchSummary):
            self.fetch_summary(effect.seq)
        elif isinstance(effect, live.ScheduleAt):
            self._schedule(effect.at, effect.event)
        elif isinstance(effect, live.Quit):
            self.exit()

    @work(thread=True)
    def fetch_summary(self, seq: int) -> None:
        def outcome(result=None, error=None):
            if error is not None:
                return live.FetchFailed(seq, error)
            return live.SummaryLoaded(seq, result)

        self._report(outcome, partial(self.service.get_game_summary, self.game_id))

    def on_click(self, event: events.Click) -> None:
        if event.button == 1:
            self.apply(live.Click(event.screen_y, plays_start_row(self.view_state, self.view_theme)))


class ReplayApp(_ViewApp):
    """Step through every play of a completed game."""

    def __init__(self, service: ScoreService, game_id: str, view_theme: Theme,
                 light: bool = False, speed: int = replay.DEFAULT_SPEED):
        super().__init__(service, game_id, view_theme, light)
        self.speed = speed

    def initial_state(self, now: float):
        return replay.init(self.game_id, now, self.speed)

    def transition(self, event, now: float):
        return replay.update(self.view_state, event, now)

    def render_state(self):
        return render_replay(self.view_state, self.view_theme)

    def key_event(self, key: str):
        return replay.Key(key)

    def perform(self, effect) -> None:
        if isinstance(effect, replay.FetchReplay):
            self.fetch_replay()
        elif isinstance(effect, replay.ScheduleAt):
            self._schedule(effect.at, effect.event)
        elif isinstance(effect, replay.Quit):
            self.exit()

    @work(thread=True)
    def fetch_replay(self) -> None:
        def outcome(result=None, error=None):
            if error is not None:
                return replay.FetchFailed(error)
            return replay.ReplayLoaded(result)

        self._report(outcome, partial(self.service.get_game_replay, self.game_id))
