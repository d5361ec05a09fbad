import asyncio

from nflwatch import live, replay
from nflwatch.client import NetworkError
from nflwatch.models import Game, GameReplay, GameSummary, Play, ReplayPlay, Team
from nflwatch.render import Theme, plays_start_row
from nflwatch.tui import LiveApp, ReplayApp

PLAIN = Theme.plain()


class _FakeService:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def get_game_summary(self, game_id):
        self.calls.append(("summary", game_id))
        if self.error:
            raise self.error
        plays = tuple(Play(id=str(i), text=f"play number {i}", period=1, clock="12:00") for i in range(3))
        return GameSummary(
            game=Game(id=game_id, home_team=Team("Patriots", "NE", 7), away_team=Team("Bills", "BUF", 3)),
            current_play=Play(id="0", possession="NE"),
            recent_plays=plays,
            situation="2nd & 4 at BUF 30",
            yards_to_endzone=30,
        )

    def get_game_replay(self, game_id):
        self.calls.append(("replay", game_id))
        plays = tuple(ReplayPlay(id=str(i), text=f"replay play {i}") for i in range(4))
        return GameReplay(game=Game(id=game_id), plays=plays)


async def _loaded(app, pilot):
    await app.workers.wait_for_complete()
    await pilot.pause()


def test_live_app_loads_and_handles_keys_and_clicks():
    service = _FakeService()
    app = LiveApp(service, "401", PLAIN)

    async def run():
        async with app.run_test() as pilot:
            await _loaded(app, pilot)
            assert app.view_state.phase is live.Phase.READY
            assert app.view_state.summary.game.home_team.score == 7

            await pilot.press("j")
            assert app.view_state.selected == 0

            row = plays_start_row(app.view_state, PLAIN)
            await pilot.click(offset=(6, row + 2))
            assert (app.view_state.selected, app.view_state.expanded) == (2, 2)

    asyncio.run(run())
    assert service.calls == [("summary", "401")]


def test_live_app_quit_collapses_then_exits():
    app = LiveApp(_FakeService(), "401", PLAIN)
    exits = []
    real_exit = app.exit

    def exit_(*args, **kwargs):
        exits.append(True)
        real_exit(*args, **kwargs)

    app.exit = exit_

    async def run():
        async with app.run_test() as pilot:
            await _loaded(app, pilot)
            await pilot.press("j", "enter")
            assert app.view_state.expanded == 0

            await pilot.press("q")
            assert app.view_state.expanded == -1
            assert exits == []

            await pilot.press("q")
            await pilot.pause()

    asyncio.run(run())
    assert exits == [True]


def test_live_app_keeps_fetch_error():
    app = LiveApp(_FakeService(error=NetworkError("connection refused")), "401", PLAIN)

    async def run():
        async with app.run_test() as pilot:
            await _loaded(app, pilot)
            assert isinstance(app.view_state.error, NetworkError)
            assert app.view_state.summary is None

    asyncio.run(run())


def test_replay_app_fetches_once_and_steps():
    service = _FakeService()
    app = ReplayApp(service, "401", PLAIN, speed=3)

    async def run():
        async with app.run_test() as pilot:
            await _loaded(app, pilot)
            assert app.view_state.phase is replay.Phase.READY
            assert app.view_state.auto_speed == 3

            await pilot.press("l", "l")
            assert app.view_state.play_index == 2
            await pilot.press("l", "l")
            assert app.view_state.play_index == 3

    asyncio.run(run())
    assert service.calls == [("replay", "401")]


def test_ctrl_c_goes_through_the_view():
    app = LiveApp(_FakeService(), "401", PLAIN)

    async def run():
        async with app.run_test() as pilot:
            await _loaded(app, pilot)
            await pilot.press("j", "enter")
            assert app.view_state.expanded == 0
            # an open play is collapsed instead of quitting
            await pilot.press("ctrl+c")
            assert app.view_state.expanded == -1

    asyncio.run(run())
