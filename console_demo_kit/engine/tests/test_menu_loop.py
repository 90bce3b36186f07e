import asyncio
import unittest
from unittest.mock import patch

from console_demo_kit.engine.cancellation import CancellationScope
from console_demo_kit.engine.menu_loop import MenuLoop, MenuState
from console_demo_kit.engine.models import MenuAction, MenuEntry, MenuModel
from console_demo_kit.engine.options import ConsoleDemoOptions
from console_demo_kit.engine.run_slot import RunSlot
from console_demo_kit.engine.runner import ScenarioRunner


class _ScriptedInput:
    """Returns scripted selections; None (end of input) once the script runs out."""

    def __init__(self, selections: list[str | None], *, block_when_done: bool = False) -> None:
        self._selections = list(selections)
        self._block_when_done = block_when_done
        self.reads = 0

    async def read_selection(self, prompt: str) -> str | None:
        self.reads += 1
        if self._selections:
            return self._selections.pop(0)
        if self._block_when_done:
            await asyncio.Event().wait()
        return None


class _RecordingRenderer:
    def __init__(self) -> None:
        self.renders = 0
        self.invalid: list[str] = []

    def render(self, menu: MenuModel) -> None:
        self.renders += 1

    def render_invalid_selection(self, raw: str) -> None:
        self.invalid.append(raw)


class _RecordingScenarioRenderer:
    def __init__(self) -> None:
        self.started: list[str] = []
        self.outcomes = []  # type: ignore[var-annotated]

    def render_start(self, descriptor) -> None:  # type: ignore[no-untyped-def]
        self.started.append(descriptor.name)

    def render_outcome(self, outcome) -> None:  # type: ignore[no-untyped-def]
        self.outcomes.append(outcome)


class _CountingPause:
    def __init__(self) -> None:
        self.waits = 0

    async def wait(self, prompt: str) -> None:
        self.waits += 1


class _FnScenario:
    def __init__(self, name, fn) -> None:  # type: ignore[no-untyped-def]
        self.name = name
        self._fn = fn
        self.runs = 0

    async def run(self, token) -> None:  # type: ignore[no-untyped-def]
        self.runs += 1
        await self._fn(token)


async def _noop(token) -> None:  # type: ignore[no-untyped-def]
    await asyncio.sleep(0)


class TestMenuLoop(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.slot = RunSlot()
        self.renderer = _RecordingRenderer()
        self.scenario_renderer = _RecordingScenarioRenderer()
        self.pause = _CountingPause()
        self.transitions: list[MenuState] = []
        self.session = CancellationScope(name="session")

    async def asyncTearDown(self) -> None:
        self.session.close()

    def _loop(self, input_reader: _ScriptedInput) -> MenuLoop:
        return MenuLoop(
            ConsoleDemoOptions(),
            self.renderer,
            input_reader,
            ScenarioRunner(self.slot),
            self.pause,
            self.scenario_renderer,
            on_state_change=lambda old, new: self.transitions.append(new),
        )

    async def test_scenario_then_quit_walks_the_state_machine(self) -> None:
        scenario = _FnScenario("A", _noop)
        loop = self._loop(_ScriptedInput(["1", "q"]))

        await loop.run(MenuModel([scenario]), self.session.token)

        self.assertEqual(
            self.transitions,
            [
                MenuState.RENDERING,
                MenuState.AWAITING_INPUT,
                MenuState.DISPATCHING_SCENARIO,
                MenuState.PAUSING,
                MenuState.RENDERING,
                MenuState.AWAITING_INPUT,
                MenuState.STOPPED,
            ],
        )
        self.assertEqual(loop.state, MenuState.STOPPED)
        self.assertEqual(scenario.runs, 1)
        self.assertTrue(self.scenario_renderer.outcomes[0].is_completed)
        self.assertEqual(self.pause.waits, 1)
        self.assertTrue(self.slot.is_empty)

    async def test_unknown_selection_rerenders_without_pause(self) -> None:
        loop = self._loop(_ScriptedInput(["9", "", "q"]))

        await loop.run(MenuModel([_FnScenario("A", _noop)]), self.session.token)

        self.assertEqual(self.renderer.invalid, ["9"])
        self.assertEqual(self.renderer.renders, 3)
        self.assertEqual(self.pause.waits, 0)

    async def test_action_is_invoked_then_paused(self) -> None:
        calls: list[str] = []
        menu = MenuModel([], [MenuAction("H", "Help", lambda: calls.append("help"))])
        loop = self._loop(_ScriptedInput(["h", "q"]))

        await loop.run(menu, self.session.token)

        self.assertEqual(calls, ["help"])
        self.assertIn(MenuState.DISPATCHING_ACTION, self.transitions)
        self.assertEqual(self.pause.waits, 1)

    async def test_oversized_number_is_invalid_and_loop_continues(self) -> None:
        scenario = _FnScenario("A", _noop)
        selection = "9" * 5000
        loop = self._loop(_ScriptedInput([selection, "1", "q"]))

        await loop.run(MenuModel([scenario]), self.session.token)

        self.assertEqual(self.renderer.invalid, [selection])
        self.assertEqual(scenario.runs, 1)
        self.assertEqual(loop.state, MenuState.STOPPED)

    async def test_entry_without_target_is_skipped(self) -> None:
        menu = MenuModel([_FnScenario("A", _noop)])
        loop = self._loop(_ScriptedInput(["1", "q"]))

        with patch.object(menu, "resolve", return_value=MenuEntry(kind="action", key="1", label="Broken")):
            await loop.run(menu, self.session.token)

        self.assertNotIn(MenuState.DISPATCHING_ACTION, self.transitions)
        self.assertNotIn(MenuState.DISPATCHING_SCENARIO, self.transitions)
        self.assertEqual(self.pause.waits, 0)
        self.assertEqual(self.renderer.renders, 2)

    async def test_end_of_input_stops(self) -> None:
        loop = self._loop(_ScriptedInput([None]))

        await loop.run(MenuModel([]), self.session.token)

        self.assertEqual(loop.state, MenuState.STOPPED)

    async def test_failed_scenario_is_reported_and_loop_continues(self) -> None:
        async def _boom(token) -> None:  # type: ignore[no-untyped-def]
            raise RuntimeError("boom")

        reader = _ScriptedInput(["1", "q"])
        loop = self._loop(reader)

        with self.assertLogs("console_demo_kit.engine.runner", level="ERROR"):
            await loop.run(MenuModel([_FnScenario("B", _boom)]), self.session.token)

        self.assertTrue(self.scenario_renderer.outcomes[0].is_failed)
        self.assertEqual(self.pause.waits, 1)
        self.assertEqual(reader.reads, 2)

    async def test_session_cancel_while_idle_stops_without_running_anything(self) -> None:
        scenario = _FnScenario("A", _noop)
        loop = self._loop(_ScriptedInput([], block_when_done=True))
        asyncio.get_running_loop().call_later(0.05, self.session.cancel)

        await asyncio.wait_for(loop.run(MenuModel([scenario]), self.session.token), timeout=2.0)

        self.assertEqual(loop.state, MenuState.STOPPED)
        self.assertEqual(scenario.runs, 0)

    async def test_already_cancelled_session_never_renders(self) -> None:
        self.session.cancel()
        loop = self._loop(_ScriptedInput(["1"]))

        await loop.run(MenuModel([_FnScenario("A", _noop)]), self.session.token)

        self.assertEqual(self.renderer.renders, 0)
        self.assertEqual(self.transitions, [MenuState.STOPPED])

    async def test_session_cancel_while_busy_cancels_scenario_then_stops(self) -> None:
        started = asyncio.Event()

        async def _slow(token) -> None:  # type: ignore[no-untyped-def]
            started.set()
            await token.sleep(10)

        loop = self._loop(_ScriptedInput(["1", "q"]))
        run_task = asyncio.create_task(loop.run(MenuModel([_FnScenario("Slow", _slow)]), self.session.token))
        await asyncio.wait_for(started.wait(), timeout=2.0)

        self.session.cancel(reason="shutdown")
        await asyncio.wait_for(run_task, timeout=2.0)

        self.assertEqual(len(self.scenario_renderer.outcomes), 1)
        self.assertTrue(self.scenario_renderer.outcomes[0].is_cancelled)
        self.assertEqual(self.pause.waits, 0)
        self.assertEqual(loop.state, MenuState.STOPPED)
        self.assertTrue(self.slot.is_empty)

    async def test_failure_during_session_shutdown_is_shown_then_stops(self) -> None:
        session = self.session

        async def _cancel_then_fail(token) -> None:  # type: ignore[no-untyped-def]
            session.cancel(reason="shutdown")
            raise RuntimeError("late failure")

        loop = self._loop(_ScriptedInput(["1", "q"]))

        with self.assertLogs("console_demo_kit.engine.runner", level="ERROR"):
            await loop.run(MenuModel([_FnScenario("Late", _cancel_then_fail)]), self.session.token)

        self.assertTrue(self.scenario_renderer.outcomes[0].is_failed)
        self.assertEqual(self.pause.waits, 0)
        self.assertEqual(loop.state, MenuState.STOPPED)

    async def test_action_error_propagates(self) -> None:
        def _broken() -> None:
            raise ValueError("action failed")

        loop = self._loop(_ScriptedInput(["x"]))

        with self.assertRaises(ValueError):
            await loop.run(MenuModel([], [MenuAction("X", "Broken", _broken)]), self.session.token)
        self.assertEqual(loop.state, MenuState.STOPPED)


if __name__ == "__main__":
    unittest.main(verbosity=2)
