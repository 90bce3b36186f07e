import asyncio
import io
import logging
import os
import signal
import tempfile
import unittest
from pathlib import Path

from rich.console import Console

from console_demo_kit.console.logging_adapter import setup_console_logging
from console_demo_kit.engine.cancellation import CancellationScope
from console_demo_kit.engine.errors import ConfigurationError
from console_demo_kit.engine.menu_loop import MenuState
from console_demo_kit.engine.models import MenuAction
from console_demo_kit.engine.options import ConsoleDemoOptions
from console_demo_kit.engine.service import ConsoleDemoEngine


class _ScriptedInput:
    def __init__(self, selections: list[str | None]) -> None:
        self._selections = list(selections)
        self.reads = 0

    async def read_selection(self, prompt: str) -> str | None:
        self.reads += 1
        return self._selections.pop(0) if self._selections else None


class _NoPause:
    async def wait(self, prompt: str) -> None:
        return None


class _FixedVersion:
    def get_version(self) -> str:
        return "1.2.3"


class _FnScenario:
    def __init__(self, name, fn) -> None:  # type: ignore[no-untyped-def]
        self.name = name
        self._fn = fn

    async def run(self, token) -> None:  # type: ignore[no-untyped-def]
        await self._fn(token)


async def _complete(token) -> None:  # type: ignore[no-untyped-def]
    await asyncio.sleep(0)


async def _fail(token) -> None:  # type: ignore[no-untyped-def]
    raise ValueError("boom from B")


class TestConsoleDemoEngine(unittest.IsolatedAsyncioTestCase):
    def _engine(self, selections: list[str | None], **option_overrides) -> ConsoleDemoEngine:  # type: ignore[no-untyped-def]
        self.output = io.StringIO()
        self.input = _ScriptedInput(selections)
        self.exit_codes: list[int] = []
        self.states: list[tuple[MenuState, bool]] = []
        engine: ConsoleDemoEngine | None = None

        def _on_state(old: MenuState, new: MenuState) -> None:
            assert engine is not None
            self.states.append((new, engine.coordinator.is_installed))

        engine = ConsoleDemoEngine(
            ConsoleDemoOptions(title="Test Demo", **option_overrides),
            console=Console(file=self.output, force_terminal=False, width=100),
            input_reader=self.input,
            pause=_NoPause(),
            version_provider=_FixedVersion(),
            exit_process=self.exit_codes.append,
            on_state_change=_on_state,
        )
        return engine

    async def test_complete_then_fail_then_quit(self) -> None:
        before = signal.getsignal(signal.SIGINT)
        engine = self._engine(["1", "2", "q"])
        scenarios = [_FnScenario("A", _complete), _FnScenario("B", _fail)]

        with self.assertLogs("console_demo_kit.engine.runner", level="ERROR"):
            exit_code = await engine.run(scenarios)

        self.assertEqual(exit_code, 0)
        text = self.output.getvalue()
        self.assertIn("Test Demo", text)
        completed_at = text.index("Scenario 'A' completed")
        failed_at = text.index("Scenario 'B' failed: ValueError: boom from B")
        self.assertLess(completed_at, failed_at)
        self.assertEqual(self.input.reads, 3)
        self.assertEqual(self.exit_codes, [])

        awaiting = [installed for state, installed in self.states if state is MenuState.AWAITING_INPUT]
        self.assertTrue(awaiting and all(awaiting))
        self.assertFalse(engine.coordinator.is_installed)
        self.assertIs(signal.getsignal(signal.SIGINT), before)
        self.assertTrue(engine.run_slot.is_empty)

    async def test_interrupt_handling_disabled_installs_nothing(self) -> None:
        engine = self._engine(["1", "q"], handle_interrupt=False)

        exit_code = await engine.run([_FnScenario("A", _complete)])

        self.assertEqual(exit_code, 0)
        self.assertTrue(self.states)
        self.assertFalse(any(installed for _, installed in self.states))
        self.assertFalse(engine.coordinator.handle_interrupt())

    async def test_help_flag_short_circuits_menu(self) -> None:
        engine = self._engine(["1"])

        exit_code = await engine.run([_FnScenario("A", _complete)], argv=["--help"])

        self.assertEqual(exit_code, 0)
        self.assertIn("Usage:", self.output.getvalue())
        self.assertEqual(self.input.reads, 0)
        self.assertEqual(self.states, [])

    async def test_help_and_version_flags(self) -> None:
        engine = self._engine([])

        await engine.run([], argv=["-v", "-h"])

        text = self.output.getvalue()
        self.assertIn("Usage:", text)
        self.assertIn("Version: 1.2.3", text)
        self.assertLess(text.index("Usage:"), text.index("Version: 1.2.3"))

    async def test_builtin_help_and_version_actions(self) -> None:
        engine = self._engine(["H", "v", "q"])

        await engine.run([_FnScenario("A", _complete)])

        text = self.output.getvalue()
        self.assertIn("Usage:", text)
        self.assertIn("Version: 1.2.3", text)

    async def test_caller_actions_follow_builtin_ones(self) -> None:
        calls: list[str] = []
        engine = self._engine(["x", "q"])

        await engine.run([], [MenuAction("X", "Extra", lambda: calls.append("x"))])

        self.assertEqual(calls, ["x"])
        menu = engine.build_menu([], [MenuAction("X", "Extra", lambda: None)])
        self.assertEqual([e.key for e in menu.action_entries], ["H", "V", "X"])

    async def test_configuration_error_surfaces_before_install(self) -> None:
        engine = self._engine(["1"])

        with self.assertRaises(ConfigurationError):
            await engine.run([_FnScenario("A", _complete)], [MenuAction("h", "Clash", lambda: None)])

        self.assertEqual(self.input.reads, 0)
        self.assertEqual(self.states, [])
        self.assertFalse(engine.coordinator.is_installed)

    async def test_cancelled_external_token_returns_immediately(self) -> None:
        external = CancellationScope(name="host")
        external.cancel()
        engine = self._engine(["1"])

        exit_code = await engine.run([_FnScenario("A", _complete)], cancel_token=external.token)

        self.assertEqual(exit_code, 0)
        self.assertEqual(self.input.reads, 0)
        self.assertFalse(engine.coordinator.is_installed)

    @unittest.skipUnless(os.name == "posix", "SIGINT delivery test needs POSIX signals")
    async def test_sigint_during_run_does_not_leak_into_next_run(self) -> None:
        runs: list[int] = []

        async def _interrupt_first_run(token) -> None:  # type: ignore[no-untyped-def]
            runs.append(len(runs) + 1)
            if len(runs) == 1:
                os.kill(os.getpid(), signal.SIGINT)
                await token.sleep(5.0)

        engine = self._engine(["1", "1", "q"])

        exit_code = await engine.run([_FnScenario("A", _interrupt_first_run)])

        self.assertEqual(exit_code, 0)
        self.assertEqual(runs, [1, 2])
        text = self.output.getvalue()
        cancelled_at = text.index("Scenario 'A' cancelled")
        completed_at = text.index("Scenario 'A' completed")
        self.assertLess(cancelled_at, completed_at)
        self.assertEqual(self.exit_codes, [])
        self.assertEqual(self.input.reads, 3)


class TestEngineWithConsoleLogging(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        root = logging.getLogger()
        self._saved_handlers = list(root.handlers)
        self._saved_level = root.level
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.addCleanup(self._restore_root)

    def _restore_root(self) -> None:
        root = logging.getLogger()
        for handler in list(root.handlers):
            if handler not in self._saved_handlers:
                root.removeHandler(handler)
                handler.close()
        for handler in self._saved_handlers:
            if handler not in root.handlers:
                root.addHandler(handler)
        root.setLevel(self._saved_level)

    async def test_failure_is_shown_once_per_run(self) -> None:
        output = io.StringIO()
        console = Console(file=output, force_terminal=False, width=100)
        log_path = setup_console_logging(console, log_dir=Path(self._tmp.name), level=logging.DEBUG)
        engine = ConsoleDemoEngine(
            ConsoleDemoOptions(title="Test Demo"),
            console=console,
            input_reader=_ScriptedInput(["1", "1", "q"]),
            pause=_NoPause(),
            version_provider=_FixedVersion(),
            exit_process=lambda code: None,
        )

        exit_code = await engine.run([_FnScenario("B", _fail)])

        self.assertEqual(exit_code, 0)
        text = output.getvalue()
        self.assertEqual(text.count("Scenario 'B' failed: ValueError: boom from B"), 2)
        self.assertNotIn("Scenario failed: name=B", text)
        self.assertNotIn("❌", text)
        for handler in logging.getLogger().handlers:
            handler.flush()
        log_text = log_path.read_text(encoding="utf-8")
        self.assertIn("Scenario failed: name=B", log_text)
        self.assertIn("ValueError: boom from B", log_text)


if __name__ == "__main__":
    unittest.main(verbosity=2)
