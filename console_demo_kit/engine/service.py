from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable, Iterable, Sequence
from typing import Any, Protocol

from rich.console import Console
from rich.text import Text

from console_demo_kit.console.args import parse_args
from console_demo_kit.console.help_printer import ConsoleHelpPrinter
from console_demo_kit.console.input_reader import ConsoleMenuInputReader
from console_demo_kit.console.menu_renderer import ConsoleMenuRenderer
from console_demo_kit.console.pause import ConsolePause
from console_demo_kit.console.scenario_renderer import ConsoleScenarioRenderer
from console_demo_kit.console.version import AppVersionProvider
from console_demo_kit.engine.cancellation import CancellationScope, CancellationToken
from console_demo_kit.engine.interrupt import InterruptCoordinator
from console_demo_kit.engine.menu_loop import (
    MenuInputReader,
    MenuLoop,
    MenuRenderer,
    PauseStep,
    ScenarioRenderer,
    StateListener,
)
from console_demo_kit.engine.models import MenuAction, MenuModel, Scenario, ScenarioDescriptor
from console_demo_kit.engine.options import ConsoleDemoOptions
from console_demo_kit.engine.run_slot import RunSlot
from console_demo_kit.engine.runner import ScenarioRunner

logger = logging.getLogger(__name__)

EXIT_OK = 0


class HelpPrinter(Protocol):
    def print(self) -> None: ...


class VersionProvider(Protocol):
    def get_version(self) -> str: ...


class ConsoleDemoEngine:
    """Composition root of the demo host.

    Wires RunSlot, ScenarioRunner, InterruptCoordinator and MenuLoop around
    the console collaborators, then drives one interactive session per
    `run()` call. Every collaborator can be replaced, which is how the tests
    run the engine without a terminal.

    Example:
        engine = ConsoleDemoEngine(ConsoleDemoOptions(title="Demo"))
        exit_code = await engine.run([HelloScenario(), SleepScenario()])
    """

    def __init__(
        self,
        options: ConsoleDemoOptions | None = None,
        *,
        console: Console | None = None,
        menu_renderer: MenuRenderer | None = None,
        input_reader: MenuInputReader | None = None,
        pause: PauseStep | None = None,
        scenario_renderer: ScenarioRenderer | None = None,
        help_printer: HelpPrinter | None = None,
        version_provider: VersionProvider | None = None,
        exit_process: Callable[[int], Any] = os._exit,
        on_state_change: StateListener | None = None,
    ) -> None:
        self._options = options or ConsoleDemoOptions()
        self._console = console or Console()

        self._run_slot = RunSlot()
        self._runner = ScenarioRunner(self._run_slot)
        self._coordinator = InterruptCoordinator(self._options, self._run_slot, exit_process=exit_process)

        self._help_printer = help_printer or ConsoleHelpPrinter(self._console, self._options)
        self._version_provider = version_provider or AppVersionProvider()
        self._menu_loop = MenuLoop(
            self._options,
            menu_renderer or ConsoleMenuRenderer(self._console, self._options),
            input_reader or ConsoleMenuInputReader(on_interrupt=self._coordinator.handle_interrupt),
            self._runner,
            pause or ConsolePause(on_interrupt=self._coordinator.handle_interrupt),
            scenario_renderer or ConsoleScenarioRenderer(self._console),
            on_state_change=on_state_change,
        )

    @property
    def options(self) -> ConsoleDemoOptions:
        return self._options

    @property
    def run_slot(self) -> RunSlot:
        return self._run_slot

    @property
    def coordinator(self) -> InterruptCoordinator:
        return self._coordinator

    @property
    def menu_loop(self) -> MenuLoop:
        return self._menu_loop

    def print_help(self) -> None:
        self._help_printer.print()

    def print_version(self) -> None:
        self._console.print(Text(f"Version: {self._version_provider.get_version()}"))

    def build_menu(
        self,
        scenarios: Iterable[Scenario | ScenarioDescriptor],
        menu_actions: Iterable[MenuAction] | None = None,
    ) -> MenuModel:
        """Built-in help/version actions first, then the caller's actions.

        Raises:
            ConfigurationError: invalid scenarios or conflicting action keys.
        """
        actions = [
            MenuAction(self._options.help_key, "Help", self.print_help),
            MenuAction(self._options.version_key, "Version", self.print_version),
            *(menu_actions or ()),
        ]
        return MenuModel(scenarios, actions, quit_key=self._options.quit_key)

    async def run(
        self,
        scenarios: Iterable[Scenario | ScenarioDescriptor],
        menu_actions: Iterable[MenuAction] | None = None,
        cancel_token: CancellationToken | None = None,
        *,
        argv: Sequence[str] | None = None,
    ) -> int:
        """Run one interactive session and return the process exit status.

        `-h/--help` and `-v/--version` in `argv` print and return without
        showing the menu. Otherwise the menu runs until the quit key, end of
        input, or cancellation of `cancel_token`.
        """
        args = parse_args(argv)
        if args.should_exit:
            if args.help_requested:
                self.print_help()
            if args.version_requested:
                self.print_version()
            return EXIT_OK

        menu = self.build_menu(scenarios, menu_actions)
        logger.info(
            f"Console demo session starting: title={self._options.title!r} "
            f"scenarios={len(menu.scenario_entries)} actions={len(menu.action_entries)}"
        )

        with CancellationScope(cancel_token, name="session") as session:
            handle = self._coordinator.install(asyncio.get_running_loop())
            try:
                await self._menu_loop.run(menu, session.token)
            finally:
                self._coordinator.uninstall(handle)

        logger.info("Console demo session finished")
        return EXIT_OK
