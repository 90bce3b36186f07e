from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from typing import Protocol

from console_demo_kit.engine.cancellation import CancellationToken
from console_demo_kit.engine.errors import OperationCancelledError
from console_demo_kit.engine.models import MenuModel, ScenarioDescriptor
from console_demo_kit.engine.options import ConsoleDemoOptions
from console_demo_kit.engine.runner import ScenarioOutcome, ScenarioRunner

logger = logging.getLogger(__name__)


class MenuState(Enum):
    IDLE = "idle"
    RENDERING = "rendering"
    AWAITING_INPUT = "awaiting_input"
    DISPATCHING_ACTION = "dispatching_action"
    DISPATCHING_SCENARIO = "dispatching_scenario"
    PAUSING = "pausing"
    STOPPED = "stopped"


class MenuRenderer(Protocol):
    def render(self, menu: MenuModel) -> None: ...

    def render_invalid_selection(self, raw: str) -> None: ...


class ScenarioRenderer(Protocol):
    def render_start(self, descriptor: ScenarioDescriptor) -> None: ...

    def render_outcome(self, outcome: ScenarioOutcome) -> None: ...


class MenuInputReader(Protocol):
    async def read_selection(self, prompt: str) -> str | None:
        """Return the raw selection, or None at end of input."""
        ...


class PauseStep(Protocol):
    async def wait(self, prompt: str) -> None: ...


StateListener = Callable[[MenuState, MenuState], None]


class MenuLoop:
    """Render → read → dispatch → pause, until quit input or session cancellation.

    Scenario errors are reported and the loop carries on. Errors raised by
    menu actions or collaborators are not caught here.
    """

    def __init__(
        self,
        options: ConsoleDemoOptions,
        renderer: MenuRenderer,
        input_reader: MenuInputReader,
        runner: ScenarioRunner,
        pause: PauseStep,
        scenario_renderer: ScenarioRenderer,
        *,
        on_state_change: StateListener | None = None,
    ) -> None:
        self._options = options
        self._renderer = renderer
        self._input_reader = input_reader
        self._runner = runner
        self._pause = pause
        self._scenario_renderer = scenario_renderer
        self._on_state_change = on_state_change
        self._state = MenuState.IDLE

    @property
    def state(self) -> MenuState:
        return self._state

    def _transition(self, new_state: MenuState) -> None:
        old_state = self._state
        self._state = new_state
        logger.debug(f"Menu state: {old_state.value} -> {new_state.value}")
        if self._on_state_change is not None:
            self._on_state_change(old_state, new_state)

    async def run(self, menu: MenuModel, session_token: CancellationToken) -> None:
        self._state = MenuState.IDLE
        try:
            while not session_token.is_cancelled:
                self._transition(MenuState.RENDERING)
                self._renderer.render(menu)

                self._transition(MenuState.AWAITING_INPUT)
                try:
                    raw = await session_token.guard(
                        self._input_reader.read_selection(self._options.menu_prompt)
                    )
                except OperationCancelledError:
                    logger.debug("Session cancelled while awaiting input")
                    break

                if raw is None or menu.is_quit(raw):
                    logger.debug("Quit requested")
                    break

                entry = menu.resolve(raw)
                if entry is None:
                    if raw.strip():
                        self._renderer.render_invalid_selection(raw)
                    continue

                if entry.kind == "action" and entry.action is not None:
                    self._transition(MenuState.DISPATCHING_ACTION)
                    entry.action.invoke()
                elif entry.kind == "scenario" and entry.scenario is not None:
                    self._transition(MenuState.DISPATCHING_SCENARIO)
                    await self._dispatch_scenario(entry.scenario, session_token)
                else:
                    continue

                if session_token.is_cancelled:
                    break

                self._transition(MenuState.PAUSING)
                try:
                    await session_token.guard(self._pause.wait(self._options.pause_prompt))
                except OperationCancelledError:
                    logger.debug("Session cancelled while paused")
                    break
        finally:
            self._transition(MenuState.STOPPED)

    async def _dispatch_scenario(
        self,
        descriptor: ScenarioDescriptor,
        session_token: CancellationToken,
    ) -> ScenarioOutcome:
        self._scenario_renderer.render_start(descriptor)
        outcome = await self._runner.execute(descriptor, session_token)
        # Failures are shown even when the session is already shutting down.
        self._scenario_renderer.render_outcome(outcome)
        return outcome
