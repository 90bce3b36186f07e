from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.text import Text

from console_demo_kit.console.error_display import format_error
from console_demo_kit.console.status import print_error, print_hint, print_success, print_warning

if TYPE_CHECKING:
    from console_demo_kit.engine.models import ScenarioDescriptor
    from console_demo_kit.engine.runner import ScenarioOutcome


class ConsoleScenarioRenderer:
    def __init__(self, console: Console) -> None:
        self._console = console

    def render_start(self, descriptor: ScenarioDescriptor) -> None:
        self._console.print()
        self._console.rule(Text(f"▶ {descriptor.name}", style="bold"), style="cyan")

    def render_outcome(self, outcome: ScenarioOutcome) -> None:
        self._console.print()
        name = outcome.scenario_name
        if outcome.is_completed:
            print_success(self._console, f"Scenario '{name}' completed ({outcome.duration_ms / 1000:.1f}s)")
            return
        if outcome.is_cancelled:
            print_warning(self._console, f"Scenario '{name}' cancelled")
            return

        error = outcome.error
        message, suggestion = format_error(error) if error is not None else ("Unknown error", None)
        print_error(self._console, f"Scenario '{name}' failed: {message}")
        if suggestion:
            print_hint(self._console, suggestion)
