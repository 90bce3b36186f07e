from __future__ import annotations


class ConsoleEngineError(Exception):
    pass


class ConfigurationError(ConsoleEngineError):
    """Invalid menu setup or options. Raised before the menu loop starts."""


class OperationCancelledError(ConsoleEngineError):
    """Cooperative stop requested through a cancellation token."""

    def __init__(self, reason: str | None = None) -> None:
        self.reason = reason or "cancelled"
        super().__init__(f"Operation cancelled ({self.reason})")


class ScenarioFailure(ConsoleEngineError):
    """An error raised by a scenario while it was running."""

    def __init__(self, scenario_name: str, error: BaseException) -> None:
        self.scenario_name = scenario_name
        self.error = error
        super().__init__(f"Scenario '{scenario_name}' failed: {error}")
