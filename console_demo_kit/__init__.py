"""
An embeddable interactive console harness for running demo scenarios.

Example:
    import asyncio

    from console_demo_kit import ConsoleDemoEngine, ConsoleDemoOptions

    class Hello:
        name = "Hello"

        async def run(self, token):
            print("Hello!")

    exit_code = asyncio.run(ConsoleDemoEngine(ConsoleDemoOptions(title="Demo")).run([Hello()]))
"""

from console_demo_kit.engine import (
    CancellationScope,
    CancellationToken,
    ConfigurationError,
    ConsoleDemoEngine,
    ConsoleDemoOptions,
    ConsoleEngineError,
    MenuAction,
    OperationCancelledError,
    Scenario,
    ScenarioFailure,
    ScenarioOutcome,
    load_options,
)

__all__ = [
    "ConsoleDemoEngine",
    "ConsoleDemoOptions",
    "load_options",
    "Scenario",
    "MenuAction",
    "ScenarioOutcome",
    # Cancellation
    "CancellationScope",
    "CancellationToken",
    # Errors
    "ConsoleEngineError",
    "ConfigurationError",
    "OperationCancelledError",
    "ScenarioFailure",
]
