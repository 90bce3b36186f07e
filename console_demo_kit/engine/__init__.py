"""
Execution and cancellation engine: menu loop, scenario runner, Ctrl+C routing.
"""

from console_demo_kit.engine.cancellation import (
    CancellationRegistration,
    CancellationScope,
    CancellationToken,
)
from console_demo_kit.engine.errors import (
    ConfigurationError,
    ConsoleEngineError,
    OperationCancelledError,
    ScenarioFailure,
)
from console_demo_kit.engine.interrupt import InterruptCoordinator, InterruptHandle
from console_demo_kit.engine.menu_loop import MenuLoop, MenuState
from console_demo_kit.engine.models import (
    MenuAction,
    MenuEntry,
    MenuModel,
    Scenario,
    ScenarioDescriptor,
)
from console_demo_kit.engine.options import ConsoleDemoOptions
from console_demo_kit.engine.run_slot import RunSlot
from console_demo_kit.engine.runner import ScenarioOutcome, ScenarioRunner
from console_demo_kit.engine.service import ConsoleDemoEngine
from console_demo_kit.engine.settings import load_options

__all__ = [
    "ConsoleDemoEngine",
    "ConsoleDemoOptions",
    "load_options",
    # Menu
    "MenuLoop",
    "MenuState",
    "MenuModel",
    "MenuEntry",
    "MenuAction",
    "Scenario",
    "ScenarioDescriptor",
    # Execution
    "RunSlot",
    "ScenarioRunner",
    "ScenarioOutcome",
    "InterruptCoordinator",
    "InterruptHandle",
    # Cancellation
    "CancellationScope",
    "CancellationToken",
    "CancellationRegistration",
    # Errors
    "ConsoleEngineError",
    "ConfigurationError",
    "OperationCancelledError",
    "ScenarioFailure",
]
