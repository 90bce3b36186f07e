"""
Terminal collaborators for the engine, built on rich and prompt_toolkit.
"""

from console_demo_kit.console.args import ArgsOptions, parse_args
from console_demo_kit.console.error_display import format_error
from console_demo_kit.console.help_printer import ConsoleHelpPrinter
from console_demo_kit.console.input_reader import ConsoleMenuInputReader
from console_demo_kit.console.logging_adapter import ConsoleLoggingHandler, setup_console_logging
from console_demo_kit.console.menu_renderer import ConsoleMenuRenderer
from console_demo_kit.console.pause import ConsolePause
from console_demo_kit.console.scenario_renderer import ConsoleScenarioRenderer
from console_demo_kit.console.version import AppVersionProvider

__all__ = [
    "ArgsOptions",
    "parse_args",
    "format_error",
    "ConsoleHelpPrinter",
    "ConsoleMenuInputReader",
    "ConsoleMenuRenderer",
    "ConsolePause",
    "ConsoleScenarioRenderer",
    "AppVersionProvider",
    "ConsoleLoggingHandler",
    "setup_console_logging",
]
