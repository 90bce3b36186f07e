from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.text import Text

if TYPE_CHECKING:
    from console_demo_kit.engine.options import ConsoleDemoOptions


class ConsoleHelpPrinter:
    def __init__(self, console: Console, options: ConsoleDemoOptions, *, program: str = "demo") -> None:
        self._console = console
        self._options = options
        self._program = program

    def help_text(self) -> str:
        opts = self._options
        if not opts.handle_interrupt:
            ctrl_c = "  Ctrl+C            Not handled by the demo host"
        elif opts.exit_on_interrupt_when_idle:
            ctrl_c = (
                "  Ctrl+C            Cancel the running scenario; exit when the menu is shown"
            )
        else:
            ctrl_c = "  Ctrl+C            Cancel the running scenario"

        return (
            f"{opts.title}\n"
            "\n"
            f"Usage: {self._program} [options]\n"
            "\n"
            "Options:\n"
            "  -h, --help        Show this help and exit\n"
            "  -v, --version     Show version and exit\n"
            "\n"
            "Menu:\n"
            "  <number>          Run the scenario with that number\n"
            f"  {opts.help_key:<17} Show this help\n"
            f"  {opts.version_key:<17} Show version\n"
            f"  {opts.quit_key:<17} Quit\n"
            f"{ctrl_c}\n"
        )

    def print(self) -> None:
        self._console.print(Text(self.help_text()))
