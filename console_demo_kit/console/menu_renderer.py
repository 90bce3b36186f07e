from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table
from rich.text import Text

from console_demo_kit.console.status import print_warning

if TYPE_CHECKING:
    from console_demo_kit.engine.models import MenuEntry, MenuModel
    from console_demo_kit.engine.options import ConsoleDemoOptions


class ConsoleMenuRenderer:
    """Draws the scenario menu with rich.

    Layout:
      ──────────── Title ────────────
        1  Hello
        2  Sleep

        H  Help
        Q  Quit
    """

    def __init__(self, console: Console, options: ConsoleDemoOptions) -> None:
        self._console = console
        self._options = options

    def render(self, menu: MenuModel) -> None:
        self._console.print()
        self._console.rule(Text(self._options.title, style="bold cyan"))
        self._console.print(self._build_table(menu))

    def render_invalid_selection(self, raw: str) -> None:
        print_warning(self._console, f"Unknown selection: {raw.strip()!r}")

    def _build_table(self, menu: MenuModel) -> Table:
        table = Table(show_header=False, box=None, padding=(0, 2), pad_edge=True)
        table.add_column(justify="right", no_wrap=True)
        table.add_column()

        if not menu.scenario_entries:
            table.add_row(Text("-", style="dim"), Text("No scenarios available", style="dim"))
        for entry in menu.scenario_entries:
            table.add_row(*self._row(entry, key_style="bold cyan"))

        table.add_row(Text(""), Text(""))
        for entry in menu.action_entries:
            table.add_row(*self._row(entry, key_style="bold"))
        table.add_row(Text(menu.quit_key, style="bold"), Text(menu.quit_label, style="dim"))
        return table

    @staticmethod
    def _row(entry: MenuEntry, *, key_style: str) -> tuple[Text, Text]:
        return Text(entry.key, style=key_style), Text(entry.label)
