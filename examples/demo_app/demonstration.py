"""Demo application: the scenario set and the engine configuration in one place."""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Sequence

from rich.console import Console

from console_demo_kit import ConsoleDemoEngine, Scenario, load_options
from console_demo_kit.console import setup_console_logging
from demo_app.basic_scenarios import (
    CountdownScenario,
    CtrlCScenario,
    ErrorScenario,
    HelloScenario,
    SleepScenario,
)
from demo_app.tic_tac_toe import DEFAULT_BOARD_OPTIONS, TicTacToeRules, TicTacToeScenario

console = Console()
logger = logging.getLogger(__name__)

DEMO_TITLE = "console-demo-kit - Demo"


def build_scenarios(console: Console) -> list[Scenario]:
    return [
        HelloScenario(console),
        SleepScenario(console=console),
        CountdownScenario(console=console),
        ErrorScenario(console),
        CtrlCScenario(console=console),
        TicTacToeScenario(TicTacToeRules(7, 3), DEFAULT_BOARD_OPTIONS, console=console),
    ]


async def run(argv: Sequence[str] | None = None) -> int:
    log_path = setup_console_logging(console)
    logger.debug(f"Demo logging to {log_path}")

    options = load_options(title=DEMO_TITLE)
    engine = ConsoleDemoEngine(options, console=console)
    return await engine.run(build_scenarios(console), argv=argv)


if __name__ == "__main__":
    raise SystemExit(asyncio.run(run(sys.argv[1:])))
