"""Small scenarios that show off the engine: output, waiting, failure, cancellation."""

from __future__ import annotations

from rich.console import Console
from rich.text import Text

from console_demo_kit import CancellationToken


class _ConsoleScenario:
    name = "Scenario"

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()


class HelloScenario(_ConsoleScenario):
    name = "Hello"

    async def run(self, token: CancellationToken) -> None:
        self._console.print(Text("Hello, world!", style="bold green"))


class SleepScenario(_ConsoleScenario):
    """Waits for a while; Ctrl+C cuts the wait short."""

    name = "Sleep"

    def __init__(self, seconds: float = 3.0, *, console: Console | None = None) -> None:
        super().__init__(console)
        if seconds < 0:
            raise ValueError("seconds cannot be negative")
        self.seconds = seconds

    async def run(self, token: CancellationToken) -> None:
        self._console.print(f"Sleeping for {self.seconds:g}s...")
        await token.sleep(self.seconds)
        self._console.print("Woke up.")


class CountdownScenario(_ConsoleScenario):
    name = "Countdown"

    def __init__(self, start: int = 10, interval: float = 1.0, *, console: Console | None = None) -> None:
        super().__init__(console)
        if start < 0:
            raise ValueError("start cannot be negative")
        if interval < 0:
            raise ValueError("interval cannot be negative")
        self.start = start
        self.interval = interval

    async def run(self, token: CancellationToken) -> None:
        for remaining in range(self.start, 0, -1):
            self._console.print(f"{remaining}...")
            await token.sleep(self.interval)
        self._console.print(Text("Liftoff!", style="bold"))


class ErrorScenario(_ConsoleScenario):
    """Fails on purpose, so the error display can be seen."""

    name = "Error"

    async def run(self, token: CancellationToken) -> None:
        self._console.print("Doing some work before failing...")
        await token.sleep(0.2)
        raise RuntimeError("Something went wrong inside the scenario")


class CtrlCScenario(_ConsoleScenario):
    """Runs until Ctrl+C (or any other cancellation) stops it."""

    name = "Ctrl+C"

    def __init__(self, tick: float = 0.5, *, console: Console | None = None) -> None:
        super().__init__(console)
        self.tick = tick
        self.ticks = 0

    async def run(self, token: CancellationToken) -> None:
        self.ticks = 0
        self._console.print(Text("Press Ctrl+C to stop this scenario.", style="yellow"))
        while True:
            token.raise_if_cancelled()
            self.ticks += 1
            self._console.print(f"tick {self.ticks}", style="dim")
            await token.sleep(self.tick)
