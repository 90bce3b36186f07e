from __future__ import annotations

import logging
from collections.abc import Callable

from prompt_toolkit.application import Application
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout import Layout, Window
from prompt_toolkit.layout.controls import FormattedTextControl

logger = logging.getLogger(__name__)


class ConsolePause:
    """Waits for any key between a finished scenario and the next menu."""

    def __init__(self, *, on_interrupt: Callable[[], bool] | None = None) -> None:
        self._on_interrupt = on_interrupt

    def _build_application(self, prompt: str) -> Application[None]:
        bindings = KeyBindings()

        @bindings.add("<any>")
        def _acknowledge(event) -> None:
            event.app.exit()

        # More specific than <any>, so it wins for Ctrl+C.
        @bindings.add("c-c")
        def _interrupt(event) -> None:
            event.app.exit(exception=KeyboardInterrupt())

        control = FormattedTextControl(text=[("class:pause", prompt)])
        return Application(
            layout=Layout(Window(content=control, height=1, dont_extend_height=True)),
            key_bindings=bindings,
            full_screen=False,
            erase_when_done=True,
        )

    async def wait(self, prompt: str) -> None:
        app = self._build_application(prompt)
        try:
            await app.run_async()
        except EOFError:
            return
        except KeyboardInterrupt:
            if self._on_interrupt is not None and self._on_interrupt():
                return
            raise
