from __future__ import annotations

import logging
from collections.abc import Callable

from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory

logger = logging.getLogger(__name__)

InterruptCallback = Callable[[], bool]


class ConsoleMenuInputReader:
    """Reads one menu selection per call with a prompt_toolkit prompt.

    prompt_toolkit puts the terminal in raw mode, so Ctrl+C shows up as
    KeyboardInterrupt instead of SIGINT. It is handed to `on_interrupt`
    (the interrupt coordinator); if nobody consumes it, it is re-raised.
    """

    def __init__(
        self,
        *,
        on_interrupt: InterruptCallback | None = None,
        session: PromptSession[str] | None = None,
    ) -> None:
        self._on_interrupt = on_interrupt
        self._session = session

    def _ensure_session(self) -> PromptSession[str]:
        if self._session is None:
            self._session = PromptSession(history=InMemoryHistory())
        return self._session

    async def read_selection(self, prompt: str) -> str | None:
        session = self._ensure_session()
        try:
            text = await session.prompt_async(prompt)
        except EOFError:
            logger.debug("End of input at menu prompt")
            return None
        except KeyboardInterrupt:
            if self._on_interrupt is not None and self._on_interrupt():
                return ""
            raise
        return text.strip()
