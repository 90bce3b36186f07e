"""Ctrl+C (SIGINT) routing for the demo engine.

While a scenario runs (RunSlot occupied) an interrupt cancels that scenario's
scope and the menu comes back. While the menu is idle an interrupt either
terminates the process on the spot (`exit_on_interrupt_when_idle`) or is
passed on to whatever handler was installed before us.

Busy/idle is never tracked here; it is read from a RunSlot snapshot at the
moment the interrupt is processed.
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal

from console_demo_kit.engine.options import ConsoleDemoOptions
from console_demo_kit.engine.run_slot import RunSlot

logger = logging.getLogger(__name__)

InstallMode = Literal["none", "loop", "signal"]


@dataclass(slots=True)
class InterruptHandle:
    """Opaque subscription token returned by `InterruptCoordinator.install`."""

    mode: InstallMode = "none"
    signum: int = signal.SIGINT
    previous_handler: Any = None
    loop: asyncio.AbstractEventLoop | None = None
    active: bool = False

    @classmethod
    def empty(cls) -> InterruptHandle:
        return cls()

    @property
    def is_empty(self) -> bool:
        return self.mode == "none"


class InterruptCoordinator:
    def __init__(
        self,
        options: ConsoleDemoOptions,
        run_slot: RunSlot,
        *,
        exit_process: Callable[[int], Any] = os._exit,
        signum: int = signal.SIGINT,
    ) -> None:
        self._options = options
        self._run_slot = run_slot
        self._exit_process = exit_process
        self._signum = signum
        self._handle: InterruptHandle | None = None

    @property
    def is_installed(self) -> bool:
        return self._handle is not None and self._handle.active

    def install(self, loop: asyncio.AbstractEventLoop | None = None) -> InterruptHandle:
        """Subscribe to the interrupt signal.

        Returns an empty handle (and changes nothing) when interrupt handling
        is disabled or when not running on the main thread, where Python does
        not allow installing signal handlers.
        """
        if not self._options.handle_interrupt:
            return InterruptHandle.empty()
        current = self._handle
        if current is not None and current.active:
            return current
        if threading.current_thread() is not threading.main_thread():
            logger.warning("Interrupt handling skipped: signal handlers need the main thread")
            return InterruptHandle.empty()

        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                loop = None

        previous = signal.getsignal(self._signum)
        handle = InterruptHandle(signum=self._signum, previous_handler=previous, loop=loop, active=True)

        if loop is not None:
            try:
                loop.add_signal_handler(self._signum, self._on_loop_signal)
            except (NotImplementedError, RuntimeError, ValueError):
                # Windows event loops have no add_signal_handler
                logger.debug("add_signal_handler unavailable, using signal.signal")
            else:
                handle.mode = "loop"
                self._handle = handle
                logger.debug("Interrupt handler installed on event loop")
                return handle

        signal.signal(self._signum, self._on_process_signal)
        handle.mode = "signal"
        self._handle = handle
        logger.debug("Interrupt handler installed with signal.signal")
        return handle

    def uninstall(self, handle: InterruptHandle | None) -> None:
        """Release a subscription. Empty or already released handles are ignored."""
        if handle is None or handle.is_empty or not handle.active:
            return
        handle.active = False
        if self._handle is handle:
            self._handle = None

        if handle.mode == "loop" and handle.loop is not None and not handle.loop.is_closed():
            handle.loop.remove_signal_handler(handle.signum)
        # remove_signal_handler resets to the default; put back what was there before us
        previous = handle.previous_handler
        if previous is None:
            previous = signal.default_int_handler if handle.signum == signal.SIGINT else signal.SIG_DFL
        signal.signal(handle.signum, previous)
        logger.debug("Interrupt handler uninstalled")

    def handle_interrupt(self) -> bool:
        """Apply the interrupt policy. Returns True when the interrupt was consumed.

        Also called by the console input collaborators, which receive Ctrl+C
        as KeyboardInterrupt while prompt_toolkit owns the terminal.
        """
        if not self.is_installed:
            return False

        scope = self._run_slot.snapshot()
        if scope is not None:
            # Snapshot may already be released; cancel() is then a no-op.
            cancelled = scope.cancel(reason="interrupt")
            logger.info(f"Interrupt while busy: scope={scope.name} cancelled={cancelled}")
            return True

        if self._options.exit_on_interrupt_when_idle:
            logger.info(f"Interrupt while idle: exiting with code {self._options.idle_exit_code}")
            self._exit_process(self._options.idle_exit_code)
            return True

        logger.debug("Interrupt while idle: left to previous handler")
        return False

    def _on_loop_signal(self) -> None:
        handle = self._handle
        if handle is None:
            return
        if not self.handle_interrupt():
            self._chain_previous(handle, None)

    def _on_process_signal(self, signum: int, frame: Any) -> None:
        handle = self._handle
        if handle is None:
            return
        loop = handle.loop
        if loop is not None and loop.is_running():
            # Never touch locks from signal context; hop onto the loop.
            loop.call_soon_threadsafe(self._dispatch_from_loop, handle)
            return
        if not self.handle_interrupt():
            self._chain_previous(handle, frame)

    def _dispatch_from_loop(self, handle: InterruptHandle) -> None:
        if not handle.active:
            return
        if not self.handle_interrupt():
            self._chain_previous(handle, None)

    def _chain_previous(self, handle: InterruptHandle, frame: Any) -> None:
        previous = handle.previous_handler
        if callable(previous):
            previous(handle.signum, frame)
            return
        if previous == signal.SIG_IGN:
            return
        raise KeyboardInterrupt
