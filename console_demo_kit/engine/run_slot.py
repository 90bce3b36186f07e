from __future__ import annotations

import threading

from console_demo_kit.engine.cancellation import CancellationScope


class RunSlot:
    """Holds the cancellation scope of the scenario currently executing, if any.

    ScenarioRunner is the only writer (`publish` / `clear`); the interrupt
    coordinator only takes snapshots. Writes are compare-and-set under a lock.
    `snapshot()` is a single reference load and never blocks, so it is safe to
    call from signal context.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._scope: CancellationScope | None = None

    def __repr__(self) -> str:
        return f"RunSlot(busy={self.is_busy})"

    @property
    def is_busy(self) -> bool:
        return self._scope is not None

    @property
    def is_empty(self) -> bool:
        return self._scope is None

    def snapshot(self) -> CancellationScope | None:
        return self._scope

    def publish(self, scope: CancellationScope) -> None:
        with self._lock:
            if self._scope is not None:
                raise RuntimeError(
                    f"RunSlot already holds scope {self._scope.name!r}; scenarios cannot run concurrently"
                )
            self._scope = scope

    def clear(self, expected: CancellationScope) -> bool:
        """Empty the slot if it still holds `expected`. Returns whether it did."""
        with self._lock:
            if self._scope is not expected:
                return False
            self._scope = None
            return True
