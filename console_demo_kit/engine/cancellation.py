"""Cooperative cancellation scopes.

A `CancellationScope` is a revocable "stop now" signal. Scopes form a tree:
a child created from a parent token is cancelled whenever the parent is.
Code that should stop on request receives the scope's `CancellationToken`
and checks it at its own suspension points.

Usage:
    with CancellationScope(name="session") as session:
        child = session.create_child(name="scenario")
        try:
            await child.token.sleep(1.0)
        finally:
            child.close()
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Awaitable, Callable
from typing import TypeVar

from console_demo_kit.engine.errors import OperationCancelledError

logger = logging.getLogger(__name__)

T = TypeVar("T")

CancelCallback = Callable[[], None]


class CancellationRegistration:
    """Handle returned by `CancellationToken.register`; `dispose()` detaches the callback."""

    __slots__ = ("_scope", "_callback_id")

    def __init__(self, scope: CancellationScope | None, callback_id: int) -> None:
        self._scope = scope
        self._callback_id = callback_id

    def dispose(self) -> None:
        scope = self._scope
        if scope is None:
            return
        self._scope = None
        scope._unregister(self._callback_id)


_EMPTY_REGISTRATION_ID = -1


class CancellationScope:
    """Session or run scoped source of a cancellation signal.

    `cancel()` is thread-safe and idempotent. Callbacks fire once, outside
    the lock, in registration order. `close()` releases the scope: it detaches
    from the parent and drops pending callbacks; cancelling a closed scope is
    a no-op.
    """

    def __init__(self, parent: CancellationToken | None = None, *, name: str = "scope") -> None:
        self.name = name
        self._lock = threading.Lock()
        self._cancelled = False
        self._closed = False
        self._reason: str | None = None
        self._callbacks: dict[int, CancelCallback] = {}
        self._next_callback_id = 0
        self.token = CancellationToken(self)
        self._parent_registration: CancellationRegistration | None = None
        if parent is not None:
            self._parent_registration = parent.register(lambda: self.cancel(reason=parent.reason))

    def __repr__(self) -> str:
        return f"CancellationScope(name={self.name!r}, cancelled={self._cancelled}, closed={self._closed})"

    def __enter__(self) -> CancellationScope:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def reason(self) -> str | None:
        return self._reason

    def create_child(self, *, name: str = "child") -> CancellationScope:
        return CancellationScope(self.token, name=name)

    def cancel(self, reason: str | None = None) -> bool:
        """Request cancellation. Returns False when already cancelled or closed."""
        with self._lock:
            if self._cancelled or self._closed:
                return False
            self._cancelled = True
            self._reason = reason or "cancelled"
            callbacks = list(self._callbacks.values())
            self._callbacks.clear()

        logger.debug(f"Cancellation requested: scope={self.name} reason={self._reason}")
        for callback in callbacks:
            try:
                callback()
            except Exception:
                logger.exception(f"Cancellation callback failed: scope={self.name}")
        return True

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._callbacks.clear()
            parent_registration = self._parent_registration
            self._parent_registration = None

        if parent_registration is not None:
            parent_registration.dispose()

    def _register(self, callback: CancelCallback) -> CancellationRegistration:
        with self._lock:
            if self._closed and not self._cancelled:
                return CancellationRegistration(None, _EMPTY_REGISTRATION_ID)
            if not self._cancelled:
                callback_id = self._next_callback_id
                self._next_callback_id += 1
                self._callbacks[callback_id] = callback
                return CancellationRegistration(self, callback_id)

        # Already cancelled: run immediately.
        callback()
        return CancellationRegistration(None, _EMPTY_REGISTRATION_ID)

    def _unregister(self, callback_id: int) -> None:
        with self._lock:
            self._callbacks.pop(callback_id, None)


class CancellationToken:
    """Read side of a `CancellationScope`, handed to code that must stop on request."""

    __slots__ = ("_scope",)

    def __init__(self, scope: CancellationScope) -> None:
        self._scope = scope

    def __repr__(self) -> str:
        return f"CancellationToken(scope={self._scope.name!r}, cancelled={self.is_cancelled})"

    @property
    def is_cancelled(self) -> bool:
        return self._scope.is_cancelled

    @property
    def reason(self) -> str | None:
        return self._scope.reason

    def raise_if_cancelled(self) -> None:
        if self._scope.is_cancelled:
            raise OperationCancelledError(self._scope.reason)

    def register(self, callback: CancelCallback) -> CancellationRegistration:
        return self._scope._register(callback)

    async def wait(self) -> None:
        """Suspend until cancellation is requested."""
        loop = asyncio.get_running_loop()
        waiter = loop.create_future()
        registration = self.register(lambda: loop.call_soon_threadsafe(_resolve, waiter))
        try:
            await waiter
        finally:
            registration.dispose()

    async def guard(self, awaitable: Awaitable[T]) -> T:
        """Await `awaitable`, abandoning it if cancellation is requested first.

        Raises:
            OperationCancelledError: cancellation won the race; the inner task is cancelled.
        """
        if self.is_cancelled:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise OperationCancelledError(self.reason)
        loop = asyncio.get_running_loop()
        task = asyncio.ensure_future(awaitable)
        cancelled = loop.create_future()
        registration = self.register(lambda: loop.call_soon_threadsafe(_resolve, cancelled))
        try:
            await asyncio.wait({task, cancelled}, return_when=asyncio.FIRST_COMPLETED)
        except BaseException:
            task.cancel()
            raise
        finally:
            registration.dispose()
            if not cancelled.done():
                cancelled.cancel()

        if task.done():
            return task.result()

        task.cancel()
        await asyncio.wait({task})
        if not task.cancelled() and task.exception() is not None:
            logger.debug(f"Guarded task failed after cancellation: {task.exception()!r}")
        raise OperationCancelledError(self.reason)

    async def sleep(self, delay: float) -> None:
        await self.guard(asyncio.sleep(max(0.0, delay)))


def _resolve(future: asyncio.Future[None]) -> None:
    if not future.done():
        future.set_result(None)
