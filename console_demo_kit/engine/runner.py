from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Literal

from console_demo_kit.engine.cancellation import CancellationRegistration, CancellationScope, CancellationToken
from console_demo_kit.engine.errors import OperationCancelledError, ScenarioFailure
from console_demo_kit.engine.models import Scenario, ScenarioDescriptor
from console_demo_kit.engine.run_slot import RunSlot

logger = logging.getLogger(__name__)

OutcomeStatus = Literal["completed", "cancelled", "failed"]


@dataclass(frozen=True, slots=True)
class ScenarioOutcome:
    scenario_name: str
    status: OutcomeStatus
    failure: ScenarioFailure | None = None
    duration_ms: float = 0.0

    @property
    def is_completed(self) -> bool:
        return self.status == "completed"

    @property
    def is_cancelled(self) -> bool:
        return self.status == "cancelled"

    @property
    def is_failed(self) -> bool:
        return self.status == "failed"

    @property
    def error(self) -> BaseException | None:
        return self.failure.error if self.failure is not None else None


class ScenarioRunner:
    """Executes one scenario at a time inside a fresh child cancellation scope.

    The scope is published into the `RunSlot` before the scenario starts and
    removed in a `finally` block, so the slot is empty again by the time the
    outcome is returned. Cancelling the scope cancels the scenario task (seen
    at its next await) and flips its token for cooperative checks.
    """

    def __init__(self, run_slot: RunSlot) -> None:
        self._run_slot = run_slot

    @property
    def run_slot(self) -> RunSlot:
        return self._run_slot

    async def execute(
        self,
        scenario: Scenario | ScenarioDescriptor,
        session_token: CancellationToken,
    ) -> ScenarioOutcome:
        descriptor = ScenarioDescriptor.of(scenario)
        name = descriptor.name
        loop = asyncio.get_running_loop()
        started_at = time.monotonic()

        scope = CancellationScope(session_token, name=f"scenario:{name}")
        registration: CancellationRegistration | None = None
        self._run_slot.publish(scope)
        try:
            task = loop.create_task(descriptor.scenario.run(scope.token), name=f"scenario-{name}")
            registration = scope.token.register(lambda: loop.call_soon_threadsafe(task.cancel))
            status, failure = await self._await_scenario(task, scope, name)
        except Exception as exc:
            # run() itself raised before a task existed
            status, failure = "failed", ScenarioFailure(name, exc)
            failure.__cause__ = exc
        finally:
            if registration is not None:
                registration.dispose()
            self._run_slot.clear(scope)
            scope.close()

        duration_ms = (time.monotonic() - started_at) * 1000
        if failure is not None:
            # The scenario renderer shows the failure; the traceback goes to the log file only.
            logger.error(
                f"Scenario failed: name={name} duration_ms={duration_ms:.0f}",
                exc_info=failure.error,
                extra={"console": False},
            )
        else:
            logger.info(f"Scenario finished: name={name} status={status} duration_ms={duration_ms:.0f}")
        return ScenarioOutcome(scenario_name=name, status=status, failure=failure, duration_ms=duration_ms)

    async def _await_scenario(
        self,
        task: asyncio.Task[None],
        scope: CancellationScope,
        name: str,
    ) -> tuple[OutcomeStatus, ScenarioFailure | None]:
        try:
            await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                # The runner itself is being cancelled by its host.
                raise
            if not scope.is_cancelled:
                logger.warning(f"Scenario task cancelled outside its scope: name={name}")
            return "cancelled", None
        except OperationCancelledError as exc:
            if scope.is_cancelled:
                return "cancelled", None
            failure = ScenarioFailure(name, exc)
            failure.__cause__ = exc
            return "failed", failure
        except Exception as exc:
            failure = ScenarioFailure(name, exc)
            failure.__cause__ = exc
            return "failed", failure

        if scope.is_cancelled:
            return "cancelled", None
        return "completed", None
