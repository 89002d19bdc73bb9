"""Durable execution host for workflow runs.

Runs are checkpointed in a ``RunStore`` and woken through a ``WakeScheduler``
(Azure Service Bus scheduled messages in production). A wake message carries
the run id and the wake token issued at the last checkpoint; stale or
duplicate wake messages no longer match the stored token and are ignored, so
each suspension resumes once.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Mapping, Optional, Protocol

from app.models.workflow_run import TERMINAL_RUN_STATUSES, WorkflowRunStatus
from app.utils.date_utils import utcnow
from app.utils.exceptions import ValidationException, WorkflowTriggerException
from app.workflows.context import SuspendRun, WorkflowContext
from app.workflows.reminder_workflow import WorkflowResult

logger = logging.getLogger(__name__)

WorkflowFn = Callable[[WorkflowContext], Awaitable[WorkflowResult]]


def new_wake_token() -> str:
    return uuid.uuid4().hex


@dataclass
class RunRecord:
    id: str
    workflow: str
    status: WorkflowRunStatus
    wake_token: str
    subscription_id: Optional[str] = None
    payload: dict[str, Any] = field(default_factory=dict)
    journal: dict[str, Any] = field(default_factory=dict)
    outcome: Optional[str] = None
    result: Optional[dict[str, Any]] = None
    wake_at: Optional[datetime] = None
    last_error: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_RUN_STATUSES


class RunStore(Protocol):
    async def create(self, workflow: str, payload: dict[str, Any], subscription_id: Optional[str]) -> RunRecord:
        ...

    async def get(self, run_id: str) -> Optional[RunRecord]:
        ...

    async def claim(self, run_id: str, wake_token: str) -> Optional[RunRecord]:
        """Mark a live run RUNNING if ``wake_token`` matches; None otherwise."""
        ...

    async def save(self, record: RunRecord, expected_token: str) -> bool:
        """Write ``record`` only if the stored run is live and still holds ``expected_token``."""
        ...

    async def list_live(self, subscription_id: str) -> list[RunRecord]:
        ...


class WakeScheduler(Protocol):
    async def schedule_wake(self, run_id: str, wake_token: str, wake_at: Optional[datetime] = None) -> bool:
        """Deliver a wake message now (``wake_at`` None) or at ``wake_at``."""
        ...


class WorkflowHost:
    def __init__(
        self,
        runs: RunStore,
        waker: WakeScheduler,
        workflows: Mapping[str, WorkflowFn],
        clock: Callable[[], datetime] = utcnow,
    ):
        self._runs = runs
        self._waker = waker
        self._workflows = dict(workflows)
        self._clock = clock

    async def start(self, workflow: str, payload: dict[str, Any]) -> str:
        """Create a run and enqueue its first wake-up. Returns the run id."""
        if workflow not in self._workflows:
            raise ValidationException(f"Unknown workflow: {workflow}")

        record = await self._runs.create(workflow, payload, payload.get("subscription_id"))
        if not await self._waker.schedule_wake(record.id, record.wake_token):
            record.status = WorkflowRunStatus.FAILED
            record.last_error = "Failed to enqueue initial wake-up"
            await self._runs.save(record, record.wake_token)
            raise WorkflowTriggerException(details={"run_id": record.id})

        logger.info(f"Started {workflow} run {record.id}")
        return record.id

    async def resume(self, run_id: str, wake_token: str) -> Optional[WorkflowResult]:
        """Replay a run from its journal. Returns the result once it terminates."""
        record = await self._runs.claim(run_id, wake_token)
        if record is None:
            logger.info(f"Ignoring wake-up for run {run_id}: unknown, finished or stale token")
            return None

        claimed_token = record.wake_token
        ctx = WorkflowContext(run_id=record.id, payload=record.payload, journal=record.journal, clock=self._clock)
        try:
            result = await self._workflows[record.workflow](ctx)
        except SuspendRun as suspend:
            record.journal = ctx.journal
            record.status = WorkflowRunStatus.SUSPENDED
            record.wake_at = suspend.wake_at
            record.wake_token = new_wake_token()
            if not await self._runs.save(record, claimed_token):
                logger.info(f"Run {record.id} was retired while running; not scheduling '{suspend.label}'")
                return None
            if not await self._waker.schedule_wake(record.id, record.wake_token, suspend.wake_at):
                record.status = WorkflowRunStatus.FAILED
                record.last_error = f"Failed to schedule wake-up for '{suspend.label}'"
                await self._runs.save(record, record.wake_token)
                raise WorkflowTriggerException(message=record.last_error, details={"run_id": record.id})
            logger.info(f"Run {record.id} suspended at '{suspend.label}' until {suspend.wake_at.isoformat()}")
            return None
        except Exception as exc:
            record.journal = ctx.journal
            record.status = WorkflowRunStatus.FAILED
            record.last_error = f"{type(exc).__name__}: {exc}"
            if not await self._runs.save(record, claimed_token):
                logger.info(f"Run {record.id} was retired while running; failure not recorded")
            logger.exception(f"Run {record.id} failed")
            raise

        record.journal = ctx.journal
        record.status = WorkflowRunStatus.COMPLETED
        record.outcome = result.outcome.value
        record.result = result.to_dict()
        record.wake_at = None
        if not await self._runs.save(record, claimed_token):
            logger.info(f"Run {record.id} was retired while running; result not recorded")
        return result

    async def get_run(self, run_id: str) -> Optional[RunRecord]:
        return await self._runs.get(run_id)

    async def live_runs(self, subscription_id: str) -> list[RunRecord]:
        return await self._runs.list_live(subscription_id)

    async def supersede(self, subscription_id: str, keep_run_id: Optional[str] = None) -> list[str]:
        """Retire live runs of a subscription so their pending wake-ups are ignored."""
        superseded = []
        for record in await self._runs.list_live(subscription_id):
            if record.id == keep_run_id:
                continue
            run_id = record.id
            # the run may checkpoint concurrently and rotate its token
            while record is not None and not record.is_terminal:
                token = record.wake_token
                record.status = WorkflowRunStatus.SUPERSEDED
                record.wake_at = None
                if await self._runs.save(record, token):
                    superseded.append(run_id)
                    break
                record = await self._runs.get(run_id)
        if superseded:
            logger.info(f"Superseded runs {superseded} for subscription {subscription_id}")
        return superseded
