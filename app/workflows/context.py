"""Replay context handed to a workflow by the durable host.

A workflow function is re-executed from the top every time its run resumes.
Each ``run`` step executes at most once per run: its JSON result is journaled
and returned from the journal on every later replay. ``sleep_until`` either
passes (the wake time has arrived) or raises ``SuspendRun`` so the host can
checkpoint the journal and schedule a wake-up.
"""

import inspect
import logging
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional, Union

from app.utils.date_utils import coerce_utc, utcnow

logger = logging.getLogger(__name__)

StepFn = Callable[[], Union[Any, Awaitable[Any]]]


class SuspendRun(Exception):
    """Raised out of a workflow to park the run until ``wake_at``."""

    def __init__(self, label: str, wake_at: datetime):
        self.label = label
        self.wake_at = wake_at
        super().__init__(f"Run suspended at '{label}' until {wake_at.isoformat()}")


class WorkflowContext:
    def __init__(
        self,
        run_id: str,
        payload: Optional[dict[str, Any]] = None,
        journal: Optional[dict[str, Any]] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.run_id = run_id
        self.payload = dict(payload or {})
        self._journal: dict[str, Any] = dict(journal or {})
        self._clock = clock

    @property
    def journal(self) -> dict[str, Any]:
        return dict(self._journal)

    def now(self) -> datetime:
        return coerce_utc(self._clock())

    async def run(self, step_name: str, fn: StepFn) -> Any:
        if step_name in self._journal:
            return self._journal[step_name]
        result = fn()
        if inspect.isawaitable(result):
            result = await result
        self._journal[step_name] = result
        return result

    async def sleep_until(self, label: str, wake_at: datetime) -> None:
        key = f"sleep:{label}"
        if key in self._journal:
            return
        wake_at = coerce_utc(wake_at)
        if self.now() >= wake_at:
            self._journal[key] = wake_at.isoformat()
            return
        logger.debug("Run %s suspending at '%s' until %s", self.run_id, label, wake_at.isoformat())
        raise SuspendRun(label, wake_at)
