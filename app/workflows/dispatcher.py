"""Entry points invoked by the subscription handlers."""

import logging
import uuid

from app.utils.exceptions import WorkflowTriggerException
from app.workflows.host import WorkflowHost
from app.workflows.reminder_workflow import REMINDER_WORKFLOW

logger = logging.getLogger(__name__)


class TriggerDispatcher:
    def __init__(self, host: WorkflowHost, supersede_previous_runs: bool = True):
        self._host = host
        self._supersede_previous_runs = supersede_previous_runs

    async def on_subscription_created_or_updated(self, subscription_id: str) -> str:
        """Start one reminder run and return its id without waiting for it.

        Start failures raise ``WorkflowTriggerException``; anything that goes
        wrong later inside the run stays with the run record.
        """
        try:
            uuid.UUID(str(subscription_id))
        except ValueError:
            raise WorkflowTriggerException(
                message="Invalid subscription ID", details={"subscription_id": subscription_id}
            )

        run_id = await self._host.start(REMINDER_WORKFLOW, {"subscription_id": str(subscription_id)})
        if self._supersede_previous_runs:
            await self._host.supersede(str(subscription_id), keep_run_id=run_id)
        return run_id

    async def on_subscription_cancelled(self, subscription_id: str) -> list[str]:
        """Advisory cancellation: report live runs, never abort them.

        A suspended run re-reads the subscription when it next wakes and, with
        status re-checking enabled, stops there.
        """
        live = await self._host.live_runs(str(subscription_id))
        run_ids = [record.id for record in live]
        if run_ids:
            logger.warning(
                f"Subscription {subscription_id} cancelled with live reminder runs {run_ids}; "
                "they will stop at their next wake-up"
            )
        else:
            logger.info(f"Cancelling reminders for subscription: {subscription_id} (no live runs)")
        return run_ids
