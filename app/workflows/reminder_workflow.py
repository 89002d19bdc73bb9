"""Renewal reminder workflow.

One run per subscription trigger. The run loads the subscription, checks that
it is still active and not past its renewal date, then walks the reminder
schedule: future reminders suspend the run until their instant and then fire,
reminders due today fire immediately, and elapsed reminders are skipped.

Suspension is delegated to the durable host through ``WorkflowContext``; the
workflow only decides *when* to wake up.
"""

import enum
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional

from app.models.subscription_enums import SubscriptionStatus
from app.workflows.context import WorkflowContext
from app.workflows.contracts import NotificationSender, SubscriptionSnapshot, SubscriptionStore
from app.workflows.schedule import ReminderInstant, ReminderScheduleCalculator
from app.utils.date_utils import coerce_utc, is_same_day, utcnow

logger = logging.getLogger(__name__)

REMINDER_WORKFLOW = "subscription.reminder"


class WorkflowState(str, enum.Enum):
    LOADING = "loading"
    EVALUATING = "evaluating"
    SUSPENDED = "suspended"
    FIRING = "firing"
    TERMINATED = "terminated"


class RunOutcome(str, enum.Enum):
    COMPLETED = "COMPLETED"
    EXPIRED = "EXPIRED"
    INACTIVE = "INACTIVE"
    NOT_FOUND = "NOT_FOUND"


@dataclass
class WorkflowResult:
    outcome: RunOutcome
    subscription_id: str
    message: str
    status: Optional[str] = None
    sent: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["outcome"] = self.outcome.value
        return data


class ReminderWorkflow:
    """Workflow engine for renewal reminders."""

    name = REMINDER_WORKFLOW

    def __init__(
        self,
        store: SubscriptionStore,
        sender: NotificationSender,
        calculator: ReminderScheduleCalculator,
        recheck_status_on_resume: bool = True,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._store = store
        self._sender = sender
        self._calculator = calculator
        self._recheck_status_on_resume = recheck_status_on_resume
        self._clock = clock

    async def __call__(self, ctx: WorkflowContext) -> WorkflowResult:
        """Host entry point; the subscription id travels in the run payload."""
        return await self.run(str(ctx.payload.get("subscription_id") or ""), ctx)

    async def run(self, subscription_id: str, ctx: Optional[WorkflowContext] = None) -> WorkflowResult:
        """Evaluate the subscription and process its reminders.

        Without a host-provided context the run is ephemeral: the first future
        reminder raises ``SuspendRun`` to the caller.
        """
        if ctx is None:
            ctx = WorkflowContext(run_id=f"inline-{subscription_id}", clock=self._clock)

        self._enter(ctx, WorkflowState.LOADING)
        subscription = await self._load(ctx, "get subscription", subscription_id)
        if subscription is None:
            logger.error(f"Subscription not found: {subscription_id}")
            return self._terminate(ctx, WorkflowResult(
                outcome=RunOutcome.NOT_FOUND,
                subscription_id=subscription_id,
                message="Subscription not found",
            ))

        # Captured once so that replays after a wake-up take the same branches
        now = coerce_utc(datetime.fromisoformat(
            await ctx.run("evaluation time", lambda: ctx.now().isoformat())
        ))

        self._enter(ctx, WorkflowState.EVALUATING)
        if not subscription.is_active:
            logger.info(
                f"Subscription {subscription_id} is not active. Current status: {subscription.status.value}"
            )
            return self._inactive(ctx, subscription)

        if subscription.renewal_date <= now:
            logger.info(f"Renewal date has passed for subscription {subscription_id}. Marking expired.")
            await ctx.run(
                "update subscription status",
                lambda: self._store.update_status(subscription_id, SubscriptionStatus.EXPIRED),
            )
            return self._terminate(ctx, WorkflowResult(
                outcome=RunOutcome.EXPIRED,
                subscription_id=subscription_id,
                message="Renewal date has passed, subscription marked as expired",
                status=SubscriptionStatus.EXPIRED.value,
            ))

        result = WorkflowResult(
            outcome=RunOutcome.COMPLETED,
            subscription_id=subscription_id,
            message="Reminders processed successfully",
        )
        for reminder in self._calculator.schedule(subscription.renewal_date):
            if reminder.fire_at > now:
                self._enter(ctx, WorkflowState.SUSPENDED)
                logger.info(
                    "Scheduling %s days reminder for subscription %s on %s",
                    reminder.days_before,
                    subscription_id,
                    reminder.fire_at.date().isoformat(),
                )
                await ctx.sleep_until(f"Reminder {reminder.days_before} days before", reminder.fire_at)

                # Status is re-read after every suspension, never carried over
                subscription = await self._load(
                    ctx, f"reload subscription after {reminder.days_before} days wait", subscription_id
                )
                if subscription is None:
                    logger.warning(f"Subscription {subscription_id} disappeared while the run was suspended")
                    return self._terminate(ctx, WorkflowResult(
                        outcome=RunOutcome.NOT_FOUND,
                        subscription_id=subscription_id,
                        message="Subscription not found after resume",
                        sent=result.sent,
                        failed=result.failed,
                        skipped=result.skipped,
                    ))
                if self._recheck_status_on_resume and not subscription.is_active:
                    logger.info(
                        f"Subscription {subscription_id} became {subscription.status.value} while suspended; "
                        "dropping remaining reminders"
                    )
                    return self._inactive(ctx, subscription, result)
                await self._fire(ctx, reminder, subscription, result)
            elif is_same_day(reminder.fire_at, now):
                await self._fire(ctx, reminder, subscription, result)
            else:
                logger.info(
                    f"Reminder date for {reminder.days_before} days before has already passed "
                    f"for subscription {subscription_id}"
                )
                result.skipped.append(reminder.days_before)

        return self._terminate(ctx, result)

    async def _load(self, ctx: WorkflowContext, step: str, subscription_id: str) -> Optional[SubscriptionSnapshot]:
        async def _fetch() -> Optional[dict[str, Any]]:
            if not subscription_id:
                return None
            snapshot = await self._store.find_by_id(subscription_id)
            return snapshot.model_dump(mode="json") if snapshot is not None else None

        data = await ctx.run(step, _fetch)
        return SubscriptionSnapshot.model_validate(data) if data is not None else None

    async def _fire(
        self,
        ctx: WorkflowContext,
        reminder: ReminderInstant,
        subscription: SubscriptionSnapshot,
        result: WorkflowResult,
    ) -> None:
        self._enter(ctx, WorkflowState.FIRING)
        label = reminder.label

        async def _send() -> bool:
            try:
                logger.info(f"Sending {label} for subscription: {subscription.id}")
                if not subscription.owner_email:
                    raise ValueError("User data missing from subscription")
                delivered = await self._sender.send(
                    to=subscription.owner_email, kind=label, context=subscription
                )
            except Exception as exc:
                logger.error(f"Error sending {label}: {exc}")
                return False
            if not delivered:
                logger.error(f"Error sending {label}: sender reported failure")
                return False
            logger.info(f"{label} sent successfully to {subscription.owner_email}")
            return True

        if await ctx.run(label, _send):
            result.sent.append(reminder.days_before)
        else:
            result.failed.append(reminder.days_before)

    def _inactive(
        self,
        ctx: WorkflowContext,
        subscription: SubscriptionSnapshot,
        progress: Optional[WorkflowResult] = None,
    ) -> WorkflowResult:
        return self._terminate(ctx, WorkflowResult(
            outcome=RunOutcome.INACTIVE,
            subscription_id=subscription.id,
            message=f"Workflow stopped - subscription status is {subscription.status.value}",
            status=subscription.status.value,
            sent=progress.sent if progress else [],
            failed=progress.failed if progress else [],
            skipped=progress.skipped if progress else [],
        ))

    def _terminate(self, ctx: WorkflowContext, result: WorkflowResult) -> WorkflowResult:
        self._enter(ctx, WorkflowState.TERMINATED)
        logger.info(
            "Run %s for subscription %s terminated: %s",
            ctx.run_id,
            result.subscription_id,
            result.outcome.value,
        )
        return result

    @staticmethod
    def _enter(ctx: WorkflowContext, state: WorkflowState) -> None:
        logger.debug("Run %s -> %s", ctx.run_id, state.value)
