"""Wires the reminder workflow to its production collaborators."""

from dataclasses import dataclass
from functools import lru_cache

from app.core.config import settings
from app.core.db import get_sessionmaker
from app.database.subscription_repo import SqlSubscriptionStore
from app.database.workflow_run_repo import SqlRunStore
from app.integrations.service_bus_publisher import ServiceBusWakeScheduler
from app.services.notification_service import ReminderNotificationSender
from app.workflows.dispatcher import TriggerDispatcher
from app.workflows.host import WorkflowHost
from app.workflows.reminder_workflow import ReminderWorkflow
from app.workflows.schedule import ReminderScheduleCalculator


@dataclass(frozen=True)
class WorkflowRuntime:
    host: WorkflowHost
    dispatcher: TriggerDispatcher


@lru_cache
def get_workflow_runtime() -> WorkflowRuntime:
    session_factory = get_sessionmaker()
    workflow = ReminderWorkflow(
        store=SqlSubscriptionStore(session_factory),
        sender=ReminderNotificationSender(session_factory),
        calculator=ReminderScheduleCalculator(settings.reminder_lead_days),
        recheck_status_on_resume=settings.WORKFLOW_RECHECK_STATUS_ON_RESUME,
    )
    host = WorkflowHost(
        runs=SqlRunStore(session_factory),
        waker=ServiceBusWakeScheduler(),
        workflows={workflow.name: workflow},
    )
    dispatcher = TriggerDispatcher(host, supersede_previous_runs=settings.WORKFLOW_SUPERSEDE_PREVIOUS_RUNS)
    return WorkflowRuntime(host=host, dispatcher=dispatcher)


def get_dispatcher() -> TriggerDispatcher:
    return get_workflow_runtime().dispatcher


def get_workflow_host() -> WorkflowHost:
    return get_workflow_runtime().host
