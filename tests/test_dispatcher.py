from datetime import datetime, timezone

import pytest

from app.models.workflow_run import WorkflowRunStatus
from app.utils.exceptions import WorkflowTriggerException
from app.workflows.dispatcher import TriggerDispatcher
from app.workflows.host import WorkflowHost
from app.workflows.reminder_workflow import ReminderWorkflow
from app.workflows.schedule import ReminderScheduleCalculator
from tests.fakes import make_snapshot

RENEWAL = datetime(2024, 3, 10, tzinfo=timezone.utc)


def _dispatcher(store, sender, runs, waker, clock, supersede=True):
    workflow = ReminderWorkflow(store=store, sender=sender, calculator=ReminderScheduleCalculator(), clock=clock)
    host = WorkflowHost(runs=runs, waker=waker, workflows={workflow.name: workflow}, clock=clock)
    return TriggerDispatcher(host, supersede_previous_runs=supersede)


@pytest.mark.asyncio
async def test_trigger_returns_run_id_without_running(store, sender, runs, waker, clock):
    sub = store.add(make_snapshot(RENEWAL))
    dispatcher = _dispatcher(store, sender, runs, waker, clock)

    run_id = await dispatcher.on_subscription_created_or_updated(sub.id)

    assert run_id in runs.records
    assert runs.records[run_id].payload == {"subscription_id": sub.id}
    assert store.reads == 0
    assert sender.sent == []


@pytest.mark.asyncio
@pytest.mark.parametrize("bad_id", ["", "not-a-uuid", "12345"])
async def test_invalid_subscription_id_is_rejected(store, sender, runs, waker, clock, bad_id):
    dispatcher = _dispatcher(store, sender, runs, waker, clock)

    with pytest.raises(WorkflowTriggerException) as excinfo:
        await dispatcher.on_subscription_created_or_updated(bad_id)

    assert excinfo.value.message == "Invalid subscription ID"
    assert runs.records == {}


@pytest.mark.asyncio
async def test_start_failure_surfaces_to_caller(store, sender, runs, waker, clock):
    sub = store.add(make_snapshot(RENEWAL))
    waker.available = False

    with pytest.raises(WorkflowTriggerException):
        await _dispatcher(store, sender, runs, waker, clock).on_subscription_created_or_updated(sub.id)


@pytest.mark.asyncio
async def test_retrigger_supersedes_previous_run(store, sender, runs, waker, clock):
    sub = store.add(make_snapshot(RENEWAL))
    dispatcher = _dispatcher(store, sender, runs, waker, clock)

    first = await dispatcher.on_subscription_created_or_updated(sub.id)
    second = await dispatcher.on_subscription_created_or_updated(sub.id)

    assert first != second
    assert runs.records[first].status == WorkflowRunStatus.SUPERSEDED
    assert runs.records[second].status == WorkflowRunStatus.PENDING


@pytest.mark.asyncio
async def test_retrigger_keeps_independent_runs_when_supersede_disabled(store, sender, runs, waker, clock):
    sub = store.add(make_snapshot(RENEWAL))
    dispatcher = _dispatcher(store, sender, runs, waker, clock, supersede=False)

    first = await dispatcher.on_subscription_created_or_updated(sub.id)
    second = await dispatcher.on_subscription_created_or_updated(sub.id)

    assert {r.id for r in await runs.list_live(sub.id)} == {first, second}


@pytest.mark.asyncio
async def test_cancel_is_advisory(store, sender, runs, waker, clock):
    sub = store.add(make_snapshot(RENEWAL))
    dispatcher = _dispatcher(store, sender, runs, waker, clock)
    run_id = await dispatcher.on_subscription_created_or_updated(sub.id)

    assert await dispatcher.on_subscription_cancelled(sub.id) == [run_id]
    assert runs.records[run_id].status == WorkflowRunStatus.PENDING


@pytest.mark.asyncio
async def test_cancel_without_runs_returns_empty(store, sender, runs, waker, clock):
    dispatcher = _dispatcher(store, sender, runs, waker, clock)

    assert await dispatcher.on_subscription_cancelled("3f0c7a52-0000-4000-8000-000000000000") == []
