"""Operator endpoints for the renewal reminder workflow."""

from fastapi import APIRouter

from app.api.deps import AdminUser, Dispatcher, Host
from app.schemas.workflows import CancelResponse, TriggerRequest, TriggerResponse, WorkflowRunResponse
from app.utils.date_utils import coerce_utc
from app.utils.envelopes import api_success
from app.utils.exceptions import NotFoundException

router = APIRouter(tags=["workflows"])


@router.post("/workflows/subscriptions/reminder", response_model=dict, status_code=202)
async def trigger_reminder_workflow(payload: TriggerRequest, admin: AdminUser, dispatcher: Dispatcher):
    """Start a reminder run for a subscription. Does not wait for it."""
    run_id = await dispatcher.on_subscription_created_or_updated(payload.subscription_id)
    return api_success(TriggerResponse(run_id=run_id).model_dump(by_alias=True))


@router.post("/workflows/subscriptions/cancel", response_model=dict)
async def cancel_reminder_workflow(payload: TriggerRequest, admin: AdminUser, dispatcher: Dispatcher):
    """Advisory: lists live runs, which stop on their next wake-up."""
    live_run_ids = await dispatcher.on_subscription_cancelled(payload.subscription_id)
    response = CancelResponse(subscription_id=payload.subscription_id, live_run_ids=live_run_ids)
    return api_success(response.model_dump(by_alias=True))


@router.get("/workflows/runs/{run_id}", response_model=dict)
async def get_workflow_run(run_id: str, admin: AdminUser, host: Host):
    record = await host.get_run(run_id)
    if record is None:
        raise NotFoundException("Workflow run not found", details={"run_id": run_id})

    response = WorkflowRunResponse(
        id=record.id,
        workflow=record.workflow,
        status=record.status.value,
        subscription_id=record.subscription_id,
        outcome=record.outcome,
        result=record.result,
        wake_at=coerce_utc(record.wake_at) if record.wake_at else None,
        last_error=record.last_error,
        steps=list(record.journal),
        created_at=coerce_utc(record.created_at) if record.created_at else None,
        updated_at=coerce_utc(record.updated_at) if record.updated_at else None,
    )
    return api_success(response.model_dump(mode="json", by_alias=True))
