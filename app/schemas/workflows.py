"""Workflow trigger and run schemas."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class TriggerRequest(BaseModel):
    subscription_id: str = Field(..., min_length=1, alias="subscriptionId")

    class Config:
        populate_by_name = True


class TriggerResponse(BaseModel):
    run_id: str = Field(..., alias="runId")

    class Config:
        populate_by_name = True


class CancelResponse(BaseModel):
    """Advisory cancel result; live runs keep going until they re-read the status."""

    subscription_id: str = Field(..., alias="subscriptionId")
    live_run_ids: list[str] = Field(default_factory=list, alias="liveRunIds")

    class Config:
        populate_by_name = True


class WorkflowRunResponse(BaseModel):
    id: str
    workflow: str
    status: str
    subscription_id: Optional[str] = Field(None, alias="subscriptionId")
    outcome: Optional[str] = None
    result: Optional[dict[str, Any]] = None
    wake_at: Optional[datetime] = Field(None, alias="wakeAt")
    last_error: Optional[str] = Field(None, alias="lastError")
    steps: list[str] = Field(default_factory=list)
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    class Config:
        populate_by_name = True
