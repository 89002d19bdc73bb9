"""Run checkpoint storage for the durable workflow host."""

import json
import uuid
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.models.workflow_run import TERMINAL_RUN_STATUSES, WorkflowRun, WorkflowRunStatus
from app.utils.date_utils import coerce_utc
from app.workflows.host import RunRecord, new_wake_token


def _loads(value: Optional[str]) -> Any:
    return json.loads(value) if value else None


def _to_record(run: WorkflowRun) -> RunRecord:
    return RunRecord(
        id=str(run.id),
        workflow=run.workflow,
        status=run.status,
        wake_token=run.wake_token,
        subscription_id=run.subscription_id,
        payload=_loads(run.payload) or {},
        journal=_loads(run.journal) or {},
        outcome=run.outcome,
        result=_loads(run.result),
        wake_at=coerce_utc(run.wake_at) if run.wake_at else None,
        last_error=run.last_error,
        created_at=run.created_date,
        updated_at=run.updated_date,
    )


def _apply(run: WorkflowRun, record: RunRecord) -> None:
    run.status = record.status
    run.wake_token = record.wake_token
    run.journal = json.dumps(record.journal, default=str)
    run.outcome = record.outcome
    run.result = json.dumps(record.result, default=str) if record.result is not None else None
    run.wake_at = record.wake_at
    run.last_error = record.last_error


class SqlRunStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def create(self, workflow: str, payload: dict[str, Any], subscription_id: Optional[str]) -> RunRecord:
        async with self._session_factory() as db:
            run = WorkflowRun(
                workflow=workflow,
                subscription_id=subscription_id,
                status=WorkflowRunStatus.PENDING,
                payload=json.dumps(payload, default=str),
                journal="{}",
                wake_token=new_wake_token(),
            )
            db.add(run)
            await db.commit()
            await db.refresh(run)
            return _to_record(run)

    async def get(self, run_id: str) -> Optional[RunRecord]:
        async with self._session_factory() as db:
            run = await self._fetch(db, run_id)
            return _to_record(run) if run is not None else None

    async def claim(self, run_id: str, wake_token: str) -> Optional[RunRecord]:
        async with self._session_factory() as db:
            run = await self._fetch(db, run_id, for_update=True)
            if run is None or run.status in TERMINAL_RUN_STATUSES or run.wake_token != wake_token:
                return None
            run.status = WorkflowRunStatus.RUNNING
            await db.commit()
            await db.refresh(run)
            return _to_record(run)

    async def save(self, record: RunRecord, expected_token: str) -> bool:
        async with self._session_factory() as db:
            run = await self._fetch(db, record.id, for_update=True)
            if run is None:
                raise LookupError(f"Workflow run {record.id} does not exist")
            if run.status in TERMINAL_RUN_STATUSES or run.wake_token != expected_token:
                return False
            _apply(run, record)
            await db.commit()
            return True

    async def list_live(self, subscription_id: str) -> list[RunRecord]:
        async with self._session_factory() as db:
            result = await db.execute(
                select(WorkflowRun)
                .where(
                    WorkflowRun.subscription_id == subscription_id,
                    WorkflowRun.status.not_in(list(TERMINAL_RUN_STATUSES)),
                )
                .order_by(WorkflowRun.created_date.asc())
            )
            return [_to_record(run) for run in result.scalars().all()]

    @staticmethod
    async def _fetch(db: AsyncSession, run_id: str, for_update: bool = False) -> Optional[WorkflowRun]:
        try:
            key = uuid.UUID(str(run_id))
        except ValueError:
            return None
        query = select(WorkflowRun).where(WorkflowRun.id == key)
        if for_update:
            query = query.with_for_update()
        result = await db.execute(query)
        return result.scalar_one_or_none()
