"""In-memory collaborators for workflow tests."""

import copy
import uuid
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Optional

from app.models.subscription_enums import SubscriptionFrequency, SubscriptionStatus
from app.models.workflow_run import WorkflowRunStatus
from app.utils.date_utils import coerce_utc
from app.utils.exceptions import StoreUnavailableException
from app.workflows.contracts import SubscriptionSnapshot
from app.workflows.host import RunRecord, new_wake_token


def make_snapshot(
    renewal_date: datetime,
    status: SubscriptionStatus = SubscriptionStatus.ACTIVE,
    subscription_id: Optional[str] = None,
    owner_email: Optional[str] = "jane@example.com",
) -> SubscriptionSnapshot:
    return SubscriptionSnapshot(
        id=subscription_id or str(uuid.uuid4()),
        user_id=str(uuid.uuid4()),
        owner_name="Jane",
        owner_email=owner_email,
        name="Netflix Premium",
        price=Decimal("15.99"),
        currency="USD",
        frequency=SubscriptionFrequency.MONTHLY,
        status=status,
        payment_method="Visa ending 4242",
        renewal_date=renewal_date,
    )


class FrozenClock:
    def __init__(self, now: datetime):
        self.now = coerce_utc(now)

    def __call__(self) -> datetime:
        return self.now

    def set(self, moment: datetime) -> None:
        self.now = coerce_utc(moment)

    def advance(self, **kwargs: Any) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeSubscriptionStore:
    def __init__(self):
        self.subscriptions: dict[str, SubscriptionSnapshot] = {}
        self.updates: list[tuple[str, SubscriptionStatus]] = []
        self.reads = 0
        self.unavailable = False

    def add(self, snapshot: SubscriptionSnapshot) -> SubscriptionSnapshot:
        self.subscriptions[snapshot.id] = snapshot
        return snapshot

    def set_status(self, subscription_id: str, status: SubscriptionStatus) -> None:
        self.subscriptions[subscription_id] = self.subscriptions[subscription_id].model_copy(
            update={"status": status}
        )

    def remove(self, subscription_id: str) -> None:
        self.subscriptions.pop(subscription_id, None)

    async def find_by_id(self, subscription_id: str) -> Optional[SubscriptionSnapshot]:
        if self.unavailable:
            raise StoreUnavailableException(details={"subscription_id": subscription_id})
        self.reads += 1
        return self.subscriptions.get(subscription_id)

    async def update_status(self, subscription_id: str, status: SubscriptionStatus) -> None:
        if self.unavailable:
            raise StoreUnavailableException(details={"subscription_id": subscription_id})
        self.updates.append((subscription_id, status))
        if subscription_id in self.subscriptions:
            self.set_status(subscription_id, status)


class FakeNotificationSender:
    def __init__(self):
        self.sent: list[tuple[str, str, str]] = []
        self.reject_kinds: set[str] = set()
        self.raise_kinds: set[str] = set()

    @property
    def kinds(self) -> list[str]:
        return [kind for _, kind, _ in self.sent]

    async def send(self, to: str, kind: str, context: SubscriptionSnapshot) -> bool:
        if kind in self.raise_kinds:
            raise RuntimeError("SMTP relay refused connection")
        if kind in self.reject_kinds:
            return False
        self.sent.append((to, kind, context.id))
        return True


class InMemoryRunStore:
    def __init__(self):
        self.records: dict[str, RunRecord] = {}

    async def create(self, workflow: str, payload: dict[str, Any], subscription_id: Optional[str]) -> RunRecord:
        record = RunRecord(
            id=str(uuid.uuid4()),
            workflow=workflow,
            status=WorkflowRunStatus.PENDING,
            wake_token=new_wake_token(),
            subscription_id=subscription_id,
            payload=dict(payload),
        )
        self.records[record.id] = record
        return copy.deepcopy(record)

    async def get(self, run_id: str) -> Optional[RunRecord]:
        record = self.records.get(run_id)
        return copy.deepcopy(record) if record is not None else None

    async def claim(self, run_id: str, wake_token: str) -> Optional[RunRecord]:
        record = self.records.get(run_id)
        if record is None or record.is_terminal or record.wake_token != wake_token:
            return None
        record.status = WorkflowRunStatus.RUNNING
        return copy.deepcopy(record)

    async def save(self, record: RunRecord, expected_token: str) -> bool:
        stored = self.records.get(record.id)
        if stored is None:
            raise LookupError(f"Workflow run {record.id} does not exist")
        if stored.is_terminal or stored.wake_token != expected_token:
            return False
        self.records[record.id] = copy.deepcopy(record)
        return True

    async def list_live(self, subscription_id: str) -> list[RunRecord]:
        return [
            copy.deepcopy(record)
            for record in self.records.values()
            if record.subscription_id == subscription_id and not record.is_terminal
        ]


class RecordingWaker:
    def __init__(self):
        self.messages: list[tuple[str, str, Optional[datetime]]] = []
        self.available = True

    @property
    def last(self) -> tuple[str, str, Optional[datetime]]:
        return self.messages[-1]

    async def schedule_wake(self, run_id: str, wake_token: str, wake_at: Optional[datetime] = None) -> bool:
        if not self.available:
            return False
        self.messages.append((run_id, wake_token, wake_at))
        return True
