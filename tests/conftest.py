import os
import sys
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{Path(tempfile.mkdtemp()) / 'subdub-test.db'}")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("ENABLE_APP_INSIGHTS", "false")
os.environ.setdefault("SERVICEBUS_CONNECTION_STRING", "")

from tests.fakes import (  # noqa: E402
    FakeNotificationSender,
    FakeSubscriptionStore,
    FrozenClock,
    InMemoryRunStore,
    RecordingWaker,
)


@pytest.fixture
def clock():
    return FrozenClock(datetime(2024, 2, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def store():
    return FakeSubscriptionStore()


@pytest.fixture
def sender():
    return FakeNotificationSender()


@pytest.fixture
def runs():
    return InMemoryRunStore()


@pytest.fixture
def waker():
    return RecordingWaker()
