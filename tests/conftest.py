import asyncio
from datetime import datetime, timezone

import pytest

from sleepsync.database.store import InMemoryStore
from sleepsync.models import MS_PER_HOUR, Participant
from sleepsync.services.notification_service import NotificationSink
from sleepsync.services.sleep_cycle_service import create_sleep_cycle_service

FAST_DELAYS = (0.01, 0.01, 0.01)


def ms(value: str) -> int:
    """ISO timestamp (UTC) -> epoch milliseconds."""
    return int(datetime.fromisoformat(value).replace(tzinfo=timezone.utc).timestamp() * 1000)


def hours(n: float) -> int:
    return int(n * MS_PER_HOUR)


class RecordingSink(NotificationSink):
    def __init__(self):
        self.sent = []

    async def send(self, participant_id: str, text: str) -> None:
        self.sent.append((participant_id, text))

    def texts_for(self, participant_id: str):
        return [text for pid, text in self.sent if pid == participant_id]


class FakeClock:
    def __init__(self, now: int):
        self.now = now

    def __call__(self) -> int:
        return self.now


async def wait_for(predicate, timeout: float = 1.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.005)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def clock():
    return FakeClock(ms("2026-01-21T22:00:00"))


@pytest.fixture
def make_cycle(store, sink, clock):
    created = []

    def _make(participant_ids=("alice", "bob"), delays=FAST_DELAYS):
        roster = [Participant(participant_id=pid, display_name=pid.title()) for pid in participant_ids]
        cycle = create_sleep_cycle_service(store, sink, roster, reminder_delays=delays, clock=clock)
        created.append(cycle)
        return cycle

    yield _make

    for cycle in created:
        cycle.scheduler.cancel_all()
