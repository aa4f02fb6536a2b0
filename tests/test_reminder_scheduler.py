import asyncio

import pytest

from sleepsync.services.reminder_scheduler import STAGE_MESSAGES, ReminderScheduler
from tests.conftest import FAST_DELAYS, wait_for


@pytest.fixture
def escalated():
    return []


@pytest.fixture
def scheduler(sink, escalated):
    async def on_escalated(participant_id, generation):
        escalated.append(participant_id)

    scheduler = ReminderScheduler(sink, FAST_DELAYS, on_escalated=on_escalated)
    yield scheduler
    scheduler.cancel_all()


async def test_chain_sends_three_stages_then_escalates(scheduler, sink, escalated):
    scheduler.start("alice")
    assert scheduler.is_pending("alice")

    await wait_for(lambda: escalated)

    assert sink.texts_for("alice") == list(STAGE_MESSAGES)
    assert escalated == ["alice"]
    assert not scheduler.is_pending("alice")


async def test_cancel_before_first_stage_sends_nothing(scheduler, sink, escalated):
    scheduler.start("alice")
    assert scheduler.cancel("alice")

    await asyncio.sleep(sum(FAST_DELAYS) * 3)

    assert sink.sent == []
    assert escalated == []


async def test_cancel_after_first_stage_stops_the_rest(sink, escalated):
    async def on_escalated(participant_id, generation):
        escalated.append(participant_id)

    scheduler = ReminderScheduler(sink, (0.01, 0.2, 0.2), on_escalated=on_escalated)
    scheduler.start("alice")
    await wait_for(lambda: sink.sent)

    scheduler.cancel("alice")
    await asyncio.sleep(0.5)

    assert sink.texts_for("alice") == [STAGE_MESSAGES[0]]
    assert escalated == []


async def test_restart_replaces_pending_chain(sink, escalated):
    async def on_escalated(participant_id, generation):
        escalated.append(participant_id)

    scheduler = ReminderScheduler(sink, (0.05, 0.01, 0.01), on_escalated=on_escalated)
    scheduler.start("alice")
    first = scheduler._timers["alice"]
    scheduler.start("alice")

    await wait_for(lambda: escalated)
    await asyncio.sleep(0.1)

    assert first.cancelled()
    assert escalated == ["alice"]
    assert sink.texts_for("alice") == list(STAGE_MESSAGES)


async def test_chains_for_different_participants_are_independent(scheduler, sink, escalated):
    scheduler.start("alice")
    scheduler.start("bob")
    scheduler.cancel("bob")

    await wait_for(lambda: escalated)
    await asyncio.sleep(0.05)

    assert escalated == ["alice"]
    assert sink.texts_for("bob") == []


async def test_cancel_without_chain_is_noop(scheduler):
    assert not scheduler.cancel("nobody")


async def test_late_cancel_does_not_interrupt_escalation(sink):
    gate = asyncio.Event()
    finished = []

    async def on_escalated(participant_id, generation):
        await gate.wait()
        finished.append(participant_id)

    scheduler = ReminderScheduler(sink, FAST_DELAYS, on_escalated=on_escalated)
    scheduler.start("alice")
    await wait_for(lambda: len(sink.sent) == 3)

    assert not scheduler.cancel("alice")
    gate.set()
    await wait_for(lambda: finished)

    assert finished == ["alice"]


async def test_failing_escalation_is_contained(sink):
    async def on_escalated(participant_id, generation):
        raise RuntimeError("store down")

    scheduler = ReminderScheduler(sink, FAST_DELAYS, on_escalated=on_escalated)
    scheduler.start("alice")
    await wait_for(lambda: len(sink.sent) == 3)
    await asyncio.sleep(0.02)

    assert not scheduler.is_pending("alice")


def test_requires_three_delays(sink):
    with pytest.raises(ValueError):
        ReminderScheduler(sink, (1, 2))


async def test_late_cancel_marks_detached_chain_stale(sink):
    gate = asyncio.Event()
    seen = []

    async def on_escalated(participant_id, generation):
        await gate.wait()
        seen.append(scheduler.is_current(participant_id, generation))

    scheduler = ReminderScheduler(sink, FAST_DELAYS, on_escalated=on_escalated)
    scheduler.start("alice")
    await wait_for(lambda: len(sink.sent) == 3)

    scheduler.cancel("alice")
    gate.set()
    await wait_for(lambda: seen)

    assert seen == [False]


async def test_generation_stays_current_without_interference(scheduler, escalated):
    scheduler.start("alice")
    generation = scheduler.generation("alice")

    await wait_for(lambda: escalated)

    assert scheduler.is_current("alice", generation)
