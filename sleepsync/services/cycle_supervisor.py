# sleepsync/services/cycle_supervisor.py

import asyncio
from datetime import datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from sleepsync.core.logger import get_logger
from sleepsync.enums import Phase
from sleepsync.services.sleep_cycle_service import CycleCompleted, SleepCycleService

logger = get_logger("cycle_supervisor")


def parse_bedtime(value: str):
    """'HH:MM' -> (hour, minute); empty -> None."""
    if not value:
        return None
    hour, _, minute = value.partition(":")
    hour, minute = int(hour), int(minute or 0)
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(f"Invalid bedtime {value!r}")
    return hour, minute


def seconds_until(bedtime, now: datetime) -> float:
    """Seconds from `now` (tz-aware) to the next occurrence of bedtime."""
    if bedtime is None:
        return 0.0
    hour, minute = bedtime
    target = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if target <= now:
        target += timedelta(days=1)
    return (target - now).total_seconds()


class CycleSupervisor:
    """
    Consumes cycle-completion events and starts the next cycle.

    A new sleeping phase is announced at the next bedtime; a new waking
    phase starts straight away and is silent.
    """

    def __init__(
        self,
        cycle: SleepCycleService,
        grace_seconds: float = 0.5,
        bedtime: str = "22:00",
        timezone: str = "UTC"
    ):
        self.cycle = cycle
        self.grace_seconds = grace_seconds
        self.bedtime = parse_bedtime(bedtime)
        self.tz = ZoneInfo(timezone)
        self._task: Optional[asyncio.Task] = None

    async def start(self) -> None:
        await self.cycle.begin_phase()
        self._task = asyncio.create_task(self._run(), name="cycle_supervisor")
        logger.info("Cycle supervisor started")

    async def stop(self) -> None:
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        await self.cycle.shutdown()
        logger.info("Cycle supervisor stopped successfully")

    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _run(self) -> None:
        while True:
            event = await self.cycle.completions.get()
            try:
                await self.handle_completion(event)
            except Exception as e:
                # Cycle stays stalled until the next completion or a restart
                logger.error(f"❌ Failed to start next cycle after {event.phase.value}: {e!r}")

    async def handle_completion(self, event: CycleCompleted) -> None:
        logger.info(f"Cycle completed at {event.completed_at.isoformat()}, next phase {event.phase.value}")
        # Let outbound sends flush before the next round of messages
        await asyncio.sleep(self.grace_seconds)

        if event.phase == Phase.SLEEPING:
            delay = seconds_until(self.bedtime, datetime.now(self.tz))
            if delay > 0:
                logger.info(f"Next sleeping phase announced in {delay / 3600:.1f}h")
                await asyncio.sleep(delay)

        await self.cycle.begin_phase()
