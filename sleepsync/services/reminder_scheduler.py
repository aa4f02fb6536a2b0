# sleepsync/services/reminder_scheduler.py

import asyncio
from typing import Awaitable, Callable, Dict, Optional, Sequence

from sleepsync.core.logger import get_logger
from sleepsync.services.notification_service import NotificationSink

logger = get_logger("reminder_scheduler")

STAGE_MESSAGES = (
    "Are you still awake?",
    "Are you really asleep?",
    "Marking you as asleep. Reply 'yes' when you wake up.",
)


class ReminderScheduler:
    """
    One escalation chain per participant, held as a single asyncio task.

    Each stage waits its delay and sends its message. After the last message
    `on_escalated(participant_id, generation)` runs. Before the last stage
    sends, the task drops out of the handle map so a late `cancel` cannot
    interrupt the transition half way. Every `start` and `cancel` bumps the
    participant's generation, so the callback can tell whether its chain was
    superseded while it was detached.
    """

    def __init__(
        self,
        sink: NotificationSink,
        delays: Sequence[float],
        on_escalated: Optional[Callable[[str, int], Awaitable[None]]] = None
    ):
        if len(delays) != len(STAGE_MESSAGES):
            raise ValueError(f"Expected {len(STAGE_MESSAGES)} reminder delays, got {len(delays)}")
        self.sink = sink
        self.delays = tuple(delays)
        self.on_escalated = on_escalated
        self._timers: Dict[str, asyncio.Task] = {}
        self._generations: Dict[str, int] = {}

    def start(self, participant_id: str) -> None:
        """(Re)arm the chain for a participant, replacing any pending one."""
        self.cancel(participant_id)
        generation = self._bump(participant_id)
        task = asyncio.create_task(self._run_chain(participant_id, generation), name=f"reminders:{participant_id}")
        self._timers[participant_id] = task
        logger.debug(f"Reminder chain armed for {participant_id} with delays {self.delays}")

    def cancel(self, participant_id: str) -> bool:
        """Drop the pending chain. Returns True if there was one."""
        self._bump(participant_id)
        task = self._timers.pop(participant_id, None)
        if task is None or task.done():
            return False
        task.cancel()
        logger.debug(f"Reminder chain cancelled for {participant_id}")
        return True

    def cancel_all(self) -> None:
        for participant_id in list(self._timers):
            self.cancel(participant_id)

    def is_pending(self, participant_id: str) -> bool:
        task = self._timers.get(participant_id)
        return task is not None and not task.done()

    def generation(self, participant_id: str) -> int:
        return self._generations.get(participant_id, 0)

    def is_current(self, participant_id: str, generation: int) -> bool:
        return self.generation(participant_id) == generation

    def _bump(self, participant_id: str) -> int:
        self._generations[participant_id] = self.generation(participant_id) + 1
        return self._generations[participant_id]

    def _detach(self, participant_id: str) -> None:
        if self._timers.get(participant_id) is asyncio.current_task():
            del self._timers[participant_id]

    async def _run_chain(self, participant_id: str, generation: int) -> None:
        last_stage = len(self.delays)
        try:
            for stage, (delay, message) in enumerate(zip(self.delays, STAGE_MESSAGES), start=1):
                await asyncio.sleep(delay)
                if stage == last_stage:
                    self._detach(participant_id)
                logger.info(f"Reminder stage {stage} for {participant_id}")
                await self.sink.send(participant_id, message)

            if self.on_escalated is not None:
                await self.on_escalated(participant_id, generation)
        except Exception as e:
            logger.error(f"❌ Reminder chain for {participant_id} failed: {e!r}")
        finally:
            self._detach(participant_id)
