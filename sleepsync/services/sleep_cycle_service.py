"""
Sleep Cycle Service
Routes chat replies by phase, finishes escalation chains and flips the global
phase once every roster participant has reached the phase's target state.
"""

import asyncio
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel

from sleepsync.core.logger import get_logger
from sleepsync.database.store import KeyValueStore
from sleepsync.enums import Phase, ReplyOutcome, UserState
from sleepsync.models import Participant
from sleepsync.services.notification_service import NotificationSink
from sleepsync.services.phase_service import PhaseService
from sleepsync.services.reminder_scheduler import ReminderScheduler
from sleepsync.services.sleep_history_service import SleepHistoryService, now_ms
from sleepsync.services.sleep_stats_service import SleepStatsService, format_stats_message
from sleepsync.services.user_state_service import UserStateService

logger = get_logger("sleep_cycle_service")

GOOD_MORNING_MESSAGE = "Good morning! You're marked awake."
STILL_AWAKE_MESSAGE = "Still awake? I'll check again later."

# Target state that completes each phase
PHASE_TARGETS = {
    Phase.SLEEPING: UserState.ASLEEP,
    Phase.WAKING: UserState.AWAKE,
}


def greeting_message(display_name: str, affirmative_reply: str) -> str:
    return f'Hello {display_name}! Reply "{affirmative_reply}" if you\'re awake.'


class CycleCompleted(BaseModel):
    """Emitted once per phase flip; `phase` is the phase just entered."""

    phase: Phase
    completed_at: datetime


class SleepCycleService:
    """
    The sleep/wake state machine.

    All transitions run under one lock, so replies and escalation completions
    are handled one at a time. Store failures propagate to the caller.
    """

    def __init__(
        self,
        roster: Sequence[Participant],
        phases: PhaseService,
        user_states: UserStateService,
        history: SleepHistoryService,
        scheduler: ReminderScheduler,
        sink: NotificationSink,
        affirmative_reply: str = "yes"
    ):
        self.roster: Dict[str, Participant] = {p.participant_id: p for p in roster}
        self.phases = phases
        self.user_states = user_states
        self.history = history
        self.scheduler = scheduler
        self.sink = sink
        self.affirmative_reply = affirmative_reply.strip().lower()
        self.completions: "asyncio.Queue[CycleCompleted]" = asyncio.Queue()
        self._lock = asyncio.Lock()

        self.scheduler.on_escalated = self.on_escalation_complete

    @property
    def participant_ids(self) -> List[str]:
        return list(self.roster)

    def is_affirmative(self, text: Optional[str]) -> bool:
        return (text or "").strip().lower() == self.affirmative_reply

    async def begin_phase(self) -> Phase:
        """Entry action for whatever phase is persisted right now."""
        phase = await self.phases.get_phase()
        if phase == Phase.SLEEPING:
            logger.info(f"Sleeping phase: greeting {len(self.roster)} participants and arming reminders")
            for participant in self.roster.values():
                await self.sink.send(
                    participant.participant_id,
                    greeting_message(participant.display_name, self.affirmative_reply)
                )
                self.scheduler.start(participant.participant_id)
        else:
            logger.info("Waking phase: waiting for wake-up confirmations")
        return phase

    async def handle_reply(self, participant_id: str, text: Optional[str]) -> ReplyOutcome:
        if participant_id not in self.roster:
            logger.info(f"Ignoring message from unknown participant {participant_id}")
            return ReplyOutcome.IGNORED
        if not self.is_affirmative(text):
            logger.debug(f"Ignoring non-qualifying reply from {participant_id}: {text!r}")
            return ReplyOutcome.IGNORED

        # The pending chain must not fire once the participant has answered
        self.scheduler.cancel(participant_id)

        async with self._lock:
            phase = await self.phases.get_phase()
            if phase == Phase.SLEEPING:
                await self.sink.send(participant_id, STILL_AWAKE_MESSAGE)
                self.scheduler.start(participant_id)
                return ReplyOutcome.RESCHEDULED

            if await self.user_states.get_state(participant_id) == UserState.AWAKE:
                logger.debug(f"{participant_id} already awake")
                return ReplyOutcome.ALREADY_AWAKE

            stats = await self.history.mark_awake(participant_id)
            await self.sink.send(participant_id, format_stats_message(stats))
            await self.sink.send(participant_id, GOOD_MORNING_MESSAGE)
            await self._complete_if_everyone_in(Phase.WAKING)
            return ReplyOutcome.MARKED_AWAKE

    async def on_escalation_complete(self, participant_id: str, generation: Optional[int] = None) -> None:
        """
        Final reminder stage: the participant is considered asleep, unless a
        reply or a newer chain superseded this one while its last message was
        being sent.
        """
        async with self._lock:
            if generation is not None and not self.scheduler.is_current(participant_id, generation):
                logger.info(f"Stale reminder chain for {participant_id} finished; ignoring")
                return
            if await self.history.mark_asleep(participant_id):
                logger.info(f"{participant_id} marked asleep after reminders")
            await self._complete_if_everyone_in(Phase.SLEEPING)

    async def _complete_if_everyone_in(self, phase: Phase) -> Optional[Phase]:
        if not await self.phases.all_participants_in(PHASE_TARGETS[phase], self.participant_ids):
            return None

        new_phase = await self.phases.toggle_from(phase)
        if new_phase is None:
            return None

        logger.info(f"All participants {PHASE_TARGETS[phase].value}. Cycle complete, entering {new_phase.value}")
        self.scheduler.cancel_all()
        self.completions.put_nowait(
            CycleCompleted(phase=new_phase, completed_at=datetime.now(timezone.utc))
        )
        return new_phase

    async def shutdown(self) -> None:
        self.scheduler.cancel_all()


def create_sleep_cycle_service(
    store: KeyValueStore,
    sink: NotificationSink,
    roster: Sequence[Participant],
    reminder_delays: Sequence[float],
    affirmative_reply: str = "yes",
    timezone_name: str = "UTC",
    evening_start_hour: int = 12,
    clock=now_ms
) -> SleepCycleService:
    """Wire the services around one store and one sink."""
    user_states = UserStateService(store)
    phases = PhaseService(store, user_states)
    stats = SleepStatsService(store, timezone=timezone_name, evening_start_hour=evening_start_hour)
    history = SleepHistoryService(store, user_states, stats, clock=clock)
    scheduler = ReminderScheduler(sink, reminder_delays)
    return SleepCycleService(
        roster=roster,
        phases=phases,
        user_states=user_states,
        history=history,
        scheduler=scheduler,
        sink=sink,
        affirmative_reply=affirmative_reply
    )
