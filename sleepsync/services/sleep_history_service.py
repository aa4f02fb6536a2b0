"""
Sleep History Service
Newest-first session log per participant in `sleepHistory:<id>`.
"""

import time
from typing import Callable, List, Optional

from sleepsync.core.logger import get_logger
from sleepsync.database.store import KeyValueStore
from sleepsync.enums import UserState
from sleepsync.exceptions.errors import MalformedRecord
from sleepsync.models import SleepSession, SleepStats
from sleepsync.services.sleep_stats_service import SleepStatsService
from sleepsync.services.user_state_service import UserStateService

logger = get_logger("sleep_history_service")


def history_key(participant_id: str) -> str:
    return f"sleepHistory:{participant_id}"


def now_ms() -> int:
    return int(time.time() * 1000)


class SleepHistoryService:
    """Opens and closes sleep sessions and keeps the user state in step."""

    def __init__(
        self,
        store: KeyValueStore,
        user_states: UserStateService,
        stats: SleepStatsService,
        clock: Callable[[], int] = now_ms
    ):
        self.store = store
        self.user_states = user_states
        self.stats = stats
        self.clock = clock

    async def get_history(self, participant_id: str) -> List[SleepSession]:
        """All decodable sessions, newest first. Malformed entries are skipped."""
        sessions = []
        for raw in await self.store.lrange(history_key(participant_id), 0, -1):
            try:
                sessions.append(SleepSession.decode(raw))
            except MalformedRecord as e:
                logger.warning(f"Skipping history entry for {participant_id}: {e.message}")
        return sessions

    async def latest_session(self, participant_id: str) -> Optional[SleepSession]:
        raw = await self.store.lindex(history_key(participant_id), 0)
        if raw is None:
            return None
        return SleepSession.decode(raw)

    async def _readable_head(self, participant_id: str) -> Optional[SleepSession]:
        try:
            return await self.latest_session(participant_id)
        except MalformedRecord as e:
            logger.warning(f"Latest session for {participant_id} is malformed, leaving history as is: {e.message}")
            return None

    async def mark_asleep(self, participant_id: str, now: Optional[int] = None) -> bool:
        """
        Open a session and record ASLEEP. Returns False without opening a
        session if the participant is already asleep or still has an open one.
        An open session left behind by a failed state write only gets its
        state repaired.
        """
        state = await self.user_states.get_state(participant_id)
        head = await self._readable_head(participant_id)
        if head is not None and head.is_open:
            if state != UserState.ASLEEP:
                logger.warning(f"{participant_id} has an open session but is not recorded asleep; repairing state")
                await self.user_states.set_state(participant_id, UserState.ASLEEP)
            return False

        if state == UserState.ASLEEP:
            logger.debug(f"{participant_id} already asleep")
            return False

        session = SleepSession(start=now if now is not None else self.clock())
        await self.store.lpush(history_key(participant_id), session.encode())
        await self.user_states.set_state(participant_id, UserState.ASLEEP)
        return True

    async def mark_awake(self, participant_id: str, now: Optional[int] = None) -> SleepStats:
        """
        Close the open session at the head of the history, if there is one,
        update stats from it and record AWAKE. A wake with no open session
        only records the state. Returns the participant's current stats.
        """
        session = await self._readable_head(participant_id)

        stats = None
        if session is not None and session.is_open:
            end = now if now is not None else self.clock()
            closed = session.closed_at(max(end, session.start))
            await self.store.lset(history_key(participant_id), 0, closed.encode())
            stats = await self.stats.record_night(participant_id, closed)
        else:
            logger.info(f"No open session for {participant_id}; marking awake only")

        await self.user_states.set_state(participant_id, UserState.AWAKE)

        if stats is None:
            stats = await self.stats.get_stats(participant_id)
        return stats
