"""
Sleep Statistics Service
Incremental per-participant aggregates, updated once per closed sleep session.
"""

from datetime import datetime
from zoneinfo import ZoneInfo

from sleepsync.core.logger import get_logger
from sleepsync.database.store import KeyValueStore
from sleepsync.exceptions.errors import MalformedRecord
from sleepsync.models import SleepSession, SleepStats

logger = get_logger("sleep_stats_service")

TARGET_SLEEP_HOURS = 8


def stats_key(participant_id: str) -> str:
    return f"sleepStats:{participant_id}"


def format_stats_message(stats: SleepStats) -> str:
    return (
        "Sleep Statistics:\n"
        f"Sleep Debt: {stats.sleep_debt_hours:.1f} hours\n"
        f"Good Sleep Streak: {stats.good_sleep_streak} days\n"
        f"Best Streak: {stats.best_streak} days\n"
        f"Good Night Percentage: {stats.good_night_percentage:.1f}%"
    )


class SleepStatsService:
    """
    Derives cumulative statistics from closed sessions.

    A good night starts on the evening side of midnight (local hour at or after
    `evening_start_hour`) and lasts at least eight hours.
    """

    def __init__(self, store: KeyValueStore, timezone: str = "UTC", evening_start_hour: int = 12):
        self.store = store
        self.tz = ZoneInfo(timezone)
        self.evening_start_hour = evening_start_hour

    async def get_stats(self, participant_id: str) -> SleepStats:
        data = await self.store.hgetall(stats_key(participant_id))
        try:
            return SleepStats.from_hash(data)
        except MalformedRecord as e:
            # Unreadable fields restart from 0 and are rewritten on the next night
            logger.warning(f"Stats for {participant_id} are malformed, salvaging readable fields: {e.message}")
            return SleepStats.salvage_hash(data)

    def started_before_midnight(self, session: SleepSession) -> bool:
        started = datetime.fromtimestamp(session.start / 1000, tz=self.tz)
        return started.hour >= self.evening_start_hour

    def is_good_night(self, session: SleepSession) -> bool:
        return self.started_before_midnight(session) and session.hours >= TARGET_SLEEP_HOURS

    async def record_night(self, participant_id: str, session: SleepSession) -> SleepStats:
        """
        Fold one closed session into the participant's stats.

        One read and one multi-field write. The pair is not atomic: two
        concurrent calls for the same participant can lose an update.
        """
        if session.is_open:
            raise ValueError("cannot record stats for an open session")

        stats = await self.get_stats(participant_id)
        good_night = self.is_good_night(session)

        stats.sleep_debt_hours += session.hours - TARGET_SLEEP_HOURS
        if good_night:
            stats.good_sleep_streak += 1
            stats.best_streak = max(stats.best_streak, stats.good_sleep_streak)
        else:
            stats.good_sleep_streak = 0
        stats.total_nights += 1
        if good_night:
            stats.good_nights += 1

        await self.store.hset(stats_key(participant_id), stats.to_hash())
        logger.info(
            f"Recorded {session.hours:.2f}h night for {participant_id} "
            f"(good={good_night}, streak={stats.good_sleep_streak}, debt={stats.sleep_debt_hours:.2f}h)"
        )
        return stats
