"""
Dashboard Controller
"""
from typing import Dict, List

from sleepsync.schemas.dashboard_schemas import (
    ParticipantStatsResponse, SleepSessionResponse, StatusResponse
)
from sleepsync.services.sleep_cycle_service import SleepCycleService
from sleepsync.core.logger import get_logger

logger = get_logger("dashboard_controller")


class DashboardController:
    """Read-only views over the persisted sleep data of the roster."""

    @staticmethod
    async def get_history(cycle: SleepCycleService) -> Dict[str, List[SleepSessionResponse]]:
        history = {}
        for participant_id in cycle.participant_ids:
            sessions = await cycle.history.get_history(participant_id)
            history[participant_id] = [
                SleepSessionResponse(start=s.start, end=s.end) for s in sessions
            ]
        return history

    @staticmethod
    async def get_stats(cycle: SleepCycleService) -> Dict[str, ParticipantStatsResponse]:
        stats = {}
        for participant in cycle.roster.values():
            participant_stats = await cycle.history.stats.get_stats(participant.participant_id)
            stats[participant.participant_id] = ParticipantStatsResponse(
                display_name=participant.display_name,
                sleep_debt_hours=round(participant_stats.sleep_debt_hours, 1),
                good_sleep_streak=participant_stats.good_sleep_streak,
                best_streak=participant_stats.best_streak,
                good_night_percentage=round(participant_stats.good_night_percentage, 1),
                total_nights=participant_stats.total_nights,
                good_nights=participant_stats.good_nights
            )
        return stats

    @staticmethod
    async def get_status(cycle: SleepCycleService) -> StatusResponse:
        phase = await cycle.phases.get_phase()
        states = await cycle.user_states.get_raw_states()
        return StatusResponse(phase=phase.value, states=states)
