"""
Dashboard Routes
"""
from fastapi import APIRouter, Depends

from sleepsync.api.v1.dependencies import get_sleep_cycle
from sleepsync.api.v1.controllers.dashboard_controller import DashboardController
from sleepsync.schemas.dashboard_schemas import HistoryResponse, StatsResponse, StatusResponse
from sleepsync.services.sleep_cycle_service import SleepCycleService

router = APIRouter(tags=["Dashboard"])


@router.get(
    "/history",
    summary="Sleep History",
    description="All sleep sessions per participant, newest first.",
    response_model=HistoryResponse
)
async def get_history(cycle: SleepCycleService = Depends(get_sleep_cycle)):
    return await DashboardController.get_history(cycle)


@router.get(
    "/stats",
    summary="Sleep Statistics",
    description="Sleep debt, streaks and good-night percentage per participant.",
    response_model=StatsResponse
)
async def get_stats(cycle: SleepCycleService = Depends(get_sleep_cycle)):
    return await DashboardController.get_stats(cycle)


@router.get(
    "/status",
    summary="Cycle Status",
    description="Current phase and the recorded state of each participant.",
    response_model=StatusResponse
)
async def get_status(cycle: SleepCycleService = Depends(get_sleep_cycle)):
    return await DashboardController.get_status(cycle)
