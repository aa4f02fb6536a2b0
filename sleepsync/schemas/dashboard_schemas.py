"""
Dashboard API Schemas
"""
from pydantic import BaseModel
from typing import Dict, List, Optional


class SleepSessionResponse(BaseModel):
    """One sleep session; times are epoch milliseconds"""
    start: int
    end: Optional[int]


class ParticipantStatsResponse(BaseModel):
    """Derived sleep statistics for one participant"""
    display_name: str
    sleep_debt_hours: float  # positive = surplus, negative = debt
    good_sleep_streak: int
    best_streak: int
    good_night_percentage: float
    total_nights: int
    good_nights: int


class StatusResponse(BaseModel):
    """Current global phase and raw per-participant states"""
    phase: str
    states: Dict[str, str]


HistoryResponse = Dict[str, List[SleepSessionResponse]]
StatsResponse = Dict[str, ParticipantStatsResponse]
