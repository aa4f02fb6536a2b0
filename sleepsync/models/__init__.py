from .participant import Participant
from .sleep_session import SleepSession, MS_PER_HOUR
from .sleep_stats import SleepStats

__all__ = [
    "Participant",
    "SleepSession",
    "SleepStats",
    "MS_PER_HOUR",
]
