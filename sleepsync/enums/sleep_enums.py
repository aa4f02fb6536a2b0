"""
Sleep cycle enums for the application.
"""

from enum import Enum


class Phase(str, Enum):
    SLEEPING = "sleeping"
    WAKING = "waking"

    @property
    def opposite(self) -> "Phase":
        return Phase.WAKING if self is Phase.SLEEPING else Phase.SLEEPING


class UserState(str, Enum):
    ASLEEP = "asleep"
    AWAKE = "awake"


class ReplyOutcome(str, Enum):
    IGNORED = "ignored"
    RESCHEDULED = "rescheduled"
    MARKED_AWAKE = "marked_awake"
    ALREADY_AWAKE = "already_awake"
