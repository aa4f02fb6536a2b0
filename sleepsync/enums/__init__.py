"""
Shared enums for the application.
"""

from .sleep_enums import Phase, UserState, ReplyOutcome

__all__ = [
    "Phase",
    "UserState",
    "ReplyOutcome"
]
