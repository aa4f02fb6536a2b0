"""
Per-participant current state, stored in the `userState` hash.
"""

from typing import Dict, Optional

from sleepsync.core.logger import get_logger
from sleepsync.database.store import KeyValueStore
from sleepsync.enums import UserState

logger = get_logger("user_state_service")

USER_STATE_KEY = "userState"


class UserStateService:
    """Reads and writes the recorded ASLEEP/AWAKE state of each participant."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    async def get_state(self, participant_id: str) -> Optional[UserState]:
        """Recorded state, or None if the participant never transitioned."""
        raw = await self.store.hget(USER_STATE_KEY, participant_id)
        return self._parse(participant_id, raw)

    async def get_states(self) -> Dict[str, UserState]:
        raw_states = await self.store.hgetall(USER_STATE_KEY)
        states = {}
        for participant_id, raw in raw_states.items():
            state = self._parse(participant_id, raw)
            if state is not None:
                states[participant_id] = state
        return states

    async def get_raw_states(self) -> Dict[str, str]:
        return await self.store.hgetall(USER_STATE_KEY)

    async def set_state(self, participant_id: str, state: UserState) -> None:
        await self.store.hset(USER_STATE_KEY, {participant_id: state.value})
        logger.info(f"User {participant_id} is now {state.value}")

    @staticmethod
    def _parse(participant_id: str, raw: Optional[str]) -> Optional[UserState]:
        if raw is None:
            return None
        try:
            return UserState(raw)
        except ValueError:
            logger.warning(f"Ignoring unknown state {raw!r} for {participant_id}")
            return None
