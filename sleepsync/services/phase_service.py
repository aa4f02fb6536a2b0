"""
Global sleep phase and the all-participants transition rule.
"""

from typing import Iterable, Optional

from sleepsync.core.logger import get_logger
from sleepsync.database.store import KeyValueStore
from sleepsync.enums import Phase, UserState
from sleepsync.services.user_state_service import UserStateService

logger = get_logger("phase_service")

PHASE_KEY = "sleepPhase"


class PhaseService:

    def __init__(self, store: KeyValueStore, user_states: UserStateService):
        self.store = store
        self.user_states = user_states

    async def get_phase(self) -> Phase:
        raw = await self.store.get(PHASE_KEY)
        if raw is None:
            return Phase.SLEEPING
        try:
            return Phase(raw)
        except ValueError:
            logger.warning(f"Unknown stored phase {raw!r}, defaulting to sleeping")
            return Phase.SLEEPING

    async def set_phase(self, phase: Phase) -> None:
        await self.store.set(PHASE_KEY, phase.value)

    async def toggle(self) -> Phase:
        """Flip the phase and persist it. Callers act on the returned phase."""
        current = await self.get_phase()
        new_phase = current.opposite
        await self.set_phase(new_phase)
        logger.info(f"Phase toggled: {current.value} -> {new_phase.value}")
        return new_phase

    async def toggle_from(self, expected: Phase) -> Optional[Phase]:
        """Toggle only if the phase is still `expected`; None otherwise."""
        current = await self.get_phase()
        if current != expected:
            logger.debug(f"Phase already {current.value}, not toggling from {expected.value}")
            return None
        return await self.toggle()

    async def all_participants_in(self, target: UserState, roster: Iterable[str]) -> bool:
        """
        True iff every roster participant has a recorded state equal to `target`.

        The roster is the source of required participants: someone with no
        recorded state does not count, and an empty roster is never satisfied.
        """
        participant_ids = list(roster)
        if not participant_ids:
            return False

        states = await self.user_states.get_states()
        return all(states.get(participant_id) == target for participant_id in participant_ids)
