"""
Chat Controller
"""
from sleepsync.enums import ReplyOutcome
from sleepsync.schemas.chat_schemas import InboundMessage, InboundMessageResponse
from sleepsync.services.sleep_cycle_service import SleepCycleService
from sleepsync.core.logger import get_logger

logger = get_logger("chat_controller")


class ChatController:
    """Feeds inbound chat messages into the sleep cycle."""

    @staticmethod
    async def receive_message(message: InboundMessage, cycle: SleepCycleService) -> InboundMessageResponse:
        logger.info(f"Message from {message.participant_id}: {message.text!r}")

        # StoreUnavailable propagates to the 503 handler
        outcome = await cycle.handle_reply(message.participant_id, message.text)

        return InboundMessageResponse(
            status="ignored" if outcome == ReplyOutcome.IGNORED else "processed",
            outcome=outcome.value
        )
