from fastapi import APIRouter, Depends

from sleepsync.api.v1.dependencies import get_sleep_cycle
from sleepsync.api.v1.controllers.chat_controller import ChatController
from sleepsync.schemas.chat_schemas import InboundMessage, InboundMessageResponse
from sleepsync.services.sleep_cycle_service import SleepCycleService

router = APIRouter()


@router.post("/webhooks/chat", tags=["Webhooks"], response_model=InboundMessageResponse)
async def chat_webhook(
    message: InboundMessage,
    cycle: SleepCycleService = Depends(get_sleep_cycle)
):
    """
    Inbound messages from the chat transport.
    Only the affirmative reply from a roster participant changes anything.
    """
    return await ChatController.receive_message(message, cycle)
