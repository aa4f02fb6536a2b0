"""
Chat Transport Schemas
"""
from pydantic import BaseModel, Field


class InboundMessage(BaseModel):
    """A text message received by the chat transport"""
    participant_id: str = Field(..., min_length=1)
    text: str = ""


class InboundMessageResponse(BaseModel):
    status: str  # processed, ignored
    outcome: str
