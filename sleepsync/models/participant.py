from pydantic import BaseModel


class Participant(BaseModel):
    """A roster entry. The roster comes from configuration and is never persisted."""

    participant_id: str
    display_name: str
