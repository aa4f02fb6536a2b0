import json
from typing import Optional

from pydantic import BaseModel, ValidationError, model_validator

from sleepsync.exceptions.errors import MalformedRecord

MS_PER_HOUR = 1000 * 60 * 60


class SleepSession(BaseModel):
    """
    One night of sleep for a participant, stored as JSON in `sleepHistory:<id>`.
    Times are epoch milliseconds; `end` is None while the session is open.
    """

    start: int
    end: Optional[int] = None

    @model_validator(mode="after")
    def _end_after_start(self):
        if self.end is not None and self.end < self.start:
            raise ValueError("session ends before it starts")
        return self

    @property
    def is_open(self) -> bool:
        return self.end is None

    @property
    def hours(self) -> float:
        if self.end is None:
            return 0.0
        return (self.end - self.start) / MS_PER_HOUR

    def closed_at(self, end: int) -> "SleepSession":
        return SleepSession(start=self.start, end=end)

    def encode(self) -> str:
        return json.dumps({"start": self.start, "end": self.end})

    @classmethod
    def decode(cls, raw: str) -> "SleepSession":
        try:
            return cls.model_validate_json(raw)
        except ValidationError as e:
            raise MalformedRecord(f"Invalid sleep session record: {e.errors()[0]['msg']}", raw=raw) from e
