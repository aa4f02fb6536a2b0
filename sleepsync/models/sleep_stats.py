import math
from typing import Dict, Optional

from pydantic import BaseModel

from sleepsync.exceptions.errors import MalformedRecord

# Field names inside the `sleepStats:<id>` hash
SLEEP_DEBT = "sleepDebt"
GOOD_SLEEP_STREAK = "goodSleepStreak"
BEST_STREAK = "bestStreak"
TOTAL_NIGHTS = "totalNights"
GOOD_NIGHTS = "goodNights"


def decode_float(value: Optional[str], field: str = "") -> float:
    """Absent or empty decodes to 0.0."""
    if value is None or value == "":
        return 0.0
    try:
        number = float(value)
    except ValueError as e:
        raise MalformedRecord(f"Field '{field}' is not a number: {value!r}", raw=value) from e
    if not math.isfinite(number):
        raise MalformedRecord(f"Field '{field}' is not finite: {value!r}", raw=value)
    return number


def decode_int(value: Optional[str], field: str = "") -> int:
    """Absent or empty decodes to 0. Accepts "3.0" as written by other clients."""
    return int(decode_float(value, field))


def encode_number(value) -> str:
    return repr(float(value)) if isinstance(value, float) else str(int(value))


class SleepStats(BaseModel):
    """Cumulative per-participant sleep statistics."""

    sleep_debt_hours: float = 0.0
    good_sleep_streak: int = 0
    best_streak: int = 0
    total_nights: int = 0
    good_nights: int = 0

    @property
    def good_night_percentage(self) -> float:
        if self.total_nights == 0:
            return 0.0
        return self.good_nights / self.total_nights * 100

    @classmethod
    def from_hash(cls, data: Dict[str, str]) -> "SleepStats":
        return cls(
            sleep_debt_hours=decode_float(data.get(SLEEP_DEBT), SLEEP_DEBT),
            good_sleep_streak=decode_int(data.get(GOOD_SLEEP_STREAK), GOOD_SLEEP_STREAK),
            best_streak=decode_int(data.get(BEST_STREAK), BEST_STREAK),
            total_nights=decode_int(data.get(TOTAL_NIGHTS), TOTAL_NIGHTS),
            good_nights=decode_int(data.get(GOOD_NIGHTS), GOOD_NIGHTS),
        )

    @classmethod
    def salvage_hash(cls, data: Dict[str, str]) -> "SleepStats":
        """Like from_hash, but unreadable fields decode to 0."""
        def field(decoder, name):
            try:
                return decoder(data.get(name), name)
            except MalformedRecord:
                return decoder(None)

        stats = cls(
            sleep_debt_hours=field(decode_float, SLEEP_DEBT),
            good_sleep_streak=field(decode_int, GOOD_SLEEP_STREAK),
            best_streak=field(decode_int, BEST_STREAK),
            total_nights=field(decode_int, TOTAL_NIGHTS),
            good_nights=field(decode_int, GOOD_NIGHTS),
        )
        stats.best_streak = max(stats.best_streak, stats.good_sleep_streak)
        stats.total_nights = max(stats.total_nights, stats.good_nights)
        return stats

    def to_hash(self) -> Dict[str, str]:
        return {
            SLEEP_DEBT: encode_number(float(self.sleep_debt_hours)),
            GOOD_SLEEP_STREAK: encode_number(self.good_sleep_streak),
            BEST_STREAK: encode_number(self.best_streak),
            TOTAL_NIGHTS: encode_number(self.total_nights),
            GOOD_NIGHTS: encode_number(self.good_nights),
        }
