import os
from dotenv import load_dotenv

load_dotenv()


def _parse_roster(raw: str):
    """Parse `id:Display Name,id:Display Name` into (participant_id, display_name) pairs."""
    roster = []
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        participant_id, _, display_name = item.partition(":")
        participant_id = participant_id.strip()
        if not participant_id:
            raise ValueError(f"ROSTER entry {item!r} has no participant id")
        roster.append((participant_id, display_name.strip() or participant_id))
    return roster


def _parse_delays(raw: str):
    delays = tuple(float(part) for part in raw.split(",") if part.strip())
    if len(delays) != 3:
        raise ValueError(f"REMINDER_DELAYS_SECONDS needs exactly three values, got {raw!r}")
    return delays


class Settings:
    # Environment setting
    ENVIRONMENT = os.getenv("ENVIRONMENT", "development")

    # Store
    REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/1")
    STORE_BACKEND = os.getenv("STORE_BACKEND", "redis")

    # Participants, e.g. "212600000001@c.us:Bilal,212600000002@c.us:Walid"
    ROSTER_RAW = os.getenv("ROSTER", "")

    # Chat behaviour
    AFFIRMATIVE_REPLY = os.getenv("AFFIRMATIVE_REPLY", "yes")
    NOTIFY_WEBHOOK_URL = os.getenv("NOTIFY_WEBHOOK_URL", "")

    # Escalation chain: 15, 10 and 5 minutes
    REMINDER_DELAYS_RAW = os.getenv("REMINDER_DELAYS_SECONDS", "900,600,300")
    CYCLE_COMPLETION_GRACE_SECONDS = float(os.getenv("CYCLE_COMPLETION_GRACE_SECONDS", "0.5"))
    BEDTIME = os.getenv("BEDTIME", "22:00")

    # Sleep statistics
    TIMEZONE = os.getenv("TIMEZONE", "UTC")
    GOOD_NIGHT_EVENING_START_HOUR = int(os.getenv("GOOD_NIGHT_EVENING_START_HOUR", "12"))

    @property
    def ROSTER(self):
        return _parse_roster(self.ROSTER_RAW)

    @property
    def REMINDER_DELAYS(self):
        return _parse_delays(self.REMINDER_DELAYS_RAW)


settings = Settings()
