from fastapi import Request

from sleepsync.services.sleep_cycle_service import SleepCycleService


def get_sleep_cycle(request: Request) -> SleepCycleService:
    """The state machine created in the app lifespan."""
    return request.app.state.sleep_cycle
