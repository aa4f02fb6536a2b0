import uvicorn
from fastapi import FastAPI, Request
from contextlib import asynccontextmanager
from fastapi.responses import JSONResponse
from sleepsync.exceptions.handlers import (
    application_exception_handler,
    http_exception_handler,
    generic_exception_handler
)
from sleepsync.exceptions.errors import ApplicationException
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.exceptions import RequestValidationError

from sleepsync.api.v1.routes import dashboard_router, chat_router
from sleepsync.core.config import settings
from sleepsync.database.connection import create_store
from sleepsync.models import Participant
from sleepsync.services.cycle_supervisor import CycleSupervisor
from sleepsync.services.notification_service import create_notification_sink
from sleepsync.services.sleep_cycle_service import create_sleep_cycle_service

from sleepsync.core.logger import get_logger

logger = get_logger("sleepsync")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 SleepSync is starting...")
    store = create_store()
    sink = create_notification_sink(settings.NOTIFY_WEBHOOK_URL)
    try:
        await store.ping()
        logger.info("Store connection ensured.")

        roster = [
            Participant(participant_id=participant_id, display_name=display_name)
            for participant_id, display_name in settings.ROSTER
        ]
        if not roster:
            logger.warning("ROSTER is empty; phases will never complete")

        sleep_cycle = create_sleep_cycle_service(
            store,
            sink,
            roster,
            reminder_delays=settings.REMINDER_DELAYS,
            affirmative_reply=settings.AFFIRMATIVE_REPLY,
            timezone_name=settings.TIMEZONE,
            evening_start_hour=settings.GOOD_NIGHT_EVENING_START_HOUR
        )
        supervisor = CycleSupervisor(
            sleep_cycle,
            grace_seconds=settings.CYCLE_COMPLETION_GRACE_SECONDS,
            bedtime=settings.BEDTIME,
            timezone=settings.TIMEZONE
        )

        app.state.store = store
        app.state.sleep_cycle = sleep_cycle
        app.state.supervisor = supervisor

        await supervisor.start()

    except Exception as e:
        logger.error(f"Failed to initialize application: {e}")
        await sink.close()
        await store.close()
        raise e

    yield

    logger.info("🛑 SleepSync is shutting down...")
    await supervisor.stop()
    await sink.close()
    await store.close()


app = FastAPI(
    title="SleepSync",
    version="1.0.0",
    lifespan=lifespan,
    description="""
    Shared sleep/wake cycle for a small group, driven by chat replies.

    ## Endpoints

    - `POST /api/v1/webhooks/chat`: inbound messages from the chat transport
    - `GET /api/v1/history`, `/api/v1/stats`, `/api/v1/status`: dashboard data
    """
)

# Include API routers
app.include_router(dashboard_router, prefix="/api/v1")
app.include_router(chat_router, prefix="/api/v1")


@app.get("/", include_in_schema=False)
async def root():
    """Root endpoint with service information."""
    return {
        "message": "SleepSync API",
        "docs": "/docs",
        "environment": settings.ENVIRONMENT,
        "version": "1.0.0"
    }


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.error(f"Validation error on {request.url.path}: {exc.errors()}")

    errors = []
    for error in exc.errors():
        errors.append({
            "type": error.get("type"),
            "loc": error.get("loc"),
            "msg": error.get("msg"),
            "input": str(error.get("input")) if error.get("input") is not None else None
        })

    return JSONResponse(
        status_code=422,
        content={"detail": errors, "url": str(request.url), "method": request.method}
    )

# Exception handlers
app.add_exception_handler(ApplicationException, application_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

if __name__ == "__main__":
    uvicorn.run(
        "sleepsync.main:app",
        host="127.0.0.1",
        port=8000,
        timeout_graceful_shutdown=30
    )
