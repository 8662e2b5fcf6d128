from fastapi import FastAPI

from booking_scheduler.api.v1.booking import router as booking_router
from booking_scheduler.core.config import settings
from booking_scheduler.core.log_config import configure_logging

configure_logging(settings.LOG_LEVEL)

app = FastAPI(title="Call Booking Scheduler", version="1.0.0")

app.include_router(booking_router, prefix="/api/v1", tags=["booking"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
