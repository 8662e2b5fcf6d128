from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    PORTAL_BASE_URL: str = "http://localhost:3000"
    PORTAL_SUGGESTIONS_PATH: str = "/api/public/appointments/suggestions"
    PORTAL_BOOK_PATH: str = "/api/public/appointments/book"
    PORTAL_DEMO_REQUEST_PATH: str = "/api/marketing/demo-request"
    PORTAL_TIMEOUT_SECONDS: float = 10.0

    BOOKING_DURATION_MINUTES: int = Field(default=30, ge=10, le=180)
    BOOKING_LEAD_TIME_MINUTES: int = Field(default=30, ge=0)
    BOOKING_WINDOW_DAYS: int = Field(default=7, ge=1, le=30)
    BOOKING_SLOT_LIMIT: int = Field(default=50, ge=1, le=50)
    BOOKING_ADVANCE_SEARCH_DAYS: int = Field(default=14, ge=1)
    CLOCK_TICK_SECONDS: float = 30.0

    DEFAULT_VIEWER_TIMEZONE: str = "UTC"
    MOCK_PORTAL_TIMEZONE: str = "America/New_York"


settings = Settings()
