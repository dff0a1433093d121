from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    API_BASE_URL: str | None = None
    API_TIMEOUT_SECONDS: float = 10.0
    ACCESS_TOKEN: str | None = None

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    DELIVERY_POLL_INTERVAL_SECONDS: float = 30.0
    OTP_DISPLAY_WINDOW_HOURS: int = 24

    OFFERS_PAGE_LIMIT: int = 100
    ADMIN_BOOKINGS_PAGE_LIMIT: int = 50


settings = Settings()
