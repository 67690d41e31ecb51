from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    PROJECT_NAME: str = "Touch Media Booking"
    API_V1_STR: str = "/api"

    # Server
    PORT: int = 3000
    ENVIRONMENT: str = "development"
    LOG_DIR: str = "logs"

    # Storage
    DATABASE_PATH: str = "bookings.db"
    BUSINESS_CONFIG_PATH: str = ""

    # Business
    BUSINESS_NAME: str = "Touch Media Ltd."
    SLOT_TIMEZONE: str = "UTC"

    # Automation webhooks (empty = disabled)
    FETCH_TIMES_WEBHOOK_URL: str = ""
    SUBMIT_BOOKING_WEBHOOK_URL: str = ""
    NOTIFY_WEBHOOK_URL: str = ""
    WEBHOOK_TIMEOUT: float = 10.0

    # Email
    EMAIL_HOST: str = "smtp.gmail.com"
    EMAIL_PORT: int = 587
    EMAIL_USER: str = ""
    EMAIL_PASS: str = ""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)

settings = Settings()
