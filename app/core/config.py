from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "local"
    APP_NAME: str = "Billboard Booking Engine"
    # Comma-separated origins for CORS. If empty, uses localhost defaults.
    CORS_ORIGINS: str = ""
    LOG_LEVEL: str = "INFO"

    # Verifies caller tokens; tokens themselves are issued by the account service.
    SECRET_KEY: str = "change-me"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    DATABASE_URL: str = "sqlite:///./billboards.db"

    @field_validator("DATABASE_URL", mode="after")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Render and others give postgres://; SQLAlchemy expects postgresql+psycopg2://."""
        if v and v.startswith("postgres://"):
            return "postgresql+psycopg2://" + v[11:]
        return v
    REDIS_URL: str = "redis://localhost:6379/0"

    # Business day boundaries ("today", completion sweep)
    TIMEZONE: str = "Asia/Kolkata"
    CURRENCY: str = "INR"

    # Seed values for the platform policy store. Runtime reads go through policy_service.
    DEFAULT_COMMISSION_PERCENT: Decimal = Decimal("15")
    DEFAULT_GST_PERCENT: Decimal = Decimal("18")
    DEFAULT_WEEKDAY_DISCOUNT_CAP_PERCENT: Decimal = Decimal("50")
    DEFAULT_WEEKEND_DISCOUNT_CAP_PERCENT: Decimal = Decimal("30")

    AVAILABILITY_MAX_WINDOW_DAYS: int = 366
    COMPLETION_SWEEP_SECONDS: float = 900.0

    # Payment collaborator callbacks (HMAC-SHA256 over raw body, header X-Signature: sha256=<hex>)
    PAYMENT_WEBHOOK_VERIFY: bool = False
    PAYMENT_WEBHOOK_SECRET: str = ""


settings = Settings()
