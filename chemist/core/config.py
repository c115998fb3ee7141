# chemist/core/config.py

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Literal

class Settings(BaseSettings):
    # App
    ENV: str = "development"
    DEBUG: bool = False

    # Security
    SECRET_KEY: str
    ALGORITHM: Literal["HS256"] = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Database
    DATABASE_URL: str

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True

    # Frontend
    CORS_ORIGINS: list[str] = [
        "http://127.0.0.1:5173",
        "http://localhost:5173",
    ]

    # SMS (Africa's Talking)
    AFRICAS_TALKING_API_KEY: str | None = None
    AFRICAS_TALKING_USERNAME: str = "sandbox"
    SMS_API_URL: str = "https://api.sandbox.africastalking.com/version1/messaging"
    SMS_TIMEOUT_SECONDS: int = 10

    # Operator number that receives every new sale
    SALE_ALERT_PHONE: str | None = None

    CURRENCY: str = "KES"

    DEFAULT_LOW_STOCK_THRESHOLD: int = 10

    # Enables /internal/bootstrap-admin for the first admin account
    INTERNAL_ADMIN_SECRET: str | None = None



    model_config = SettingsConfigDict(
        env_file=".env",
        extra="forbid",
    )


settings = Settings()
