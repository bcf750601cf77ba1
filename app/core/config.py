# app/core/config.py

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    ENV: str = "development"
    DEBUG: bool = False

    # Security
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Database
    DATABASE_URL: str

    # Frontend
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True

    # Store defaults
    DEFAULT_PROFIT_PERCENTAGE: int = 30

    # Checkout
    # When False, a sale that would take stock below zero is rejected
    # instead of being clamped at zero.
    ALLOW_OVERSELL: bool = True

    # Change feed history kept for polling clients
    CHANGE_FEED_SIZE: int = 500

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="forbid",
    )


settings = Settings()
