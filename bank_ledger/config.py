"""
Application configuration.

All configuration is loaded from environment variables.
Never hardcode secrets or connection strings in code.
"""

import os
from functools import lru_cache

from dotenv import load_dotenv

# Load .env file into environment variables
load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Bank Ledger"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "10000"))

    # Database
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "postgresql://localhost:5432/bank_ledger"
    )

    # Credentials
    JWT_SECRET: str = os.getenv("JWT_SECRET", "change-me")
    REFRESH_SECRET: str = os.getenv("REFRESH_SECRET", "change-me-too")
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(
        os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60")
    )
    REFRESH_TOKEN_EXPIRE_DAYS: int = int(
        os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "7")
    )

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_JSON: bool = os.getenv("LOG_JSON", "true").lower() == "true"

    # Ledger
    ACCOUNT_NUMBER_PREFIX: str = os.getenv("ACCOUNT_NUMBER_PREFIX", "ACC")
    RECENT_ACTIVITY_LIMIT: int = int(os.getenv("RECENT_ACTIVITY_LIMIT", "10"))
    MAX_RECENT_LIMIT: int = int(os.getenv("MAX_RECENT_LIMIT", "100"))

    # Reporting
    REPORT_CURRENCY: str = os.getenv("REPORT_CURRENCY", "MWK")

    # Report email
    SMTP_HOST: str = os.getenv("SMTP_HOST", "")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USERNAME: str = os.getenv("SMTP_USERNAME", "")
    SMTP_PASSWORD: str = os.getenv("SMTP_PASSWORD", "")
    SMTP_USE_TLS: bool = os.getenv("SMTP_USE_TLS", "true").lower() == "true"
    SMTP_TIMEOUT: int = int(os.getenv("SMTP_TIMEOUT", "30"))
    REPORT_SENDER: str = os.getenv("REPORT_SENDER", "Bank Ledger <no-reply@bank-ledger.local>")
    REPORT_RECIPIENT: str = os.getenv("REPORT_RECIPIENT", "")

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")


@lru_cache()
def get_settings() -> Settings:
    """
    Return cached settings instance.

    Using lru_cache means the Settings object is created once
    and reused for all subsequent calls. This avoids reading
    environment variables repeatedly.
    """
    return Settings()
