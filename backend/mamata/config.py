"""
Application Configuration — Environment & Settings
Centralizes all config from .env with Pydantic Settings for validation.
"""
from dataclasses import dataclass, field
from pathlib import Path
from functools import lru_cache
from pydantic_settings import BaseSettings

from mamata.exceptions import ConfigurationError

# Resolve paths relative to backend/ directory
BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # --- Core ---
    APP_NAME: str = "Mamata Nepal Payments API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # --- Database ---
    DATABASE_URL: str = f"sqlite:///{BASE_DIR / 'data' / 'mamata_payments.db'}"

    # --- eSewa gateway ---
    ESEWA_MERCHANT_CODE: str = ""
    ESEWA_SECRET_KEY: str = ""
    ESEWA_PAYMENT_URL: str = "https://rc-epay.esewa.com.np/api/epay/main/v2/form"
    ESEWA_STATUS_URL: str = "https://rc.esewa.com.np/api/epay/transaction/status/"
    ESEWA_VERIFY_STATUS: bool = False
    ESEWA_STATUS_TIMEOUT_SECONDS: float = 10.0

    # --- Site origins ---
    PUBLIC_SITE_URL: str = "http://localhost:8000"
    FRONTEND_URL: str = ""

    # --- Checkout / redirect driver ---
    PAYMENT_INITIATION_URL: str = ""
    PAYMENT_MOCK_MODE: bool = False
    INITIATION_TIMEOUT_SECONDS: float = 10.0

    # --- Idempotency (0 disables) ---
    IDEMPOTENCY_WINDOW_SECONDS: int = 120

    # --- Security ---
    CORS_ORIGINS: list[str] = ["*"]

    # --- Logging ---
    LOG_DIR: str = str(BASE_DIR / "logs")
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = str(BASE_DIR / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = True

    @property
    def site_origin(self) -> str:
        return self.PUBLIC_SITE_URL.rstrip("/")

    @property
    def frontend_origin(self) -> str:
        return (self.FRONTEND_URL or self.PUBLIC_SITE_URL).rstrip("/")

    @property
    def initiation_url(self) -> str:
        return self.PAYMENT_INITIATION_URL or f"{self.site_origin}/api/initiate-payment"


@dataclass(frozen=True)
class EsewaConfig:
    """Immutable gateway configuration, built once and injected where needed."""

    merchant_code: str
    secret_key: str = field(repr=False)
    payment_url: str
    site_origin: str

    @classmethod
    def from_settings(cls, settings: Settings) -> "EsewaConfig":
        """Build the gateway config, refusing to proceed without credentials.

        Raises:
            ConfigurationError: if the secret key or merchant code is unset.
        """
        if not settings.ESEWA_SECRET_KEY:
            raise ConfigurationError("ESEWA_SECRET_KEY is not configured")
        if not settings.ESEWA_MERCHANT_CODE:
            raise ConfigurationError("ESEWA_MERCHANT_CODE is not configured")
        return cls(
            merchant_code=settings.ESEWA_MERCHANT_CODE,
            secret_key=settings.ESEWA_SECRET_KEY,
            payment_url=settings.ESEWA_PAYMENT_URL,
            site_origin=settings.site_origin,
        )

    @property
    def success_url(self) -> str:
        return f"{self.site_origin}/api/esewa/payment/success"

    @property
    def failure_url(self) -> str:
        return f"{self.site_origin}/api/esewa/payment/failure"


@lru_cache()
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()


@lru_cache()
def get_esewa_config() -> EsewaConfig:
    """Cached gateway config. Failures are not cached and re-raise on every call."""
    return EsewaConfig.from_settings(get_settings())
