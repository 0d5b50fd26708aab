from typing import Self

from pydantic import model_validator
from pydantic_settings import BaseSettings

DEV_SESSION_SECRET_KEY = "propnet-development-secret-key-change-me"  # noqa: S105


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str
    host: str = "127.0.0.1"
    port: int = 3100
    debug: bool = False
    production: bool = False  # Enables Secure cookies and requires session_secret_key
    session_secret_key: str | None = None  # HS256 key for session credentials
    cors_origins: list[str] = []
    default_country_code: str = "+91"  # Prepended to phone numbers entered without a country code
    admin_username: str = "admin"
    admin_password_hash: str | None = None  # bcrypt hash; admin login is disabled when unset
    twilio_account_sid: str | None = None
    twilio_auth_token: str | None = None
    twilio_verify_service_sid: str | None = None
    twilio_messaging_service_sid: str | None = None  # Preferred over twilio_sms_from as the SMS sender
    twilio_sms_from: str | None = None
    app_base_url: str = "https://propnet.live"  # Public site origin used in owner consent links
    google_maps_api_key: str | None = None
    geocode_cache_ttl_seconds: int = 12 * 60 * 60
    geocode_cache_max_entries: int = 1000

    model_config = {
        "env_file": [".env"],
        "env_prefix": "PROPNET_",
        "extra": "ignore",
    }

    @model_validator(mode="after")
    def check_session_secret(self) -> Self:
        if not self.session_secret_key:
            if self.production:
                raise ValueError("PROPNET_SESSION_SECRET_KEY must be set in production")
            self.session_secret_key = DEV_SESSION_SECRET_KEY
        return self

    @property
    def secret_key(self) -> str:
        """Session signing key, always present after validation."""
        if self.session_secret_key is None:
            raise RuntimeError("Session secret key not configured")
        return self.session_secret_key
