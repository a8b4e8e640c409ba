"""Dashboard configuration loaded from environment variables.

Settings for the portal API connection, gate timings, and local storage.
Uses pydantic-settings for validation and .env file support.
"""

from pathlib import Path

from pydantic import SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Default KYC destination for agencies with pending verification
DEFAULT_KYC_VERIFICATION_PATH = "/employer-dashboard/kyc-verification"


class Settings(BaseSettings):
    """Dashboard settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Portal API
    api_base_url: str = "http://localhost:8000/api"
    api_timeout_seconds: float = 10.0
    auth_token: SecretStr = SecretStr("")
    # Minimum spacing between two requests to the same endpoint
    min_request_interval_ms: int = 2000

    # Gate timings
    dialog_show_delay_ms: int = 1000
    kyc_redirect_delay_ms: int = 1500
    completion_cache_ttl_days: int = 30
    snooze_hours: int = 12

    # Dashboard
    upcoming_interviews_limit: int = 5
    kyc_verification_path: str = DEFAULT_KYC_VERIFICATION_PATH

    # Emails that never see the completion dialog. Empty unless configured,
    # e.g. EXEMPT_EMAILS='["ops@example.com"]'
    exempt_emails: set[str] = set()

    # Local key/value storage. None keeps everything in memory.
    storage_path: Path | None = None

    # Application
    environment: str = "development"
    log_level: str = "INFO"

    @property
    def dialog_show_delay(self) -> float:
        """Dialog debounce delay in seconds."""
        return self.dialog_show_delay_ms / 1000

    @property
    def kyc_redirect_delay(self) -> float:
        """KYC redirect delay in seconds."""
        return self.kyc_redirect_delay_ms / 1000

    @property
    def min_request_interval(self) -> float:
        """Per-endpoint throttle interval in seconds."""
        return self.min_request_interval_ms / 1000

    @field_validator("exempt_emails")
    @classmethod
    def normalize_exempt_emails(cls, value: set[str]) -> set[str]:
        """Lowercase exempt emails; they are compared case-insensitively."""
        return {email.strip().lower() for email in value if email.strip()}

    @model_validator(mode="after")
    def check_timings(self) -> "Settings":
        """Validate timing and connection settings.

        Checks:
        - API base URL must be set
        - Delays and the throttle interval must be non-negative
        - Cache TTL and snooze duration must be positive
        """
        if not self.api_base_url.strip():
            msg = "API_BASE_URL must not be empty."
            raise ValueError(msg)

        for name in (
            "dialog_show_delay_ms",
            "kyc_redirect_delay_ms",
            "min_request_interval_ms",
        ):
            value = getattr(self, name)
            if value < 0:
                msg = f"{name.upper()} cannot be negative. Got: {value}"
                raise ValueError(msg)

        if self.completion_cache_ttl_days <= 0:
            msg = (
                "COMPLETION_CACHE_TTL_DAYS must be positive. "
                f"Got: {self.completion_cache_ttl_days}"
            )
            raise ValueError(msg)
        if self.snooze_hours <= 0:
            msg = f"SNOOZE_HOURS must be positive. Got: {self.snooze_hours}"
            raise ValueError(msg)

        return self


settings = Settings()
