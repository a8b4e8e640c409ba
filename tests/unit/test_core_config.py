"""Tests for dashboard configuration.

Settings for the portal connection, gate timings, exempt emails, and
storage. Tests cover defaults, env var loading, and timing validation.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from dashboard_gate.core.config import DEFAULT_KYC_VERIFICATION_PATH, Settings


def _settings(**overrides) -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(_env_file=None, **overrides)


class TestDefaults:
    """Default values match the web dashboard's behavior."""

    def test_gate_timings(self):
        """Debounce 1 s, KYC redirect 1.5 s, 30-day cache, 12-hour snooze."""
        s = _settings()
        assert s.dialog_show_delay_ms == 1000
        assert s.kyc_redirect_delay_ms == 1500
        assert s.completion_cache_ttl_days == 30
        assert s.snooze_hours == 12

    def test_request_defaults(self):
        s = _settings()
        assert s.api_timeout_seconds == 10.0
        assert s.min_request_interval_ms == 2000
        assert s.upcoming_interviews_limit == 5
        assert s.auth_token.get_secret_value() == ""

    def test_no_exempt_emails_by_default(self):
        """The exemption list is empty unless configured."""
        assert _settings().exempt_emails == set()

    def test_kyc_path_and_storage(self):
        s = _settings()
        assert s.kyc_verification_path == DEFAULT_KYC_VERIFICATION_PATH
        assert s.storage_path is None


class TestDerivedValues:
    """Millisecond settings exposed in seconds."""

    def test_delays_in_seconds(self):
        s = _settings(
            dialog_show_delay_ms=250,
            kyc_redirect_delay_ms=1500,
            min_request_interval_ms=0,
        )
        assert s.dialog_show_delay == 0.25
        assert s.kyc_redirect_delay == 1.5
        assert s.min_request_interval == 0.0


class TestExemptEmails:
    """Exempt emails are normalized for case-insensitive matching."""

    def test_lowercases_and_strips(self):
        s = _settings(exempt_emails={" Ops@Example.COM ", "team@example.com"})
        assert s.exempt_emails == {"ops@example.com", "team@example.com"}

    def test_drops_blank_entries(self):
        s = _settings(exempt_emails={"", "   ", "a@example.com"})
        assert s.exempt_emails == {"a@example.com"}


class TestEnvLoading:
    """Settings are read from environment variables."""

    def test_reads_env_vars(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("API_BASE_URL", "https://portal.example.com/api")
        monkeypatch.setenv("SNOOZE_HOURS", "6")
        monkeypatch.setenv("AUTH_TOKEN", "secret-token")
        s = _settings()
        assert s.api_base_url == "https://portal.example.com/api"
        assert s.snooze_hours == 6
        assert s.auth_token.get_secret_value() == "secret-token"

    def test_env_names_are_case_insensitive(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("dialog_show_delay_ms", "10")
        assert _settings().dialog_show_delay_ms == 10

    def test_exempt_emails_from_json_env(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("EXEMPT_EMAILS", '["Ops@Example.com"]')
        assert _settings().exempt_emails == {"ops@example.com"}

    def test_storage_path_from_env(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("STORAGE_PATH", "/tmp/dashboard.json")
        assert _settings().storage_path == Path("/tmp/dashboard.json")

    def test_auth_token_hidden_in_repr(self):
        s = _settings(auth_token="secret-token")
        assert "secret-token" not in repr(s)


class TestTimingValidation:
    """Invalid timing and connection settings are rejected."""

    def test_rejects_empty_base_url(self):
        with pytest.raises(ValidationError) as exc_info:
            _settings(api_base_url="  ")
        assert "API_BASE_URL must not be empty" in str(exc_info.value)

    @pytest.mark.parametrize(
        "field",
        ["dialog_show_delay_ms", "kyc_redirect_delay_ms", "min_request_interval_ms"],
    )
    def test_rejects_negative_delays(self, field: str):
        with pytest.raises(ValidationError) as exc_info:
            _settings(**{field: -1})
        assert f"{field.upper()} cannot be negative" in str(exc_info.value)

    def test_allows_zero_delays(self):
        """Zero disables the debounce and the throttle."""
        s = _settings(dialog_show_delay_ms=0, min_request_interval_ms=0)
        assert s.dialog_show_delay == 0.0

    @pytest.mark.parametrize("value", [0, -30])
    def test_rejects_non_positive_ttl(self, value: int):
        with pytest.raises(ValidationError) as exc_info:
            _settings(completion_cache_ttl_days=value)
        assert "COMPLETION_CACHE_TTL_DAYS must be positive" in str(exc_info.value)

    def test_rejects_non_positive_snooze(self):
        with pytest.raises(ValidationError) as exc_info:
            _settings(snooze_hours=0)
        assert "SNOOZE_HOURS must be positive" in str(exc_info.value)
