"""Snooze clock for the profile-completion prompt.

"Skip for now" stores an absolute end time on the user's preferences. The
snooze holds until that time passes, across logins and sessions.
"""

from datetime import UTC, datetime, timedelta
from typing import Any

from dashboard_gate.schemas.user import UserProfile

DEFAULT_SNOOZE_DURATION = timedelta(hours=12)


def is_snoozed(user: UserProfile, now: datetime | None = None) -> bool:
    """Whether the user's snooze window is still open at now.

    Args:
        user: User snapshot.
        now: Evaluation time. Defaults to the current time.

    Returns:
        True if profileCompletionSkippedUntil lies strictly in the future.
        A naive now is read as UTC.
    """
    skipped_until = user.preferences.profile_completion_skipped_until
    if skipped_until is None:
        return False
    now = now or datetime.now(UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    return skipped_until > now


def snooze_until(
    now: datetime | None = None, duration: timedelta = DEFAULT_SNOOZE_DURATION
) -> datetime:
    """End of a snooze started at now."""
    return (now or datetime.now(UTC)) + duration


def build_snooze_update(
    user: UserProfile,
    now: datetime | None = None,
    duration: timedelta = DEFAULT_SNOOZE_DURATION,
) -> dict[str, Any]:
    """Build the PATCH /profile body that snoozes the prompt.

    Existing preferences are preserved. The skip session records the login
    the snooze was requested in (falls back to now).

    Returns:
        ``{"preferences": {...}}`` ready to send.
    """
    now = now or datetime.now(UTC)
    preferences = user.preferences.to_payload()
    preferences["profileCompletionSkippedUntil"] = snooze_until(
        now, duration
    ).isoformat()
    preferences["profileCompletionSkipSession"] = user.last_login_at or now.isoformat()
    return {"preferences": preferences}
