"""Profile-completion gate for the employer dashboard.

Decides, on every user-state change, whether the "complete your profile"
dialog should interrupt the user. Signals are checked in a fixed order and
the first match wins:

1. Server flag ``preferences.profileCompleted is True`` (authoritative;
   also refreshes the persisted completion record)
2. Honored persisted completion record (same user type, < 30 days old)
3. Configured exempt email
4. Open snooze window (``profileCompletionSkippedUntil`` in the future)
5. Required fields present (phone, designation, and company unless admin)
6. Otherwise show the dialog, after a cancelable 1 s debounce

Once the server has confirmed completion for a user in this session, no
later evaluation for that user shows the dialog.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any, Protocol

import structlog

from dashboard_gate.adapters.portal.client import ApiResponse
from dashboard_gate.adapters.ui.base import DialogView, NoticeLevel, Notifier
from dashboard_gate.core.config import Settings
from dashboard_gate.core.errors import PortalApiError
from dashboard_gate.schemas.user import UserPreferences, UserProfile
from dashboard_gate.services.completion_store import (
    CompletionRecord,
    PersistedCompletionStore,
)
from dashboard_gate.services.delayed_action import DelayedAction
from dashboard_gate.services.snooze import (
    DEFAULT_SNOOZE_DURATION,
    build_snooze_update,
    is_snoozed,
)

logger = structlog.get_logger()

DEFAULT_SHOW_DELAY_SECONDS = 1.0

PROFILE_COMPLETED_MESSAGE = "Profile completed successfully!"
PROFILE_UPDATE_FAILED_MESSAGE = "Failed to update profile. Please try again."
SNOOZED_MESSAGE = "Profile completion reminder snoozed for {hours} hours"


class ProfileFetcher(Protocol):
    """Server-profile operations the gate needs."""

    async def get_current_user(self) -> UserProfile: ...

    async def update_profile(self, data: dict[str, Any]) -> ApiResponse: ...


class GateReason(str, Enum):
    """Which rule produced a decision."""

    SERVER_COMPLETED = "server_completed"
    CACHED_COMPLETION = "cached_completion"
    EXEMPT_EMAIL = "exempt_email"
    SNOOZED = "snoozed"
    REQUIRED_FIELDS_PRESENT = "required_fields_present"
    MISSING_REQUIRED_FIELDS = "missing_required_fields"


@dataclass(frozen=True)
class GateDecision:
    """Outcome of one evaluation.

    Attributes:
        show_dialog: Whether the completion dialog should be shown.
        check_done: Whether the check reached a decision.
        reason: Rule that decided.
    """

    show_dialog: bool
    check_done: bool
    reason: GateReason


@dataclass
class ProfileCompletionForm:
    """Fields submitted from the completion dialog."""

    phone: str
    designation: str
    department: str | None = None
    current_location: str | None = None
    company_id: str | None = None

    def to_payload(self, preferences: UserPreferences) -> dict[str, Any]:
        """Build the PATCH /profile body, marking the profile completed."""
        payload: dict[str, Any] = {
            "phone": self.phone,
            "designation": self.designation,
        }
        if self.department:
            payload["department"] = self.department
        if self.current_location:
            payload["currentLocation"] = self.current_location
        if self.company_id:
            payload["companyId"] = self.company_id
        payload["preferences"] = {
            **preferences.to_payload(),
            "profileCompleted": True,
        }
        return payload


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ProfileGateController:
    """Decides when to show the profile-completion dialog.

    ``evaluate`` must run inside an event loop because a "show" decision
    schedules the debounced dialog on it.

    Args:
        store: Persisted completion record accessor.
        fetcher: Server-profile fetcher (normally PortalApiClient).
        dialog: Dialog the gate opens and closes.
        notifier: Optional toast sink for submit/snooze feedback.
        show_delay_seconds: Debounce before the dialog becomes visible.
        exempt_emails: Emails that never see the dialog.
        snooze_duration: Length of a "skip for now" snooze.
        clock: Source of the current time.
    """

    def __init__(
        self,
        store: PersistedCompletionStore,
        fetcher: ProfileFetcher,
        dialog: DialogView,
        *,
        notifier: Notifier | None = None,
        show_delay_seconds: float = DEFAULT_SHOW_DELAY_SECONDS,
        exempt_emails: Iterable[str] = (),
        snooze_duration: timedelta = DEFAULT_SNOOZE_DURATION,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._fetcher = fetcher
        self._dialog = dialog
        self._notifier = notifier
        self._show_delay = show_delay_seconds
        self._exempt_emails = frozenset(e.strip().lower() for e in exempt_emails)
        self._snooze_duration = snooze_duration
        self._clock = clock
        self._show_timer = DelayedAction("profile-dialog-show")
        self._confirmed_user_ids: set[str] = set()
        self._user: UserProfile | None = None
        self._decision: GateDecision | None = None
        self._dialog_visible = False

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        store: PersistedCompletionStore,
        fetcher: ProfileFetcher,
        dialog: DialogView,
        *,
        notifier: Notifier | None = None,
    ) -> "ProfileGateController":
        return cls(
            store,
            fetcher,
            dialog,
            notifier=notifier,
            show_delay_seconds=settings.dialog_show_delay,
            exempt_emails=settings.exempt_emails,
            snooze_duration=timedelta(hours=settings.snooze_hours),
        )

    @property
    def user(self) -> UserProfile | None:
        """Snapshot used by the latest evaluation."""
        return self._user

    @property
    def decision(self) -> GateDecision | None:
        """Latest decision."""
        return self._decision

    @property
    def dialog_visible(self) -> bool:
        return self._dialog_visible

    @property
    def show_pending(self) -> bool:
        """Whether a debounced show is waiting to fire."""
        return self._show_timer.is_pending

    @property
    def show_timer(self) -> DelayedAction:
        return self._show_timer

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate(
        self, user: UserProfile | None, now: datetime | None = None
    ) -> GateDecision | None:
        """Run the full gate check for a user snapshot.

        Cancels any pending debounced show first. A "show" decision
        schedules a new one; any other decision hides the dialog at once.

        Args:
            user: Current user, or None while no user is loaded.
            now: Evaluation time. Defaults to the controller clock.

        Returns:
            The decision, or None when there is no user.
        """
        self._show_timer.cancel()
        if user is None:
            self._user = None
            self._decision = None
            self._set_visible(False)
            return None

        now = now or self._clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=UTC)
        self._user = user

        decision = self._decide(user, now)
        self._decision = decision
        logger.info(
            "gate_decision",
            user_id=user.id,
            user_type=user.user_type.value,
            show_dialog=decision.show_dialog,
            reason=decision.reason.value,
        )

        if decision.show_dialog:
            self._show_timer.schedule(self._show_delay, self._show_dialog)
        else:
            self._set_visible(False)
        return decision

    def _decide(self, user: UserProfile, now: datetime) -> GateDecision:
        if user.preferences.profile_completed is True:
            self._confirmed_user_ids.add(user.id)
            self._store.write(CompletionRecord.for_user(user.user_type.value, now))
            return self._hidden(GateReason.SERVER_COMPLETED)
        if user.id in self._confirmed_user_ids:
            return self._hidden(GateReason.SERVER_COMPLETED)

        if self._store.read(user.user_type.value, now) is not None:
            return self._hidden(GateReason.CACHED_COMPLETION)

        if user.email and user.email.strip().lower() in self._exempt_emails:
            return self._hidden(GateReason.EXEMPT_EMAIL)

        if is_snoozed(user, now):
            return self._hidden(GateReason.SNOOZED)

        missing = user.missing_required_fields()
        if not missing:
            return self._hidden(GateReason.REQUIRED_FIELDS_PRESENT)

        logger.debug("gate_missing_fields", user_id=user.id, missing=missing)
        return GateDecision(
            show_dialog=True,
            check_done=True,
            reason=GateReason.MISSING_REQUIRED_FIELDS,
        )

    @staticmethod
    def _hidden(reason: GateReason) -> GateDecision:
        return GateDecision(show_dialog=False, check_done=True, reason=reason)

    def _show_dialog(self) -> None:
        if self._decision is not None and self._decision.show_dialog:
            self._set_visible(True)

    def _set_visible(self, visible: bool) -> None:
        self._dialog_visible = visible
        self._dialog.set_visible(visible)

    # ------------------------------------------------------------------
    # Dialog actions
    # ------------------------------------------------------------------

    def dismiss(self) -> None:
        """Close the dialog for now without persisting anything.

        The next ``evaluate`` decides again from scratch.
        """
        self._show_timer.cancel()
        self._set_visible(False)

    async def acknowledge_profile_update(self) -> GateDecision | None:
        """Refresh the user after a profile change and re-evaluate.

        The dialog is hidden immediately. If the refresh fails the dialog
        stays hidden and no decision is made.

        Returns:
            Decision for the refreshed user, or None if the refresh failed.
        """
        self._show_timer.cancel()
        self._set_visible(False)

        try:
            user = await self._fetcher.get_current_user()
        except PortalApiError as e:
            logger.warning("profile_refresh_failed", error=e.message)
            return None

        return self.evaluate(user)

    async def complete_profile(self, form: ProfileCompletionForm) -> bool:
        """Submit the completion form and mark the profile completed.

        Returns:
            True if the server accepted the update.
        """
        user = self._user
        if user is None:
            logger.warning("complete_profile_without_user")
            return False

        try:
            response = await self._fetcher.update_profile(
                form.to_payload(user.preferences)
            )
        except PortalApiError as e:
            logger.warning("profile_update_failed", user_id=user.id, error=e.message)
            self._notify(NoticeLevel.ERROR, PROFILE_UPDATE_FAILED_MESSAGE)
            return False

        if not response.success:
            logger.warning(
                "profile_update_rejected", user_id=user.id, message=response.message
            )
            self._notify(
                NoticeLevel.ERROR, response.message or "Failed to update profile"
            )
            return False

        self._store.write(
            CompletionRecord.for_user(user.user_type.value, self._clock())
        )
        self._notify(NoticeLevel.SUCCESS, PROFILE_COMPLETED_MESSAGE)
        await self.acknowledge_profile_update()
        return True

    async def snooze(self) -> bool:
        """Snooze the prompt ("skip for now").

        The dialog closes whether or not the server accepted the snooze.

        Returns:
            True if the snooze was saved.
        """
        user = self._user
        self.dismiss()
        if user is None:
            return False

        payload = build_snooze_update(user, self._clock(), self._snooze_duration)
        try:
            response = await self._fetcher.update_profile(payload)
        except PortalApiError as e:
            logger.warning("snooze_failed", user_id=user.id, error=e.message)
            return False

        if not response.success:
            logger.warning("snooze_rejected", user_id=user.id, message=response.message)
            return False

        hours = round(self._snooze_duration.total_seconds() / 3600)
        self._notify(NoticeLevel.SUCCESS, SNOOZED_MESSAGE.format(hours=hours))
        await self.acknowledge_profile_update()
        return True

    def close(self) -> None:
        """Cancel the pending show (teardown)."""
        self._show_timer.cancel()

    def _notify(self, level: NoticeLevel, message: str) -> None:
        if self._notifier is not None:
            self._notifier.notify(level, message)
