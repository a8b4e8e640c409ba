"""Dashboard data aggregator.

Fans out to the portal endpoints behind the employer dashboard (stats,
company profile, recent applications/jobs/hot vacancies, upcoming
interviews) and assembles one view model.

Each section degrades on its own: a failed section falls back to its
empty default while the rest still render. Only a failed stats call (the
umbrella request) produces a user-facing error notice.
"""

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, Protocol

import structlog
from pydantic import ValidationError

from dashboard_gate.adapters.portal.client import RECENT_ITEMS_LIMIT, ApiResponse
from dashboard_gate.adapters.storage.base import BrowserStorage
from dashboard_gate.adapters.ui.base import NoticeLevel, Notifier
from dashboard_gate.core.errors import RateLimitError, StorageError
from dashboard_gate.schemas.company import CompanyProfile
from dashboard_gate.schemas.dashboard import DashboardStats, UpcomingInterview
from dashboard_gate.schemas.user import UserProfile
from dashboard_gate.services.completion_store import USER_KEY
from dashboard_gate.services.dashboard_view import (
    ActivityItem,
    QuickAction,
    StatCard,
    build_stat_cards,
    calculate_profile_completion,
    default_stat_cards,
    generate_recent_activity,
    quick_actions_for,
)

logger = structlog.get_logger()

RATE_LIMITED_MESSAGE = "Too many requests. Please wait a moment before refreshing."
LOAD_FAILED_MESSAGE = "Failed to load dashboard data"
GOOGLE_WELCOME_MESSAGE = "Welcome! Your Google account details are loaded."

_RATE_LIMIT_MARKER = "Rate limit exceeded"


class DashboardApi(Protocol):
    """Portal calls the aggregator needs."""

    async def get_dashboard_stats(self) -> ApiResponse: ...

    async def get_company(self, company_id: str) -> ApiResponse: ...

    async def get_upcoming_interviews(self, limit: int = 5) -> ApiResponse: ...

    async def get_employer_applications(self) -> ApiResponse: ...

    async def get_employer_jobs(self, limit: int = RECENT_ITEMS_LIMIT) -> ApiResponse: ...

    async def get_employer_hot_vacancies(self) -> ApiResponse: ...


# ---------------------------------------------------------------------------
# View model
# ---------------------------------------------------------------------------


@dataclass
class DashboardView:
    """Everything the dashboard renders after a load.

    Attributes:
        stats: Seven stat cards (zero-valued when stats failed).
        company: Company profile, if the user has one and it loaded.
        recent_applications: Up to 5 recent applications.
        recent_jobs: Up to 5 recent jobs.
        recent_hot_vacancies: Up to 5 recent hot vacancies.
        recent_activity: Activity feed (placeholder when empty).
        upcoming_interviews: Scheduled interviews.
        profile_completion: Completion percentage, 0-100.
        quick_actions: Actions visible to this user.
        error: User-facing message for the umbrella failure, if any.
    """

    stats: list[StatCard]
    company: CompanyProfile | None = None
    recent_applications: list[dict[str, Any]] = field(default_factory=list)
    recent_jobs: list[dict[str, Any]] = field(default_factory=list)
    recent_hot_vacancies: list[dict[str, Any]] = field(default_factory=list)
    recent_activity: list[ActivityItem] = field(default_factory=list)
    upcoming_interviews: list[UpcomingInterview] = field(default_factory=list)
    profile_completion: int = 0
    quick_actions: list[QuickAction] = field(default_factory=list)
    error: str | None = None


def is_rate_limited(error: BaseException) -> bool:
    """Whether error signals throttling."""
    return isinstance(error, RateLimitError) or _RATE_LIMIT_MARKER in str(error)


def _as_list(data: Any) -> list[dict[str, Any]]:
    """First objects of a list endpoint's ``data`` array."""
    if not isinstance(data, list):
        return []
    return [item for item in data if isinstance(item, dict)][:RECENT_ITEMS_LIMIT]


# ---------------------------------------------------------------------------
# Aggregator
# ---------------------------------------------------------------------------


class DashboardDataAggregator:
    """Loads and assembles the employer dashboard.

    Args:
        api: Portal client.
        notifier: Toast sink for the umbrella failure and OAuth welcome.
        storage: Key/value storage for the display copy of the user.
        interviews_limit: Number of upcoming interviews to request.
    """

    def __init__(
        self,
        api: DashboardApi,
        notifier: Notifier,
        storage: BrowserStorage,
        *,
        interviews_limit: int = 5,
    ) -> None:
        self._api = api
        self._notifier = notifier
        self._storage = storage
        self._interviews_limit = interviews_limit
        self._in_flight = False

    @property
    def is_loading(self) -> bool:
        return self._in_flight

    async def load_all(self, user: UserProfile) -> DashboardView | None:
        """Load every dashboard section.

        Returns:
            The assembled view, or None if a load is already in flight.
        """
        if self._in_flight:
            logger.info("dashboard_load_skipped", reason="already_in_flight")
            return None

        self._in_flight = True
        try:
            return await self._load(user)
        finally:
            self._in_flight = False

    async def _load(self, user: UserProfile) -> DashboardView:
        logger.info("dashboard_load_start", user_id=user.id)

        stats_result, company, interviews = await asyncio.gather(
            self._fetch_stats(),
            self._fetch_company(user),
            self._fetch_interviews(),
        )

        view = DashboardView(stats=default_stat_cards())
        stats: DashboardStats | None = None
        if isinstance(stats_result, BaseException):
            # Umbrella failure: no fallback calls, recent lists stay empty
            view.error = (
                RATE_LIMITED_MESSAGE
                if is_rate_limited(stats_result)
                else LOAD_FAILED_MESSAGE
            )
            self._notifier.notify(NoticeLevel.ERROR, view.error)
        elif stats_result is not None:
            stats = stats_result
            view.stats = build_stat_cards(stats)
            view.recent_applications = stats.recent_applications[:RECENT_ITEMS_LIMIT]
            view.recent_jobs = stats.recent_jobs[:RECENT_ITEMS_LIMIT]
            view.recent_hot_vacancies = stats.recent_hot_vacancies[
                :RECENT_ITEMS_LIMIT
            ]
        else:
            (
                view.recent_applications,
                view.recent_jobs,
                view.recent_hot_vacancies,
            ) = await self._fetch_recent_fallback()

        view.recent_activity = generate_recent_activity(
            view.recent_applications, view.recent_jobs, view.recent_hot_vacancies
        )
        view.company = company
        view.upcoming_interviews = interviews
        view.profile_completion = calculate_profile_completion(user, company)
        view.quick_actions = quick_actions_for(user.user_type)

        if user.oauth_provider == "google":
            self._store_display_user(user)

        logger.info(
            "dashboard_load_complete",
            user_id=user.id,
            stats_loaded=stats is not None,
            company_loaded=company is not None,
            interviews=len(interviews),
            activity=len(view.recent_activity),
        )
        return view

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    async def _fetch_stats(self) -> DashboardStats | BaseException | None:
        """Stats section.

        Returns:
            Parsed stats, None if the server answered ``success: false`` or
            sent an unusable payload, or the raised error (umbrella failure).
        """
        try:
            response = await self._api.get_dashboard_stats()
        except Exception as e:  # noqa: BLE001
            logger.warning("dashboard_stats_failed", error=str(e))
            return e

        if not response.success or not isinstance(response.data, dict):
            logger.info("dashboard_stats_unavailable", message=response.message)
            return None
        try:
            return DashboardStats.model_validate(response.data)
        except ValidationError:
            logger.warning("dashboard_stats_invalid")
            return None

    async def _fetch_company(self, user: UserProfile) -> CompanyProfile | None:
        if not user.company_id:
            return None
        try:
            response = await self._api.get_company(user.company_id)
            if response.success and isinstance(response.data, dict):
                return CompanyProfile.model_validate(response.data)
        except Exception as e:  # noqa: BLE001
            logger.warning(
                "dashboard_company_failed", company_id=user.company_id, error=str(e)
            )
        return None

    async def _fetch_interviews(self) -> list[UpcomingInterview]:
        try:
            response = await self._api.get_upcoming_interviews(self._interviews_limit)
            data = response.data if response.success else None
            raw = data.get("interviews") if isinstance(data, dict) else None
            if not isinstance(raw, list):
                return []
        except Exception as e:  # noqa: BLE001
            logger.warning("dashboard_interviews_failed", error=str(e))
            return []

        interviews: list[UpcomingInterview] = []
        for index, item in enumerate(raw):
            if not isinstance(item, dict):
                continue
            try:
                interviews.append(UpcomingInterview.model_validate(item))
            except ValidationError:
                logger.warning("dashboard_interview_skipped", index=index)
        return interviews

    async def _fetch_recent_fallback(
        self,
    ) -> tuple[list[dict[str, Any]], list[dict[str, Any]], list[dict[str, Any]]]:
        """Recent lists from their own endpoints when stats had none."""

        async def fetch(name: str, call: Any) -> list[dict[str, Any]]:
            try:
                response = await call
            except Exception as e:  # noqa: BLE001
                logger.warning("dashboard_recent_failed", section=name, error=str(e))
                return []
            return _as_list(response.data) if response.success else []

        applications, jobs, hot_vacancies = await asyncio.gather(
            fetch("applications", self._api.get_employer_applications()),
            fetch("jobs", self._api.get_employer_jobs(RECENT_ITEMS_LIMIT)),
            fetch("hot_vacancies", self._api.get_employer_hot_vacancies()),
        )
        return applications, jobs, hot_vacancies

    def _store_display_user(self, user: UserProfile) -> None:
        """Save a display copy of a Google OAuth user and greet them."""
        self._notifier.notify(NoticeLevel.SUCCESS, GOOGLE_WELCOME_MESSAGE)
        blob = user.model_dump(mode="json", by_alias=True)
        blob["displayName"] = user.display_name
        try:
            self._storage.set_item(USER_KEY, json.dumps(blob))
        except StorageError:
            logger.warning("display_user_store_failed", user_id=user.id)
