"""View-model builders for the employer dashboard.

Pure functions that turn API payloads into the cards, activity feed, quick
actions, and completion percentage the dashboard renders.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from dashboard_gate.schemas.company import CompanyProfile
from dashboard_gate.schemas.dashboard import DashboardStats
from dashboard_gate.schemas.user import UserProfile, UserType

# =============================================================================
# Stat cards
# =============================================================================


@dataclass(frozen=True)
class StatCard:
    title: str
    value: str
    change: str
    link: str | None = None


@dataclass(frozen=True)
class _StatCardSpec:
    title: str
    field: str
    positive: str
    empty: str
    link: str | None


_APPLICATIONS_LINK = "/employer-dashboard/applications"

_STAT_CARD_SPECS = (
    _StatCardSpec(
        "Active Jobs",
        "active_jobs",
        "+{n} active",
        "No active jobs",
        "/employer-dashboard/manage-jobs",
    ),
    _StatCardSpec(
        "Total Applications",
        "total_applications",
        "{n} received",
        "No applications yet",
        _APPLICATIONS_LINK,
    ),
    _StatCardSpec(
        "Under Review",
        "reviewing_applications",
        "{n} reviewing",
        "No applications under review",
        f"{_APPLICATIONS_LINK}?status=reviewing",
    ),
    _StatCardSpec(
        "Shortlisted",
        "shortlisted_applications",
        "{n} shortlisted",
        "No shortlisted candidates",
        f"{_APPLICATIONS_LINK}?status=shortlisted",
    ),
    _StatCardSpec(
        "Interviews Scheduled",
        "interview_scheduled_applications",
        "{n} scheduled",
        "No interviews scheduled",
        f"{_APPLICATIONS_LINK}?status=interview_scheduled",
    ),
    _StatCardSpec(
        "Profile Views",
        "profile_views",
        "{n} views",
        "No profile views",
        None,
    ),
    _StatCardSpec(
        "Hired Candidates",
        "hired_candidates",
        "{n} hired",
        "No hires yet",
        f"{_APPLICATIONS_LINK}?status=hired",
    ),
)


def build_stat_cards(stats: DashboardStats) -> list[StatCard]:
    """Build the seven dashboard stat cards from the stats payload."""
    cards = []
    for spec in _STAT_CARD_SPECS:
        count = getattr(stats, spec.field)
        cards.append(
            StatCard(
                title=spec.title,
                value=str(count),
                change=spec.positive.format(n=count) if count > 0 else spec.empty,
                link=spec.link,
            )
        )
    return cards


def default_stat_cards() -> list[StatCard]:
    """Zero-valued cards shown when the stats could not be loaded."""
    return [
        StatCard(title=spec.title, value="0", change="No data", link=spec.link)
        for spec in _STAT_CARD_SPECS
    ]


# =============================================================================
# Recent activity
# =============================================================================


@dataclass(frozen=True)
class ActivityItem:
    id: str
    type: str
    title: str
    description: str
    time: str


PLACEHOLDER_ACTIVITY = ActivityItem(
    id="placeholder",
    type="placeholder",
    title="No recent activity",
    description="Your recent activities will appear here",
    time="Just now",
)

_MAX_APPLICATION_ITEMS = 3
_MAX_HOT_VACANCY_ITEMS = 2
_MAX_JOB_ITEMS = 2


def _activity_time(value: Any) -> str:
    """Date part of an ISO timestamp, or "Recently" if missing/unparseable."""
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date().isoformat()
        except ValueError:
            pass
    return "Recently"


def generate_recent_activity(
    applications: list[dict[str, Any]],
    jobs: list[dict[str, Any]],
    hot_vacancies: list[dict[str, Any]],
) -> list[ActivityItem]:
    """Build the activity feed: applications, then hot vacancies, then jobs.

    Returns:
        Up to 3 application, 2 hot-vacancy, and 2 job items, or the single
        placeholder item when there is nothing to show.
    """
    activities: list[ActivityItem] = []

    for index, app in enumerate(applications[:_MAX_APPLICATION_ITEMS]):
        job = app.get("job") if isinstance(app.get("job"), dict) else {}
        applicant = app.get("applicantName") or "A candidate"
        job_title = job.get("title") or "a job"
        activities.append(
            ActivityItem(
                id=f"app-{index}",
                type="application",
                title="New application received",
                description=f"{applicant} applied for {job_title}",
                time=_activity_time(app.get("appliedAt")),
            )
        )

    for index, vacancy in enumerate(hot_vacancies[:_MAX_HOT_VACANCY_ITEMS]):
        title = vacancy.get("title") or "Hot vacancy"
        if vacancy.get("status") == "draft":
            heading = "Hot Vacancy Created as Draft"
            description = f"{title} created as draft - complete payment to go live"
        else:
            heading = "Hot Vacancy Posted"
            description = f"{title} is now featured as a hot vacancy"
        activities.append(
            ActivityItem(
                id=f"hot-vacancy-{index}",
                type="hot_vacancy",
                title=heading,
                description=description,
                time=_activity_time(vacancy.get("createdAt")),
            )
        )

    for index, job in enumerate(jobs[:_MAX_JOB_ITEMS]):
        activities.append(
            ActivityItem(
                id=f"job-{index}",
                type="job",
                title="Job posted successfully",
                description=f"{job.get('title') or 'A job'} position is now live",
                time=_activity_time(job.get("createdAt")),
            )
        )

    return activities or [PLACEHOLDER_ACTIVITY]


# =============================================================================
# Quick actions
# =============================================================================


@dataclass(frozen=True)
class QuickAction:
    title: str
    description: str
    href: str
    admin_only: bool = False


QUICK_ACTIONS = (
    QuickAction("Post a Job", "Create a new job posting", "/employer-dashboard/post-job"),
    QuickAction(
        "View Applications", "Review job applications", _APPLICATIONS_LINK
    ),
    QuickAction(
        "Job Templates",
        "Use reusable job templates",
        "/employer-dashboard/job-templates",
    ),
    QuickAction(
        "Bulk Import",
        "Import multiple jobs at once",
        "/employer-dashboard/bulk-import",
    ),
    QuickAction(
        "Featured Jobs",
        "Promote your job listings",
        "/employer-dashboard/featured-jobs",
    ),
    QuickAction(
        "Search Database",
        "Find candidates in our database",
        "/employer-dashboard/create-requirement",
    ),
    QuickAction(
        "Analytics",
        "View search performance metrics",
        "/employer-dashboard/analytics",
    ),
    QuickAction("Messages", "Chat with your team", "/messages"),
    QuickAction(
        "Usage Pulse",
        "Monitor quota usage and activity",
        "/admin/usage-pulse",
        admin_only=True,
    ),
)

_ADMIN_TYPES = frozenset({UserType.ADMIN, UserType.SUPERADMIN})


def quick_actions_for(user_type: UserType | None) -> list[QuickAction]:
    """Quick actions visible to user_type; admin-only ones need an admin."""
    is_admin = user_type in _ADMIN_TYPES
    return [a for a in QUICK_ACTIONS if not a.admin_only or is_admin]


# =============================================================================
# Profile completion percentage
# =============================================================================

_USER_FIELD_WEIGHT = 5.7
_COMPANY_FIELD_WEIGHT = 10
# Credit given while the company exists but has not been loaded yet
_UNLOADED_COMPANY_CREDIT = 30


def _filled(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def calculate_profile_completion(
    user: UserProfile | None, company: CompanyProfile | None
) -> int:
    """Estimate how complete the employer profile is, 0-100.

    User fields count 5.7 points each; company fields count 10 points each.
    A missing industry list counts as "Other", so it always scores.
    """
    if user is None:
        return 0

    completion = 0.0
    user_fields = (
        user.first_name,
        user.last_name,
        user.email,
        user.phone,
        user.current_location,
        user.headline,
        user.summary,
    )
    completion += _USER_FIELD_WEIGHT * sum(1 for f in user_fields if _filled(f))

    if user.company_id and company is not None:
        company_fields = (
            company.name,
            company.industries[0] if company.industries else "Other",
            company.company_size,
            company.website,
            company.description,
            company.address,
        )
        completion += _COMPANY_FIELD_WEIGHT * sum(
            1 for f in company_fields if _filled(f)
        )
    elif user.company_id:
        completion += _UNLOADED_COMPANY_CREDIT

    # Round half up
    return min(100, math.floor(completion + 0.5))
