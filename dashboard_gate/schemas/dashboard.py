"""Dashboard payload schemas.

Counters missing from the stats payload (or sent as null) default to 0 and
missing lists default to empty, so a partial response still renders.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class DashboardStats(BaseModel):
    """Payload of GET /employer/dashboard/stats."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    active_jobs: int = 0
    total_applications: int = 0
    reviewing_applications: int = 0
    shortlisted_applications: int = 0
    interview_scheduled_applications: int = 0
    profile_views: int = 0
    hired_candidates: int = 0
    recent_applications: list[dict[str, Any]] = []
    recent_jobs: list[dict[str, Any]] = []
    recent_hot_vacancies: list[dict[str, Any]] = []

    @field_validator(
        "active_jobs",
        "total_applications",
        "reviewing_applications",
        "shortlisted_applications",
        "interview_scheduled_applications",
        "profile_views",
        "hired_candidates",
        mode="before",
    )
    @classmethod
    def null_count_to_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator(
        "recent_applications", "recent_jobs", "recent_hot_vacancies", mode="before"
    )
    @classmethod
    def null_list_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class InterviewApplicant(BaseModel):
    """Applicant summary nested in an interview (snake_case on the wire)."""

    model_config = ConfigDict(extra="ignore")

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None


class InterviewApplication(BaseModel):
    model_config = ConfigDict(extra="ignore")

    applicant: InterviewApplicant | None = None


class UpcomingInterview(BaseModel):
    """One entry of GET /employer/interviews/upcoming."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    title: str | None = None
    scheduled_at: str | None = None
    interview_type: str | None = None
    job_application: InterviewApplication | None = None

    @property
    def applicant_name(self) -> str | None:
        """Applicant's full name, if present."""
        if self.job_application is None or self.job_application.applicant is None:
            return None
        applicant = self.job_application.applicant
        parts = [p for p in (applicant.first_name, applicant.last_name) if p]
        return " ".join(parts) or None
