"""Typed views of portal API payloads."""

from dashboard_gate.schemas.company import CompanyProfile
from dashboard_gate.schemas.dashboard import DashboardStats, UpcomingInterview
from dashboard_gate.schemas.user import (
    UserPreferences,
    UserProfile,
    UserType,
    parse_user_payload,
)

__all__ = [
    "CompanyProfile",
    "DashboardStats",
    "parse_user_payload",
    "UpcomingInterview",
    "UserPreferences",
    "UserProfile",
    "UserType",
]
