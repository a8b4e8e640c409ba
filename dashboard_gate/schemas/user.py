"""User profile schemas.

The portal returns loosely shaped user objects (camelCase keys, blank
strings, ids as numbers or strings). These models validate and normalize
them once at the API boundary so the gate logic reads typed attributes.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)
from pydantic.alias_generators import to_camel


class UserType(str, Enum):
    """Account types known to the portal."""

    JOBSEEKER = "jobseeker"
    EMPLOYER = "employer"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"
    RECRUITER = "recruiter"


def _blank_to_none(value: Any) -> Any:
    """Normalize empty or whitespace-only strings to None."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp, treating naive values as UTC.

    Unparseable values become None rather than failing the whole profile.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


class UserPreferences(BaseModel):
    """Preferences blob stored on the user record.

    Unknown keys are kept so they survive a read-modify-write PATCH.

    Attributes:
        profile_completed: True once the user submitted the completion form.
        profile_completion_skipped_until: End of the current snooze window.
        profile_completion_skip_session: Login session the snooze was set in.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    profile_completed: bool | None = None
    profile_completion_skipped_until: datetime | None = None
    profile_completion_skip_session: str | None = None

    @field_validator("profile_completed", mode="before")
    @classmethod
    def normalize_completed(cls, value: Any) -> bool | None:
        """Accept real booleans and "true"/"false" strings, else None."""
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in ("true", "false"):
            return value.strip().lower() == "true"
        return None

    @field_validator("profile_completion_skipped_until", mode="before")
    @classmethod
    def normalize_skipped_until(cls, value: Any) -> datetime | None:
        """Parse the snooze timestamp leniently."""
        return _parse_timestamp(value)

    def to_payload(self) -> dict[str, Any]:
        """Serialize back to the wire shape (camelCase, ISO timestamps)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class UserProfile(BaseModel):
    """Read-only snapshot of the signed-in user.

    Attributes:
        id: User id as a string.
        email: Login email.
        user_type: Account type.
        phone: Contact phone (required for a complete employer profile).
        designation: Job title (required for a complete employer profile).
        company_id: Company the user belongs to (not required for admins).
        preferences: Profile-completion preferences.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: str
    email: str | None = None
    user_type: UserType
    phone: str | None = None
    designation: str | None = None
    company_id: str | None = None
    preferences: UserPreferences = Field(default_factory=UserPreferences)

    first_name: str | None = None
    last_name: str | None = None
    current_location: str | None = None
    headline: str | None = None
    summary: str | None = None
    avatar: str | None = None
    oauth_provider: str | None = Field(
        default=None,
        validation_alias=AliasChoices("oauth_provider", "oauthProvider"),
    )
    last_login_at: str | None = None
    region: str | None = None

    @field_validator("id", "company_id", mode="before")
    @classmethod
    def coerce_identifier(cls, value: Any) -> Any:
        """Ids arrive as numbers, UUIDs, or strings; store them as strings."""
        value = _blank_to_none(value)
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator(
        "email",
        "phone",
        "designation",
        "first_name",
        "last_name",
        "current_location",
        "headline",
        "summary",
        "avatar",
        "oauth_provider",
        "last_login_at",
        "region",
        mode="before",
    )
    @classmethod
    def normalize_blank(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("user_type", mode="before")
    @classmethod
    def normalize_user_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("preferences", mode="before")
    @classmethod
    def default_preferences(cls, value: Any) -> Any:
        """Missing or non-object preferences become an empty blob."""
        if not isinstance(value, dict | UserPreferences):
            return {}
        return value

    @property
    def is_admin(self) -> bool:
        return self.user_type == UserType.ADMIN

    def missing_required_fields(self) -> list[str]:
        """Return the required profile fields this user has not filled in.

        Admin accounts are not required to belong to a company.
        """
        missing = []
        if not self.phone:
            missing.append("phone")
        if not self.designation:
            missing.append("designation")
        if not self.company_id and not self.is_admin:
            missing.append("companyId")
        return missing

    @property
    def display_name(self) -> str | None:
        """Full name when both parts are known, otherwise the email."""
        if self.first_name and self.last_name:
            return f"{self.first_name} {self.last_name}"
        return self.email


def parse_user_payload(data: Any) -> UserProfile:
    """Build a UserProfile from an API ``data`` field.

    The profile endpoints return either ``{"user": {...}}`` or the user
    object itself.

    Raises:
        pydantic.ValidationError: If the payload is not a valid user.
    """
    if isinstance(data, dict) and isinstance(data.get("user"), dict):
        data = data["user"]
    return UserProfile.model_validate(data)
