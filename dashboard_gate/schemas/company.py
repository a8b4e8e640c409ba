"""Company profile schema for GET /employer/company/{companyId}."""

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

# Account types that must pass KYC before posting jobs
AGENCY_ACCOUNT_TYPES = frozenset({"recruiting_agency", "consulting_firm"})

# Verification states that still require KYC
KYC_PENDING_STATUSES = frozenset({"pending", "unverified"})


class CompanyProfile(BaseModel):
    """Company record as returned by the portal.

    Attributes:
        id: Company id as a string.
        name: Display name.
        company_account_type: e.g. "direct", "recruiting_agency".
        verification_status: e.g. "verified", "pending", "unverified".
        industries: Industry labels; the first one is shown on the dashboard.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: str | None = None
    name: str | None = None
    company_account_type: str | None = None
    verification_status: str | None = None
    industries: list[str] = []
    company_size: str | None = None
    website: str | None = None
    description: str | None = None
    address: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("industries", mode="before")
    @classmethod
    def coerce_industries(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value

    @property
    def is_agency(self) -> bool:
        """True for recruiting agencies and consulting firms."""
        return self.company_account_type in AGENCY_ACCOUNT_TYPES

    @property
    def needs_kyc(self) -> bool:
        """True while verification is pending or has not started."""
        return self.verification_status in KYC_PENDING_STATUSES
