"""KYC redirect for unverified agency accounts.

Recruiting agencies and consulting firms must finish KYC before they can
post jobs. When such a company is still pending or unverified, the user is
told so and sent to the KYC page shortly after the dashboard loads.
"""

from typing import Protocol

import structlog
from pydantic import ValidationError

from dashboard_gate.adapters.portal.client import ApiResponse
from dashboard_gate.adapters.ui.base import Navigator, NoticeLevel, Notifier
from dashboard_gate.core.config import DEFAULT_KYC_VERIFICATION_PATH, Settings
from dashboard_gate.core.errors import PortalApiError
from dashboard_gate.schemas.company import CompanyProfile
from dashboard_gate.schemas.user import UserProfile
from dashboard_gate.services.delayed_action import DelayedAction

logger = structlog.get_logger()

DEFAULT_REDIRECT_DELAY_SECONDS = 1.5

KYC_REQUIRED_MESSAGE = "KYC verification required to post jobs and access features"


class CompanyFetcher(Protocol):
    async def get_company(self, company_id: str) -> ApiResponse: ...


class AgencyVerificationRedirector:
    """One-shot KYC redirect, run once per user change.

    Args:
        fetcher: Company lookup (normally PortalApiClient).
        notifier: Toast sink for the KYC notice.
        navigator: Router used for the redirect.
        kyc_path: Redirect destination.
        delay_seconds: Delay between the notice and the redirect.
    """

    def __init__(
        self,
        fetcher: CompanyFetcher,
        notifier: Notifier,
        navigator: Navigator,
        *,
        kyc_path: str = DEFAULT_KYC_VERIFICATION_PATH,
        delay_seconds: float = DEFAULT_REDIRECT_DELAY_SECONDS,
    ) -> None:
        self._fetcher = fetcher
        self._notifier = notifier
        self._navigator = navigator
        self._kyc_path = kyc_path
        self._delay = delay_seconds
        self._redirect = DelayedAction("kyc-redirect")

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        fetcher: CompanyFetcher,
        notifier: Notifier,
        navigator: Navigator,
    ) -> "AgencyVerificationRedirector":
        return cls(
            fetcher,
            notifier,
            navigator,
            kyc_path=settings.kyc_verification_path,
            delay_seconds=settings.kyc_redirect_delay,
        )

    @property
    def redirect_pending(self) -> bool:
        return self._redirect.is_pending

    @property
    def redirect_timer(self) -> DelayedAction:
        return self._redirect

    async def check(self, user: UserProfile | None) -> bool:
        """Look up the user's company and schedule a KYC redirect if needed.

        Performs at most one company lookup. A pending redirect from an
        earlier check is cancelled first. Lookup failures are logged and
        never raised.

        Returns:
            True if a redirect was scheduled.
        """
        self._redirect.cancel()
        if user is None or not user.company_id:
            return False

        try:
            response = await self._fetcher.get_company(user.company_id)
        except PortalApiError as e:
            logger.warning(
                "agency_check_failed",
                user_id=user.id,
                company_id=user.company_id,
                error=e.message,
            )
            return False
        except Exception:  # noqa: BLE001
            logger.exception("agency_check_error", company_id=user.company_id)
            return False

        if not response.success or not isinstance(response.data, dict):
            return False

        try:
            company = CompanyProfile.model_validate(response.data)
        except ValidationError:
            logger.warning(
                "agency_check_invalid_company", company_id=user.company_id
            )
            return False

        if not (company.is_agency and company.needs_kyc):
            return False

        logger.info(
            "kyc_redirect_scheduled",
            company_id=user.company_id,
            account_type=company.company_account_type,
            verification_status=company.verification_status,
        )
        self._notifier.notify(NoticeLevel.INFO, KYC_REQUIRED_MESSAGE)
        self._redirect.schedule(self._delay, self._go_to_kyc)
        return True

    def _go_to_kyc(self) -> None:
        self._navigator.navigate(self._kyc_path)

    def close(self) -> None:
        """Cancel the pending redirect (teardown)."""
        self._redirect.cancel()
