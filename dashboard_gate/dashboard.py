"""Employer dashboard session.

Wires the profile gate, the agency KYC redirect, and the data aggregator to
one portal client and one storage backend, and drives them on user changes.
"""

import asyncio
from datetime import timedelta

import httpx
import structlog

from dashboard_gate.adapters.portal.client import PortalApiClient
from dashboard_gate.adapters.storage import BrowserStorage, create_storage
from dashboard_gate.adapters.ui.base import DialogView, Navigator, Notifier
from dashboard_gate.core import config
from dashboard_gate.core.config import Settings
from dashboard_gate.schemas.user import UserProfile
from dashboard_gate.services.agency_redirect import AgencyVerificationRedirector
from dashboard_gate.services.completion_store import PersistedCompletionStore
from dashboard_gate.services.dashboard_aggregator import (
    DashboardDataAggregator,
    DashboardView,
)
from dashboard_gate.services.profile_gate import (
    GateDecision,
    ProfileGateController,
)

logger = structlog.get_logger()


class EmployerDashboard:
    """Owns the dashboard services for one signed-in session.

    Args:
        client: Portal API client shared by all services.
        gate: Profile-completion gate.
        redirector: Agency KYC redirector.
        aggregator: Dashboard data loader.
        owns_client: Close the client on ``close()``.
    """

    def __init__(
        self,
        client: PortalApiClient,
        gate: ProfileGateController,
        redirector: AgencyVerificationRedirector,
        aggregator: DashboardDataAggregator,
        *,
        owns_client: bool = False,
    ) -> None:
        self.client = client
        self.gate = gate
        self.redirector = redirector
        self.aggregator = aggregator
        self._owns_client = owns_client
        self._view: DashboardView | None = None

    @classmethod
    def create(
        cls,
        settings: Settings | None = None,
        *,
        dialog: DialogView,
        notifier: Notifier,
        navigator: Navigator,
        storage: BrowserStorage | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> "EmployerDashboard":
        """Build a dashboard from settings.

        Args:
            settings: Loaded settings. Defaults to the environment settings.
            dialog: Profile-completion dialog.
            notifier: Toast sink.
            navigator: Router used for the KYC redirect.
            storage: Storage backend. Defaults to ``settings.storage_path``.
            http_client: Pre-built httpx client. The dashboard closes the
                portal client only when it built the HTTP client itself.

        Returns:
            A ready dashboard; call ``close()`` when done.
        """
        settings = settings or config.settings
        storage = storage if storage is not None else create_storage(
            settings.storage_path
        )
        store = PersistedCompletionStore(
            storage, ttl=timedelta(days=settings.completion_cache_ttl_days)
        )
        client = PortalApiClient.from_settings(settings, http_client=http_client)

        gate = ProfileGateController.from_settings(
            settings, store, client, dialog, notifier=notifier
        )
        redirector = AgencyVerificationRedirector.from_settings(
            settings, client, notifier, navigator
        )
        aggregator = DashboardDataAggregator(
            client,
            notifier,
            storage,
            interviews_limit=settings.upcoming_interviews_limit,
        )
        return cls(
            client,
            gate,
            redirector,
            aggregator,
            owns_client=http_client is None,
        )

    @property
    def view(self) -> DashboardView | None:
        """Most recently loaded dashboard view."""
        return self._view

    async def on_user_changed(self, user: UserProfile | None) -> GateDecision | None:
        """React to a new user snapshot.

        The gate decides synchronously; the agency check and the data load
        then run concurrently. A failure in either is logged and does not
        affect the other.

        Signing out (a None user) cancels the pending dialog and redirect.

        Returns:
            The gate decision, or None when there is no user.
        """
        decision = self.gate.evaluate(user)
        if user is None:
            self.redirector.close()
            return None

        redirect_result, view = await asyncio.gather(
            self.redirector.check(user),
            self.aggregator.load_all(user),
            return_exceptions=True,
        )
        if isinstance(redirect_result, BaseException):
            logger.error(
                "agency_check_crashed", user_id=user.id, error=str(redirect_result)
            )
        if isinstance(view, BaseException):
            logger.error("dashboard_load_crashed", user_id=user.id, error=str(view))
        elif view is not None:
            self._view = view
        return decision

    async def on_profile_updated(self) -> GateDecision | None:
        """Re-check the gate after a profile change, then reload the data."""
        decision = await self.gate.acknowledge_profile_update()
        user = self.gate.user
        if decision is not None and user is not None:
            view = await self.aggregator.load_all(user)
            if view is not None:
                self._view = view
        return decision

    async def close(self) -> None:
        """Cancel pending timers and release the HTTP client."""
        self.gate.close()
        self.redirector.close()
        if self._owns_client:
            await self.client.aclose()
        logger.info("dashboard_closed")

    async def __aenter__(self) -> "EmployerDashboard":
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.close()
