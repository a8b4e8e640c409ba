"""Portal REST API adapter."""

from dashboard_gate.adapters.portal.client import (
    RECENT_ITEMS_LIMIT,
    ApiResponse,
    PortalApiClient,
)

__all__ = [
    "ApiResponse",
    "PortalApiClient",
    "RECENT_ITEMS_LIMIT",
]
