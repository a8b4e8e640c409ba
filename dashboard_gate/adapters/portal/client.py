"""Portal REST API client.

HTTP client for the job-portal endpoints used by the employer dashboard:
the signed-in user's profile, company lookup, dashboard stats, upcoming
interviews, and the recent-activity list endpoints.

Every response is normalized to the ``{success, message, data}`` envelope.
Non-2xx responses raise a PortalApiError subclass.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import ValidationError

from dashboard_gate.core.config import Settings
from dashboard_gate.core.errors import (
    AccessDeniedError,
    AuthenticationRequiredError,
    InvalidResponseError,
    PortalApiError,
    RateLimitError,
    RequestFailedError,
    ResourceNotFoundError,
    ServerError,
    ValidationFailedError,
)
from dashboard_gate.schemas.user import UserProfile, parse_user_payload

logger = logging.getLogger(__name__)

# HTTP client timeout for portal requests
_DEFAULT_TIMEOUT = 10.0

# Retry-After fallback when a 429 carries no usable header
_DEFAULT_RETRY_AFTER_SECONDS = 5.0

# Number of items kept from the recent-activity list endpoints
RECENT_ITEMS_LIMIT = 5


@dataclass
class ApiResponse:
    """Normalized response envelope.

    Attributes:
        success: Server-declared success flag.
        message: Optional server message.
        data: The ``data`` field (or the whole body if it had no envelope).
    """

    success: bool
    message: str | None = None
    data: Any = None


def _retry_after_seconds(response: httpx.Response) -> float:
    header = response.headers.get("Retry-After")
    if header is None:
        return _DEFAULT_RETRY_AFTER_SECONDS
    try:
        return max(float(header), 0.0)
    except ValueError:
        return _DEFAULT_RETRY_AFTER_SECONDS


def _error_for_response(response: httpx.Response, body: Any) -> PortalApiError:
    """Map a non-2xx response to the matching PortalApiError."""
    status = response.status_code

    if status == 429:
        return RateLimitError(retry_after_seconds=_retry_after_seconds(response))

    body_dict = body if isinstance(body, dict) else {}
    errors = body_dict.get("errors")
    if isinstance(errors, list) and errors and all(isinstance(e, dict) for e in errors):
        return ValidationFailedError(status, errors)

    server_message = body_dict.get("message") or body_dict.get("error")
    if not isinstance(server_message, str) or not server_message.strip():
        server_message = None
    raw_text = body.strip() if isinstance(body, str) and body.strip() else None

    if status == 401:
        return AuthenticationRequiredError(server_message or raw_text)
    if status == 403:
        return AccessDeniedError(server_message or raw_text)
    if status == 404:
        return ResourceNotFoundError(server_message or raw_text)
    if status >= 500:
        return ServerError(status, server_message or response.reason_phrase)
    return RequestFailedError(
        server_message
        or raw_text
        or f"Request failed ({status}): {response.reason_phrase}",
        status_code=status,
    )


def _decode_body(response: httpx.Response) -> Any:
    """Decode a JSON body; fall back to the raw text (or None if empty)."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class PortalApiClient:
    """Async client for the portal REST API.

    Concurrent identical GET requests share one in-flight call, and
    requests to the same endpoint are spaced by at least
    ``min_request_interval`` seconds.

    Args:
        base_url: API root, e.g. ``https://portal.example.com/api``.
        auth_token: Bearer token; omitted from headers when empty.
        timeout: Per-request timeout in seconds.
        min_request_interval: Minimum spacing per endpoint in seconds.
        http_client: Pre-built httpx client (tests inject a MockTransport).
    """

    def __init__(
        self,
        base_url: str,
        *,
        auth_token: str = "",
        timeout: float = _DEFAULT_TIMEOUT,
        min_request_interval: float = 0.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        headers = {"Content-Type": "application/json"}
        if auth_token:
            headers["Authorization"] = f"Bearer {auth_token}"

        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._base_url = base_url.rstrip("/")
        self._headers = headers
        self._timeout = timeout
        self._min_request_interval = min_request_interval
        self._last_request_at: dict[str, float] = {}
        self._in_flight: dict[str, asyncio.Task[ApiResponse]] = {}

    @classmethod
    def from_settings(
        cls, settings: Settings, http_client: httpx.AsyncClient | None = None
    ) -> "PortalApiClient":
        return cls(
            settings.api_base_url,
            auth_token=settings.auth_token.get_secret_value(),
            timeout=settings.api_timeout_seconds,
            min_request_interval=settings.min_request_interval,
            http_client=http_client,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "PortalApiClient":
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Request plumbing
    # ------------------------------------------------------------------

    async def _throttle(self, endpoint: str) -> None:
        if self._min_request_interval > 0:
            last = self._last_request_at.get(endpoint)
            if last is not None:
                wait = self._min_request_interval - (time.monotonic() - last)
                if wait > 0:
                    logger.debug("Throttling %s for %.2fs", endpoint, wait)
                    await asyncio.sleep(wait)
        self._last_request_at[endpoint] = time.monotonic()

    async def _send(
        self,
        method: str,
        endpoint: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> ApiResponse:
        await self._throttle(endpoint)

        try:
            response = await self._client.request(
                method,
                f"{self._base_url}{endpoint}",
                params=params,
                json=json_body,
                headers=self._headers,
                timeout=self._timeout,
            )
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, endpoint, e)
            raise RequestFailedError(f"Network error: {e}") from e

        body = _decode_body(response)
        if not response.is_success:
            error = _error_for_response(response, body)
            logger.warning(
                "%s %s returned %d: %s",
                method,
                endpoint,
                response.status_code,
                error.message,
            )
            raise error

        if body is None:
            return ApiResponse(success=True)
        if not isinstance(body, dict):
            raise InvalidResponseError()
        if "success" not in body:
            return ApiResponse(success=True, message="Request successful", data=body)
        return ApiResponse(
            success=bool(body.get("success")),
            message=body.get("message"),
            data=body.get("data"),
        )

    async def _get(
        self, endpoint: str, params: dict[str, Any] | None = None
    ) -> ApiResponse:
        key = endpoint
        if params:
            key = f"{endpoint}?{httpx.QueryParams(params)}"

        pending = self._in_flight.get(key)
        if pending is not None:
            logger.debug("Joining in-flight request to %s", key)
            return await asyncio.shield(pending)

        task = asyncio.ensure_future(self._send("GET", endpoint, params=params))
        self._in_flight[key] = task
        try:
            return await asyncio.shield(task)
        finally:
            if task.done():
                self._in_flight.pop(key, None)
            else:
                task.add_done_callback(lambda _t: self._in_flight.pop(key, None))

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    async def get_current_user(self) -> UserProfile:
        """Fetch the signed-in user's profile (GET /profile).

        Raises:
            PortalApiError: If the request fails or returns an invalid user.
        """
        response = await self._get("/profile")
        return self._user_from(response)

    async def update_profile(self, data: dict[str, Any]) -> ApiResponse:
        """Apply a partial profile update (PATCH /profile).

        Args:
            data: Camel-case fields to change, e.g. ``{"preferences": {...}}``.

        Raises:
            PortalApiError: On non-2xx responses.
        """
        return await self._send("PATCH", "/profile", json_body=data)

    @staticmethod
    def _user_from(response: ApiResponse) -> UserProfile:
        if not response.success:
            raise RequestFailedError(response.message or "Failed to load profile")
        try:
            return parse_user_payload(response.data)
        except ValidationError as e:
            raise InvalidResponseError("Profile response is not a valid user") from e

    # ------------------------------------------------------------------
    # Employer dashboard
    # ------------------------------------------------------------------

    async def get_company(self, company_id: str) -> ApiResponse:
        """GET /employer/company/{companyId}."""
        return await self._get(f"/employer/company/{company_id}")

    async def get_dashboard_stats(self) -> ApiResponse:
        """GET /employer/dashboard/stats."""
        return await self._get("/employer/dashboard/stats")

    async def get_upcoming_interviews(self, limit: int = 5) -> ApiResponse:
        """GET /employer/interviews/upcoming?limit=N."""
        return await self._get("/employer/interviews/upcoming", {"limit": limit})

    async def get_employer_applications(self) -> ApiResponse:
        """GET /employer/applications."""
        return await self._get("/employer/applications")

    async def get_employer_jobs(self, limit: int = RECENT_ITEMS_LIMIT) -> ApiResponse:
        """GET /employer/jobs?limit=N."""
        return await self._get("/employer/jobs", {"limit": limit})

    async def get_employer_hot_vacancies(self) -> ApiResponse:
        """GET /employer/hot-vacancies."""
        return await self._get("/employer/hot-vacancies")
