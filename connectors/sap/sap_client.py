"""SAP HTTP Client.

Low-level HTTP client for SAP OData API calls.
Handles request header setup (basic auth, sap-client) and error mapping.
No retries: a failed request is reported to the caller as SAPTransportError.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
import asyncio

import aiohttp

from core.config import SAPConfig
from core.observability.logging import get_logger

logger = get_logger(__name__)


class SAPApiError(Exception):
    """Base exception for SAP API errors."""
    def __init__(self, message: str, status_code: int = 0, response_body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class SAPTransportError(SAPApiError):
    """Network failure or HTTP error status reaching the service."""
    pass


class SAPParseError(SAPApiError):
    """Response body does not decode into the expected record shape."""
    pass


class SAPEmptyResultError(SAPApiError):
    """The service returned no records where at least one was required."""
    pass


@dataclass
class SAPResponse:
    """Fully read HTTP response."""
    status: int
    body: bytes
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


class SAPRequestClient:
    """HTTP client for SAP OData services.

    Provides:
    - Basic auth and sap-client header setup
    - Query parameter rendering
    - Transport/HTTP error mapping

    One instance may be shared by concurrent fetches.

    Usage:
        async with SAPRequestClient(config) as client:
            response = await client.request("GET", url, {"$filter": "..."})
    """

    def __init__(self, config: SAPConfig, session: Optional[aiohttp.ClientSession] = None):
        """Initialize request client.

        Args:
            config: SAP configuration (credentials, sap-client, timeout)
            session: Optional externally managed aiohttp session
        """
        self.config = config
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "SAPRequestClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            auth = None
            if self.config.has_credentials:
                auth = aiohttp.BasicAuth(self.config.user, self.config.password or "")
            self._session = aiohttp.ClientSession(
                auth=auth,
                timeout=aiohttp.ClientTimeout(total=self.config.timeout_seconds),
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    def _get_headers(self, has_body: bool = False) -> Dict[str, str]:
        """Get headers for API requests."""
        headers = {"Accept": "application/json"}
        if has_body:
            headers["Content-Type"] = "application/json"
        if self.config.sap_client:
            headers["sap-client"] = self.config.sap_client
        return headers

    async def request(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, str]] = None,
        body: Optional[Any] = None,
    ) -> SAPResponse:
        """Make an API request and read the full response.

        Args:
            method: HTTP method
            url: Absolute URL
            params: Query parameters (empty for navigation links)
            body: Optional request body (str/bytes sent as-is, other values as JSON)

        Returns:
            SAPResponse with status and body

        Raises:
            SAPTransportError: Network failure, timeout or HTTP status >= 400
        """
        session = self._get_session()
        kwargs: Dict[str, Any] = {"headers": self._get_headers(has_body=body is not None)}
        if params:
            kwargs["params"] = params
        if isinstance(body, (str, bytes)):
            if body:
                kwargs["data"] = body
        elif body is not None:
            kwargs["json"] = body

        logger.debug(f"{method} {url}", extra_fields={"params": params or {}})

        try:
            async with session.request(method, url, **kwargs) as response:
                raw = await response.read()
                status = response.status
                headers = dict(response.headers)
        except asyncio.TimeoutError:
            raise SAPTransportError(f"Request timed out after {self.config.timeout_seconds}s: {url}")
        except aiohttp.ClientError as e:
            raise SAPTransportError(f"Request failed with {type(e).__name__}: {e}")

        result = SAPResponse(status=status, body=raw, headers=headers)
        if status >= 400:
            raise SAPTransportError(
                f"API error {status} for {url}: {result.text[:200]}",
                status,
                result.text,
            )

        return result
