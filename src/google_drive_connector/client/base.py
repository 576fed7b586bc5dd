"""Shared HTTP plumbing for Google REST API clients.

Handles bearer authentication, a single token refresh on 401, and
normalization of every failed call into a :class:`RemoteError` subclass.
Retrying is not done here; callers wrap calls in a ``RetryExecutor``.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from ..config import GoogleAPIConfig, GoogleAuthConfig
from ..utils.classifier import classify_remote_error
from ..utils.errors import AuthenticationError
from .auth import GoogleOAuthClient

logger = logging.getLogger(__name__)


class GoogleAPIClient:
    """Async base client for Google REST APIs.

    The HTTP client and OAuth client are owned by the instance (or injected),
    never shared through module-level state.
    """

    def __init__(
        self,
        credentials: GoogleAuthConfig,
        api_config: Optional[GoogleAPIConfig] = None,
        oauth_client: Optional[GoogleOAuthClient] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the client.

        Args:
            credentials: OAuth client id, secret, refresh token and an
                optional current access token
            api_config: API endpoints and timeouts
            oauth_client: Optional OAuth client for token refresh
            http_client: Optional httpx client for API requests
        """
        self.api_config = api_config or GoogleAPIConfig()
        self._credentials = credentials
        self._access_token = credentials.access_token
        self._oauth_client = oauth_client or GoogleOAuthClient()
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(self.api_config.api_timeout_seconds)
        )

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit - close HTTP client."""
        await self.close()

    async def close(self):
        """Close the HTTP client if this instance created it."""
        if self._http_client and self._owns_http_client:
            await self._http_client.aclose()

    async def _refresh_token(self) -> None:
        logger.info("Refreshing access token")
        self._access_token = await self._oauth_client.refresh_access_token(
            self._credentials.refresh_token,
            self._credentials.client_id,
            self._credentials.client_secret,
        )

    async def _send(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Dict[str, Any]] = None,
        content: Optional[bytes] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        request_headers = dict(headers or {})
        request_headers["Authorization"] = f"Bearer {self._access_token}"
        try:
            return await self._http_client.request(
                method,
                url,
                params=params,
                json=json_data,
                content=content,
                headers=request_headers,
            )
        except httpx.TimeoutException as e:
            logger.error("Timeout calling Google API: url=%s, error=%s", url, str(e))
            raise classify_remote_error(
                None, "Request to Google API timed out", cause=e, timed_out=True
            )
        except httpx.TransportError as e:
            logger.error("Network error calling Google API: url=%s, error=%s", url, str(e))
            raise classify_remote_error(
                None, f"Network error calling Google API: {e}", cause=e
            )

    async def _make_request(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Dict[str, Any]] = None,
        content: Optional[bytes] = None,
        headers: Optional[Dict[str, str]] = None,
        parse_json: bool = True,
    ) -> Any:
        """Make one HTTP request to a Google API.

        Args:
            method: HTTP method (GET, POST, etc.)
            url: API endpoint URL
            params: Query parameters
            json_data: JSON body for POST/PATCH requests
            content: Raw request body (multipart uploads)
            headers: Extra request headers
            parse_json: Whether to parse response as JSON

        Returns:
            Parsed JSON response, or raw bytes if parse_json=False

        Raises:
            AuthenticationError: Credentials rejected even after refresh
            TransientRemoteError: Rate limits, 500/503, timeouts
            FatalRemoteError: Any other failure
        """
        if not self._access_token:
            await self._refresh_token()

        response = await self._send(method, url, params, json_data, content, headers)

        if response.status_code == 401:
            await self._refresh_token()
            response = await self._send(method, url, params, json_data, content, headers)
            if response.status_code == 401:
                raise AuthenticationError(
                    "Authentication failed even after token refresh",
                    status_code=401,
                )

        if response.status_code >= 400:
            error = self._parse_error_response(response)
            message = error.get("message") or response.reason_phrase or "Unknown error"
            logger.error(
                "Google API error: status_code=%s, url=%s, message=%s",
                response.status_code,
                url,
                message,
            )
            raise classify_remote_error(
                response.status_code,
                message,
                reason=response.reason_phrase,
            )

        if not parse_json:
            return response.content
        if not response.content:
            return {}
        return response.json()

    def _parse_error_response(self, response: httpx.Response) -> Dict[str, Any]:
        """Parse a Google JSON error body.

        Args:
            response: HTTP response object

        Returns:
            The ``error`` object of the body, or the raw text as message
        """
        try:
            error_json = response.json()
        except ValueError:
            return {"message": response.text[:500] if response.text else None}
        if isinstance(error_json, dict) and isinstance(error_json.get("error"), dict):
            return error_json["error"]
        return {}
