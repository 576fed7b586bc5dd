"""Google OAuth 2.0 client for token management.

Exchanges the stored refresh token for short-lived access tokens used by the
Drive and Sheets API clients.
"""

import logging
from typing import Dict, Any, Optional
import httpx

from ..utils.classifier import classify_remote_error
from ..utils.errors import AuthenticationError

logger = logging.getLogger(__name__)


class GoogleOAuthClient:
    """OAuth 2.0 client for Google API authentication.

    Handles token refresh using refresh tokens obtained during the initial
    OAuth flow.
    """

    TOKEN_ENDPOINT = "https://oauth2.googleapis.com/token"

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        """Initialize OAuth client.

        Args:
            client: Optional httpx client for making requests.
                    If not provided, a new client will be created per request.
        """
        self._client = client

    async def refresh_access_token(
        self,
        refresh_token: str,
        client_id: str,
        client_secret: str,
    ) -> str:
        """Refresh an expired access token using a refresh token.

        Args:
            refresh_token: The refresh token obtained during initial OAuth flow
            client_id: OAuth 2.0 client ID from Google Cloud Console
            client_secret: OAuth 2.0 client secret

        Returns:
            New access token string

        Raises:
            AuthenticationError: If refresh token is invalid or revoked
            TransientRemoteError: If the token endpoint is rate limited,
                unavailable or timed out
            FatalRemoteError: For any other token endpoint failure
        """
        if not (refresh_token and client_id and client_secret):
            raise AuthenticationError(
                "Client id, client secret and refresh token are all required"
            )

        logger.info(
            "Refreshing Google OAuth access token: client_id=%s",
            client_id[:10] + "...",
        )

        data = {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
            "client_id": client_id,
            "client_secret": client_secret,
        }

        client = self._client or httpx.AsyncClient(timeout=30.0)
        try:
            response = await client.post(
                self.TOKEN_ENDPOINT,
                data=data,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except httpx.TimeoutException as e:
            logger.error("Timeout during token refresh: error=%s", str(e))
            raise classify_remote_error(
                None, "Token refresh request timed out", cause=e, timed_out=True
            )
        except httpx.TransportError as e:
            logger.error("Network error during token refresh: error=%s", str(e))
            raise classify_remote_error(
                None, "Network error during token refresh", cause=e
            )
        finally:
            if not self._client:
                await client.aclose()

        if response.status_code == 200:
            token_data = response.json()
            access_token = token_data.get("access_token")
            if not access_token:
                raise AuthenticationError("Token refresh response missing access_token")

            logger.info(
                "Successfully refreshed access token: expires_in=%s",
                token_data.get("expires_in"),
            )
            return access_token

        error_data = self._parse_error_response(response)
        if response.status_code in (400, 401):
            error_msg = error_data.get("error_description", "Invalid refresh token")
            logger.error(
                "Token refresh failed - invalid credentials: status_code=%s, error=%s",
                response.status_code,
                error_data.get("error"),
            )
            raise AuthenticationError(
                f"Token refresh failed: {error_msg}",
                status_code=response.status_code,
            )

        logger.error(
            "Unexpected token refresh error: status_code=%s, error_data=%s",
            response.status_code,
            error_data,
        )
        raise classify_remote_error(
            response.status_code,
            error_data.get("error_description") or response.reason_phrase,
            reason=response.reason_phrase,
        )

    def _parse_error_response(self, response: httpx.Response) -> Dict[str, Any]:
        """Parse error response from OAuth endpoint.

        Args:
            response: HTTP response object

        Returns:
            Parsed error data or empty dict
        """
        try:
            data = response.json()
        except ValueError:
            return {"raw_text": response.text[:500] if response.text else None}
        return data if isinstance(data, dict) else {}
