"""
Google OAuth utilities.

These helpers build the consent URL and exchange the authorization code
returned to the gmail callback path for an access token.
"""

from __future__ import annotations

import ssl
from typing import Optional, Union
from urllib.parse import urlencode

import httpx

from fastapi import status

from contacts_import.core.config import GoogleSettings
from contacts_import.services.errors import (
    OAuthTokenExchangeError,
    ProviderAuthorizationError,
)

# Token endpoint error codes meaning the grant itself was refused.
_REJECTED_GRANT_ERRORS = {"invalid_grant", "access_denied", "unauthorized_client"}


class GoogleOAuthClient:
    """Build Google authorization URLs and exchange authorization codes."""

    AUTH_BASE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"

    def __init__(
        self,
        google_settings: GoogleSettings,
        *,
        timeout: float = 10.0,
        verify: Union[ssl.SSLContext, bool] = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._google = google_settings
        self._timeout = timeout
        self._verify = verify
        self._transport = transport

    def build_authorization_url(self, state: str) -> str:
        """Construct the Google OAuth consent URL."""
        params = {
            "client_id": self._google.client_id,
            "redirect_uri": str(self._google.redirect_uri),
            "response_type": "code",
            "scope": " ".join(self._google.scopes),
            "access_type": "online",
            "include_granted_scopes": "true",
            "prompt": "consent",
            "state": state,
        }
        query = urlencode(params)
        return f"{self.AUTH_BASE_URL}?{query}"

    async def exchange_authorization_code(self, code: str) -> str:
        """Exchange an authorization code for an access token."""
        payload = {
            "code": code,
            "client_id": self._google.client_id,
            "client_secret": self._google.client_secret,
            "redirect_uri": str(self._google.redirect_uri),
            "grant_type": "authorization_code",
        }

        async with httpx.AsyncClient(
            timeout=self._timeout, verify=self._verify, transport=self._transport
        ) as client:
            response = await client.post(self.TOKEN_URL, data=payload)

        if response.status_code != status.HTTP_200_OK:
            if _error_code(response) in _REJECTED_GRANT_ERRORS:
                raise ProviderAuthorizationError(response.text)
            raise OAuthTokenExchangeError(response.text)

        try:
            token_payload = response.json()
        except ValueError as exc:
            raise OAuthTokenExchangeError("Token endpoint returned invalid JSON.") from exc

        access_token = token_payload.get("access_token")
        if not access_token:
            raise OAuthTokenExchangeError("Incomplete token payload returned from Google.")
        return access_token


def _error_code(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    return body.get("error") if isinstance(body, dict) else None


__all__ = ["GoogleOAuthClient"]
