"""Gmail contacts import backed by Google OAuth and the People API."""

from __future__ import annotations

import logging
from http import HTTPStatus

from starlette.requests import Request
from starlette.responses import RedirectResponse, Response

from contacts_import.clients import GoogleContactsClient, GoogleOAuthClient
from contacts_import.services.errors import ProviderAuthorizationError
from contacts_import.services.query_codec import QueryParams
from contacts_import.services.state_token import StateTokenCodec

from .base import ContactsProvider, ContactsResult

logger = logging.getLogger(__name__)


class GmailContactsProvider(ContactsProvider):
    name = "gmail"

    def __init__(
        self,
        oauth_client: GoogleOAuthClient,
        contacts_client: GoogleContactsClient,
        state_codec: StateTokenCodec,
    ) -> None:
        self._oauth = oauth_client
        self._contacts = contacts_client
        self._state_codec = state_codec

    async def request_authorization_from_user(
        self, request: Request, params: QueryParams
    ) -> Response:
        state = self._state_codec.encode(params)
        authorization_url = self._oauth.build_authorization_url(state=state)
        return RedirectResponse(url=authorization_url, status_code=HTTPStatus.FOUND)

    async def fetch_contacts(self, request: Request) -> ContactsResult:
        error = request.query_params.get("error")
        if error:
            raise ProviderAuthorizationError(f"Google returned error={error}")

        code = request.query_params.get("code")
        if not code:
            raise ProviderAuthorizationError("Callback did not include an authorization code.")

        access_token = await self._oauth.exchange_authorization_code(code)
        logger.debug("Exchanged gmail authorization code for an access token")
        return await self._contacts.list_contacts(access_token)


__all__ = ["GmailContactsProvider"]
