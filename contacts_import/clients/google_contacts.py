"""Google People API client returning normalized contacts."""

from __future__ import annotations

import logging
import ssl
from typing import Any, Dict, List, Optional, Union

import httpx

from contacts_import.schemas import Contact
from contacts_import.services.errors import ContactsFetchError, ProviderAuthorizationError
from contacts_import.utils.http import RetryConfig, request_with_retry

logger = logging.getLogger(__name__)


class GoogleContactsClient:
    """Read the authenticated user's connections from the People API."""

    CONNECTIONS_URL = "https://people.googleapis.com/v1/people/me/connections"
    PERSON_FIELDS = "names,emailAddresses,phoneNumbers"
    PAGE_SIZE = 1000

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        verify: Union[ssl.SSLContext, bool] = True,
        retry_config: Optional[RetryConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._timeout = timeout
        self._verify = verify
        self._retry = retry_config or RetryConfig(attempts=2, backoff_seconds=0.5)
        self._transport = transport

    async def list_contacts(self, access_token: str) -> List[Contact]:
        headers = {"Authorization": f"Bearer {access_token}"}
        contacts: List[Contact] = []
        page_token: Optional[str] = None

        async with httpx.AsyncClient(
            timeout=self._timeout, verify=self._verify, transport=self._transport
        ) as client:
            while True:
                params: Dict[str, Any] = {
                    "personFields": self.PERSON_FIELDS,
                    "pageSize": self.PAGE_SIZE,
                }
                if page_token:
                    params["pageToken"] = page_token
                try:
                    response = await request_with_retry(
                        client.get,
                        self.CONNECTIONS_URL,
                        params=params,
                        headers=headers,
                        retry_config=self._retry,
                    )
                except httpx.HTTPStatusError as exc:
                    if exc.response.status_code in (401, 403):
                        raise ProviderAuthorizationError(
                            "Google rejected the access token for the People API."
                        ) from exc
                    raise

                try:
                    payload = response.json()
                except ValueError as exc:
                    raise ContactsFetchError("People API returned invalid JSON.") from exc

                contacts.extend(
                    contact
                    for contact in map(_to_contact, payload.get("connections", []))
                    if contact is not None
                )
                page_token = payload.get("nextPageToken")
                if not page_token:
                    break

        logger.info("Fetched %d contacts from Google", len(contacts))
        return contacts


def _primary(entries: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not entries:
        return None
    for entry in entries:
        if entry.get("metadata", {}).get("primary"):
            return entry
    return entries[0]


def _to_contact(person: Dict[str, Any]) -> Optional[Contact]:
    email = _primary(person.get("emailAddresses", []))
    if not email or not email.get("value"):
        return None
    name = _primary(person.get("names", []))
    phone = _primary(person.get("phoneNumbers", []))
    return Contact(
        name=name.get("displayName") if name else None,
        email=email["value"],
        phone=phone.get("value") if phone else None,
    )


__all__ = ["GoogleContactsClient"]
