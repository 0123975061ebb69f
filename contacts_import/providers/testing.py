"""Canned provider used by integration tests and local demos."""

from __future__ import annotations

import copy
from http import HTTPStatus
from typing import Iterable, Optional

from starlette.requests import Request
from starlette.responses import RedirectResponse, Response

from contacts_import.schemas import Contact
from contacts_import.services.query_codec import QueryParams

from .base import ContactsProvider, ContactsResult

DEFAULT_TEST_CONTACTS = (
    Contact(name="Ada Lovelace", email="ada@example.com"),
    Contact(name="Alan Turing", email="alan@example.com"),
)


class IntegrationTestProvider(ContactsProvider):
    """
    Skip the external consent screen and return preconfigured contacts.

    The entry step redirects straight back to the callback path; the callback
    step raises ``error`` when one is configured.
    """

    def __init__(
        self,
        name: str = "gmail",
        *,
        contacts: Optional[Iterable[ContactsResult]] = None,
        error: Optional[BaseException] = None,
        mount_path: str = "/contacts",
    ) -> None:
        self.name = name
        self.contacts = list(DEFAULT_TEST_CONTACTS if contacts is None else contacts)
        self.error = error
        self.callback_path = f"{mount_path.rstrip('/')}/{name}/callback"
        self.authorization_requests: list[QueryParams] = []
        self.fetch_count = 0

    async def request_authorization_from_user(
        self, request: Request, params: QueryParams
    ) -> Response:
        self.authorization_requests.append(dict(params))
        return RedirectResponse(url=self.callback_path, status_code=HTTPStatus.FOUND)

    async def fetch_contacts(self, request: Request) -> ContactsResult:
        self.fetch_count += 1
        if self.error is not None:
            raise self.error
        return copy.deepcopy(self.contacts)


__all__ = ["DEFAULT_TEST_CONTACTS", "IntegrationTestProvider"]
