"""Contract implemented by every contacts provider adapter."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from starlette.requests import Request
from starlette.responses import Response

from contacts_import.services.query_codec import QueryParams

ContactsResult = Any


class ContactsProvider(ABC):
    """
    Provider-specific half of the import flow.

    ``name`` doubles as the flow name: it determines the entry path, the
    callback path and the session key used by ``ContactsImportFlow``.
    Failures are reported by raising the exceptions in
    ``contacts_import.services.errors``.
    """

    name: str

    @abstractmethod
    async def request_authorization_from_user(
        self, request: Request, params: QueryParams
    ) -> Response:
        """Return a redirect to the provider's consent screen."""

    @abstractmethod
    async def fetch_contacts(self, request: Request) -> ContactsResult:
        """Exchange the callback's authorization code and fetch the contacts."""


__all__ = ["ContactsProvider", "ContactsResult"]
