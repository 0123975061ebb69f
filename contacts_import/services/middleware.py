"""Starlette middleware that mounts one ``ContactsImportFlow`` per provider."""

from __future__ import annotations

from typing import Iterable

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from .flow import ContactsImportFlow


class ContactsImportMiddleware(BaseHTTPMiddleware):
    """
    Intercept entry and callback paths of the configured flows.

    Must sit inside ``SessionMiddleware`` so ``scope["session"]`` is populated.
    Requests that match no flow are forwarded unchanged.
    """

    def __init__(self, app: ASGIApp, flows: Iterable[ContactsImportFlow]) -> None:
        super().__init__(app)
        self.flows = list(flows)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        for flow in self.flows:
            if flow.matches(path):
                return await flow.handle(request, call_next)
        return await call_next(request)


__all__ = ["ContactsImportMiddleware"]
