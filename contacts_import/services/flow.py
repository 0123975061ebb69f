"""
Authorization-code flow shared by every contacts provider.

Each request is routed on its path alone:

* ``<mount>/<name>[/]`` starts the flow. The raw query string is stored in the
  session and the provider redirects the user to its consent screen.
* ``<mount>/<name>/callback...`` finishes the flow. Contacts are fetched and
  attached to ``request.state`` together with the originator query params,
  then the request continues down the pipeline.
* Anything else passes through untouched.

Provider failures never escape as exceptions; they become a redirect to
``<mount>/failure`` carrying only the error kind and the caller's params.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from http import HTTPStatus
from typing import TYPE_CHECKING, Any, Awaitable, Callable, MutableMapping, Optional

from starlette.requests import Request
from starlette.responses import RedirectResponse, Response

from .errors import FlowError, SessionNotConfiguredError, classify_failure
from .query_codec import QueryParams, decode_query_string, encode_query_string
from .state_token import StateTokenCodec

if TYPE_CHECKING:
    from contacts_import.providers.base import ContactsProvider

_LOG = logging.getLogger(__name__)

CONTACTS_STATE_KEY = "contacts"
QUERY_PARAMS_STATE_KEY = "contacts_query_params"
ERROR_PARAM = "error_message"
STATE_PARAM = "state"

CallNext = Callable[[Request], Awaitable[Response]]


@dataclass(frozen=True)
class FlowOutcome:
    """Result of one provider step: either ``value`` or ``error`` is meaningful."""

    value: Any = None
    error: Optional[FlowError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def run_provider_step(step: Awaitable[Any]) -> FlowOutcome:
    """Await a provider call, turning classified failures into an outcome."""
    try:
        return FlowOutcome(value=await step)
    except Exception as exc:
        kind = classify_failure(exc)
        if kind is None:
            raise
        return FlowOutcome(error=FlowError.from_exception(kind, exc))


class ContactsImportFlow:
    """Routes entry, callback and unrelated requests for a single provider."""

    def __init__(
        self,
        provider: ContactsProvider,
        *,
        mount_path: str = "/contacts",
        session_namespace: str = "contacts_import",
        state_codec: Optional[StateTokenCodec] = None,
        logger: Optional[logging.Logger] = _LOG,
    ) -> None:
        self.provider = provider
        self.state_codec = state_codec or StateTokenCodec()
        self.logger = logger

        mount = mount_path.rstrip("/")
        self.entry_path = f"{mount}/{provider.name}"
        self.callback_path = f"{self.entry_path}/callback"
        self.failure_path = f"{mount}/failure"
        self.session_key = f"{session_namespace}.{provider.name}.query_string"
        self._entry_pattern = re.compile(rf"^{re.escape(self.entry_path)}/?$")

    @property
    def name(self) -> str:
        return self.provider.name

    def is_entry(self, path: str) -> bool:
        return self._entry_pattern.match(path) is not None

    def is_callback(self, path: str) -> bool:
        return path.startswith(self.callback_path)

    def matches(self, path: str) -> bool:
        return self.is_entry(path) or self.is_callback(path)

    async def handle(self, request: Request, call_next: CallNext) -> Response:
        path = request.url.path
        if self.is_entry(path):
            return await self._handle_entry(request)
        if self.is_callback(path):
            return await self._handle_callback(request, call_next)
        return await call_next(request)

    async def _handle_entry(self, request: Request) -> Response:
        session = self._session(request)
        query_string = request.url.query
        session[self.session_key] = query_string
        params = decode_query_string(query_string)
        self._debug("Starting %s contacts import", self.name)

        outcome = await run_provider_step(
            self.provider.request_authorization_from_user(request, params)
        )
        if not outcome.ok:
            originator = self.originator_query_params(request, params)
            return self._failure_redirect(request, outcome.error, originator)
        return outcome.value

    async def _handle_callback(self, request: Request, call_next: CallNext) -> Response:
        session = self._session(request)
        session_params = decode_query_string(session.pop(self.session_key, None))
        originator = self.originator_query_params(request, session_params)
        self._debug("Handling %s contacts callback", self.name)

        outcome = await run_provider_step(self.provider.fetch_contacts(request))
        if not outcome.ok:
            return self._failure_redirect(request, outcome.error, originator)

        setattr(request.state, CONTACTS_STATE_KEY, outcome.value)
        setattr(request.state, QUERY_PARAMS_STATE_KEY, originator)
        return await call_next(request)

    def originator_query_params(
        self, request: Request, session_params: QueryParams
    ) -> QueryParams:
        """Prefer params echoed back in ``state``, then the session copy."""
        state_params = self.state_codec.decode(request.query_params.get(STATE_PARAM))
        if state_params:
            return state_params
        # A raw entry query may carry its own state token.
        return {
            key: value
            for key, value in (session_params or {}).items()
            if key != STATE_PARAM
        }

    def failure_location(self, request: Request, error: FlowError, originator: QueryParams) -> str:
        params = decode_query_string(request.url.query)
        params.update(originator)
        params.pop(STATE_PARAM, None)
        params[ERROR_PARAM] = error.kind.value
        return f"{self.failure_path}?{encode_query_string(params)}"

    def _failure_redirect(
        self, request: Request, error: FlowError, originator: QueryParams
    ) -> Response:
        if self.logger is not None:
            self.logger.warning(
                "Error %s while processing %s: %s",
                error.kind.value,
                request.url.path,
                error.message,
            )
        return RedirectResponse(
            url=self.failure_location(request, error, originator),
            status_code=HTTPStatus.FOUND,
        )

    @staticmethod
    def _session(request: Request) -> MutableMapping[str, Any]:
        if "session" not in request.scope:
            raise SessionNotConfiguredError(
                "SessionMiddleware must be installed to import contacts."
            )
        return request.scope["session"]

    def _debug(self, message: str, *args: Any) -> None:
        if self.logger is not None:
            self.logger.debug(message, *args)


__all__ = [
    "CONTACTS_STATE_KEY",
    "ContactsImportFlow",
    "FlowOutcome",
    "QUERY_PARAMS_STATE_KEY",
    "run_provider_step",
]
