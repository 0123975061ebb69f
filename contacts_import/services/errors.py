"""
Failure vocabulary for the contacts import flow.

Provider adapters raise the exceptions defined here (or let ``httpx`` and
timeout errors escape); the flow maps them onto a small set of stable
``FlowErrorKind`` values that are safe to expose to the failure endpoint.
"""

from __future__ import annotations

import asyncio
import errno
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import httpx


class ContactsProviderError(Exception):
    """Base class for failures reported by a contacts provider adapter."""


class ProviderAuthorizationError(ContactsProviderError):
    """Raised when the user declined access or the provider rejected the grant."""


class OAuthTokenExchangeError(ContactsProviderError):
    """Raised when the token endpoint returns an error."""


class ContactsFetchError(ContactsProviderError):
    """Raised when the provider returns an unusable contacts payload."""


class SessionNotConfiguredError(RuntimeError):
    """Raised when the request pipeline has no session support installed."""


class FlowErrorKind(str, Enum):
    NOT_AUTHORIZED = "not_authorized"
    TIMEOUT = "timeout"
    INTERNAL_ERROR = "internal_error"


@dataclass(frozen=True)
class FlowError:
    """A classified failure. Only ``kind`` is ever shown to the end user."""

    kind: FlowErrorKind
    message: str

    @classmethod
    def from_exception(cls, kind: FlowErrorKind, exc: BaseException) -> "FlowError":
        return cls(kind=kind, message=str(exc) or exc.__class__.__name__)


def _is_timeout(exc: BaseException) -> bool:
    if isinstance(exc, (TimeoutError, asyncio.TimeoutError, httpx.TimeoutException)):
        return True
    return isinstance(exc, OSError) and exc.errno == errno.ETIMEDOUT


def classify_failure(exc: BaseException) -> Optional[FlowErrorKind]:
    """
    Map an adapter failure to its ``FlowErrorKind``.

    Returns ``None`` for exceptions outside the taxonomy; those must keep
    propagating to the surrounding pipeline.
    """
    if isinstance(exc, SessionNotConfiguredError):
        return None
    if isinstance(exc, ProviderAuthorizationError):
        return FlowErrorKind.NOT_AUTHORIZED
    if _is_timeout(exc):
        return FlowErrorKind.TIMEOUT
    if isinstance(exc, (ContactsProviderError, httpx.HTTPError, RuntimeError)):
        return FlowErrorKind.INTERNAL_ERROR
    return None


__all__ = [
    "ContactsFetchError",
    "ContactsProviderError",
    "FlowError",
    "FlowErrorKind",
    "OAuthTokenExchangeError",
    "ProviderAuthorizationError",
    "SessionNotConfiguredError",
    "classify_failure",
]
