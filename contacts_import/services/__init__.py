"""Service layer exports."""

from .errors import (
    ContactsFetchError,
    ContactsProviderError,
    FlowError,
    FlowErrorKind,
    OAuthTokenExchangeError,
    ProviderAuthorizationError,
    SessionNotConfiguredError,
    classify_failure,
)
from .flow import (
    CONTACTS_STATE_KEY,
    QUERY_PARAMS_STATE_KEY,
    ContactsImportFlow,
    FlowOutcome,
    run_provider_step,
)
from .middleware import ContactsImportMiddleware
from .query_codec import QueryParams, decode_query_string, encode_query_string
from .state_token import StateTokenCodec

__all__ = [
    "CONTACTS_STATE_KEY",
    "QUERY_PARAMS_STATE_KEY",
    "ContactsFetchError",
    "ContactsImportFlow",
    "ContactsImportMiddleware",
    "ContactsProviderError",
    "FlowError",
    "FlowErrorKind",
    "FlowOutcome",
    "OAuthTokenExchangeError",
    "ProviderAuthorizationError",
    "QueryParams",
    "SessionNotConfiguredError",
    "StateTokenCodec",
    "classify_failure",
    "decode_query_string",
    "encode_query_string",
    "run_provider_step",
]
