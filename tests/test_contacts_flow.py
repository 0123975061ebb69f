try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import logging

import httpx
import pytest
from starlette.responses import RedirectResponse

from contacts_import.providers import ContactsProvider, IntegrationTestProvider
from contacts_import.services import (
    CONTACTS_STATE_KEY,
    QUERY_PARAMS_STATE_KEY,
    ContactsImportFlow,
    ProviderAuthorizationError,
    SessionNotConfiguredError,
    StateTokenCodec,
)

SESSION_KEY = "contacts_import.gmail.query_string"


class RecordingProvider(ContactsProvider):
    """Provider that records calls and fails on demand."""

    def __init__(self, *, authorize_error=None, fetch_error=None, contacts=None) -> None:
        self.name = "gmail"
        self.authorize_error = authorize_error
        self.fetch_error = fetch_error
        self.contacts = contacts if contacts is not None else [{"email": "ada@example.com"}]
        self.authorize_calls: list[dict] = []
        self.fetch_calls = 0

    async def request_authorization_from_user(self, request, params):
        self.authorize_calls.append(params)
        if self.authorize_error is not None:
            raise self.authorize_error
        return RedirectResponse("https://provider.example/consent", status_code=302)

    async def fetch_contacts(self, request):
        self.fetch_calls += 1
        if self.fetch_error is not None:
            raise self.fetch_error
        return self.contacts


def _flow(provider, **kwargs) -> ContactsImportFlow:
    return ContactsImportFlow(provider, **kwargs)


def test_paths_derive_from_mount_and_provider_name() -> None:
    flow = _flow(RecordingProvider(), mount_path="/import/", session_namespace="ns")

    assert flow.entry_path == "/import/gmail"
    assert flow.callback_path == "/import/gmail/callback"
    assert flow.failure_path == "/import/failure"
    assert flow.session_key == "ns.gmail.query_string"


@pytest.mark.parametrize(
    ("path", "entry", "callback"),
    [
        ("/contacts/gmail", True, False),
        ("/contacts/gmail/", True, False),
        ("/contacts/gmail/callback", False, True),
        ("/contacts/gmail/callback/extra", False, True),
        ("/contacts/gmailx", False, False),
        ("/contacts/gmail/other", False, False),
        ("/prefix/contacts/gmail", False, False),
        ("/other", False, False),
    ],
)
def test_path_matching(path: str, entry: bool, callback: bool) -> None:
    flow = _flow(RecordingProvider())

    assert flow.is_entry(path) is entry
    assert flow.is_callback(path) is callback


@pytest.mark.anyio
async def test_entry_stores_query_string_and_requests_authorization(
    make_request, call_next
) -> None:
    provider = RecordingProvider()
    session: dict = {}
    request = make_request("/contacts/gmail", "a=1&b=2", session=session)

    response = await _flow(provider).handle(request, call_next)

    assert response.status_code == 302
    assert response.headers["location"] == "https://provider.example/consent"
    assert session == {SESSION_KEY: "a=1&b=2"}
    assert provider.authorize_calls == [{"a": "1", "b": "2"}]
    assert call_next.requests == []
    assert not hasattr(request.state, CONTACTS_STATE_KEY)


@pytest.mark.anyio
async def test_entry_accepts_trailing_slash(make_request, call_next) -> None:
    provider = RecordingProvider()

    await _flow(provider).handle(make_request("/contacts/gmail/", "x=9"), call_next)

    assert provider.authorize_calls == [{"x": "9"}]


@pytest.mark.anyio
async def test_entry_failure_redirects_with_entry_params(make_request, call_next) -> None:
    provider = RecordingProvider(authorize_error=RuntimeError("consent url broken"))
    request = make_request("/contacts/gmail", "a=1")

    response = await _flow(provider).handle(request, call_next)

    assert response.status_code == 302
    assert response.headers["location"] == "/contacts/failure?a=1&error_message=internal_error"


@pytest.mark.anyio
async def test_entry_failure_drops_incoming_state_token(make_request, call_next) -> None:
    provider = RecordingProvider(authorize_error=ProviderAuthorizationError("declined"))
    request = make_request("/contacts/gmail", "a=1&state=junk")

    response = await _flow(provider).handle(request, call_next)

    location = response.headers["location"]
    assert location == "/contacts/failure?a=1&error_message=not_authorized"
    assert "state" not in location


@pytest.mark.anyio
async def test_callback_failure_drops_state_from_session_copy(make_request, call_next) -> None:
    provider = RecordingProvider(fetch_error=RuntimeError("boom"))
    session = {SESSION_KEY: "a=1&state=x"}
    request = make_request("/contacts/gmail/callback", "code=abc", session=session)

    response = await _flow(provider).handle(request, call_next)

    location = response.headers["location"]
    assert location == "/contacts/failure?code=abc&a=1&error_message=internal_error"
    assert "state" not in location


@pytest.mark.anyio
async def test_callback_attaches_contacts_and_forwards(make_request, call_next) -> None:
    provider = RecordingProvider()
    session = {SESSION_KEY: "a=1&b=2"}
    request = make_request("/contacts/gmail/callback", "code=abc", session=session)

    response = await _flow(provider).handle(request, call_next)

    assert response.body == b"downstream"
    assert call_next.requests == [request]
    assert getattr(request.state, CONTACTS_STATE_KEY) == [{"email": "ada@example.com"}]
    assert getattr(request.state, QUERY_PARAMS_STATE_KEY) == {"a": "1", "b": "2"}
    assert SESSION_KEY not in session


@pytest.mark.anyio
async def test_callback_without_prior_entry_uses_empty_params(make_request, call_next) -> None:
    request = make_request("/contacts/gmail/callback", "code=abc")

    await _flow(RecordingProvider()).handle(request, call_next)

    assert getattr(request.state, QUERY_PARAMS_STATE_KEY) == {}


@pytest.mark.anyio
async def test_callback_state_takes_precedence_over_session(make_request, call_next) -> None:
    codec = StateTokenCodec()
    state = codec.encode({"c": "3"})
    session = {SESSION_KEY: "a=1&b=2"}
    request = make_request("/contacts/gmail/callback", f"code=abc&state={state}", session=session)

    await _flow(RecordingProvider(), state_codec=codec).handle(request, call_next)

    assert getattr(request.state, QUERY_PARAMS_STATE_KEY) == {"c": "3"}


@pytest.mark.anyio
async def test_callback_with_malformed_state_falls_back_to_session(
    make_request, call_next
) -> None:
    session = {SESSION_KEY: "a=1"}
    request = make_request("/contacts/gmail/callback", "state=%%%garbage", session=session)

    await _flow(RecordingProvider()).handle(request, call_next)

    assert getattr(request.state, QUERY_PARAMS_STATE_KEY) == {"a": "1"}


@pytest.mark.anyio
async def test_callback_denied_redirects_to_failure(make_request, call_next) -> None:
    codec = StateTokenCodec()
    provider = RecordingProvider(fetch_error=ProviderAuthorizationError("user declined"))
    session = {SESSION_KEY: "a=1&b=2"}
    request = make_request(
        "/contacts/gmail/callback", f"state={codec.encode({})}", session=session
    )

    response = await _flow(provider, state_codec=codec).handle(request, call_next)

    assert response.status_code == 302
    assert response.body == b""
    assert response.headers["location"] == (
        "/contacts/failure?a=1&b=2&error_message=not_authorized"
    )
    assert call_next.requests == []
    assert not hasattr(request.state, CONTACTS_STATE_KEY)


@pytest.mark.anyio
async def test_failure_redirect_merges_params_and_error_wins(make_request, call_next) -> None:
    codec = StateTokenCodec()
    state = codec.encode({"origin": "app", "error_message": "spoofed"})
    provider = RecordingProvider(
        fetch_error=httpx.ReadTimeout("slow", request=httpx.Request("GET", "https://x"))
    )
    request = make_request(
        "/contacts/gmail/callback", f"code=abc&state={state}&origin=provider"
    )

    response = await _flow(provider, state_codec=codec).handle(request, call_next)

    location = response.headers["location"]
    assert location == "/contacts/failure?code=abc&origin=app&error_message=timeout"
    assert "state=" not in location


@pytest.mark.anyio
async def test_failure_logs_kind_and_message_but_does_not_leak_it(
    make_request, call_next, caplog: pytest.LogCaptureFixture
) -> None:
    provider = RecordingProvider(fetch_error=RuntimeError("secret upstream detail"))
    request = make_request("/contacts/gmail/callback", "code=abc")

    with caplog.at_level(logging.WARNING):
        response = await _flow(provider).handle(request, call_next)

    assert "Error internal_error while processing /contacts/gmail/callback" in caplog.text
    assert "secret upstream detail" in caplog.text
    assert "secret" not in response.headers["location"]


@pytest.mark.anyio
async def test_failure_without_logger(make_request, call_next) -> None:
    provider = RecordingProvider(fetch_error=ProviderAuthorizationError("nope"))

    response = await _flow(provider, logger=None).handle(
        make_request("/contacts/gmail/callback"), call_next
    )

    assert response.headers["location"] == "/contacts/failure?error_message=not_authorized"


@pytest.mark.anyio
async def test_unclassified_failure_propagates(make_request, call_next) -> None:
    provider = RecordingProvider(fetch_error=KeyError("bug"))

    with pytest.raises(KeyError):
        await _flow(provider).handle(make_request("/contacts/gmail/callback"), call_next)


@pytest.mark.anyio
async def test_unrelated_path_passes_through_untouched(make_request, call_next) -> None:
    provider = RecordingProvider()
    session = {"unrelated": "value"}
    request = make_request("/other", "a=1", session=session)

    response = await _flow(provider).handle(request, call_next)

    assert response.body == b"downstream"
    assert call_next.requests == [request]
    assert session == {"unrelated": "value"}
    assert provider.authorize_calls == []
    assert provider.fetch_calls == 0
    assert not hasattr(request.state, CONTACTS_STATE_KEY)


@pytest.mark.anyio
@pytest.mark.parametrize("path", ["/contacts/gmail", "/contacts/gmail/callback"])
async def test_missing_session_is_fatal(make_request, call_next, path: str) -> None:
    provider = RecordingProvider()
    request = make_request(path, "a=1", with_session=False)

    with pytest.raises(SessionNotConfiguredError):
        await _flow(provider).handle(request, call_next)

    assert provider.authorize_calls == []
    assert provider.fetch_calls == 0


@pytest.mark.anyio
async def test_missing_session_does_not_affect_other_paths(make_request, call_next) -> None:
    request = make_request("/other", with_session=False)

    response = await _flow(RecordingProvider()).handle(request, call_next)

    assert response.body == b"downstream"


@pytest.mark.anyio
async def test_integration_test_provider_round_trip(make_request, call_next) -> None:
    provider = IntegrationTestProvider(contacts=[{"email": "grace@example.com"}])
    flow = _flow(provider)
    session: dict = {}

    entry = await flow.handle(make_request("/contacts/gmail", "a=1", session=session), call_next)
    assert entry.headers["location"] == "/contacts/gmail/callback"

    callback_request = make_request(entry.headers["location"], session=session)
    await flow.handle(callback_request, call_next)

    assert getattr(callback_request.state, CONTACTS_STATE_KEY) == [{"email": "grace@example.com"}]
    assert getattr(callback_request.state, QUERY_PARAMS_STATE_KEY) == {"a": "1"}
