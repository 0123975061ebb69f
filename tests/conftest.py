"""Pytest configuration shared across the suite."""

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover
    import _bootstrap  # type: ignore # noqa: F401

from typing import Any, Dict, Optional

import pytest
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO-powered tests to run against asyncio backend only."""
    return "asyncio"


def build_request(
    path: str,
    query_string: str = "",
    session: Optional[Dict[str, Any]] = None,
    with_session: bool = True,
) -> Request:
    """Create a bare Starlette request, optionally carrying a session dict."""
    scope: Dict[str, Any] = {
        "type": "http",
        "method": "GET",
        "scheme": "http",
        "server": ("testserver", 80),
        "path": path,
        "root_path": "",
        "query_string": query_string.encode("latin-1"),
        "headers": [(b"host", b"testserver")],
    }
    if with_session:
        scope["session"] = {} if session is None else session
    return Request(scope)


class RecordingCallNext:
    """Stand-in for the downstream pipeline stage."""

    def __init__(self) -> None:
        self.requests: list[Request] = []

    async def __call__(self, request: Request) -> Response:
        self.requests.append(request)
        return PlainTextResponse("downstream")


@pytest.fixture
def call_next() -> RecordingCallNext:
    return RecordingCallNext()


@pytest.fixture
def make_request():
    return build_request
