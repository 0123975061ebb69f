"""HTTP utilities providing retry/backoff semantics and TLS configuration."""

from __future__ import annotations

import asyncio
import ssl
from pathlib import Path
from typing import Awaitable, Callable, Optional, Union

import httpx


class RetryConfig:
    def __init__(self, *, attempts: int = 3, backoff_seconds: float = 1.0) -> None:
        self.attempts = max(1, attempts)
        self.backoff_seconds = backoff_seconds


def _is_retryable(exc: httpx.HTTPError) -> bool:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= 500
    return isinstance(exc, httpx.TransportError)


async def request_with_retry(
    func: Callable[..., Awaitable[httpx.Response]],
    *args,
    retry_config: RetryConfig | None = None,
    **kwargs,
) -> httpx.Response:
    """
    Call ``func`` until it returns a successful response.

    Transport errors (timeouts included) and 5xx responses are retried with a
    linear backoff; 4xx responses are raised immediately. The last error is
    re-raised once attempts are exhausted.
    """
    config = retry_config or RetryConfig()
    attempt = 0
    last_exception: Exception | None = None

    while attempt < config.attempts:
        try:
            response = await func(*args, **kwargs)
            response.raise_for_status()
            return response
        except httpx.HTTPError as exc:
            if not _is_retryable(exc):
                raise
            last_exception = exc
            attempt += 1
            if attempt >= config.attempts:
                break
            await asyncio.sleep(config.backoff_seconds * attempt)

    if last_exception is not None:
        raise last_exception
    raise RuntimeError("Request failed without raising an exception")


def build_verify(ca_file: Optional[Union[str, Path]]) -> Union[ssl.SSLContext, bool]:
    """Return the ``verify`` argument for ``httpx`` clients honoring a custom CA bundle."""
    if ca_file is None:
        return True
    return ssl.create_default_context(cafile=str(ca_file))


__all__ = ["RetryConfig", "build_verify", "request_with_retry"]
