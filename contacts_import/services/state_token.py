"""Encode the caller's query parameters into the OAuth ``state`` value."""

from __future__ import annotations

import base64
import binascii
import hmac
import json
import logging
from hashlib import sha256
from typing import Any, Mapping, Optional

from .query_codec import QueryParams

logger = logging.getLogger(__name__)

_SIGNATURE_SIZE = sha256().digest_size


class StateTokenCodec:
    """
    Round-trip ``{"qs": params}`` through an opaque, URL-safe token.

    When ``secret_key`` is provided the payload is prefixed with an HMAC so a
    tampered token decodes to an empty mapping instead of attacker-chosen values.
    """

    def __init__(self, secret_key: Optional[str] = None) -> None:
        self._secret_key = secret_key.encode("utf-8") if secret_key else None

    def encode(self, params: Mapping[str, str]) -> str:
        serialized = json.dumps(
            {"qs": dict(params)}, separators=(",", ":"), sort_keys=True
        ).encode("utf-8")
        if self._secret_key is not None:
            serialized = self._sign(serialized) + serialized
        return base64.urlsafe_b64encode(serialized).decode("ascii")

    def decode(self, token: Optional[str]) -> QueryParams:
        """Return the embedded query params, or ``{}`` for a missing or invalid token."""
        if not token:
            return {}
        try:
            raw = base64.urlsafe_b64decode(_pad(token).encode("ascii"))
        except (binascii.Error, UnicodeEncodeError, ValueError):
            logger.warning("Discarding OAuth state that is not valid base64")
            return {}

        if self._secret_key is not None:
            signature, raw = raw[:_SIGNATURE_SIZE], raw[_SIGNATURE_SIZE:]
            if not hmac.compare_digest(signature, self._sign(raw)):
                logger.warning("Discarding OAuth state with an invalid signature")
                return {}

        try:
            payload: Any = json.loads(raw)
        except (UnicodeDecodeError, json.JSONDecodeError):
            logger.warning("Discarding OAuth state that is not valid JSON")
            return {}

        if not isinstance(payload, dict):
            return {}
        query_params = payload.get("qs") or {}
        if not isinstance(query_params, dict):
            return {}
        return {str(key): str(value) for key, value in query_params.items()}

    def _sign(self, serialized: bytes) -> bytes:
        assert self._secret_key is not None
        return hmac.new(self._secret_key, serialized, sha256).digest()


def _pad(token: str) -> str:
    # Some providers strip trailing "=" from echoed parameters.
    return token + "=" * (-len(token) % 4)


__all__ = ["StateTokenCodec"]
