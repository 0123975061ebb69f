"""Query string helpers shared by the flow and the provider adapters."""

from __future__ import annotations

from typing import Dict, Mapping, Optional, Union
from urllib.parse import parse_qsl, urlencode

QueryParams = Dict[str, str]


def decode_query_string(query: Optional[Union[str, bytes]]) -> QueryParams:
    """
    Parse a raw query string into a flat mapping.

    Segments without ``=`` map to an empty value and repeated keys keep the
    last value. Malformed input is parsed best-effort and never raises.
    """
    if not query:
        return {}
    if isinstance(query, bytes):
        query = query.decode("latin-1")
    return dict(parse_qsl(query, keep_blank_values=True, errors="replace"))


def encode_query_string(params: Mapping[str, str]) -> str:
    """Escape and join ``params`` into a query string."""
    return urlencode([(str(key), str(value)) for key, value in params.items()])


__all__ = ["QueryParams", "decode_query_string", "encode_query_string"]
