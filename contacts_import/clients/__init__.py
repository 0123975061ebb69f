"""Expose constructed client wrappers."""

from .google_auth import GoogleOAuthClient
from .google_contacts import GoogleContactsClient

__all__ = [
    "GoogleContactsClient",
    "GoogleOAuthClient",
]
