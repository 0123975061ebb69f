"""Contacts provider adapters."""

from .base import ContactsProvider, ContactsResult
from .gmail import GmailContactsProvider
from .testing import DEFAULT_TEST_CONTACTS, IntegrationTestProvider

__all__ = [
    "ContactsProvider",
    "ContactsResult",
    "DEFAULT_TEST_CONTACTS",
    "GmailContactsProvider",
    "IntegrationTestProvider",
]
