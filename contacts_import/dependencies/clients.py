"""
Factory functions assembling providers and import flows from settings.
"""

from __future__ import annotations

from typing import List, Optional

from contacts_import.clients import GoogleContactsClient, GoogleOAuthClient
from contacts_import.core.config import AppSettings
from contacts_import.providers import (
    ContactsProvider,
    GmailContactsProvider,
    IntegrationTestProvider,
)
from contacts_import.services import ContactsImportFlow, StateTokenCodec
from contacts_import.utils.http import RetryConfig, build_verify


def get_state_codec(settings: AppSettings) -> StateTokenCodec:
    """Provide the OAuth state codec, signed when a secret is configured."""
    return StateTokenCodec(secret_key=settings.contacts.state_secret)


def get_google_oauth_client(settings: AppSettings) -> GoogleOAuthClient:
    contacts = settings.contacts
    return GoogleOAuthClient(
        settings.google,
        timeout=contacts.http_timeout_seconds,
        verify=build_verify(contacts.ssl_ca_file),
    )


def get_google_contacts_client(settings: AppSettings) -> GoogleContactsClient:
    contacts = settings.contacts
    return GoogleContactsClient(
        timeout=contacts.http_timeout_seconds,
        verify=build_verify(contacts.ssl_ca_file),
        retry_config=RetryConfig(attempts=contacts.http_retry_attempts),
    )


def get_contacts_providers(settings: AppSettings) -> List[ContactsProvider]:
    """Build one provider per configured name, or test doubles in test mode."""
    contacts = settings.contacts
    if contacts.test_mode:
        return [
            IntegrationTestProvider(name, mount_path=contacts.mount_path)
            for name in contacts.providers
        ]

    providers: List[ContactsProvider] = []
    for name in contacts.providers:
        if name == "gmail":
            providers.append(
                GmailContactsProvider(
                    oauth_client=get_google_oauth_client(settings),
                    contacts_client=get_google_contacts_client(settings),
                    state_codec=get_state_codec(settings),
                )
            )
        else:
            raise ValueError(f"No contacts provider registered for {name!r}")
    return providers


def build_flows(
    settings: AppSettings,
    providers: Optional[List[ContactsProvider]] = None,
) -> List[ContactsImportFlow]:
    """Wrap each provider in a ``ContactsImportFlow`` mounted per settings."""
    if providers is None:
        providers = get_contacts_providers(settings)
    state_codec = get_state_codec(settings)
    return [
        ContactsImportFlow(
            provider,
            mount_path=settings.contacts.mount_path,
            session_namespace=settings.contacts.session_namespace,
            state_codec=state_codec,
        )
        for provider in providers
    ]


__all__ = [
    "build_flows",
    "get_contacts_providers",
    "get_google_contacts_client",
    "get_google_oauth_client",
    "get_state_codec",
]
