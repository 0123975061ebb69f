"""Expose dependency helpers for the application factory and routers."""

from .clients import (
    build_flows,
    get_contacts_providers,
    get_google_contacts_client,
    get_google_oauth_client,
    get_state_codec,
)
from .config import SettingsDependency, get_app_settings

__all__ = [
    "SettingsDependency",
    "build_flows",
    "get_app_settings",
    "get_contacts_providers",
    "get_google_contacts_client",
    "get_google_oauth_client",
    "get_state_codec",
]
