"""
Settings injection for the contacts routes.

``create_app`` overrides ``get_app_settings`` with the settings it was built
from, so routes and middleware always agree on the enabled providers.
"""

from fastapi import Depends

from contacts_import.core.config import AppSettings, get_settings


def get_app_settings() -> AppSettings:
    """FastAPI dependency returning the process-wide settings."""
    return get_settings()


SettingsDependency = Depends(get_app_settings)

__all__ = ["SettingsDependency", "get_app_settings"]
