"""
FastAPI application entrypoint for the contacts import service.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware

from contacts_import.api.routes import contacts_router, router as api_router
from contacts_import.core.config import AppSettings, get_settings
from contacts_import.core.logging import configure_logging
from contacts_import.dependencies import build_flows, get_app_settings
from contacts_import.providers import ContactsProvider
from contacts_import.services import ContactsImportMiddleware


def create_app(
    settings: Optional[AppSettings] = None,
    providers: Optional[List[ContactsProvider]] = None,
) -> FastAPI:
    """Factory for the FastAPI application."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Contacts Import",
        version="0.1.0",
        description="OAuth redirect flow importing address books from contact providers.",
    )
    app.include_router(api_router)
    app.dependency_overrides[get_app_settings] = lambda: settings
    app.include_router(contacts_router, prefix=settings.contacts.mount_path)

    # Starlette runs the last registered middleware first; the session must
    # wrap the import flows.
    app.add_middleware(
        ContactsImportMiddleware, flows=build_flows(settings, providers)
    )
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        https_only=settings.environment == "production",
    )
    return app


app = create_app()

__all__ = ["app", "create_app"]
