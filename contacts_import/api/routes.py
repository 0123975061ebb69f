"""
FastAPI routes for the contacts import service.

The import flow itself lives in ``ContactsImportMiddleware``; these routes are
the downstream stages it hands off to.
"""

from __future__ import annotations

import logging
from http import HTTPStatus

from fastapi import APIRouter, HTTPException, Query, Request

from contacts_import.core.config import AppSettings
from contacts_import.dependencies.config import SettingsDependency
from contacts_import.schemas import ContactsImportResult, FailureResponse
from contacts_import.services import CONTACTS_STATE_KEY, QUERY_PARAMS_STATE_KEY
from contacts_import.services.flow import ERROR_PARAM

router = APIRouter()
contacts_router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@contacts_router.get("/failure", response_model=FailureResponse)
async def contacts_import_failure(
    request: Request,
    error_message: str = Query(..., description="Failure kind reported by the flow."),
) -> FailureResponse:
    """Landing page for failed imports; echoes the caller's params back."""
    query_params = {
        key: value
        for key, value in request.query_params.items()
        if key != ERROR_PARAM
    }
    return FailureResponse(error_message=error_message, query_params=query_params)


@contacts_router.get("/{provider}/callback", response_model=ContactsImportResult)
async def contacts_import_callback(
    provider: str,
    request: Request,
    settings: AppSettings = SettingsDependency,
) -> ContactsImportResult:
    """Return the contacts attached to the request by the import middleware."""
    if provider not in settings.contacts.providers:
        raise HTTPException(
            status_code=HTTPStatus.NOT_FOUND,
            detail=f"Unknown contacts provider {provider!r}.",
        )
    contacts = getattr(request.state, CONTACTS_STATE_KEY, None)
    if contacts is None:
        raise HTTPException(
            status_code=HTTPStatus.NOT_FOUND,
            detail=f"No contacts import configured for {provider!r}.",
        )

    query_params = getattr(request.state, QUERY_PARAMS_STATE_KEY, None) or {}
    logger.info("Imported %d contacts from %s", len(contacts), provider)
    return ContactsImportResult(
        provider=provider,
        contacts=list(contacts),
        query_params=query_params,
    )


__all__ = ["contacts_router", "router"]
