"""Schemas describing imported contacts and flow outcomes."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class Contact(BaseModel):
    """A single normalized contact entry."""

    name: Optional[str] = Field(None, description="Display name, when the provider has one.")
    email: str = Field(..., description="Primary email address.")
    phone: Optional[str] = None


class ContactsImportResult(BaseModel):
    """Response returned once a provider callback has produced contacts."""

    provider: str
    contacts: List[Any] = Field(default_factory=list)
    query_params: Dict[str, str] = Field(
        default_factory=dict,
        description="Query parameters supplied when the flow was started.",
    )


class FailureResponse(BaseModel):
    """Body served by the failure endpoint."""

    error_message: str
    query_params: Dict[str, str] = Field(default_factory=dict)


__all__ = ["Contact", "ContactsImportResult", "FailureResponse"]
