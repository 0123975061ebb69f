"""Public schema exports."""

from .contacts import Contact, ContactsImportResult, FailureResponse

__all__ = [
    "Contact",
    "ContactsImportResult",
    "FailureResponse",
]
