"""Domain types for the email ingestion pipeline."""

from onebox.domain.categories import EmailCategory, coerce_category
from onebox.domain.entities import EmailAddress, EmailDocument, Envelope, MessageRef
from onebox.domain.identity import email_fingerprint

__all__ = [
    "EmailCategory",
    "coerce_category",
    "email_fingerprint",
    "EmailAddress",
    "EmailDocument",
    "Envelope",
    "MessageRef",
]
