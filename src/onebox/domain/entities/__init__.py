"""Domain entities."""

from onebox.domain.entities.email_document import EmailDocument
from onebox.domain.entities.message_ref import EmailAddress, Envelope, MessageRef

__all__ = [
    "EmailAddress",
    "EmailDocument",
    "Envelope",
    "MessageRef",
]
