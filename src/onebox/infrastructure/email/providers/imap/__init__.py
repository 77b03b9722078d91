"""IMAP mailbox provider."""

from onebox.infrastructure.email.providers.imap.client import ImapMailboxSession
from onebox.infrastructure.email.providers.imap.mapper import to_envelope

__all__ = [
    "ImapMailboxSession",
    "to_envelope",
]
