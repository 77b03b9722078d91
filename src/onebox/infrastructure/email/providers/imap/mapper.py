from __future__ import annotations

from email.header import decode_header, make_header
from typing import Any, Optional

from onebox.domain.entities.message_ref import EmailAddress, Envelope


def _decode(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    try:
        return str(make_header(decode_header(value)))
    except (LookupError, ValueError, UnicodeDecodeError):
        # Unknown charset or broken encoded-word; keep the raw header
        return value


def _address(raw: Any) -> Optional[EmailAddress]:
    mailbox = _decode(getattr(raw, "mailbox", None))
    host = _decode(getattr(raw, "host", None))
    if not mailbox:
        # Group syntax markers carry no mailbox
        return None
    address = f"{mailbox}@{host}" if host else mailbox
    return EmailAddress(address=address, name=_decode(getattr(raw, "name", None)))


def _addresses(raw_list: Any) -> Optional[list[EmailAddress]]:
    if raw_list is None:
        return None
    out = [a for a in (_address(r) for r in raw_list) if a is not None]
    return out


def to_envelope(raw: Any) -> Envelope:
    """Map an imapclient ``Envelope`` onto the domain Envelope."""
    if raw is None:
        return Envelope()
    subject = _decode(raw.subject)
    return Envelope(
        subject=subject.strip() if subject else None,
        from_=_addresses(raw.from_),
        to=_addresses(raw.to),
        date=raw.date,
    )
