"""Turn raw RFC822 bytes plus envelope metadata into an EmailDocument."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from email import policy
from email.message import Message
from email.parser import BytesParser
from typing import Optional

from onebox.domain.categories import EmailCategory
from onebox.domain.entities.email_document import EmailDocument
from onebox.domain.entities.message_ref import EmailAddress, Envelope
from onebox.domain.identity import email_fingerprint

NO_CONTENT = "(No content)"
NO_SUBJECT = "(no-subject)"

_TAG_RE = re.compile(r"<[^>]+>")


def strip_tags(html: str) -> str:
    # Naive on purpose: entities and script/style contents are left as-is.
    return _TAG_RE.sub("", html)


def _part_text(part: Message) -> str:
    try:
        content = part.get_content()
    except (LookupError, ValueError, AttributeError):
        content = None
    if isinstance(content, str):
        return content

    payload = part.get_payload(decode=True) or b""
    charset = part.get_content_charset() or "utf-8"
    try:
        return payload.decode(charset, errors="replace")
    except LookupError:
        return payload.decode("utf-8", errors="replace")


def _find_bodies(em: Message) -> tuple[Optional[str], Optional[str]]:
    """Return the first text/plain and text/html bodies, skipping attachments."""
    plain: Optional[str] = None
    html: Optional[str] = None

    for part in em.walk():
        if part.is_multipart():
            continue
        if part.get_content_disposition() == "attachment":
            continue

        ctype = part.get_content_type()
        if ctype == "text/plain" and plain is None:
            plain = _part_text(part)
        elif ctype == "text/html" and html is None:
            html = _part_text(part)

    return plain, html


def extract_body(raw: bytes) -> str:
    """Plain text if present, else tag-stripped HTML, else a placeholder."""
    if not raw:
        return NO_CONTENT

    em = BytesParser(policy=policy.default).parsebytes(raw)
    plain, html = _find_bodies(em)

    text = (plain or "").strip()
    if not text and html:
        text = strip_tags(html).strip()
    return text or NO_CONTENT


def flatten_addresses(addresses: Optional[list[EmailAddress]]) -> str:
    if not addresses:
        return ""
    return ",".join(a.address for a in addresses if a and a.address)


def iso_date(value: Optional[datetime], now: datetime) -> str:
    date = value or now
    if date.tzinfo is None:
        date = date.replace(tzinfo=timezone.utc)
    return date.isoformat()


def normalize_message(
    raw: bytes,
    envelope: Envelope,
    *,
    account: str,
    folder: str,
    uid: int,
    now: Optional[datetime] = None,
) -> EmailDocument:
    """Build the canonical, still unlabelled, document for one message."""
    captured_at = now or datetime.now(timezone.utc)

    subject = envelope.subject if envelope.subject else NO_SUBJECT

    return EmailDocument(
        id=email_fingerprint(account, folder, uid),
        account=account,
        folder=folder,
        subject=subject,
        from_=flatten_addresses(envelope.from_),
        to=flatten_addresses(envelope.to),
        date=iso_date(envelope.date, captured_at),
        text=extract_body(raw),
        label=EmailCategory.UNLABELLED,
    )
