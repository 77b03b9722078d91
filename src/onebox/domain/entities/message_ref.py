from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional


@dataclass(frozen=True)
class EmailAddress:
    address: str
    name: Optional[str] = None


@dataclass(frozen=True)
class Envelope:
    subject: Optional[str] = None
    from_: Optional[list[EmailAddress]] = None
    to: Optional[list[EmailAddress]] = None
    date: Optional[datetime] = None


@dataclass
class MessageRef:
    """A message as yielded by a mailbox session.

    The RFC822 source is only fetched when ``raw_source()`` is called.
    """

    uid: int
    envelope: Envelope
    load_source: Callable[[], bytes] = field(repr=False)
    _source: Optional[bytes] = field(default=None, init=False, repr=False)

    def raw_source(self) -> bytes:
        if self._source is None:
            self._source = self.load_source() or b""
        return self._source
