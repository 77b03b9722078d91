from __future__ import annotations

from typing import Protocol

from onebox.domain.entities.email_document import EmailDocument


class EmailStore(Protocol):
    def exists(self, doc_id: str) -> bool: ...

    def upsert(self, document: EmailDocument) -> None: ...
