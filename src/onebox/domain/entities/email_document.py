from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from onebox.domain.categories import EmailCategory


@dataclass(frozen=True)
class EmailDocument:
    id: str
    account: str
    folder: str
    subject: str
    from_: str
    to: str
    date: str  # ISO-8601
    text: str
    label: EmailCategory = EmailCategory.UNLABELLED

    def with_label(self, label: EmailCategory) -> EmailDocument:
        return replace(self, label=label)

    def to_record(self) -> dict[str, Any]:
        """Shape stored in the document store."""
        return {
            "id": self.id,
            "account": self.account,
            "folder": self.folder,
            "subject": self.subject,
            "from": self.from_,
            "to": self.to,
            "date": self.date,
            "text": self.text,
            "labels": {"ai": self.label.value},
        }
