from __future__ import annotations

from typing import Protocol


class EmailClassifier(Protocol):
    def classify(self, text: str) -> str: ...
