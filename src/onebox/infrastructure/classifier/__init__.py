"""Email classification backends."""

from onebox.infrastructure.classifier.llm import LLMEmailClassifier, create_llm

__all__ = [
    "LLMEmailClassifier",
    "create_llm",
]
