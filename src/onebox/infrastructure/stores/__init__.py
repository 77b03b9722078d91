"""Store implementations."""

from onebox.infrastructure.stores.milvus_email_store import MilvusEmailStore

__all__ = [
    "MilvusEmailStore",
]
