# src/onebox/infrastructure/__init__.py
"""Infrastructure layer - external services, databases, and configuration."""

from onebox.infrastructure.milvus_client import (
    MilvusClientWrapper,
    get_milvus_client,
)
from onebox.infrastructure.settings import Settings, get_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    # Milvus
    "MilvusClientWrapper",
    "get_milvus_client",
]
