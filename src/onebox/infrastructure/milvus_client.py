"""Milvus client used as the email document store."""

from typing import Any

from loguru import logger
from pymilvus import MilvusClient

from onebox.infrastructure.settings import Settings, get_settings


class MilvusClientWrapper:
    """Wrapper for Milvus connection lifecycle."""

    def __init__(self, settings: Settings | None = None):
        """Initialize Milvus client wrapper."""
        self.settings = settings or get_settings()
        self._client: MilvusClient | None = None

    def connect(self) -> MilvusClient:
        """Establish connection to Milvus."""
        if self._client is None:
            logger.info(f"Connecting to Milvus at {self.settings.milvus_uri}")
            self._client = MilvusClient(uri=self.settings.milvus_uri)
            logger.info("Milvus connection established")
        return self._client

    def disconnect(self) -> None:
        """Close Milvus connection."""
        if self._client is not None:
            self._client.close()
            self._client = None
            logger.info("Milvus connection closed")

    @property
    def client(self) -> MilvusClient:
        """Get or create Milvus client."""
        if self._client is None:
            return self.connect()
        return self._client

    def health_check(self) -> dict[str, Any]:
        """Check Milvus connection health."""
        try:
            self.client.list_collections()
            return {"status": "healthy", "uri": self.settings.milvus_uri}
        except Exception as e:
            logger.error(f"Milvus health check failed: {e}")
            return {
                "status": "unhealthy",
                "uri": self.settings.milvus_uri,
                "error": str(e),
            }


# Singleton instance
_milvus_client: MilvusClientWrapper | None = None


def get_milvus_client() -> MilvusClientWrapper:
    """Get singleton Milvus client instance."""
    global _milvus_client
    if _milvus_client is None:
        _milvus_client = MilvusClientWrapper()
    return _milvus_client
