"""Milvus implementation of EmailStore."""

from __future__ import annotations

from loguru import logger
from pymilvus import DataType

from onebox.application.ports.email_store import EmailStore
from onebox.domain.entities.email_document import EmailDocument
from onebox.infrastructure.milvus_client import MilvusClientWrapper


COLLECTION_NAME = "emails"
PLACEHOLDER_DIM = 8  # Documents are looked up by id only, no vector search
MAX_TEXT_CHARS = 16000  # Dynamic JSON field size limit


class MilvusEmailStore(EmailStore):
    """Keyed, last-write-wins document store for emails."""

    def __init__(self, client: MilvusClientWrapper, collection_name: str = COLLECTION_NAME):
        self.client = client
        self.collection_name = collection_name
        self._ensure_collection()

    def _ensure_collection(self) -> None:
        """Create emails collection if it doesn't exist."""
        if self.client.client.has_collection(self.collection_name):
            logger.info(f"Collection {self.collection_name} already exists")
            return

        logger.info(f"Creating collection {self.collection_name}")
        self.client.client.create_collection(
            collection_name=self.collection_name,
            dimension=PLACEHOLDER_DIM,
            primary_field_name="id",
            id_type=DataType.VARCHAR,
            max_length=128,
            vector_field_name="placeholder_vector",
            auto_id=False,
        )

    def exists(self, doc_id: str) -> bool:
        results = self.client.client.get(
            collection_name=self.collection_name,
            ids=[doc_id],
            output_fields=["id"],
        )
        return bool(results)

    def upsert(self, document: EmailDocument) -> None:
        """Insert or replace the document stored under ``document.id``."""
        data = document.to_record()
        data["text"] = data["text"][:MAX_TEXT_CHARS]
        data["placeholder_vector"] = [0.0] * PLACEHOLDER_DIM

        self.client.client.upsert(
            collection_name=self.collection_name,
            data=[data],
        )
        logger.debug(f"Upserted email {document.id}")
