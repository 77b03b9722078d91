from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from pymilvus import DataType

from onebox.domain.categories import EmailCategory
from onebox.domain.entities.email_document import EmailDocument
from onebox.infrastructure.stores import MilvusEmailStore
from onebox.infrastructure.stores.milvus_email_store import MAX_TEXT_CHARS, PLACEHOLDER_DIM


@pytest.fixture
def milvus() -> MagicMock:
    wrapper = MagicMock()
    wrapper.client.has_collection.return_value = True
    return wrapper


def _doc(text: str = "Hello") -> EmailDocument:
    return EmailDocument(
        id="abc123",
        account="a@example.com",
        folder="INBOX",
        subject="Hi",
        from_="lead@example.com",
        to="sales@example.com",
        date="2026-10-01T09:30:00+00:00",
        text=text,
        label=EmailCategory.INTERESTED,
    )


def test_creates_collection_keyed_by_string_id() -> None:
    wrapper = MagicMock()
    wrapper.client.has_collection.return_value = False

    MilvusEmailStore(wrapper, collection_name="emails_test")

    kwargs = wrapper.client.create_collection.call_args.kwargs
    assert kwargs["collection_name"] == "emails_test"
    assert kwargs["primary_field_name"] == "id"
    assert kwargs["id_type"] == DataType.VARCHAR
    assert kwargs["auto_id"] is False


def test_existing_collection_is_reused(milvus) -> None:
    MilvusEmailStore(milvus)

    milvus.client.create_collection.assert_not_called()


def test_exists_looks_up_by_id(milvus) -> None:
    store = MilvusEmailStore(milvus)
    milvus.client.get.return_value = [{"id": "abc123"}]

    assert store.exists("abc123") is True
    assert milvus.client.get.call_args.kwargs["ids"] == ["abc123"]

    milvus.client.get.return_value = []
    assert store.exists("other") is False


def test_upsert_writes_record_with_label(milvus) -> None:
    store = MilvusEmailStore(milvus)

    store.upsert(_doc())

    kwargs = milvus.client.upsert.call_args.kwargs
    assert kwargs["collection_name"] == "emails"
    (row,) = kwargs["data"]
    assert row["id"] == "abc123"
    assert row["from"] == "lead@example.com"
    assert row["labels"] == {"ai": "Interested"}
    assert "label" not in row
    assert row["placeholder_vector"] == [0.0] * PLACEHOLDER_DIM


def test_upsert_truncates_long_text(milvus) -> None:
    store = MilvusEmailStore(milvus)

    store.upsert(_doc(text="x" * (MAX_TEXT_CHARS + 10)))

    (row,) = milvus.client.upsert.call_args.kwargs["data"]
    assert len(row["text"]) == MAX_TEXT_CHARS


def test_repeated_upsert_uses_same_key(milvus) -> None:
    store = MilvusEmailStore(milvus)

    store.upsert(_doc())
    store.upsert(_doc())

    ids = [c.kwargs["data"][0]["id"] for c in milvus.client.upsert.call_args_list]
    assert ids == ["abc123", "abc123"]
    milvus.client.insert.assert_not_called()
