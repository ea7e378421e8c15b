"""Tests for the SQLAlchemy saved-item store."""

import pytest

from linkvault.constants import PROCESSING_FAILED_TAG
from linkvault.core.db import get_db
from linkvault.models.contracts import ItemCategory, ItemStatus, ItemType
from linkvault.models.extraction import ItemEnrichment
from linkvault.models.schema import Domain, SavedItem
from linkvault.repositories.saved_item_store import SqlAlchemyDomainLoader


def _enrichment(**overrides) -> ItemEnrichment:
    values = {
        "title": "Why we rewrote the sync engine",
        "summary": "First point\nSecond point",
        "tags": ["python", "sync"],
        "type": ItemType.LEARN,
        "category": ItemCategory.TECH,
        "raw_content": "Full article text",
        "source": "example.com",
        "image_url": "https://example.com/cover.png",
        "domain_id": "technology",
        "author": "Jane",
    }
    values.update(overrides)
    return ItemEnrichment(**values)


def _stub(store, **overrides) -> int:
    values = {
        "user_id": "user-1",
        "url": "https://example.com/post",
        "source": "example.com",
        "origin": "url",
    }
    values.update(overrides)
    return store.create_stub(**values)


def test_create_stub_persists_new_item(store):
    item_id = _stub(store, note="read later")

    item = store.get(item_id)
    assert item.status == ItemStatus.NEW
    assert item.url == "https://example.com/post"
    assert item.note == "read later"
    assert item.tags == []
    assert item.title is None
    assert item.processed_at is None


def test_apply_enrichment_writes_every_field(store):
    item_id = _stub(store)

    store.apply_enrichment(item_id, _enrichment())

    item = store.get(item_id)
    assert item.status == ItemStatus.ENRICHED
    assert item.title == "Why we rewrote the sync engine"
    assert item.summary == "First point\nSecond point"
    assert item.tags == ["python", "sync"]
    assert item.type == "learn"
    assert item.category == "tech"
    assert item.domain_id == "technology"
    assert item.author == "Jane"
    assert item.processed_at is not None


def test_enrichment_is_written_once(store):
    item_id = _stub(store)
    store.apply_enrichment(item_id, _enrichment())

    with pytest.raises(ValueError):
        store.apply_enrichment(item_id, _enrichment(title="Second write"))
    with pytest.raises(ValueError):
        store.mark_failed(item_id, url="https://example.com/post", message="failed")

    assert store.get(item_id).title == "Why we rewrote the sync engine"


def test_mark_failed_sets_terminal_state(store):
    item_id = _stub(store)

    store.mark_failed(item_id, url="https://example.com/post", message="Failed to process")

    item = store.get(item_id)
    assert item.status == ItemStatus.PROCESSING_FAILED
    assert item.title == "https://example.com/post"
    assert item.summary == "Failed to process"
    assert item.tags == [PROCESSING_FAILED_TAG]


def test_missing_item(store):
    assert store.get(999) is None
    with pytest.raises(LookupError):
        store.apply_enrichment(999, _enrichment())


def test_get_returns_detached_item(store):
    item_id = _stub(store)
    item = store.get(item_id)
    # Attribute access must not need a live session
    assert item.source == "example.com"
    assert item.created_at is not None


def test_domain_loader_seeds_missing_domains(test_db):
    loader = SqlAlchemyDomainLoader()

    assert loader.ensure_domains(["technology", "finance"]) == 2
    assert loader.ensure_domains(["technology", "health", ""]) == 1

    assert loader() == {"technology": "technology", "finance": "finance", "health": "health"}


def test_domain_loader_reads_existing_ids(test_db):
    with get_db() as db:
        db.add(Domain(id="d-42", name="technology"))

    assert SqlAlchemyDomainLoader()() == {"technology": "d-42"}


def test_mark_failed_fits_longest_url(store):
    assert SavedItem.__table__.c.title.type.length >= SavedItem.__table__.c.url.type.length
    long_url = "https://example.com/" + "a" * 2000
    item_id = _stub(store, url=long_url)

    store.mark_failed(item_id, url=long_url, message="Failed to process")

    assert store.get(item_id).title == long_url
