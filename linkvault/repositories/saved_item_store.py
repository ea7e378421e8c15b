"""SQLAlchemy-backed persistence for saved items and the domain lookup table."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from contextlib import AbstractContextManager

from sqlalchemy import select
from sqlalchemy.orm import Session

from linkvault.constants import PROCESSING_FAILED_TAG
from linkvault.core.db import get_db
from linkvault.core.logging import get_logger
from linkvault.models.contracts import ItemStatus
from linkvault.models.extraction import ItemEnrichment
from linkvault.models.schema import Domain, SavedItem, utcnow

logger = get_logger(__name__)

SessionScope = Callable[[], AbstractContextManager[Session]]


class SqlAlchemySavedItemStore:
    """Saved-item store where every call is its own transaction."""

    def __init__(self, session_scope: SessionScope = get_db):
        self._session_scope = session_scope

    def create_stub(
        self,
        *,
        user_id: str,
        url: str,
        source: str,
        origin: str,
        note: str | None = None,
    ) -> int:
        with self._session_scope() as db:
            item = SavedItem(
                user_id=user_id,
                url=url,
                note=note,
                source=source,
                origin=origin,
                status=ItemStatus.NEW.value,
                tags=[],
            )
            db.add(item)
            db.flush()
            logger.info("Created saved item %s for %s", item.id, url)
            return item.id

    def _load_new_item(self, db: Session, item_id: int) -> SavedItem:
        item = db.get(SavedItem, item_id)
        if item is None:
            raise LookupError(f"Saved item {item_id} not found")
        if item.status != ItemStatus.NEW.value:
            raise ValueError(f"Saved item {item_id} is already {item.status}")
        return item

    def apply_enrichment(self, item_id: int, enrichment: ItemEnrichment) -> None:
        with self._session_scope() as db:
            item = self._load_new_item(db, item_id)
            for field, value in enrichment.model_dump().items():
                setattr(item, field, value)
            item.status = ItemStatus.ENRICHED.value
            item.processed_at = utcnow()

    def mark_failed(self, item_id: int, *, url: str, message: str) -> None:
        with self._session_scope() as db:
            item = self._load_new_item(db, item_id)
            item.title = url
            item.summary = message
            item.tags = [PROCESSING_FAILED_TAG]
            item.status = ItemStatus.PROCESSING_FAILED.value
            item.processed_at = utcnow()

    def get(self, item_id: int) -> SavedItem | None:
        """Detached copy of an item, for callers outside the pipeline."""
        with self._session_scope() as db:
            item = db.get(SavedItem, item_id)
            if item is not None:
                db.expunge(item)
            return item


class SqlAlchemyDomainLoader:
    """Loads the domain name -> id map for ``DomainCache``."""

    def __init__(self, session_scope: SessionScope = get_db):
        self._session_scope = session_scope

    def __call__(self) -> dict[str, str]:
        with self._session_scope() as db:
            rows = db.execute(select(Domain.name, Domain.id)).all()
            return {name: domain_id for name, domain_id in rows}

    def ensure_domains(self, names: Iterable[str]) -> int:
        """Insert missing domains using the name as id; returns how many were added."""
        with self._session_scope() as db:
            existing = set(db.scalars(select(Domain.name)).all())
            missing = [name for name in names if name and name not in existing]
            db.add_all(Domain(id=name, name=name) for name in missing)
            return len(missing)
