"""
The library store: one logical catalog plus one patron registry.

A ``LibraryStore`` is constructed once at startup and passed to the lending
engine, the recommendation service and the tool handlers. It owns the single
coordination point for the whole library: every unit of work (checkout,
return, recommendation, administrative edits) runs inside
``store.transaction()``, which serializes it against every other unit.

The administrative operations here mirror the catalog/patron management of
the desk staff and report each successful change to the audit sink.
"""

import logging
import threading
from collections.abc import Generator
from contextlib import contextmanager

from ..clock import Clock, SystemClock
from ..models.catalog import CatalogItem
from ..models.patron import Patron
from . import audit
from .audit import AuditSink
from .catalog_repository import CatalogRepository
from .patron_repository import PatronRepository

logger = logging.getLogger(__name__)


class LibraryStore:
    """Catalog and patron repositories guarded by one re-entrant lock."""

    def __init__(
        self,
        catalog: CatalogRepository | None = None,
        patrons: PatronRepository | None = None,
        audit_sink: AuditSink | None = None,
        clock: Clock | None = None,
    ):
        self.catalog = catalog if catalog is not None else CatalogRepository()
        self.patrons = patrons if patrons is not None else PatronRepository()
        self.audit_sink = audit_sink
        self.clock = clock or SystemClock()
        self._lock = threading.RLock()

    @contextmanager
    def transaction(self) -> Generator["LibraryStore", None, None]:
        """Run a unit of work with exclusive access to catalog and patrons."""
        with self._lock:
            yield self

    def _audit(self, event_type: str, description: str) -> None:
        if self.audit_sink is not None:
            self.audit_sink.record(event_type, description)

    # === Catalog administration ===

    def add_item(self, item: CatalogItem) -> CatalogItem:
        """
        Add an item to the catalog.

        Raises:
            DuplicateError: If the key is already catalogued
        """
        with self.transaction():
            self.catalog.add(item)
        self._audit(audit.ITEM_ADDED, f"{item.title} added")
        logger.info("Catalogued %s '%s'", item.key, item.title)
        return item

    def remove_item(self, key: str) -> CatalogItem:
        """
        Remove an item from the catalog.

        Loan records that reference the item keep their denormalized title
        and category.

        Raises:
            NotFoundError: If the key is unknown
        """
        with self.transaction():
            item = self.catalog.remove(key)
        self._audit(audit.ITEM_REMOVED, f"{item.title} removed")
        return item

    # === Patron administration ===

    def register_patron(self, patron: Patron) -> Patron:
        """
        Register a new patron.

        Raises:
            DuplicateError: If the patron id is already registered
        """
        with self.transaction():
            self.patrons.add(patron)
            if patron.registered_at is None:
                patron.registered_at = self.clock.now()
        self._audit(audit.PATRON_ADDED, f"{patron.name} added")
        return patron

    def update_patron(self, patron: Patron) -> Patron:
        """
        Replace a patron's profile, keeping loans and registration time.

        Raises:
            NotFoundError: If the patron is unknown
        """
        with self.transaction():
            updated = self.patrons.update(patron)
        self._audit(audit.PATRON_UPDATED, f"{updated.name} updated")
        return updated

    def remove_patron(self, patron_id: str) -> Patron:
        """
        Remove a patron.

        Raises:
            NotFoundError: If the patron is unknown
            ActiveLoansError: If the patron still holds loans
        """
        with self.transaction():
            patron = self.patrons.remove(patron_id)
        self._audit(audit.PATRON_REMOVED, f"{patron.name} removed")
        return patron
