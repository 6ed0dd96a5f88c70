"""
Catalog search for the Smart Library core.

All text matching is case-insensitive. Category lookups compare whole
category names; creator, title and free-text lookups match substrings.
Results keep catalog order unless stated otherwise.
"""

import logging

from ..database.store import LibraryStore
from ..models.catalog import CatalogItem

logger = logging.getLogger(__name__)


def _contains(haystack: str | None, needle: str) -> bool:
    return haystack is not None and needle in haystack.lower()


class CatalogSearch:
    """Read-only queries over the catalog."""

    def __init__(self, store: LibraryStore):
        self.store = store

    def _items(self) -> list[CatalogItem]:
        with self.store.transaction() as store:
            return store.catalog.list()

    def by_category(self, category: str) -> list[CatalogItem]:
        wanted = category.strip().lower()
        return [item for item in self._items() if item.category and item.category.lower() == wanted]

    def by_creator(self, creator: str) -> list[CatalogItem]:
        wanted = creator.strip().lower()
        return [item for item in self._items() if _contains(item.creator, wanted)]

    def by_title(self, title: str) -> list[CatalogItem]:
        wanted = title.strip().lower()
        return [item for item in self._items() if _contains(item.title, wanted)]

    def search(self, text: str) -> list[CatalogItem]:
        """
        Free-text search across title, creator, key and category.

        A blank query matches nothing.
        """
        wanted = text.strip().lower()
        if not wanted:
            return []
        results = [
            item
            for item in self._items()
            if _contains(item.title, wanted)
            or _contains(item.creator, wanted)
            or _contains(item.key, wanted)
            or _contains(item.category, wanted)
        ]
        logger.debug("Catalog search %r matched %d items", text, len(results))
        return results

    def available(self) -> list[CatalogItem]:
        with self.store.transaction() as store:
            return store.catalog.available()

    def on_loan(self) -> list[CatalogItem]:
        with self.store.transaction() as store:
            return store.catalog.on_loan()

    def most_popular(self, n: int = 10) -> list[CatalogItem]:
        """Top ``n`` items by checkout count; ties keep catalog order."""
        ranked = sorted(self._items(), key=lambda item: item.checkout_count, reverse=True)
        return ranked[: max(0, n)]
