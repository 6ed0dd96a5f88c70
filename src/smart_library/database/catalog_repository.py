"""
Catalog repository for the Smart Library core.

Stores catalog items of every variant under their catalog key and offers
the availability views the lending engine and the recommendation service
need.
"""

from ..models.catalog import CatalogItem
from .repository import InMemoryRepository


class CatalogRepository(InMemoryRepository[CatalogItem]):
    """Repository for catalog items keyed by ``CatalogItem.key``."""

    entity_name = "Catalog item"

    def identity(self, entity: CatalogItem) -> str:
        return entity.key

    def available(self) -> list[CatalogItem]:
        """Items that are not on loan, in catalog order."""
        return [item for item in self.list() if not item.on_loan]

    def on_loan(self) -> list[CatalogItem]:
        """Items currently checked out, in catalog order."""
        return [item for item in self.list() if item.on_loan]

    def categories(self) -> list[str]:
        """Distinct categories present in the catalog."""
        return list(dict.fromkeys(item.category for item in self.list() if item.category))
