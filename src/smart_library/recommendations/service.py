"""
Recommendation service for the Smart Library core.

Ties the candidate pool, the filter chain and the scorer together. The
pool is every item not currently on loan; the whole computation runs inside
the store's transaction so it never sees a half-applied checkout or return.
"""

import logging

from ..clock import Clock, SystemClock
from ..database.store import LibraryStore
from ..models.catalog import CatalogItem
from ..models.recommendation import ScoredRecommendation
from ..observability import traced
from .filters import FilterChain, default_filter_chain
from .scoring import RecommendationScorer

logger = logging.getLogger(__name__)


def _by_popularity(items: list[CatalogItem]) -> list[CatalogItem]:
    return sorted(items, key=lambda item: item.checkout_count, reverse=True)


class RecommendationService:
    """Personalized and catalog-wide recommendations."""

    def __init__(
        self,
        store: LibraryStore,
        clock: Clock | None = None,
        chain: FilterChain | None = None,
        scorer: RecommendationScorer | None = None,
        default_count: int = 10,
    ):
        self.store = store
        self.clock = clock or SystemClock()
        self.chain = chain or default_filter_chain(self.clock, creator_lookup=self._creator_of)
        self.scorer = scorer or RecommendationScorer(self.clock, creator_lookup=self._creator_of)
        self.default_count = default_count

    def _creator_of(self, item_key: str) -> str | None:
        item = self.store.catalog.get(item_key)
        return item.creator if item is not None else None

    @traced("recommendations.recommend")
    def recommend(self, patron_id: str, count: int | None = None) -> list[ScoredRecommendation]:
        """
        Recommend available items to a patron.

        Args:
            patron_id: Patron to personalize for
            count: Number of recommendations (service default when None)

        Returns:
            Scored recommendations, best first; empty for an unknown patron
        """
        target = self.default_count if count is None else count
        with self.store.transaction() as store:
            patron = store.patrons.get(patron_id)
            if patron is None:
                logger.info("No recommendations: patron %s not found", patron_id)
                return []

            pool = store.catalog.available()
            candidates = self.chain.apply(pool, patron, target)
            results = self.scorer.rank(candidates, patron)

        logger.info(
            "Recommended %d of %d available items to patron %s",
            len(results),
            len(pool),
            patron_id,
        )
        return results

    def similar_items(self, item_key: str, count: int = 5) -> list[CatalogItem]:
        """
        Available items sharing the category or creator of ``item_key``.

        Most borrowed first; an unknown key yields an empty list.
        """
        with self.store.transaction() as store:
            reference = store.catalog.get(item_key)
            if reference is None:
                return []
            similar = [
                item
                for item in store.catalog.available()
                if item.key != reference.key
                and (
                    (reference.category is not None and item.category == reference.category)
                    or item.creator == reference.creator
                )
            ]
        return _by_popularity(similar)[: max(0, count)]

    def trending(self, count: int = 10) -> list[CatalogItem]:
        """The most borrowed items in the catalog."""
        with self.store.transaction() as store:
            items = store.catalog.list()
        return _by_popularity(items)[: max(0, count)]

    def by_category(self, category: str, count: int = 10) -> list[CatalogItem]:
        """Available items in ``category`` (case-insensitive), most borrowed first."""
        wanted = category.strip().lower()
        with self.store.transaction() as store:
            matches = [
                item
                for item in store.catalog.available()
                if item.category is not None and item.category.lower() == wanted
            ]
        return _by_popularity(matches)[: max(0, count)]
