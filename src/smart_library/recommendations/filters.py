"""
Recommendation filter chain.

Recommendations start from the pool of available items and pass through
five independent stages, each narrowing or reordering the list:

1. CategoryFilter - categories the patron has read or marked as favorite
2. InterestFilter - interest tags found in category or title
3. HistoryFilter - never recommend what the patron already borrowed,
   and put other works by familiar creators first
4. AgeFilter - recent popular items for minors, older items for 40+
5. PopularityFilter - mostly popular items plus a few discoveries

The first stages top their output up from their own input when they come
up short of the target, so a narrow profile still produces a full list.
The chain truncates the final result to the target.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Sequence

from ..clock import Clock, SystemClock
from ..models.catalog import CatalogItem
from ..models.patron import Patron

logger = logging.getLogger(__name__)

CreatorLookup = Callable[[str], str | None]


def pad_to_target(
    selected: list[CatalogItem], source: Iterable[CatalogItem], target: int
) -> list[CatalogItem]:
    """
    Top ``selected`` up to ``target`` items from ``source``.

    Items already selected (by key) are skipped; ``source`` order is kept.
    A list that already reaches the target is returned unchanged.
    """
    if len(selected) >= target:
        return selected
    result = list(selected)
    seen = {item.key for item in result}
    for item in source:
        if len(result) >= target:
            break
        if item.key not in seen:
            result.append(item)
            seen.add(item.key)
    return result


class RecommendationFilter(ABC):
    """One stage of the recommendation pipeline."""

    name: str = "filter"

    @abstractmethod
    def apply(self, items: list[CatalogItem], patron: Patron, target: int) -> list[CatalogItem]:
        """Return the stage's output for ``items``; never mutates the input."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class CategoryFilter(RecommendationFilter):
    """Keep items in a category the patron has read or favorited."""

    name = "category"

    def apply(self, items: list[CatalogItem], patron: Patron, target: int) -> list[CatalogItem]:
        categories = set(patron.read_categories()) | set(patron.favorite_categories)
        selected = [item for item in items if item.category in categories]
        return pad_to_target(selected, items, target)


class InterestFilter(RecommendationFilter):
    """Keep items whose category or title mentions one of the patron's interests."""

    name = "interest"

    def apply(self, items: list[CatalogItem], patron: Patron, target: int) -> list[CatalogItem]:
        interests = [interest.lower() for interest in patron.interests]
        if not interests:
            return list(items)

        def matches(item: CatalogItem) -> bool:
            category = (item.category or "").lower()
            title = item.title.lower()
            return any(i in category or i in title for i in interests)

        selected = [item for item in items if matches(item)]
        return pad_to_target(selected, items, target)


class HistoryFilter(RecommendationFilter):
    """
    Drop anything the patron has borrowed and favor familiar creators.

    Creators of items in the loan history are resolved through
    ``creator_lookup`` (catalog key to creator). Without a lookup they are
    resolved from the stage's input, which only knows items still in the
    candidate list.
    """

    name = "history"

    def __init__(self, creator_lookup: CreatorLookup | None = None):
        self.creator_lookup = creator_lookup

    def _read_creators(self, items: Sequence[CatalogItem], read_keys: set[str]) -> set[str]:
        if self.creator_lookup is not None:
            creators = (self.creator_lookup(key) for key in read_keys)
        else:
            creators = (item.creator for item in items if item.key in read_keys)
        return {creator for creator in creators if creator}

    def apply(self, items: list[CatalogItem], patron: Patron, target: int) -> list[CatalogItem]:
        borrowed = patron.borrowed_keys()
        # Only returned loans count as read
        read_keys = {loan.item_key for loan in patron.loan_history}
        read_creators = self._read_creators(items, read_keys)

        unread = [item for item in items if item.key not in borrowed]
        familiar = [item for item in unread if item.creator in read_creators]
        others = [item for item in unread if item.creator not in read_creators]
        return familiar + others


class AgeFilter(RecommendationFilter):
    """
    Shape the list by the patron's age band.

    - under 18: published within the last five calendar years, most
      borrowed first
    - 18 to 39: unchanged
    - 40 and over: oldest publications first

    When the band's result is shorter than the target, the unfiltered input
    is used instead.
    """

    name = "age"
    RECENT_YEARS = 5

    def __init__(self, clock: Clock | None = None):
        self.clock = clock or SystemClock()

    def apply(self, items: list[CatalogItem], patron: Patron, target: int) -> list[CatalogItem]:
        if patron.age < 18:
            cutoff_year = self.clock.now().year - self.RECENT_YEARS
            recent = [item for item in items if item.publication_date.year >= cutoff_year]
            result = sorted(recent, key=lambda item: item.checkout_count, reverse=True)
        elif patron.age < 40:
            result = list(items)
        else:
            result = sorted(items, key=lambda item: item.publication_date)

        if len(result) < target:
            logger.debug(
                "Age filter kept %d of %d items for age %d; using unfiltered input",
                len(result),
                len(items),
                patron.age,
            )
            return list(items)
        return result


class PopularityFilter(RecommendationFilter):
    """
    Final stage: two thirds popular picks, one third discoveries.

    Items are ranked by checkout count. The popular share is the top
    ``2 * target // 3``; the discovery share is the next ``target // 3``
    items after it.
    """

    name = "popularity"

    def apply(self, items: list[CatalogItem], patron: Patron, target: int) -> list[CatalogItem]:
        ranked = sorted(items, key=lambda item: item.checkout_count, reverse=True)
        popular_count = target * 2 // 3
        discovery_count = target // 3
        popular = ranked[:popular_count]
        discovery = ranked[popular_count : popular_count + discovery_count]
        return popular + discovery


class FilterChain:
    """Ordered recommendation stages applied one after another."""

    def __init__(self, filters: Sequence[RecommendationFilter]):
        self.filters = list(filters)

    def apply(self, items: list[CatalogItem], patron: Patron, target: int) -> list[CatalogItem]:
        """Run every stage in order and truncate the result to ``target``."""
        if target <= 0:
            return []
        current = list(items)
        for stage in self.filters:
            current = stage.apply(current, patron, target)
            logger.debug("Filter %s -> %d items", stage.name, len(current))
        return current[:target]

    def __len__(self) -> int:
        return len(self.filters)

    def __iter__(self):
        return iter(self.filters)


def default_filter_chain(
    clock: Clock | None = None, creator_lookup: CreatorLookup | None = None
) -> FilterChain:
    """The five-stage chain in its standard order."""
    return FilterChain(
        [
            CategoryFilter(),
            InterestFilter(),
            HistoryFilter(creator_lookup=creator_lookup),
            AgeFilter(clock=clock),
            PopularityFilter(),
        ]
    )
