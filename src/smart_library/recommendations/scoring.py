"""
Recommendation scoring.

Each item that survives the filter chain gets a 0-100 score made of five
independent, additive components:

| Component  | Points                                    |
|------------|-------------------------------------------|
| category   | 30 if the category is one the patron read |
| interest   | 25 if the category mentions an interest   |
| popularity | checkout count / 10, at most 20           |
| creator    | 15 for another work by a creator read     |
| recency    | 10 under one year old, 5 up to three      |

A component that fires with a reason shown to the patron contributes its
points to that reason, so the reasons never claim more than the score.
"""

import logging
from collections.abc import Callable, Sequence

from ..clock import Clock, SystemClock
from ..models.catalog import CatalogItem
from ..models.patron import Patron
from ..models.recommendation import ScoreComponent, ScoredRecommendation

logger = logging.getLogger(__name__)

CATEGORY_POINTS = 30.0
INTEREST_POINTS = 25.0
POPULARITY_CAP = 20.0
POPULARITY_DIVISOR = 10.0
VERY_POPULAR_THRESHOLD = 20
CREATOR_POINTS = 15.0
NEW_RELEASE_POINTS = 10.0
RECENT_POINTS = 5.0
MAX_SCORE = 100.0


class RecommendationScorer:
    """Scores, explains and ranks recommendation candidates."""

    def __init__(
        self,
        clock: Clock | None = None,
        creator_lookup: Callable[[str], str | None] | None = None,
    ):
        self.clock = clock or SystemClock()
        self.creator_lookup = creator_lookup

    def _read_creators(self, patron: Patron) -> set[str]:
        """Creators of the patron's returned loans, resolved through the catalog."""
        if self.creator_lookup is None:
            return set()
        creators = (self.creator_lookup(loan.item_key) for loan in patron.loan_history)
        return {creator for creator in creators if creator}

    def components(
        self,
        item: CatalogItem,
        patron: Patron,
        read_creators: set[str] | None = None,
    ) -> list[ScoreComponent]:
        """Score components of ``item`` for ``patron`` in fixed order."""
        if read_creators is None:
            read_creators = self._read_creators(patron)
        category = item.category
        breakdown: list[ScoreComponent] = []

        if category is not None and category in patron.read_categories():
            breakdown.append(
                ScoreComponent(
                    name="category",
                    points=CATEGORY_POINTS,
                    reason=f"You have already read the '{category}' category",
                )
            )
        else:
            breakdown.append(ScoreComponent(name="category", points=0.0))

        interests = [interest.lower() for interest in patron.interests]
        if category is not None and any(i in category.lower() for i in interests):
            breakdown.append(
                ScoreComponent(name="interest", points=INTEREST_POINTS, reason="Matches your interests")
            )
        else:
            breakdown.append(ScoreComponent(name="interest", points=0.0))

        popularity = min(item.checkout_count / POPULARITY_DIVISOR, POPULARITY_CAP)
        breakdown.append(
            ScoreComponent(
                name="popularity",
                points=popularity,
                reason="Very popular" if item.checkout_count > VERY_POPULAR_THRESHOLD else None,
            )
        )

        if item.creator in read_creators:
            breakdown.append(
                ScoreComponent(
                    name="creator",
                    points=CREATOR_POINTS,
                    reason=f"Another work by {item.creator}",
                )
            )
        else:
            breakdown.append(ScoreComponent(name="creator", points=0.0))

        age = item.age_in_years(self.clock.now())
        if age < 1:
            breakdown.append(
                ScoreComponent(name="recency", points=NEW_RELEASE_POINTS, reason="New release")
            )
        elif age < 3:
            breakdown.append(
                ScoreComponent(name="recency", points=RECENT_POINTS, reason="Recently published")
            )
        else:
            breakdown.append(ScoreComponent(name="recency", points=0.0))

        return breakdown

    def score(self, item: CatalogItem, patron: Patron) -> float:
        """Total score of ``item`` for ``patron``, clamped to 0-100."""
        total = sum(c.points for c in self.components(item, patron))
        return max(0.0, min(total, MAX_SCORE))

    def rank(self, items: Sequence[CatalogItem], patron: Patron) -> list[ScoredRecommendation]:
        """
        Score every item and order them best first.

        The sort is stable, so equal scores keep the order the filter chain
        produced. Ranks run from 1 after sorting.
        """
        read_creators = self._read_creators(patron)
        scored = []
        for item in items:
            breakdown = self.components(item, patron, read_creators)
            total = max(0.0, min(sum(c.points for c in breakdown), MAX_SCORE))
            scored.append(
                ScoredRecommendation(
                    item=item,
                    score=total,
                    reasons=[c.reason for c in breakdown if c.reason],
                    breakdown=breakdown,
                )
            )

        scored.sort(key=lambda rec: rec.score, reverse=True)
        for position, recommendation in enumerate(scored, start=1):
            recommendation.rank = position
        return scored
