"""
Recommendation result models.

A ``ScoredRecommendation`` pairs an item with its 0-100 score, its rank in
the final list, and the human readable reasons that explain the score.
"""

from pydantic import BaseModel, ConfigDict, Field

from .catalog import Book, Periodical, Thesis


class ScoreComponent(BaseModel):
    """One additive part of a recommendation score."""

    name: str = Field(..., description="Component name, e.g. 'category'")
    points: float = Field(..., ge=0.0, description="Points contributed")
    reason: str | None = Field(None, description="Explanation shown to the patron")


class ScoredRecommendation(BaseModel):
    """A recommended item with its score and explanation."""

    item: Book | Periodical | Thesis = Field(..., discriminator="item_type")
    score: float = Field(..., ge=0.0, le=100.0, description="Recommendation score (0-100)")
    rank: int = Field(default=0, ge=0, description="Position in the final list (1 = best)")
    reasons: list[str] = Field(default_factory=list, description="Why the item was recommended")
    breakdown: list[ScoreComponent] = Field(
        default_factory=list,
        description="Score components in fixed order",
    )

    def points_for(self, component: str) -> float:
        """Points contributed by a named component (0 when absent)."""
        return next((c.points for c in self.breakdown if c.name == component), 0.0)

    model_config = ConfigDict(populate_by_name=True)
