"""
Recommendation tools for the Smart Library server.

recommend_items runs the personalized pipeline for a patron. Without a
patron it falls back to catalog-wide suggestions: similar items for a
given item key, items of one category, or the trending list.
"""

import logging
from typing import Any

from pydantic import BaseModel, Field, ValidationError, model_validator

from ..models.catalog import CatalogItem
from ..recommendations.service import RecommendationService

logger = logging.getLogger(__name__)


class RecommendItemsInput(BaseModel):
    """Input schema for the recommend_items tool."""

    patron_id: str | None = Field(
        default=None,
        description="Patron to personalize recommendations for",
    )

    similar_to: str | None = Field(
        default=None,
        description="Catalog key of an item to find similar items for",
    )

    category: str | None = Field(
        default=None,
        description="Restrict to available items of this category",
        examples=["Science", "History"],
    )

    count: int | None = Field(
        default=None,
        description="Number of recommendations (server default when omitted)",
        ge=1,
        le=50,
    )

    @model_validator(mode="after")
    def validate_mode(self) -> "RecommendItemsInput":
        """At most one selection mode may be given."""
        modes = [v for v in (self.patron_id, self.similar_to, self.category) if v]
        if len(modes) > 1:
            raise ValueError("Give only one of patron_id, similar_to or category")
        return self


def _item_data(item: CatalogItem) -> dict[str, Any]:
    return {
        "key": item.key,
        "title": item.title,
        "creator": item.creator,
        "category": item.category,
        "item_type": getattr(item, "item_type", None),
        "checkout_count": item.checkout_count,
    }


def build_recommendation_tools(
    service: RecommendationService, default_count: int = 10
) -> list[dict[str, Any]]:
    """Tool definitions bound to ``service``."""

    async def recommend_items_handler(arguments: dict[str, Any]) -> dict[str, Any]:
        """Handler for the recommend_items tool."""
        try:
            params = RecommendItemsInput.model_validate(arguments or {})
        except ValidationError as e:
            logger.warning("Invalid recommendation parameters: %s", e)
            return {
                "isError": True,
                "content": [{"type": "text", "text": f"Invalid recommendation parameters: {e}"}],
            }

        count = params.count or default_count
        try:
            if params.patron_id:
                recommendations = service.recommend(params.patron_id, count)
                lines = [
                    f"{rec.rank}. {rec.item.title} ({rec.score:.1f}) - "
                    + ("; ".join(rec.reasons) or "Suggested for you")
                    for rec in recommendations
                ]
                data = {
                    "patron_id": params.patron_id,
                    "recommendations": [
                        {
                            **_item_data(rec.item),
                            "score": rec.score,
                            "rank": rec.rank,
                            "reasons": rec.reasons,
                        }
                        for rec in recommendations
                    ],
                }
            else:
                if params.similar_to:
                    items = service.similar_items(params.similar_to, count)
                elif params.category:
                    items = service.by_category(params.category, count)
                else:
                    items = service.trending(count)
                lines = [f"{i}. {item.title} by {item.creator}" for i, item in enumerate(items, 1)]
                data = {"items": [_item_data(item) for item in items]}
        except Exception as e:
            logger.exception("Unexpected error in recommend_items tool")
            return {
                "isError": True,
                "content": [{"type": "text", "text": f"An unexpected error occurred: {e!s}"}],
            }

        text = "\n".join(lines) if lines else "No recommendations available."
        return {"content": [{"type": "text", "text": text}], "data": data}

    return [
        {
            "name": "recommend_items",
            "description": (
                "Recommend catalog items. With a patron_id, returns personalized, scored "
                "recommendations with reasons; otherwise similar items, a category list "
                "or the trending items."
            ),
            "inputSchema": RecommendItemsInput.model_json_schema(),
            "handler": recommend_items_handler,
        }
    ]
