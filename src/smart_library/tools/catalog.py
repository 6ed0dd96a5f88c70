"""
Catalog tools for the Smart Library server.

1. search_catalog: text, category, creator or title search
2. library_summary: headline statistics and category breakdown
"""

import logging
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from ..services.catalog import CatalogSearch
from ..services.statistics import LibraryStatistics

logger = logging.getLogger(__name__)


class SearchCatalogInput(BaseModel):
    """Input schema for the search_catalog tool."""

    query: str = Field(
        ...,
        description="Text to search for",
        min_length=1,
        max_length=200,
        examples=["history", "Asimov", "9780134685479"],
    )

    field: str = Field(
        default="all",
        description="Which field to search",
        pattern=r"^(all|title|creator|category)$",
    )

    available_only: bool = Field(
        default=False,
        description="Leave out items currently on loan",
    )

    limit: int = Field(default=20, ge=1, le=100, description="Maximum number of results")


class LibrarySummaryInput(BaseModel):
    """Input schema for the library_summary tool."""

    include_categories: bool = Field(
        default=True,
        description="Include the per-category breakdown",
    )


def build_catalog_tools(
    search: CatalogSearch, statistics: LibraryStatistics
) -> list[dict[str, Any]]:
    """Tool definitions bound to the search and statistics services."""

    async def search_catalog_handler(arguments: dict[str, Any]) -> dict[str, Any]:
        """Handler for the search_catalog tool."""
        try:
            params = SearchCatalogInput.model_validate(arguments)
        except ValidationError as e:
            logger.warning("Invalid search parameters: %s", e)
            return {
                "isError": True,
                "content": [{"type": "text", "text": f"Invalid search parameters: {e}"}],
            }

        lookups = {
            "all": search.search,
            "title": search.by_title,
            "creator": search.by_creator,
            "category": search.by_category,
        }
        try:
            items = lookups[params.field](params.query)
        except Exception as e:
            logger.exception("Unexpected error in search_catalog tool")
            return {
                "isError": True,
                "content": [{"type": "text", "text": f"An unexpected error occurred: {e!s}"}],
            }

        if params.available_only:
            items = [item for item in items if item.is_available]
        total = len(items)
        items = items[: params.limit]

        if items:
            lines = [
                f"- {item.title} by {item.creator} [{item.key}]"
                + (" (on loan)" if item.on_loan else "")
                for item in items
            ]
            text = f"Found {total} item(s) for '{params.query}':\n" + "\n".join(lines)
        else:
            text = f"No items found for '{params.query}'."

        return {
            "content": [{"type": "text", "text": text}],
            "data": {
                "total": total,
                "items": [item.model_dump(mode="json") for item in items],
            },
        }

    async def library_summary_handler(arguments: dict[str, Any]) -> dict[str, Any]:
        """Handler for the library_summary tool."""
        try:
            params = LibrarySummaryInput.model_validate(arguments or {})
        except ValidationError as e:
            return {
                "isError": True,
                "content": [{"type": "text", "text": f"Invalid summary parameters: {e}"}],
            }

        try:
            summary = statistics.summary()
            categories = statistics.category_breakdown() if params.include_categories else []
        except Exception as e:
            logger.exception("Unexpected error in library_summary tool")
            return {
                "isError": True,
                "content": [{"type": "text", "text": f"An unexpected error occurred: {e!s}"}],
            }

        text = (
            f"{summary.total_items} items ({summary.on_loan} on loan, "
            f"{summary.available} available), {summary.total_patrons} patrons, "
            f"{summary.overdue_loans} overdue loan(s), penalties {summary.total_penalties:.2f}"
        )
        return {
            "content": [{"type": "text", "text": text}],
            "data": {
                "summary": summary.model_dump(),
                "categories": [c.model_dump() for c in categories],
            },
        }

    return [
        {
            "name": "search_catalog",
            "description": "Search the catalog by title, creator, category or free text.",
            "inputSchema": SearchCatalogInput.model_json_schema(),
            "handler": search_catalog_handler,
        },
        {
            "name": "library_summary",
            "description": "Headline circulation statistics and a per-category breakdown.",
            "inputSchema": LibrarySummaryInput.model_json_schema(),
            "handler": library_summary_handler,
        },
    ]
