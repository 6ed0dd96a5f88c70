"""
Tool definitions for the Smart Library server.

Each tool is a dictionary with ``name``, ``description``, ``inputSchema``
and an async ``handler(arguments) -> dict``. Handlers are bound to the
services they drive when the tool list is built.
"""

from typing import Any

from ..recommendations.service import RecommendationService
from ..services.catalog import CatalogSearch
from ..services.lending import LendingEngine
from ..services.statistics import LibraryStatistics
from .catalog import build_catalog_tools
from .circulation import build_circulation_tools
from .recommendations import build_recommendation_tools


def build_tools(
    engine: LendingEngine,
    recommendations: RecommendationService,
    search: CatalogSearch,
    statistics: LibraryStatistics,
) -> list[dict[str, Any]]:
    """Every tool the server exposes."""
    return [
        *build_circulation_tools(engine),
        *build_recommendation_tools(recommendations, recommendations.default_count),
        *build_catalog_tools(search, statistics),
    ]


__all__ = [
    "build_catalog_tools",
    "build_circulation_tools",
    "build_recommendation_tools",
    "build_tools",
]
