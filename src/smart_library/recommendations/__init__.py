"""
Recommendation pipeline: a five-stage filter chain followed by a scorer.
"""

from .filters import (
    AgeFilter,
    CategoryFilter,
    FilterChain,
    HistoryFilter,
    InterestFilter,
    PopularityFilter,
    RecommendationFilter,
    default_filter_chain,
    pad_to_target,
)
from .scoring import RecommendationScorer
from .service import RecommendationService

__all__ = [
    "AgeFilter",
    "CategoryFilter",
    "FilterChain",
    "HistoryFilter",
    "InterestFilter",
    "PopularityFilter",
    "RecommendationFilter",
    "RecommendationScorer",
    "RecommendationService",
    "default_filter_chain",
    "pad_to_target",
]
