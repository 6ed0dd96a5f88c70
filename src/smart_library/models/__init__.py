"""
Smart Library models.

Pydantic models for the core entities:
- CatalogItem and its variants Book, Periodical and Thesis
- LoanRecord: one checkout-to-return episode
- Patron: a registered library user with two loan collections
- ScoredRecommendation: a ranked, explained recommendation
"""

from .catalog import (
    ITEM_TYPES,
    Book,
    CatalogEntry,
    CatalogItem,
    Periodical,
    Thesis,
    build_item,
)
from .loan import LoanRecord, OverdueNotice
from .patron import Patron
from .recommendation import ScoreComponent, ScoredRecommendation

__all__ = [
    "ITEM_TYPES",
    "Book",
    "CatalogEntry",
    "CatalogItem",
    "LoanRecord",
    "OverdueNotice",
    "Patron",
    "Periodical",
    "ScoreComponent",
    "ScoredRecommendation",
    "Thesis",
    "build_item",
]
