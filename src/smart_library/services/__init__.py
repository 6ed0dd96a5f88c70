"""
Library services built on top of the ``LibraryStore``.

- LendingEngine: checkout, return and overdue tracking
- CatalogSearch: catalog lookups and popularity listings
- LibraryStatistics: summary numbers, category breakdown, daily activity
"""

from .catalog import CatalogSearch
from .lending import FailureReason, LendingEngine, LendingOutcome
from .statistics import CategoryStats, LibraryStatistics, LibrarySummary

__all__ = [
    "CatalogSearch",
    "CategoryStats",
    "FailureReason",
    "LendingEngine",
    "LendingOutcome",
    "LibraryStatistics",
    "LibrarySummary",
]
