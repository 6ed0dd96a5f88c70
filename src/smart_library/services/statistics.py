"""
Library statistics for the Smart Library core.

Aggregates the catalog, the patron registry and the audit trail into the
numbers a circulation desk looks at: how much is on loan, what is overdue,
which categories circulate most, and what happened on a given day.
"""

import logging
from datetime import date
from typing import Protocol

from pydantic import BaseModel, Field

from ..clock import Clock, SystemClock
from ..database.store import LibraryStore

logger = logging.getLogger(__name__)


class DailyCountingSink(Protocol):
    """Audit sinks that can report per-day event counts."""

    def daily_counts(self, day: date) -> dict[str, int]: ...


class LibrarySummary(BaseModel):
    """Headline numbers for the whole library."""

    total_items: int = Field(..., ge=0)
    total_patrons: int = Field(..., ge=0)
    on_loan: int = Field(..., ge=0)
    available: int = Field(..., ge=0)
    total_checkouts: int = Field(..., ge=0, description="Sum of every item's checkout count")
    overdue_loans: int = Field(..., ge=0)
    total_penalties: float = Field(..., ge=0.0, description="Penalties accrued by open overdue loans")
    category_count: int = Field(..., ge=0)


class CategoryStats(BaseModel):
    """Circulation figures of one category."""

    category: str
    item_count: int = Field(..., ge=0)
    total_checkouts: int = Field(..., ge=0)
    average_checkouts: float = Field(..., ge=0.0)
    on_loan: int = Field(..., ge=0)


class LibraryStatistics:
    """Aggregate views over the store and the audit trail."""

    def __init__(
        self,
        store: LibraryStore,
        clock: Clock | None = None,
        audit_sink: DailyCountingSink | None = None,
    ):
        self.store = store
        self.clock = clock or SystemClock()
        self.audit_sink = audit_sink

    def summary(self) -> LibrarySummary:
        now = self.clock.now()
        with self.store.transaction() as store:
            items = store.catalog.list()
            patrons = store.patrons.list()

            overdue_loans = 0
            total_penalties = 0.0
            for patron in patrons:
                for loan in patron.active_loans:
                    if not loan.is_overdue(now):
                        continue
                    overdue_loans += 1
                    item = store.catalog.get(loan.item_key)
                    if item is not None:
                        total_penalties += item.calculate_penalty(loan.overdue_days(now))

            on_loan = sum(1 for item in items if item.on_loan)
            return LibrarySummary(
                total_items=len(items),
                total_patrons=len(patrons),
                on_loan=on_loan,
                available=len(items) - on_loan,
                total_checkouts=sum(item.checkout_count for item in items),
                overdue_loans=overdue_loans,
                total_penalties=total_penalties,
                category_count=len(store.catalog.categories()),
            )

    def category_breakdown(self) -> list[CategoryStats]:
        """
        Per-category circulation figures, busiest category first.

        Items without a category are left out.
        """
        grouped: dict[str, list] = {}
        with self.store.transaction() as store:
            for item in store.catalog.list():
                if item.category:
                    grouped.setdefault(item.category, []).append(item)

        stats = [
            CategoryStats(
                category=category,
                item_count=len(items),
                total_checkouts=sum(item.checkout_count for item in items),
                average_checkouts=sum(item.checkout_count for item in items) / len(items),
                on_loan=sum(1 for item in items if item.on_loan),
            )
            for category, items in grouped.items()
        ]
        return sorted(stats, key=lambda s: s.total_checkouts, reverse=True)

    def daily_activity(self, day: date | None = None) -> dict[str, int]:
        """
        Audit event counts by type for ``day`` (today when omitted).

        Returns an empty mapping when no audit sink is attached.
        """
        if self.audit_sink is None:
            logger.debug("No audit sink attached; daily activity unavailable")
            return {}
        return self.audit_sink.daily_counts(day or self.clock.now().date())
