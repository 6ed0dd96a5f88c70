"""
Lending engine for the Smart Library core.

Orchestrates the loan state machine across catalog items and patrons:

1. checkout: available item -> on loan, new LoanRecord in the patron's
   active loans
2. return_item: on-loan item -> available, LoanRecord closed and moved to
   the patron's history
3. overdue_report: every open loan past its due time, with the penalty at
   the item type's current rate

"Item unavailable" and "unknown patron" are everyday outcomes at a lending
desk, so checkout and return report them through ``LendingOutcome`` instead
of raising. Each unit of work runs inside the store's transaction, and the
audit sink is called only after the in-memory transition has succeeded.
"""

import logging
from enum import Enum

from pydantic import BaseModel, Field

from ..clock import Clock, SystemClock
from ..database import audit
from ..database.audit import AuditSink
from ..database.store import LibraryStore
from ..models.loan import LoanRecord, OverdueNotice
from ..observability import traced

logger = logging.getLogger(__name__)


class FailureReason(str, Enum):
    """Why a checkout or return was refused."""

    PATRON_NOT_FOUND = "patron_not_found"
    ITEM_NOT_FOUND = "item_not_found"
    ITEM_ON_LOAN = "item_on_loan"
    ITEM_NOT_ON_LOAN = "item_not_on_loan"
    NOT_HELD_BY_PATRON = "not_held_by_patron"


class LendingOutcome(BaseModel):
    """Result of a checkout or return."""

    success: bool = Field(..., description="Whether the transition happened")
    reason: FailureReason | None = Field(None, description="Why it did not happen")
    message: str = Field(default="", description="Human readable summary")
    loan: LoanRecord | None = Field(None, description="The affected loan record on success")

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def ok(cls, loan: LoanRecord, message: str) -> "LendingOutcome":
        return cls(success=True, loan=loan, message=message)

    @classmethod
    def refused(cls, reason: FailureReason, message: str) -> "LendingOutcome":
        return cls(success=False, reason=reason, message=message)


class LendingEngine:
    """Checkout, return and overdue tracking over a ``LibraryStore``."""

    def __init__(
        self,
        store: LibraryStore,
        audit_sink: AuditSink | None = None,
        clock: Clock | None = None,
    ):
        self.store = store
        self.audit_sink = audit_sink if audit_sink is not None else store.audit_sink
        self.clock = clock or SystemClock()

    def _audit(self, event_type: str, description: str) -> None:
        if self.audit_sink is not None:
            self.audit_sink.record(event_type, description)

    @traced("lending.checkout")
    def checkout(self, patron_id: str, item_key: str) -> LendingOutcome:
        """
        Lend an item to a patron.

        Preconditions: the patron exists, the item exists and is not on
        loan. On success the item is marked on loan (its checkout count
        grows) and a LoanRecord capturing title, category and the item
        type's due period is appended to the patron's active loans.

        Returns:
            LendingOutcome; on refusal nothing has been modified
        """
        with self.store.transaction() as store:
            patron = store.patrons.get(patron_id)
            if patron is None:
                logger.info("Checkout refused: patron %s not found", patron_id)
                return LendingOutcome.refused(
                    FailureReason.PATRON_NOT_FOUND, f"Patron {patron_id} not found"
                )

            item = store.catalog.get(item_key)
            if item is None:
                logger.info("Checkout refused: item %s not found", item_key)
                return LendingOutcome.refused(
                    FailureReason.ITEM_NOT_FOUND, f"Item {item_key} not found"
                )

            if item.on_loan:
                logger.info("Checkout refused: item %s already on loan", item_key)
                return LendingOutcome.refused(
                    FailureReason.ITEM_ON_LOAN, f"'{item.title}' is already on loan"
                )

            now = self.clock.now()
            record = LoanRecord(
                item_key=item.key,
                title=item.title,
                category=item.category,
                checked_out_at=now,
                due_period_days=item.due_period_days(),
            )
            item.checkout(now)
            patron.add_loan(record)

        self._audit(audit.CHECKOUT, f"{patron.name} - {item.title}")
        logger.info("Checked out %s to patron %s", item_key, patron_id)
        return LendingOutcome.ok(
            record,
            f"'{item.title}' checked out to {patron.name}, due {record.due_at:%Y-%m-%d}",
        )

    @traced("lending.return")
    def return_item(self, patron_id: str, item_key: str) -> LendingOutcome:
        """
        Take an item back from a patron.

        Preconditions: the patron exists, the item exists and is on loan,
        and the patron holds an active loan for it. Lateness does not
        matter here; overdue state is only ever derived.

        Returns:
            LendingOutcome; on refusal nothing has been modified
        """
        with self.store.transaction() as store:
            patron = store.patrons.get(patron_id)
            if patron is None:
                logger.info("Return refused: patron %s not found", patron_id)
                return LendingOutcome.refused(
                    FailureReason.PATRON_NOT_FOUND, f"Patron {patron_id} not found"
                )

            item = store.catalog.get(item_key)
            if item is None:
                logger.info("Return refused: item %s not found", item_key)
                return LendingOutcome.refused(
                    FailureReason.ITEM_NOT_FOUND, f"Item {item_key} not found"
                )

            if not item.on_loan:
                logger.info("Return refused: item %s is not on loan", item_key)
                return LendingOutcome.refused(
                    FailureReason.ITEM_NOT_ON_LOAN, f"'{item.title}' is not on loan"
                )

            if not patron.has_active_loan(item_key):
                logger.info("Return refused: patron %s does not hold %s", patron_id, item_key)
                return LendingOutcome.refused(
                    FailureReason.NOT_HELD_BY_PATRON,
                    f"'{item.title}' is not on loan to {patron.name}",
                )

            now = self.clock.now()
            item.check_in()
            record = patron.complete_return(item_key, now)

        self._audit(audit.RETURN, f"{patron.name} - {item.title}")
        logger.info("Patron %s returned %s", patron_id, item_key)
        return LendingOutcome.ok(record, f"'{item.title}' returned by {patron.name}")

    @traced("lending.overdue_report")
    def overdue_report(self) -> list[OverdueNotice]:
        """
        List every overdue active loan with its penalty.

        The penalty uses the per-day rate of the catalog item as it is now,
        not as it was at checkout; loans whose item has since been removed
        from the catalog carry no penalty.
        """
        now = self.clock.now()
        notices: list[OverdueNotice] = []

        with self.store.transaction() as store:
            for patron in store.patrons.list():
                for loan in patron.active_loans:
                    if not loan.is_overdue(now):
                        continue
                    days = loan.overdue_days(now)
                    item = store.catalog.get(loan.item_key)
                    penalty = item.calculate_penalty(days) if item is not None else 0.0
                    notices.append(
                        OverdueNotice(
                            patron_id=patron.id,
                            patron_name=patron.name,
                            item_key=loan.item_key,
                            item_title=loan.title or "Unknown item",
                            overdue_days=days,
                            penalty=penalty,
                        )
                    )

        logger.debug("Overdue report: %d loans overdue", len(notices))
        return notices
