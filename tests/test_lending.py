"""
Tests for the lending engine.

These tests verify the loan state machine:
1. Checkout preconditions and effects
2. Return preconditions and effects
3. Overdue detection and penalties per item type
4. Refusals never modify state and never raise
"""

import threading
from datetime import timedelta

import pytest
from smart_library.database import audit
from smart_library.services.lending import FailureReason, LendingEngine, LendingOutcome


class TestCheckout:
    """Test LendingEngine.checkout."""

    def test_checkout_success(self, engine, store, patron, book, clock):
        outcome = engine.checkout(patron.id, book.key)

        assert outcome
        assert outcome.success is True
        assert outcome.reason is None

        loan = outcome.loan
        assert loan.item_key == book.key
        assert loan.title == book.title
        assert loan.category == book.category
        assert loan.checked_out_at == clock.now()
        assert loan.due_period_days == 14
        assert loan.returned_at is None

        assert book.on_loan is True
        assert book.loaned_at == clock.now()
        assert book.checkout_count == 1
        assert store.patrons.get(patron.id).active_loans == [loan]

    @pytest.mark.parametrize(
        ("factory", "days"),
        [("make_book", 14), ("make_periodical", 7), ("make_thesis", 21)],
    )
    def test_due_period_follows_item_type(self, request, engine, store, patron, factory, days):
        item = store.add_item(request.getfixturevalue(factory)())

        outcome = engine.checkout(patron.id, item.key)

        assert outcome.loan.due_period_days == days
        assert outcome.loan.due_at == outcome.loan.checked_out_at + timedelta(days=days)

    def test_checkout_is_audited(self, engine, audit_sink, patron, book):
        engine.checkout(patron.id, book.key)

        checkouts = [e for e in audit_sink.events() if e.event_type == audit.CHECKOUT]
        assert [e.description for e in checkouts] == [f"{patron.name} - {book.title}"]

    def test_unknown_patron(self, engine, book):
        outcome = engine.checkout("nobody", book.key)

        assert not outcome
        assert outcome.reason == FailureReason.PATRON_NOT_FOUND
        assert outcome.loan is None
        assert book.on_loan is False
        assert book.checkout_count == 0

    def test_unknown_item(self, engine, patron):
        outcome = engine.checkout(patron.id, "missing")

        assert not outcome
        assert outcome.reason == FailureReason.ITEM_NOT_FOUND
        assert patron.active_loans == []

    def test_second_checkout_fails_and_keeps_first(self, engine, store, make_patron, patron, book, clock):
        first = engine.checkout(patron.id, book.key)
        other = store.register_patron(make_patron(name="John Roe", email="john@example.com"))
        clock.advance(days=1)

        second = engine.checkout(other.id, book.key)

        assert first
        assert not second
        assert second.reason == FailureReason.ITEM_ON_LOAN
        assert book.loaned_at == first.loan.checked_out_at
        assert book.checkout_count == 1
        assert patron.active_loans == [first.loan]
        assert other.active_loans == []

    def test_refusals_are_not_audited(self, engine, audit_sink, patron):
        before = len(audit_sink)
        engine.checkout(patron.id, "missing")
        engine.checkout("nobody", "missing")
        assert len(audit_sink) == before


class TestReturn:
    """Test LendingEngine.return_item."""

    def test_checkout_then_return(self, engine, patron, book, clock):
        checkout = engine.checkout(patron.id, book.key)
        clock.advance(days=3)

        outcome = engine.return_item(patron.id, book.key)

        assert outcome
        assert book.on_loan is False
        assert book.loaned_at is None
        assert patron.active_loans == []
        assert patron.loan_history == [checkout.loan]
        assert outcome.loan is checkout.loan
        assert outcome.loan.returned_at == clock.now()
        assert outcome.loan.returned_at >= outcome.loan.checked_out_at

    def test_late_return_still_succeeds(self, engine, patron, book, clock):
        engine.checkout(patron.id, book.key)
        clock.advance(days=60)

        outcome = engine.return_item(patron.id, book.key)

        assert outcome
        assert engine.overdue_report() == []

    def test_return_is_audited(self, engine, audit_sink, patron, book):
        engine.checkout(patron.id, book.key)
        engine.return_item(patron.id, book.key)

        event_types = [e.event_type for e in audit_sink.events()]
        assert event_types.count(audit.RETURN) == 1

    def test_unknown_patron(self, engine, patron, book):
        engine.checkout(patron.id, book.key)
        outcome = engine.return_item("nobody", book.key)

        assert outcome.reason == FailureReason.PATRON_NOT_FOUND
        assert book.on_loan is True

    def test_unknown_item(self, engine, patron):
        outcome = engine.return_item(patron.id, "missing")
        assert outcome.reason == FailureReason.ITEM_NOT_FOUND

    def test_item_not_on_loan(self, engine, patron, book):
        outcome = engine.return_item(patron.id, book.key)

        assert not outcome
        assert outcome.reason == FailureReason.ITEM_NOT_ON_LOAN

    def test_item_held_by_someone_else(self, engine, store, make_patron, patron, book):
        engine.checkout(patron.id, book.key)
        other = store.register_patron(make_patron(name="John Roe", email="john@example.com"))

        outcome = engine.return_item(other.id, book.key)

        assert outcome.reason == FailureReason.NOT_HELD_BY_PATRON
        assert book.on_loan is True
        assert len(patron.active_loans) == 1

    def test_item_can_be_borrowed_again(self, engine, patron, book):
        engine.checkout(patron.id, book.key)
        engine.return_item(patron.id, book.key)

        again = engine.checkout(patron.id, book.key)

        assert again
        assert book.checkout_count == 2
        assert len(patron.loan_history) == 1
        assert len(patron.active_loans) == 1


class TestOverdueReport:
    """Test LendingEngine.overdue_report."""

    def test_nothing_overdue(self, engine, patron, book, clock):
        engine.checkout(patron.id, book.key)
        clock.advance(days=14)

        assert engine.overdue_report() == []

    @pytest.mark.parametrize(
        ("factory", "due_days", "rate"),
        [("make_book", 14, 2.0), ("make_periodical", 7, 1.0), ("make_thesis", 21, 3.0)],
    )
    def test_penalty_per_item_type(self, request, engine, store, patron, clock, factory, due_days, rate):
        item = store.add_item(request.getfixturevalue(factory)())
        engine.checkout(patron.id, item.key)
        clock.advance(days=due_days + 4)

        [notice] = engine.overdue_report()

        assert notice.patron_id == patron.id
        assert notice.patron_name == patron.name
        assert notice.item_key == item.key
        assert notice.item_title == item.title
        assert notice.overdue_days == 4
        assert notice.penalty == 4 * rate

    def test_partial_day_counts(self, engine, patron, book, clock):
        engine.checkout(patron.id, book.key)
        clock.advance(days=14, hours=2)

        [notice] = engine.overdue_report()
        assert notice.overdue_days == 1
        assert notice.penalty == 2.0

    def test_removed_item_has_no_penalty(self, engine, store, patron, book, clock):
        engine.checkout(patron.id, book.key)
        store.remove_item(book.key)
        clock.advance(days=20)

        [notice] = engine.overdue_report()
        assert notice.overdue_days == 6
        assert notice.penalty == 0.0
        assert notice.item_title == book.title

    def test_missing_title_falls_back(self, engine, patron, book, clock):
        engine.checkout(patron.id, book.key)
        patron.active_loans[0].title = None
        clock.advance(days=15)

        [notice] = engine.overdue_report()
        assert notice.item_title == "Unknown item"

    def test_report_covers_all_patrons(self, engine, store, make_patron, make_book, patron, clock):
        other = store.register_patron(make_patron(name="John Roe", email="john@example.com"))
        first = store.add_item(make_book("K1"))
        second = store.add_item(make_book("K2"))
        engine.checkout(patron.id, first.key)
        engine.checkout(other.id, second.key)
        clock.advance(days=30)

        notices = engine.overdue_report()
        assert {(n.patron_id, n.item_key) for n in notices} == {
            (patron.id, "K1"),
            (other.id, "K2"),
        }
        assert all(n.overdue_days == 16 for n in notices)


class TestSerialization:
    """Lending waits for any unit of work already holding the store."""

    def test_checkout_waits_for_running_transaction(self, engine, store, patron, book):
        entered = threading.Event()
        release = threading.Event()
        outcomes = []

        def hold_store():
            with store.transaction():
                entered.set()
                release.wait(timeout=5)

        def borrow():
            outcomes.append(engine.checkout(patron.id, book.key))

        holder = threading.Thread(target=hold_store)
        holder.start()
        assert entered.wait(timeout=5)

        borrower = threading.Thread(target=borrow)
        borrower.start()
        borrower.join(timeout=0.2)

        assert borrower.is_alive()
        assert outcomes == []
        assert book.on_loan is False
        assert patron.active_loans == []

        release.set()
        holder.join(timeout=5)
        borrower.join(timeout=5)

        [outcome] = outcomes
        assert outcome
        assert book.on_loan is True
        assert [loan.item_key for loan in patron.active_loans] == [book.key]

    def test_concurrent_checkouts_lend_once(self, engine, store, make_patron, patron, book):
        other = store.register_patron(make_patron(name="John Roe", email="john@example.com"))
        outcomes = []
        threads = [
            threading.Thread(target=lambda pid=pid: outcomes.append(engine.checkout(pid, book.key)))
            for pid in (patron.id, other.id)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)

        assert sorted(bool(o) for o in outcomes) == [False, True]
        assert book.checkout_count == 1
        assert len(patron.active_loans) + len(other.active_loans) == 1


class TestLendingOutcome:
    def test_truthiness(self):
        assert not LendingOutcome.refused(FailureReason.ITEM_ON_LOAN, "busy")
        assert LendingOutcome(success=True)

    def test_reason_stays_an_enum(self, engine, patron):
        outcome = engine.checkout(patron.id, "missing")
        assert isinstance(outcome.reason, FailureReason)
        assert outcome.reason is FailureReason.ITEM_NOT_FOUND

    def test_engine_defaults_to_store_sink(self, store, audit_sink):
        assert LendingEngine(store).audit_sink is audit_sink
