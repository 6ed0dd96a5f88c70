"""
Tests for the Patron model.

These tests verify that patrons:
1. Get an opaque generated identity
2. Normalize interest tags and favorite categories
3. Keep their two loan collections consistent
4. Own the return transition
"""

from datetime import datetime, timedelta

import pytest
from pydantic import ValidationError
from smart_library.models.loan import LoanRecord
from smart_library.models.patron import Patron

NOW = datetime(2024, 6, 1, 12, 0, 0)


def active_loan(item_key: str, category: str | None = "Science") -> LoanRecord:
    return LoanRecord(
        item_key=item_key,
        title=f"Item {item_key}",
        category=category,
        checked_out_at=NOW - timedelta(days=3),
        due_period_days=14,
    )


class TestPatronModel:
    """Test suite for Patron."""

    def test_create_valid_patron(self, make_patron):
        patron = make_patron(interests=["science"], favorite_categories=["History"])

        assert len(patron.id) == 32
        assert patron.name == "Jane Doe"
        assert patron.interests == ["science"]
        assert patron.favorite_categories == ["History"]
        assert patron.active_loans == []
        assert patron.loan_history == []

    def test_ids_are_unique(self, make_patron):
        assert make_patron().id != make_patron().id

    def test_invalid_email_rejected(self, make_patron):
        with pytest.raises(ValidationError):
            make_patron(email="not-an-email")

    @pytest.mark.parametrize("age", [-1, 151])
    def test_age_bounds(self, make_patron, age):
        with pytest.raises(ValidationError):
            make_patron(age=age)

    def test_tags_are_set_like(self, make_patron):
        patron = make_patron(
            favorite_categories=[" Science", "Science", "", "History"],
            interests=["space", "space ", "  "],
        )
        assert patron.favorite_categories == ["Science", "History"]
        assert patron.interests == ["space"]

    def test_duplicate_active_loans_rejected(self, make_patron):
        with pytest.raises(ValidationError):
            make_patron(active_loans=[active_loan("A1"), active_loan("A1")])

    def test_history_entries_must_be_returned(self, make_patron):
        with pytest.raises(ValidationError):
            make_patron(loan_history=[active_loan("A1")])


class TestPatronLoans:
    """Loan collection behaviour."""

    def test_add_loan(self, make_patron):
        patron = make_patron()
        patron.add_loan(active_loan("A1"))

        assert patron.has_active_loan("A1")
        assert not patron.has_active_loan("A2")
        assert patron.find_active_loan("A1").item_key == "A1"

    def test_add_loan_refuses_duplicate(self, make_patron):
        patron = make_patron()
        patron.add_loan(active_loan("A1"))

        with pytest.raises(ValueError, match="already holds"):
            patron.add_loan(active_loan("A1"))
        assert len(patron.active_loans) == 1

    def test_complete_return_moves_same_record(self, make_patron):
        patron = make_patron()
        record = active_loan("A1")
        patron.add_loan(record)

        closed = patron.complete_return("A1", NOW)

        assert closed is record
        assert closed.returned_at == NOW
        assert patron.active_loans == []
        assert patron.loan_history == [record]

    def test_complete_return_of_unknown_item(self, make_patron):
        patron = make_patron()
        patron.add_loan(active_loan("A1"))

        assert patron.complete_return("B2", NOW) is None
        assert len(patron.active_loans) == 1

    def test_read_categories_come_from_history(self, make_patron, returned_loan):
        patron = make_patron(
            loan_history=[
                returned_loan("A1", category="Science"),
                returned_loan("A2", category=None),
                returned_loan("A3", category="History"),
                returned_loan("A4", category="Science"),
            ],
            active_loans=[active_loan("A5", category="Art")],
        )

        assert patron.read_categories() == ["Science", "History"]

    def test_borrowed_keys_cover_both_collections(self, make_patron, returned_loan):
        patron = make_patron(
            loan_history=[returned_loan("A1")],
            active_loans=[active_loan("A2")],
        )
        assert patron.borrowed_keys() == {"A1", "A2"}
