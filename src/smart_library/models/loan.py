"""
Loan records for the Smart Library core.

A ``LoanRecord`` is one checkout-to-return episode of a single catalog item.
Title and category are copied from the item at checkout time, and so is the
due period, so a record keeps describing the loan even after the catalog
item is edited, re-typed or deleted.

Overdue state is never stored. It is derived from the checkout time, the
captured due period and the current time supplied by the caller.
"""

from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field, model_validator


def overdue_days_between(due_at: datetime, now: datetime) -> int:
    """
    Whole days elapsed past ``due_at``.

    A started day counts as a full day, so any instant after the due time
    yields at least 1. Returns 0 at or before the due time.
    """
    delta = now - due_at
    if delta <= timedelta(0):
        return 0
    days = delta.days
    if delta.seconds or delta.microseconds:
        days += 1
    return days


class LoanRecord(BaseModel):
    """Represents one loan of a catalog item to a patron."""

    item_key: str = Field(
        ...,
        description="Catalog key of the borrowed item",
        min_length=1,
        examples=["9780134685479", "ISSN-0036-8733"],
    )

    title: str | None = Field(
        None,
        description="Item title captured at checkout time",
    )

    category: str | None = Field(
        None,
        description="Item category captured at checkout time",
    )

    checked_out_at: datetime = Field(
        ...,
        description="When the item was checked out",
    )

    returned_at: datetime | None = Field(
        None,
        description="When the item was returned, None while the loan is active",
    )

    due_period_days: int = Field(
        ...,
        description="Loan period in days, captured from the item type at checkout",
        ge=1,
        examples=[7, 14, 21],
    )

    @model_validator(mode="after")
    def validate_dates(self) -> "LoanRecord":
        """Ensure a return never precedes its checkout."""
        if self.returned_at is not None and self.returned_at < self.checked_out_at:
            raise ValueError("Return date cannot be before checkout date")
        return self

    @property
    def record_id(self) -> tuple[str, datetime]:
        """The same item can be borrowed many times; key + checkout time is unique."""
        return (self.item_key, self.checked_out_at)

    @property
    def due_at(self) -> datetime:
        """Instant after which the loan is overdue."""
        return self.checked_out_at + timedelta(days=self.due_period_days)

    @property
    def is_active(self) -> bool:
        return self.returned_at is None

    def is_overdue(self, now: datetime) -> bool:
        """Check if the loan is still open and past its due time."""
        return self.returned_at is None and now > self.due_at

    def overdue_days(self, now: datetime) -> int:
        """Number of started days past the due time; 0 when not overdue."""
        if not self.is_overdue(now):
            return 0
        return overdue_days_between(self.due_at, now)

    def mark_returned(self, now: datetime) -> None:
        """Close the loan."""
        if self.returned_at is not None:
            raise ValueError("Loan already returned")
        self.returned_at = now

    model_config = ConfigDict(
        validate_assignment=True,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "item_key": "9780134685479",
                "title": "A Brief History of Time",
                "category": "Science",
                "checked_out_at": "2024-05-01T10:30:00",
                "returned_at": None,
                "due_period_days": 14,
            }
        },
    )


class OverdueNotice(BaseModel):
    """One line of the overdue report."""

    patron_id: str
    patron_name: str
    item_key: str
    item_title: str
    overdue_days: int = Field(..., ge=0)
    penalty: float = Field(..., ge=0.0)
