"""
Catalog item models for the Smart Library core.

The catalog holds three kinds of circulating items, modelled as a closed set
of variants sharing a common base:

- Book: 14-day loans, penalty 2 per overdue day
- Periodical: 7-day loans, penalty 1 per overdue day
- Thesis: 21-day loans, penalty 3 per overdue day

Loan period and penalty rate are class-level policy of each variant. They
are never stored on an item, so changing the policy changes it for every
item of that type at once.

``CatalogEntry`` is a discriminated union over ``item_type`` that lets
plain dictionaries (tool input, seed data) be validated into the right
variant.
"""

from datetime import date, datetime, timedelta
from typing import Annotated, ClassVar, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    field_validator,
    model_validator,
)

from .loan import overdue_days_between


class CatalogItem(BaseModel):
    """
    Common state of every circulating item.

    Items are created available (``on_loan`` False). ``checkout`` and
    ``check_in`` are the only operations that change loan state, and
    ``checkout_count`` only ever grows.
    """

    DUE_PERIOD_DAYS: ClassVar[int] = 14
    PENALTY_PER_DAY: ClassVar[float] = 2.0
    TYPE_LABEL: ClassVar[str] = "ITEM"

    key: str = Field(
        ...,
        description="Unique catalog key (ISBN, ISSN or local accession number)",
        min_length=1,
        max_length=64,
        frozen=True,
        examples=["9780134685479", "ISSN-0036-8733"],
    )

    title: str = Field(
        ...,
        description="Title of the item",
        min_length=1,
        max_length=500,
    )

    creator: str = Field(
        ...,
        description="Author, or publisher for periodicals",
        min_length=1,
        max_length=200,
    )

    publication_date: date = Field(
        ...,
        description="Date the item was published",
    )

    category: str | None = Field(
        None,
        description="Subject category used by the recommendation filters",
        max_length=100,
        examples=["Science", "History", "Computer Science"],
    )

    on_loan: bool = Field(
        default=False,
        description="Whether the item is currently checked out",
    )

    loaned_at: datetime | None = Field(
        None,
        description="When the current loan started; present only while on loan",
    )

    checkout_count: int = Field(
        default=0,
        description="Number of times the item has ever been checked out",
        ge=0,
    )

    @field_validator("key", "title", "creator")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Value cannot be blank")
        return v

    @field_validator("category")
    @classmethod
    def normalize_category(cls, v: str | None) -> str | None:
        """Blank categories are treated as missing."""
        if v is None:
            return None
        v = v.strip()
        return v or None

    @model_validator(mode="after")
    def validate_loan_state(self) -> "CatalogItem":
        """A loan timestamp exists exactly when the item is on loan."""
        if self.on_loan != (self.loaned_at is not None):
            raise ValueError("loaned_at must be set if and only if the item is on loan")
        return self

    # === Policy ===

    @classmethod
    def due_period_days(cls) -> int:
        """Loan period of this item type in days."""
        return cls.DUE_PERIOD_DAYS

    @classmethod
    def penalty_per_day(cls) -> float:
        """Penalty charged per overdue day for this item type."""
        return cls.PENALTY_PER_DAY

    @classmethod
    def calculate_penalty(cls, overdue_days: int) -> float:
        """Penalty for the given number of overdue days."""
        return max(0, overdue_days) * cls.PENALTY_PER_DAY

    # === Loan state ===

    @property
    def is_available(self) -> bool:
        return not self.on_loan

    def checkout(self, now: datetime) -> None:
        """
        Mark the item as checked out.

        Raises:
            ValueError: If the item is already on loan
        """
        if self.on_loan:
            raise ValueError(f"'{self.title}' is already on loan")
        self.loaned_at = now
        self.on_loan = True
        self.checkout_count += 1

    def check_in(self) -> None:
        """
        Mark the item as back in the library.

        Raises:
            ValueError: If the item is not on loan
        """
        if not self.on_loan:
            raise ValueError(f"'{self.title}' is not on loan")
        self.on_loan = False
        self.loaned_at = None

    def overdue_days(self, now: datetime) -> int:
        """Days the current loan is past due, by this item's policy."""
        if self.loaned_at is None:
            return 0
        due_at = self.loaned_at + timedelta(days=self.due_period_days())
        return overdue_days_between(due_at, now)

    def age_in_years(self, now: datetime) -> float:
        """Years since publication, counted as days / 365."""
        return (now.date() - self.publication_date).days / 365

    # === Presentation ===

    def _detail_lines(self) -> list[str]:
        return []

    def summary(self) -> str:
        """Human readable description of the item."""
        lines = [
            self.TYPE_LABEL,
            f"Title: {self.title}",
            f"{self._creator_label()}: {self.creator}",
            f"Key: {self.key}",
            *self._detail_lines(),
            f"Category: {self.category or '-'}",
            f"Checkouts: {self.checkout_count}",
            f"Status: {'On loan' if self.on_loan else 'Available'}",
        ]
        return "\n".join(lines)

    def _creator_label(self) -> str:
        return "Author"

    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class Book(CatalogItem):
    """A book: 14-day loans, 2 per overdue day."""

    DUE_PERIOD_DAYS: ClassVar[int] = 14
    PENALTY_PER_DAY: ClassVar[float] = 2.0
    TYPE_LABEL: ClassVar[str] = "BOOK"

    item_type: Literal["book"] = "book"

    page_count: int = Field(default=0, ge=0, description="Number of pages")
    publisher: str | None = Field(None, description="Publishing house")
    language: str | None = Field(None, description="Language the book is written in")

    def _detail_lines(self) -> list[str]:
        return [
            f"Pages: {self.page_count}",
            f"Publisher: {self.publisher or '-'}",
            f"Language: {self.language or '-'}",
        ]


class Periodical(CatalogItem):
    """A magazine or journal issue: 7-day loans, 1 per overdue day."""

    DUE_PERIOD_DAYS: ClassVar[int] = 7
    PENALTY_PER_DAY: ClassVar[float] = 1.0
    TYPE_LABEL: ClassVar[str] = "PERIODICAL"

    item_type: Literal["periodical"] = "periodical"

    issue_number: int = Field(default=0, ge=0, description="Issue number")
    frequency: str | None = Field(
        None,
        description="Publication frequency",
        examples=["weekly", "monthly", "quarterly"],
    )
    series_id: str | None = Field(None, description="ISSN of the series")

    def _creator_label(self) -> str:
        return "Publisher"

    def _detail_lines(self) -> list[str]:
        return [
            f"ISSN: {self.series_id or '-'}",
            f"Issue: {self.issue_number}",
            f"Frequency: {self.frequency or '-'}",
        ]


class Thesis(CatalogItem):
    """An academic thesis: 21-day loans, 3 per overdue day."""

    DUE_PERIOD_DAYS: ClassVar[int] = 21
    PENALTY_PER_DAY: ClassVar[float] = 3.0
    TYPE_LABEL: ClassVar[str] = "THESIS"

    item_type: Literal["thesis"] = "thesis"

    institution: str | None = Field(None, description="Awarding university")
    department: str | None = Field(None, description="Department")
    advisor: str | None = Field(None, description="Thesis advisor")
    degree_level: str | None = Field(
        None,
        description="Degree the thesis was written for",
        examples=["Master", "PhD"],
    )

    def _detail_lines(self) -> list[str]:
        return [
            f"Degree: {self.degree_level or '-'}",
            f"Institution: {self.institution or '-'}",
            f"Department: {self.department or '-'}",
            f"Advisor: {self.advisor or '-'}",
        ]


CatalogEntry = Annotated[Book | Periodical | Thesis, Field(discriminator="item_type")]

catalog_entry_adapter: TypeAdapter[Book | Periodical | Thesis] = TypeAdapter(CatalogEntry)

ITEM_TYPES: dict[str, type[CatalogItem]] = {
    "book": Book,
    "periodical": Periodical,
    "thesis": Thesis,
}


def build_item(data: dict) -> CatalogItem:
    """Validate a plain dict into the variant named by its ``item_type``."""
    return catalog_entry_adapter.validate_python(data)
