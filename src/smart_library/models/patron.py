"""
Patron model for the Smart Library core.

A patron is a registered library user. Besides the profile fields, a patron
carries what the recommendation pipeline personalizes on:

- interests: free-form tags matched against item titles and categories
- favorite_categories: categories the patron explicitly asked for
- active_loans / loan_history: the two loan collections

Returning an item is a patron-side transition: the matching active loan gets
its return time and moves, as the same object, into the history.
"""

from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from .loan import LoanRecord


def generate_patron_id() -> str:
    """Opaque patron identifier."""
    return uuid4().hex


class Patron(BaseModel):
    """
    Represents a registered library user.

    At most one active loan per item key is allowed; the lending engine
    checks item availability first, and ``add_loan`` refuses duplicates as
    a second line.
    """

    id: str = Field(
        default_factory=generate_patron_id,
        description="Opaque patron identifier, generated at registration",
        min_length=1,
    )

    name: str = Field(
        ...,
        description="Full name of the patron",
        min_length=1,
        max_length=200,
        examples=["Jane Doe", "Mehmet Yilmaz"],
    )

    email: EmailStr = Field(
        ...,
        description="Email address of the patron",
        examples=["jane.doe@example.com"],
    )

    age: int = Field(
        ...,
        description="Age in years, used by the age recommendation filter",
        ge=0,
        le=150,
    )

    interests: list[str] = Field(
        default_factory=list,
        description="Interest tags matched against item titles and categories",
        examples=[["science", "space"], ["history"]],
    )

    favorite_categories: list[str] = Field(
        default_factory=list,
        description="Categories the patron prefers",
        examples=[["Science", "Philosophy"]],
    )

    active_loans: list[LoanRecord] = Field(
        default_factory=list,
        description="Loans that have not been returned yet",
    )

    loan_history: list[LoanRecord] = Field(
        default_factory=list,
        description="Returned loans",
    )

    registered_at: datetime | None = Field(
        None,
        description="When the patron registered; stamped by the store on registration",
    )

    @field_validator("interests", "favorite_categories")
    @classmethod
    def normalize_tags(cls, v: list[str]) -> list[str]:
        """Strip tags, drop blanks and remove duplicates while preserving order."""
        stripped = (tag.strip() for tag in v)
        return list(dict.fromkeys(tag for tag in stripped if tag))

    @model_validator(mode="after")
    def validate_loans(self) -> "Patron":
        """Validate the two loan collections."""
        keys = [loan.item_key for loan in self.active_loans]
        if len(keys) != len(set(keys)):
            raise ValueError("An item can only be actively loaned once per patron")
        if any(loan.returned_at is not None for loan in self.active_loans):
            raise ValueError("Active loans cannot have a return date")
        if any(loan.returned_at is None for loan in self.loan_history):
            raise ValueError("Loan history entries must have a return date")
        return self

    # === Derived views ===

    def read_categories(self) -> list[str]:
        """Distinct categories of returned loans, in first-read order."""
        return list(
            dict.fromkeys(loan.category for loan in self.loan_history if loan.category)
        )

    def borrowed_keys(self) -> set[str]:
        """Keys of every item the patron has ever checked out."""
        return {loan.item_key for loan in self.active_loans} | {
            loan.item_key for loan in self.loan_history
        }

    def has_active_loan(self, item_key: str) -> bool:
        return any(loan.item_key == item_key for loan in self.active_loans)

    def find_active_loan(self, item_key: str) -> LoanRecord | None:
        return next((loan for loan in self.active_loans if loan.item_key == item_key), None)

    # === Transitions ===

    def add_loan(self, record: LoanRecord) -> None:
        """
        Record a new active loan.

        Raises:
            ValueError: If the patron already holds this item
        """
        if self.has_active_loan(record.item_key):
            raise ValueError(f"Patron already holds item {record.item_key}")
        self.active_loans.append(record)

    def complete_return(self, item_key: str, now: datetime) -> LoanRecord | None:
        """
        Close the active loan for ``item_key`` and move it to the history.

        Returns:
            The closed record, or None when the patron does not hold the item
        """
        record = self.find_active_loan(item_key)
        if record is None:
            return None
        record.mark_returned(now)
        self.active_loans.remove(record)
        self.loan_history.append(record)
        return record

    model_config = ConfigDict(
        validate_assignment=True,
        populate_by_name=True,
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "id": "3f2b9c1e6a7d4e0f9b8a7c6d5e4f3a2b",
                "name": "Jane Doe",
                "email": "jane.doe@example.com",
                "age": 29,
                "interests": ["science", "space"],
                "favorite_categories": ["Science"],
            }
        },
    )
