"""
SQLAlchemy schema for the Smart Library audit trail.

Catalog and patron state lives in memory; the only persisted table is the
audit trail of library operations (items and patrons added, updated or
removed, checkouts and returns). Rows are append-only.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models."""


class AuditEventDB(Base):
    """
    One recorded library operation.

    Event types in use:
    - item_added / item_removed
    - patron_added / patron_updated / patron_removed
    - checkout / return
    """

    __tablename__ = "audit_events"

    id: Mapped[str] = mapped_column(
        String(32),
        primary_key=True,
        default=lambda: uuid4().hex,
    )

    event_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        index=True,
        comment="Kind of operation, e.g. checkout",
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        comment="Human readable detail of the operation",
    )

    occurred_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=datetime.now,
        comment="When the operation happened",
    )

    __table_args__ = (Index("idx_audit_type_time", "event_type", "occurred_at"),)

    def __repr__(self) -> str:
        return f"<AuditEvent(type='{self.event_type}', at={self.occurred_at})>"
