"""
Audit trail for library operations.

The lending engine and the library store report every successful mutation
to an ``AuditSink`` as a fire-and-forget ``record(event_type, description)``
call. The core never reads the trail back; statistics and reports do.

Two sinks are provided:
- InMemoryAuditSink: keeps events in a list (default, and used in tests)
- SqlAuditSink: appends events to the ``audit_events`` table via SQLAlchemy
"""

import logging
import threading
from collections import Counter
from datetime import date, datetime
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import desc, select

from ..clock import Clock, SystemClock
from .schema import AuditEventDB
from .session import DatabaseManager, safe_query

logger = logging.getLogger(__name__)

# Event types emitted by the core
ITEM_ADDED = "item_added"
ITEM_REMOVED = "item_removed"
PATRON_ADDED = "patron_added"
PATRON_UPDATED = "patron_updated"
PATRON_REMOVED = "patron_removed"
CHECKOUT = "checkout"
RETURN = "return"


class AuditEvent(BaseModel):
    """A recorded library operation."""

    event_type: str = Field(..., description="Kind of operation")
    description: str = Field(default="", description="Human readable detail")
    occurred_at: datetime = Field(..., description="When the operation happened")

    model_config = ConfigDict(from_attributes=True)


class AuditSink(Protocol):
    """Destination for audit events."""

    def record(self, event_type: str, description: str) -> None: ...


class InMemoryAuditSink:
    """Audit sink that keeps events in process memory."""

    def __init__(self, clock: Clock | None = None):
        self.clock = clock or SystemClock()
        self._events: list[AuditEvent] = []
        self._lock = threading.Lock()

    def record(self, event_type: str, description: str) -> None:
        event = AuditEvent(
            event_type=event_type,
            description=description,
            occurred_at=self.clock.now(),
        )
        with self._lock:
            self._events.append(event)
        logger.debug("Audit %s: %s", event_type, description)

    def events(self) -> list[AuditEvent]:
        """All events, newest first."""
        with self._lock:
            return sorted(self._events, key=lambda e: e.occurred_at, reverse=True)

    def daily_counts(self, day: date) -> dict[str, int]:
        """Number of events of each type recorded on ``day``."""
        with self._lock:
            counts = Counter(e.event_type for e in self._events if e.occurred_at.date() == day)
        return dict(counts)

    def __len__(self) -> int:
        return len(self._events)


class SqlAuditSink:
    """
    Audit sink backed by the ``audit_events`` table.

    Write failures are logged and swallowed: the audit trail must never
    undo an in-memory transition that has already succeeded.
    """

    def __init__(self, db_manager: DatabaseManager, clock: Clock | None = None):
        self.db_manager = db_manager
        self.clock = clock or SystemClock()
        self.db_manager.init_database()

    def record(self, event_type: str, description: str) -> None:
        try:
            with self.db_manager.session_scope() as session:
                session.add(
                    AuditEventDB(
                        event_type=event_type,
                        description=description,
                        occurred_at=self.clock.now(),
                    )
                )
        except Exception:
            logger.exception("Failed to persist audit event %s", event_type)

    def events(self, limit: int | None = None) -> list[AuditEvent]:
        """Stored events, newest first."""
        query = select(AuditEventDB).order_by(desc(AuditEventDB.occurred_at))
        if limit is not None:
            query = query.limit(limit)
        with self.db_manager.session_scope() as session:
            rows = safe_query(
                session,
                lambda s: s.execute(query).scalars().all(),
                "Failed to load audit events",
            )
            return [AuditEvent.model_validate(row) for row in rows]

    def daily_counts(self, day: date) -> dict[str, int]:
        """Number of events of each type recorded on ``day``."""
        start = datetime.combine(day, datetime.min.time())
        end = datetime.combine(day, datetime.max.time())
        query = select(AuditEventDB.event_type).where(
            AuditEventDB.occurred_at >= start, AuditEventDB.occurred_at <= end
        )
        with self.db_manager.session_scope() as session:
            types = safe_query(
                session,
                lambda s: s.execute(query).scalars().all(),
                "Failed to count audit events",
            )
        return dict(Counter(types))
