"""
Data access layer for the Smart Library core.

This package provides:
- In-memory repositories for the catalog and the patron registry
- LibraryStore: both repositories behind one coordination lock
- Audit sinks, including a SQLAlchemy-backed one (schema.py, session.py)
- Demo data seeding
"""

from .audit import AuditEvent, AuditSink, InMemoryAuditSink, SqlAuditSink
from .catalog_repository import CatalogRepository
from .patron_repository import PatronRepository
from .repository import (
    ActiveLoansError,
    DuplicateError,
    InMemoryRepository,
    NotFoundError,
    RepositoryException,
)
from .schema import AuditEventDB, Base
from .session import DatabaseManager
from .store import LibraryStore

__all__ = [
    "ActiveLoansError",
    "AuditEvent",
    "AuditEventDB",
    "AuditSink",
    "Base",
    "CatalogRepository",
    "DatabaseManager",
    "DuplicateError",
    "InMemoryAuditSink",
    "InMemoryRepository",
    "LibraryStore",
    "NotFoundError",
    "PatronRepository",
    "RepositoryException",
    "SqlAuditSink",
]
