"""Test configuration and fixtures for the Smart Library core.

Every test gets:
1. A FixedClock pinned to 2024-06-01 12:00, so due dates, overdue days and
   recency are deterministic
2. A fresh LibraryStore with an in-memory audit sink
3. Factories for the three item variants and for patrons
"""

from collections.abc import Callable, Generator
from datetime import date, datetime
from pathlib import Path

import pytest
from smart_library.clock import FixedClock
from smart_library.config import LibraryConfig, reset_config
from smart_library.database.audit import InMemoryAuditSink
from smart_library.database.store import LibraryStore
from smart_library.models.catalog import Book, Periodical, Thesis
from smart_library.models.loan import LoanRecord
from smart_library.models.patron import Patron
from smart_library.observability import ObservabilityConfig, initialize_observability
from smart_library.recommendations.service import RecommendationService
from smart_library.services.lending import LendingEngine

NOW = datetime(2024, 6, 1, 12, 0, 0)


@pytest.fixture(scope="session", autouse=True)
def _local_observability() -> None:
    """Keep spans local during tests."""
    initialize_observability(ObservabilityConfig(token="", console_output=False))


# === Time and Storage Fixtures ===


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def audit_sink(clock: FixedClock) -> InMemoryAuditSink:
    return InMemoryAuditSink(clock=clock)


@pytest.fixture
def store(audit_sink: InMemoryAuditSink, clock: FixedClock) -> LibraryStore:
    return LibraryStore(audit_sink=audit_sink, clock=clock)


@pytest.fixture
def engine(store: LibraryStore, audit_sink: InMemoryAuditSink, clock: FixedClock) -> LendingEngine:
    return LendingEngine(store, audit_sink=audit_sink, clock=clock)


@pytest.fixture
def recommendation_service(store: LibraryStore, clock: FixedClock) -> RecommendationService:
    return RecommendationService(store, clock=clock, default_count=10)


# === Entity Factories ===


@pytest.fixture
def make_book() -> Callable[..., Book]:
    """Build books with sensible defaults; override any field by keyword."""

    def factory(key: str = "9780000000001", **overrides) -> Book:
        data = {
            "key": key,
            "title": f"Book {key}",
            "creator": "Test Author",
            "publication_date": date(2015, 1, 1),
            "category": "Science",
        }
        data.update(overrides)
        return Book(**data)

    return factory


@pytest.fixture
def make_periodical() -> Callable[..., Periodical]:
    def factory(key: str = "ISSN-0001", **overrides) -> Periodical:
        data = {
            "key": key,
            "title": f"Periodical {key}",
            "creator": "Test Press",
            "publication_date": date(2024, 1, 1),
            "category": "Science",
            "issue_number": 12,
            "frequency": "monthly",
        }
        data.update(overrides)
        return Periodical(**data)

    return factory


@pytest.fixture
def make_thesis() -> Callable[..., Thesis]:
    def factory(key: str = "THESIS-0001", **overrides) -> Thesis:
        data = {
            "key": key,
            "title": f"Thesis {key}",
            "creator": "Test Student",
            "publication_date": date(2020, 6, 1),
            "category": "Computer Science",
            "institution": "Test University",
            "degree_level": "PhD",
        }
        data.update(overrides)
        return Thesis(**data)

    return factory


@pytest.fixture
def make_patron() -> Callable[..., Patron]:
    def factory(**overrides) -> Patron:
        data = {
            "name": "Jane Doe",
            "email": "jane.doe@example.com",
            "age": 30,
        }
        data.update(overrides)
        return Patron(**data)

    return factory


@pytest.fixture
def returned_loan() -> Callable[..., LoanRecord]:
    """Historical loan records for building reading histories."""

    def factory(item_key: str, category: str | None = None, title: str | None = None) -> LoanRecord:
        return LoanRecord(
            item_key=item_key,
            title=title or f"Item {item_key}",
            category=category,
            checked_out_at=datetime(2023, 1, 1, 10, 0),
            returned_at=datetime(2023, 1, 10, 10, 0),
            due_period_days=14,
        )

    return factory


@pytest.fixture
def patron(store: LibraryStore, make_patron) -> Patron:
    """A registered adult patron without history."""
    return store.register_patron(make_patron())


@pytest.fixture
def book(store: LibraryStore, make_book) -> Book:
    """A catalogued, available book."""
    return store.add_item(make_book())


# === Configuration Fixtures ===


@pytest.fixture
def test_config(tmp_path: Path) -> Generator[LibraryConfig, None, None]:
    """Isolated configuration with a temporary audit database."""
    reset_config()
    config = LibraryConfig(
        server_name="test-smart-library",
        server_version="0.0.1-test",
        database_path=tmp_path / "audit.db",
        debug=True,
        log_level="DEBUG",
    )
    yield config
    reset_config()
