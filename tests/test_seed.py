"""Tests for demo data generation."""

import random
from collections import Counter
from datetime import date, datetime

from smart_library.clock import FixedClock
from smart_library.database.seed import (
    CATEGORIES,
    generate_isbn13,
    generate_items,
    generate_patrons,
    seed_library,
)
from smart_library.models.catalog import Book, Periodical, Thesis


def isbn_checksum_ok(isbn: str) -> bool:
    total = sum(int(digit) * (3 if i % 2 else 1) for i, digit in enumerate(isbn))
    return total % 10 == 0


class TestSeedData:
    def test_isbn13_is_valid(self):
        rng = random.Random(1)
        for _ in range(50):
            isbn = generate_isbn13(rng)
            assert len(isbn) == 13
            assert isbn.startswith("978")
            assert isbn_checksum_ok(isbn)

    def test_generate_items_is_reproducible(self, clock):
        first = generate_items(30, seed=7, clock=clock)
        second = generate_items(30, seed=7, clock=clock)

        assert [i.model_dump() for i in first] == [i.model_dump() for i in second]

    def test_generate_items_mix(self, clock):
        items = generate_items(200, seed=3, clock=clock)
        kinds = Counter(type(item) for item in items)

        assert len(items) == 200
        assert len({item.key for item in items}) == 200
        assert set(kinds) == {Book, Periodical, Thesis}
        assert kinds[Book] > kinds[Periodical] > kinds[Thesis]
        assert all(item.category in CATEGORIES for item in items)
        assert all(item.publication_date < date(2024, 6, 1) for item in items)
        assert not any(item.on_loan for item in items)

    def test_generate_patrons(self):
        patrons = generate_patrons(10, seed=5)

        assert len(patrons) == 10
        assert len({p.email for p in patrons}) == 10
        assert all(set(p.favorite_categories) <= set(CATEGORIES) for p in patrons)

    def test_seed_library(self, store, audit_sink):
        seed_library(store, item_count=12, patron_count=3, seed=11)

        assert len(store.catalog) == 12
        assert len(store.patrons) == 3
        assert len(audit_sink) == 15

    def test_seed_library_uses_store_clock(self, store, clock):
        seed_library(store, item_count=20, patron_count=2, seed=11)

        assert all(item.publication_date < clock.now().date() for item in store.catalog)
        assert all(patron.registered_at == clock.now() for patron in store.patrons.list())

    def test_explicit_clock_dates_the_catalog(self, store):
        earlier = FixedClock(datetime(1990, 1, 1))
        seed_library(store, item_count=10, patron_count=0, seed=2, clock=earlier)

        assert all(item.publication_date < date(1990, 1, 1) for item in store.catalog)
