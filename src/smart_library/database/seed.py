"""
Demo data generation for the Smart Library core.

Populates a ``LibraryStore`` with a reproducible catalog of books,
periodicals and theses and a handful of patrons with interests and favorite
categories, so the tool server has something to lend and recommend out of
the box.
"""

import logging
import random
from datetime import timedelta

from faker import Faker

from ..clock import Clock, SystemClock
from ..models.catalog import Book, CatalogItem, Periodical, Thesis
from ..models.patron import Patron
from .store import LibraryStore

logger = logging.getLogger(__name__)

CATEGORIES = [
    "Science",
    "History",
    "Philosophy",
    "Literature",
    "Computer Science",
    "Mathematics",
    "Art",
    "Economics",
]

FREQUENCIES = ["weekly", "monthly", "quarterly"]
DEGREE_LEVELS = ["Master", "PhD"]
LANGUAGES = ["English", "Turkish", "German", "French"]


def generate_isbn13(rng: random.Random) -> str:
    """Generate a valid ISBN-13 number."""
    body = f"978{rng.randint(0, 9)}{rng.randint(1000, 9999)}{rng.randint(1000, 9999)}"
    total = sum(int(digit) * (3 if i % 2 else 1) for i, digit in enumerate(body))
    return f"{body}{(10 - total % 10) % 10}"


def generate_items(count: int, seed: int = 42, clock: Clock | None = None) -> list[CatalogItem]:
    """
    Generate ``count`` catalog items.

    Roughly 60% books, 25% periodicals and 15% theses, published over the
    last 30 years, with a spread of historical checkout counts.
    """
    fake = Faker()
    fake.seed_instance(seed)
    rng = random.Random(seed)
    today = (clock or SystemClock()).now().date()

    items: list[CatalogItem] = []
    used_keys: set[str] = set()
    while len(items) < count:
        key = generate_isbn13(rng)
        if key in used_keys:
            continue
        used_keys.add(key)

        common = {
            "key": key,
            "title": fake.sentence(nb_words=rng.randint(2, 5)).rstrip("."),
            "creator": fake.name(),
            "publication_date": today - timedelta(days=rng.randint(30, 365 * 30)),
            "category": rng.choice(CATEGORIES),
            "checkout_count": rng.randint(0, 250),
        }

        roll = rng.random()
        if roll < 0.6:
            item: CatalogItem = Book(
                **common,
                page_count=rng.randint(80, 900),
                publisher=fake.company(),
                language=rng.choice(LANGUAGES),
            )
        elif roll < 0.85:
            item = Periodical(
                **(common | {"creator": fake.company()}),
                issue_number=rng.randint(1, 400),
                frequency=rng.choice(FREQUENCIES),
                series_id=f"{rng.randint(1000, 9999)}-{rng.randint(1000, 9999)}",
            )
        else:
            item = Thesis(
                **common,
                institution=f"{fake.city()} University",
                department=rng.choice(CATEGORIES),
                advisor=fake.name(),
                degree_level=rng.choice(DEGREE_LEVELS),
            )
        items.append(item)

    return items


def generate_patrons(count: int, seed: int = 42) -> list[Patron]:
    """Generate ``count`` patrons across all age bands."""
    fake = Faker()
    fake.seed_instance(seed)
    rng = random.Random(seed)

    patrons = []
    for _ in range(count):
        favorites = rng.sample(CATEGORIES, k=rng.randint(0, 2))
        interests = [c.lower() for c in rng.sample(CATEGORIES, k=rng.randint(0, 3))]
        patrons.append(
            Patron(
                name=fake.name(),
                email=fake.unique.email(),
                age=rng.randint(12, 75),
                interests=interests,
                favorite_categories=favorites,
            )
        )
    return patrons


def seed_library(
    store: LibraryStore,
    item_count: int = 40,
    patron_count: int = 5,
    seed: int = 42,
    clock: Clock | None = None,
) -> LibraryStore:
    """Add generated items and patrons to ``store``, dated by ``clock`` (the store's by default)."""
    for item in generate_items(item_count, seed=seed, clock=clock or store.clock):
        store.add_item(item)
    for patron in generate_patrons(patron_count, seed=seed):
        store.register_patron(patron)

    logger.info("Seeded library with %d items and %d patrons", item_count, patron_count)
    return store
