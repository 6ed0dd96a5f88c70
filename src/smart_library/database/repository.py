"""
Repository pattern implementation for the Smart Library core.

Catalog items and patrons live in memory for the lifetime of the process.
Repositories give the lending engine and the recommendation service a
uniform data access surface (``get``/``list``/``add``/``update``/``remove``)
so the services never touch the underlying dictionaries directly, and tests
can substitute their own stores.

Expected lookups return ``None`` when nothing is found; mutations of
unknown or duplicate entities raise the exceptions defined here.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import Generic, TypeVar

from pydantic import BaseModel

logger = logging.getLogger(__name__)

EntityType = TypeVar("EntityType", bound=BaseModel)


class RepositoryException(Exception):
    """Base exception for repository operations."""


class NotFoundError(RepositoryException):
    """Raised when an entity is not found."""


class DuplicateError(RepositoryException):
    """Raised when attempting to create a duplicate entity."""


class ActiveLoansError(RepositoryException):
    """Raised when removing a patron who still holds loans."""

    def __init__(self, patron_id: str, active_count: int):
        self.patron_id = patron_id
        self.active_count = active_count
        super().__init__(
            f"Patron {patron_id} has {active_count} active loan(s); "
            "they must be returned before the patron can be removed"
        )


class InMemoryRepository(ABC, Generic[EntityType]):
    """
    Dictionary-backed repository keyed by each entity's identity.

    Insertion order is preserved, so ``list()`` is deterministic and the
    recommendation pipeline sees candidates in catalog order.
    """

    entity_name: str = "Entity"

    def __init__(self, entities: list[EntityType] | None = None):
        self._entities: dict[str, EntityType] = {}
        for entity in entities or []:
            self.add(entity)

    @abstractmethod
    def identity(self, entity: EntityType) -> str:
        """Return the key the entity is stored under."""

    def get(self, key: str) -> EntityType | None:
        """
        Get entity by identity.

        Returns:
            The stored entity or None if not found
        """
        return self._entities.get(key)

    def list(self) -> list[EntityType]:
        """All entities in insertion order."""
        return list(self._entities.values())

    def exists(self, key: str) -> bool:
        return key in self._entities

    def add(self, entity: EntityType) -> EntityType:
        """
        Store a new entity.

        Raises:
            DuplicateError: If an entity with the same identity exists
        """
        key = self.identity(entity)
        if key in self._entities:
            raise DuplicateError(f"{self.entity_name} {key} already exists")
        self._entities[key] = entity
        logger.debug("Added %s %s", self.entity_name, key)
        return entity

    def update(self, entity: EntityType) -> EntityType:
        """
        Replace a stored entity.

        Raises:
            NotFoundError: If no entity with that identity is stored
        """
        key = self.identity(entity)
        if key not in self._entities:
            raise NotFoundError(f"{self.entity_name} {key} not found")
        self._entities[key] = entity
        return entity

    def remove(self, key: str) -> EntityType:
        """
        Remove an entity by identity.

        Returns:
            The removed entity

        Raises:
            NotFoundError: If no entity with that identity is stored
        """
        if key not in self._entities:
            raise NotFoundError(f"{self.entity_name} {key} not found")
        entity = self._entities.pop(key)
        logger.debug("Removed %s %s", self.entity_name, key)
        return entity

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self) -> Iterator[EntityType]:
        return iter(self.list())

    def __contains__(self, key: object) -> bool:
        return key in self._entities
