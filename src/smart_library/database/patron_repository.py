"""
Patron repository for the Smart Library core.

Beyond the generic CRUD operations this repository enforces the one hard
constraint on patrons: a patron who still holds loans cannot be removed.
Profile updates keep the stored loan collections, identity and
registration time, so an edited profile can never drop loan state.
"""

import logging

from ..models.patron import Patron
from .repository import ActiveLoansError, InMemoryRepository, NotFoundError

logger = logging.getLogger(__name__)


class PatronRepository(InMemoryRepository[Patron]):
    """Repository for patrons keyed by ``Patron.id``."""

    entity_name = "Patron"

    def identity(self, entity: Patron) -> str:
        return entity.id

    def update(self, entity: Patron) -> Patron:
        """
        Replace a patron's profile.

        The loan collections and registration time of the stored patron
        are carried over to the new profile.

        Raises:
            NotFoundError: If the patron does not exist
        """
        current = self.get(entity.id)
        if current is None:
            raise NotFoundError(f"Patron {entity.id} not found")
        updated = entity.model_copy(
            update={
                "active_loans": current.active_loans,
                "loan_history": current.loan_history,
                "registered_at": current.registered_at,
            }
        )
        return super().update(updated)

    def remove(self, key: str) -> Patron:
        """
        Remove a patron.

        Raises:
            NotFoundError: If the patron does not exist
            ActiveLoansError: If the patron still holds loans
        """
        patron = self.get(key)
        if patron is None:
            raise NotFoundError(f"Patron {key} not found")
        if patron.active_loans:
            logger.info(
                "Refusing to remove patron %s with %d active loans",
                key,
                len(patron.active_loans),
            )
            raise ActiveLoansError(key, len(patron.active_loans))
        return super().remove(key)

    def find_by_email(self, email: str) -> Patron | None:
        """Case-insensitive lookup by email address."""
        wanted = email.strip().lower()
        return next((p for p in self.list() if p.email.lower() == wanted), None)
