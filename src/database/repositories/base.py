"""
Base repository with the lookups and inserts every model shares.

Shared by the media and viewing repositories.
"""

from typing import Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from src.database.models.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Generic repository over one mapped model.

    Writes flush but never commit; the caller's session scope owns
    the transaction.

    Attributes:
        model: SQLAlchemy model class.
    """

    model: type[ModelT]

    def __init__(self, session: Session) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy session instance.
        """
        self._session = session

    def get_by_id(self, entity_id: int | str) -> ModelT | None:
        """Retrieve entity by primary key.

        Args:
            entity_id: Primary key value.

        Returns:
            Entity instance or None if not found.
        """
        return self._session.get(self.model, entity_id)

    def count(self) -> int:
        """Count stored rows."""
        stmt = select(func.count()).select_from(self.model)
        return self._session.execute(stmt).scalar() or 0

    def create(self, entity: ModelT) -> ModelT:
        """Persist a new entity and load its generated columns.

        Args:
            entity: Entity instance to persist.

        Returns:
            Persisted entity with generated ID.
        """
        self._session.add(entity)
        self._session.flush()
        return entity

