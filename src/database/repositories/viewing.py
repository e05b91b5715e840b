"""Viewing repository with the queries the application pages need."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.database.models import ViewingRow
from src.database.repositories.base import BaseRepository

DEFAULT_RECENT_LIMIT = 1000
"""Upper bound on viewings fetched for one statistics pass."""


class ViewingRepository(BaseRepository[ViewingRow]):
    """Repository for ViewingRow entity operations.

    All listings are newest first (watched_at, then id).
    """

    model = ViewingRow

    def __init__(self, session: Session) -> None:
        """Initialize viewing repository.

        Args:
            session: SQLAlchemy session instance.
        """
        super().__init__(session)

    def list_by_target(self, target_id: str) -> list[ViewingRow]:
        """List every viewing of one movie or show.

        Args:
            target_id: Media document id.

        Returns:
            Viewings, newest first.
        """
        stmt = (
            select(ViewingRow)
            .where(ViewingRow.target_id == target_id)
            .order_by(ViewingRow.watched_at.desc(), ViewingRow.id.desc())
        )
        return list(self._session.scalars(stmt).all())

    def list_by_user(self, user_id: str) -> list[ViewingRow]:
        """List every viewing logged by one person.

        Args:
            user_id: Rater identifier.

        Returns:
            Viewings, newest first.
        """
        stmt = (
            select(ViewingRow)
            .where(ViewingRow.user_id == user_id)
            .order_by(ViewingRow.watched_at.desc(), ViewingRow.id.desc())
        )
        return list(self._session.scalars(stmt).all())

    def list_recent(self, limit: int = DEFAULT_RECENT_LIMIT) -> list[ViewingRow]:
        """List the most recent viewings across all users.

        Args:
            limit: Maximum number of rows.

        Returns:
            Viewings, newest first.
        """
        stmt = (
            select(ViewingRow)
            .order_by(ViewingRow.watched_at.desc(), ViewingRow.id.desc())
            .limit(limit)
        )
        return list(self._session.scalars(stmt).all())
