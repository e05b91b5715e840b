"""Media repository: catalog entries and their cached averages."""

from collections.abc import Iterable
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from src.database.models import MediaItem
from src.database.repositories.base import BaseRepository


class MediaRepository(BaseRepository[MediaItem]):
    """Repository for MediaItem entity operations."""

    model = MediaItem

    def __init__(self, session: Session) -> None:
        """Initialize media repository.

        Args:
            session: SQLAlchemy session instance.
        """
        super().__init__(session)

    def get_many(self, media_ids: Iterable[str]) -> dict[str, MediaItem]:
        """Retrieve several entries by document id.

        Args:
            media_ids: Document ids.

        Returns:
            Mapping of id to entry, for ids that exist.
        """
        ids = set(media_ids)
        if not ids:
            return {}
        stmt = select(MediaItem).where(MediaItem.id.in_(ids))
        return {item.id: item for item in self._session.scalars(stmt).all()}

    def upsert(self, media_id: str, values: dict[str, Any]) -> MediaItem:
        """Insert an entry or merge new values into the existing one.

        None values never overwrite stored data.

        Args:
            media_id: Document id.
            values: Column values.

        Returns:
            Stored entry.
        """
        item = self.get_by_id(media_id)
        if item is None:
            item = MediaItem(id=media_id, **values)
            return self.create(item)

        for column, value in values.items():
            if value is not None:
                setattr(item, column, value)
        self._session.flush()
        return item

    def update_averages(
        self,
        media_id: str,
        overall_average: float | None,
        enjoyment_average: float | None,
    ) -> bool:
        """Store the cached rating averages of one entry.

        Returns:
            True if the entry exists and was updated.
        """
        stmt = (
            update(MediaItem)
            .where(MediaItem.id == media_id)
            .values(overall_average=overall_average, enjoyment_average=enjoyment_average)
        )
        result = self._session.execute(stmt)
        return result.rowcount > 0
