"""Statistics service: fetch viewings, resolve metadata, aggregate."""

import logging
from typing import Any

from sqlalchemy.orm import Session

from src.catalog.resolver import MetadataResolver
from src.database.repositories import MediaRepository
from src.services.viewings import ViewingService
from src.settings import settings
from src.stats import StatsEngine, StatsSnapshot

logger = logging.getLogger(__name__)


class StatsService:
    """Builds statistics snapshots from the viewing store."""

    def __init__(self, session: Session, engine: StatsEngine | None = None) -> None:
        """Initialize service.

        Args:
            session: Open database session.
            engine: Statistics engine (default StatsEngine()).
        """
        self._viewings = ViewingService(session)
        self._resolver = MetadataResolver(MediaRepository(session))
        self._engine = engine or StatsEngine()

    def build_snapshot(
        self,
        limit: int | None = None,
        user_id: str | None = None,
    ) -> StatsSnapshot:
        """Aggregate the current viewings.

        Args:
            limit: Maximum viewings fetched (default settings.stats.fetch_limit).
            user_id: Restrict to one rater's viewings.

        Returns:
            Snapshot ready to be ranked by any dimension.
        """
        if user_id is not None:
            documents = self._viewings.list_by_user(user_id)
        else:
            documents = self._viewings.list_all(limit or settings.stats.fetch_limit)

        logger.info("Aggregating %d viewings", len(documents))
        metadata = self._resolver.resolve(_target_ids(documents))
        return self._engine.aggregate(documents, metadata)


def _target_ids(documents: list[dict[str, Any]]) -> set[str]:
    return {str(d["movieId"]) for d in documents if d.get("movieId")}
