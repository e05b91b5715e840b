"""Metadata resolver for the statistics engine.

Looks up display metadata for viewing targets in the media table.
Lookups are best-effort: a failure leaves the target unresolved
instead of failing the statistics pass.
"""

import logging
from collections.abc import Iterable

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from src.database.repositories import MediaRepository
from src.stats.schemas import MediaMetadata

logger = logging.getLogger(__name__)


class MetadataResolver:
    """Maps target ids to MediaMetadata.

    Attributes:
        repository: Media repository used for lookups.
    """

    def __init__(self, repository: MediaRepository) -> None:
        """Initialize resolver.

        Args:
            repository: Media repository bound to an open session.
        """
        self.repository = repository

    def resolve(self, target_ids: Iterable[str]) -> dict[str, MediaMetadata | None]:
        """Resolve metadata for several targets.

        Args:
            target_ids: Target ids to look up.

        Returns:
            Mapping with one entry per requested id; None where the
            catalog has no usable entry.
        """
        ids = sorted(set(target_ids))
        resolved: dict[str, MediaMetadata | None] = dict.fromkeys(ids)
        if not ids:
            return resolved

        try:
            items = self.repository.get_many(ids)
        except SQLAlchemyError as e:
            logger.warning("Metadata lookup failed for %d targets: %s", len(ids), e)
            return resolved

        for media_id, item in items.items():
            try:
                resolved[media_id] = MediaMetadata.model_validate(item.to_metadata())
            except ValidationError as e:
                logger.warning("Unusable catalog entry %s: %s", media_id, e)

        missing = sum(1 for value in resolved.values() if value is None)
        if missing:
            logger.info("Metadata resolved for %d/%d targets", len(ids) - missing, len(ids))
        return resolved
