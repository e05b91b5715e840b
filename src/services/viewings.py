"""Viewing service: log viewings and list them back.

Writes are validated strictly (every dimension present and in
range). Reads return the stored documents untouched so that the
statistics engine applies its own default and skip policy.
"""

import logging
from collections.abc import Mapping
from datetime import date
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.database.models import ViewingRow
from src.database.repositories import MediaRepository, ViewingRepository
from src.stats.accumulator import RatingTotals
from src.stats.normalizer import RecordNormalizer
from src.stats.schemas import (
    MediaKind,
    RatingDimension,
    Ratings,
    ViewingToggles,
    missing_dimensions,
)

logger = logging.getLogger(__name__)

MAX_NOTES_LENGTH = 5000
"""Longest free-text note accepted."""


# =============================================================================
# INPUT SCHEMA
# =============================================================================


class ViewingCreate(BaseModel):
    """Payload for a new viewing.

    Unlike stored documents, a new viewing must carry every rating
    dimension explicitly.
    """

    model_config = ConfigDict(
        extra="ignore",
        str_strip_whitespace=True,
        coerce_numbers_to_str=True,
    )

    target_id: str = Field(
        min_length=1,
        validation_alias=AliasChoices("target_id", "movieId"),
    )
    media_type: MediaKind | None = Field(
        default=None,
        validation_alias=AliasChoices("media_type", "mediaType"),
    )
    user_id: str = Field(min_length=1, validation_alias=AliasChoices("user_id", "userId"))
    watched_at: date = Field(validation_alias=AliasChoices("watched_at", "watchedAt"))
    ratings: Ratings
    toggles: ViewingToggles = Field(default_factory=ViewingToggles)
    notes: str | None = Field(default=None, max_length=MAX_NOTES_LENGTH)
    season_number: int | None = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("season_number", "seasonNumber"),
    )
    episode_number: int | None = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("episode_number", "episodeNumber"),
    )
    episode_title: str | None = Field(
        default=None,
        validation_alias=AliasChoices("episode_title", "episodeTitle"),
    )

    @field_validator("watched_at", mode="before")
    @classmethod
    def strip_time_of_day(cls, v: Any) -> Any:
        """Keep only the date part of an ISO timestamp."""
        if isinstance(v, str) and len(v) > 10 and v[10] in "T ":
            return v[:10]
        return v

    @field_validator("ratings", mode="before")
    @classmethod
    def require_every_dimension(cls, v: Any) -> Any:
        """Reject partial rating vectors."""
        if isinstance(v, Mapping):
            missing = missing_dimensions(v)
            if missing:
                raise ValueError(f"Missing ratings: {', '.join(d.value for d in missing)}")
        return v


# =============================================================================
# SERVICE
# =============================================================================


class ViewingService:
    """Viewing store operations on one session.

    Attributes:
        viewings: Viewing repository.
        media: Media repository.
    """

    def __init__(self, session: Session) -> None:
        """Initialize service.

        Args:
            session: Open database session.
        """
        self._session = session
        self.viewings = ViewingRepository(session)
        self.media = MediaRepository(session)

    # =========================================================================
    # Writes
    # =========================================================================

    def add(self, payload: ViewingCreate | Mapping[str, Any]) -> ViewingRow:
        """Persist a new viewing and refresh the cached averages.

        Args:
            payload: Viewing data.

        Returns:
            Persisted row with its generated id.

        Raises:
            ValidationError: If the payload is invalid.
        """
        data = payload if isinstance(payload, ViewingCreate) else ViewingCreate.model_validate(payload)

        row = self.viewings.create(
            ViewingRow(
                target_id=data.target_id,
                media_type=data.media_type.value if data.media_type else None,
                user_id=data.user_id,
                watched_at=data.watched_at,
                season_number=data.season_number,
                episode_number=data.episode_number,
                episode_title=data.episode_title,
                ratings=data.ratings.as_dict(),
                would_watch_again=data.toggles.would_watch_again,
                would_recommend=data.toggles.would_recommend,
                notes=data.notes,
            )
        )
        logger.info("Logged viewing %s for %s by %s", row.id, row.target_id, row.user_id)

        # Savepoint keeps the new viewing when the cache update fails
        try:
            with self._session.begin_nested():
                self.refresh_averages(data.target_id)
        except SQLAlchemyError as e:
            logger.error("Failed to update cached averages for %s: %s", data.target_id, e)

        return row

    def refresh_averages(self, target_id: str) -> tuple[float | None, float | None]:
        """Recompute the cached overall and enjoyment averages of a title.

        The cache is for listing pages only; statistics always
        recompute from the viewings.

        Args:
            target_id: Media document id.

        Returns:
            Tuple of (overall average, enjoyment average); None values
            when the title has no usable viewing.
        """
        documents = self.list_by_target(target_id)
        totals = RatingTotals()
        for record in RecordNormalizer().normalize_many(documents):
            totals.add(record.ratings)

        if totals.is_empty:
            overall, enjoyment = None, None
        else:
            overall = totals.average(RatingDimension.OVERALL)
            enjoyment = totals.average(RatingDimension.ENJOYMENT)

        if not self.media.update_averages(target_id, overall, enjoyment):
            logger.debug("No catalog entry %s to cache averages on", target_id)
        return overall, enjoyment

    # =========================================================================
    # Reads
    # =========================================================================

    def list_by_target(self, target_id: str) -> list[dict[str, Any]]:
        """Stored documents for one movie or show, newest first."""
        return [row.to_document() for row in self.viewings.list_by_target(target_id)]

    def list_by_user(self, user_id: str) -> list[dict[str, Any]]:
        """Stored documents logged by one person, newest first."""
        return [row.to_document() for row in self.viewings.list_by_user(user_id)]

    def list_all(self, limit: int) -> list[dict[str, Any]]:
        """Most recent stored documents across all users."""
        return [row.to_document() for row in self.viewings.list_recent(limit)]
