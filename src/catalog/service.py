"""Catalog service: adds TMDB titles to the media table."""

import logging
from typing import Any

from sqlalchemy.orm import Session

from src.catalog.client import TMDBClient
from src.catalog.normalizer import TMDBNormalizer, media_document_id
from src.database.models import MediaItem
from src.database.repositories import MediaRepository

logger = logging.getLogger(__name__)

MEDIA_TYPES = ("movie", "tv")


class CatalogService:
    """Search TMDB and store catalog entries.

    Attributes:
        repository: Media repository.
    """

    def __init__(self, session: Session, client: TMDBClient) -> None:
        """Initialize service.

        Args:
            session: Open database session.
            client: TMDB client, already entered as a context manager.
        """
        self.repository = MediaRepository(session)
        self._client = client
        self._normalizer = TMDBNormalizer()

    def search(self, query: str, page: int = 1) -> list[dict[str, Any]]:
        """Search movies and TV shows on TMDB."""
        return self._client.search_multi(query, page)

    def season_episodes(self, tmdb_id: int | str, season_number: int) -> list[tuple[int, str]]:
        """List (episode number, title) pairs of one TV season in airing order."""
        season = self._client.get_season(tmdb_id, season_number)
        episodes = [
            (episode["episode_number"], episode.get("name") or "")
            for episode in season.get("episodes") or []
            if episode.get("episode_number") is not None
        ]
        return sorted(episodes)

    def upsert_from_tmdb(self, tmdb_id: int | str, media_type: str, user_id: str) -> MediaItem:
        """Store full TMDB details for a title.

        An entry that already has an overview is returned as is,
        without calling TMDB. The original creator of an existing
        entry is preserved.

        Args:
            tmdb_id: TMDB identifier.
            media_type: "movie" or "tv".
            user_id: User adding the title.

        Returns:
            Stored media entry.

        Raises:
            ValueError: If media_type is unknown.
            TMDBClientError: If TMDB cannot provide the details.
        """
        if media_type not in MEDIA_TYPES:
            raise ValueError(f"Unknown media type {media_type!r}. Valid: {MEDIA_TYPES}")

        media_id = media_document_id(tmdb_id, media_type)
        existing = self.repository.get_by_id(media_id)
        if existing is not None and existing.overview:
            logger.debug("Catalog entry %s already complete", media_id)
            return existing

        if media_type == "tv":
            raw = self._client.get_tv_details(tmdb_id)
        else:
            raw = self._client.get_movie_details(tmdb_id)

        values = self._normalizer.normalize_media(raw, media_type, created_by=user_id)
        if existing is not None:
            values["created_by"] = existing.created_by

        item = self.repository.upsert(media_id, values)
        logger.info("Stored catalog entry %s (%s)", media_id, item.title)
        return item
