"""TMDB data normalizer.

Transforms raw TMDB movie and TV responses into media table
values and builds image URLs.
"""

import logging
from typing import Any

from src.settings import settings
from src.stats.classifier import SHOW_ID_PREFIX

logger = logging.getLogger(__name__)


def media_document_id(tmdb_id: int | str, media_type: str) -> str:
    """Build the store document id of a catalog entry.

    Shows get a prefix so their ids never collide with movie ids.

    Args:
        tmdb_id: TMDB identifier.
        media_type: "movie" or "tv".

    Returns:
        Document id such as "694" or "tv_1399".
    """
    if media_type == "tv":
        return f"{SHOW_ID_PREFIX}{tmdb_id}"
    return str(tmdb_id)


def poster_url(path: str | None) -> str | None:
    """Build a full poster URL from a TMDB image path."""
    if not path:
        return None
    return f"{settings.tmdb.image_base_url}{path}"


def backdrop_url(path: str | None) -> str | None:
    """Build a full backdrop URL from a TMDB image path."""
    if not path:
        return None
    return f"{settings.tmdb.backdrop_base_url}{path}"


class TMDBNormalizer:
    """Normalizes TMDB details responses for the media table."""

    DIRECTOR_JOB = "Director"

    # Maximum actors to keep per entry
    MAX_ACTORS = 10

    def normalize_media(
        self,
        raw: dict[str, Any],
        media_type: str,
        created_by: str,
    ) -> dict[str, Any]:
        """Normalize a movie or TV details response.

        Args:
            raw: TMDB details response (with appended credits).
            media_type: "movie" or "tv".
            created_by: User who added the entry.

        Returns:
            Column values for MediaItem.
        """
        release_date = raw.get("release_date") or raw.get("first_air_date")
        credits = raw.get("credits") or {}

        return {
            "tmdb_id": str(raw["id"]),
            "media_type": "tv" if media_type == "tv" else "movie",
            "title": self._clean_string(raw.get("title") or raw.get("name")) or "Unknown Title",
            "year": self._parse_year(release_date),
            "poster_path": raw.get("poster_path"),
            "backdrop_path": raw.get("backdrop_path"),
            "overview": self._clean_string(raw.get("overview")),
            "tagline": self._clean_string(raw.get("tagline")),
            "runtime": self._pick_runtime(raw),
            "genres": [g["name"] for g in raw.get("genres") or [] if g.get("name")],
            "director": self._pick_director(raw, credits),
            "cast": self._normalize_cast(credits.get("cast") or []),
            "number_of_seasons": raw.get("number_of_seasons"),
            "number_of_episodes": raw.get("number_of_episodes"),
            "first_air_date": raw.get("first_air_date") or None,
            "created_by": created_by,
        }

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _clean_string(value: str | None) -> str | None:
        if not value:
            return None
        cleaned = value.strip()
        return cleaned or None

    @staticmethod
    def _parse_year(date_str: str | None) -> int | None:
        """Extract year from a YYYY-MM-DD string."""
        if not date_str:
            return None
        try:
            return int(date_str.split("-")[0])
        except ValueError:
            logger.warning("Invalid date format: %s", date_str)
            return None

    @staticmethod
    def _pick_runtime(raw: dict[str, Any]) -> int | None:
        """Movie runtime, or the first episode run time for shows."""
        if raw.get("runtime"):
            return raw["runtime"]
        episode_run_time = raw.get("episode_run_time") or []
        return episode_run_time[0] if episode_run_time else None

    def _pick_director(self, raw: dict[str, Any], credits: dict[str, Any]) -> str | None:
        """Movie director, or the first show creator."""
        for member in credits.get("crew") or []:
            if member.get("job") == self.DIRECTOR_JOB:
                return member.get("name")
        creators = raw.get("created_by") or []
        return creators[0].get("name") if creators else None

    def _normalize_cast(self, cast: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return [
            {
                "name": member.get("name"),
                "role": member.get("character"),
                "profile_path": member.get("profile_path"),
            }
            for member in cast[: self.MAX_ACTORS]
        ]
