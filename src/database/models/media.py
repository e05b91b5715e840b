"""Media model - catalog entry for a movie or TV show.

Rows are keyed by document id: the TMDB id for movies, the TMDB id
with a "tv_" prefix for shows, so both share one table.
"""

from typing import Any

from sqlalchemy import JSON, CheckConstraint, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.database.models.base import Base


class MediaItem(Base):
    """Catalog entry with TMDB metadata and cached rating averages.

    Attributes:
        id: Document id ("694" or "tv_1399").
        tmdb_id: TMDB identifier, without prefix.
        media_type: "movie" or "tv".
        title: Movie title or show name.
        year: Release or first-air year.
        overall_average: Cached mean overall rating (downstream cache).
        enjoyment_average: Cached mean enjoyment rating (downstream cache).
    """

    __tablename__ = "media"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    tmdb_id: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    media_type: Mapped[str] = mapped_column(String(10), nullable=False, default="movie")

    # Display
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    year: Mapped[int | None] = mapped_column(Integer)
    poster_path: Mapped[str | None] = mapped_column(String(255))
    backdrop_path: Mapped[str | None] = mapped_column(String(255))
    overview: Mapped[str | None] = mapped_column(Text)
    tagline: Mapped[str | None] = mapped_column(String(500))
    runtime: Mapped[int | None] = mapped_column(Integer)
    genres: Mapped[list[str]] = mapped_column(JSON, default=list)
    director: Mapped[str | None] = mapped_column(String(255))
    cast: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)

    # TV specific
    number_of_seasons: Mapped[int | None] = mapped_column(Integer)
    number_of_episodes: Mapped[int | None] = mapped_column(Integer)
    first_air_date: Mapped[str | None] = mapped_column(String(10))

    # Ownership and cached aggregates
    created_by: Mapped[str] = mapped_column(String(128), nullable=False)
    overall_average: Mapped[float | None] = mapped_column(Float)
    enjoyment_average: Mapped[float | None] = mapped_column(Float)

    __table_args__ = (
        CheckConstraint("media_type IN ('movie', 'tv')", name="check_media_type"),
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<MediaItem(id={self.id!r}, title={self.title!r})>"

    def to_metadata(self) -> dict[str, Any]:
        """Return the fields the statistics engine uses for enrichment."""
        return {
            "target_id": self.id,
            "tmdb_id": self.tmdb_id,
            "title": self.title,
            "year": self.year,
            "poster_path": self.poster_path,
            "kind": self.media_type,
        }
