"""Viewing model - one logged watch with its rating vector."""

from datetime import date
from typing import Any

from sqlalchemy import JSON, Boolean, Date, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.database.models.base import Base, InsertedAtMixin


class ViewingRow(Base, InsertedAtMixin):
    """Stored viewing record.

    Ratings are kept as a JSON document so that older rows with
    fewer dimensions stay readable; the statistics engine applies
    the default policy when it reads them.

    Attributes:
        id: Internal primary key.
        target_id: Media document id (show id for episodes).
        media_type: "movie", "tv", "show" or "episode" when known.
        user_id: Rater identifier.
        watched_at: Viewing date.
        ratings: Rating vector as stored.
        inserted_at: Server insert time.
    """

    __tablename__ = "viewings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    target_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    media_type: Mapped[str | None] = mapped_column(String(10))
    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    watched_at: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    # Episode logs
    season_number: Mapped[int | None] = mapped_column(Integer)
    episode_number: Mapped[int | None] = mapped_column(Integer)
    episode_title: Mapped[str | None] = mapped_column(String(500))

    ratings: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    would_watch_again: Mapped[bool] = mapped_column(Boolean, default=False)
    would_recommend: Mapped[bool] = mapped_column(Boolean, default=False)
    notes: Mapped[str | None] = mapped_column(Text)

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<ViewingRow(id={self.id}, target_id={self.target_id!r}, user_id={self.user_id!r})>"

    def to_document(self) -> dict[str, Any]:
        """Return the stored document in its camelCase wire shape."""
        document: dict[str, Any] = {
            "id": self.id,
            "movieId": self.target_id,
            "userId": self.user_id,
            "watchedAt": self.watched_at.isoformat() if self.watched_at else None,
            "ratings": dict(self.ratings or {}),
            "toggles": {
                "wouldWatchAgain": bool(self.would_watch_again),
                "wouldRecommend": bool(self.would_recommend),
            },
            "notes": self.notes,
            "insertedAt": self.inserted_at.isoformat() if self.inserted_at else None,
        }
        if self.media_type:
            document["mediaType"] = self.media_type
        if self.season_number is not None:
            document["seasonNumber"] = self.season_number
        if self.episode_number is not None:
            document["episodeNumber"] = self.episode_number
        if self.episode_title:
            document["episodeTitle"] = self.episode_title
        return document
