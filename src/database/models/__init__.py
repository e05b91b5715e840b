"""SQLAlchemy ORM models for the viewing store.

Usage:
    from src.database.models import Base, MediaItem, ViewingRow

Tables:
    - media: Catalog entries (movies and TV shows)
    - viewings: Logged viewings with rating vectors
"""

from src.database.models.base import Base, InsertedAtMixin
from src.database.models.media import MediaItem
from src.database.models.viewing import ViewingRow

__all__ = [
    "Base",
    "InsertedAtMixin",
    "MediaItem",
    "ViewingRow",
]
