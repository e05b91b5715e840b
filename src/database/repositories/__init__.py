"""Database repositories for the viewing store.

Usage:
    from src.database.repositories import ViewingRepository
    from src.database import get_database

    db = get_database()
    with db.session() as session:
        viewings = ViewingRepository(session).list_recent()
"""

from src.database.repositories.base import BaseRepository
from src.database.repositories.media import MediaRepository
from src.database.repositories.viewing import ViewingRepository

__all__ = [
    "BaseRepository",
    "MediaRepository",
    "ViewingRepository",
]
