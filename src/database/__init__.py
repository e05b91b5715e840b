"""Database package for the viewing store.

Provides connection management, ORM models, and repositories.

Usage:
    from src.database import get_database, ViewingRepository

    db = get_database()
    with db.session() as session:
        repo = ViewingRepository(session)
        viewings = repo.list_by_user("uid-123")
"""

from src.database.connection import (
    DatabaseConnection,
    get_database,
    init_database,
)
from src.database.models import Base, MediaItem, ViewingRow
from src.database.repositories import (
    BaseRepository,
    MediaRepository,
    ViewingRepository,
)

__all__ = [
    # Connection
    "DatabaseConnection",
    "get_database",
    "init_database",
    # Models
    "Base",
    "MediaItem",
    "ViewingRow",
    # Repositories
    "BaseRepository",
    "MediaRepository",
    "ViewingRepository",
]
