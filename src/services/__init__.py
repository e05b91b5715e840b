"""Application services over the viewing store and the catalog."""

from src.services.stats import StatsService
from src.services.viewings import ViewingCreate, ViewingService

__all__ = [
    "StatsService",
    "ViewingCreate",
    "ViewingService",
]
