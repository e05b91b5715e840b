"""External source settings.

Exports configuration classes for the metadata catalog:
- TMDB API (REST)
"""

from src.settings.sources.tmdb import TMDBSettings

__all__ = [
    "TMDBSettings",
]
