"""Media catalog: TMDB access and metadata lookup.

Example:
    >>> from src.catalog import TMDBClient, CatalogService
    >>> with TMDBClient() as client:
    ...     CatalogService(session, client).upsert_from_tmdb(694, "movie", "uid-1")
"""

from src.catalog.client import (
    TMDBClient,
    TMDBClientError,
    TMDBNotFoundError,
    TMDBRateLimitError,
)
from src.catalog.normalizer import (
    TMDBNormalizer,
    backdrop_url,
    media_document_id,
    poster_url,
)
from src.catalog.resolver import MetadataResolver
from src.catalog.service import CatalogService

__all__ = [
    # Client
    "TMDBClient",
    "TMDBClientError",
    "TMDBNotFoundError",
    "TMDBRateLimitError",
    # Normalization
    "TMDBNormalizer",
    "media_document_id",
    "poster_url",
    "backdrop_url",
    # Services
    "MetadataResolver",
    "CatalogService",
]
