"""Viewing statistics module.

Aggregates logged viewings into per-movie, per-show and per-episode
buckets with averaged rating vectors, rankable by any dimension.

Example:
    >>> from src.stats import StatsEngine
    >>> snapshot = StatsEngine().aggregate(viewings, metadata=metadata_by_id)
    >>> top_gore = snapshot.rank("movie", "gore", limit=10)
    >>> top_cozy = snapshot.rank("movie", "cozy", limit=10)
"""

from src.stats.accumulator import Accumulator, RatingTotals, round_half_up
from src.stats.classifier import (
    SHOW_ID_PREFIX,
    Classification,
    ClassificationSource,
    Classifier,
)
from src.stats.engine import EngineStats, StatsEngine, StatsSnapshot
from src.stats.normalizer import NormalizationStats, RecordNormalizer
from src.stats.ranker import DEFAULT_LIMIT, finalize_bucket, rank_buckets
from src.stats.schemas import (
    DEFAULT_RATING,
    DIMENSION_LABELS,
    DIMENSIONS,
    AggregateBucket,
    BucketKey,
    BucketSet,
    MediaKind,
    MediaMetadata,
    RatingDimension,
    Ratings,
    UnknownDimensionError,
    ViewingRecord,
    ViewingToggles,
    parse_dimension,
)

__all__ = [
    # Main engine
    "StatsEngine",
    "StatsSnapshot",
    "EngineStats",
    # Components
    "RecordNormalizer",
    "NormalizationStats",
    "Classifier",
    "Classification",
    "ClassificationSource",
    "Accumulator",
    "RatingTotals",
    "finalize_bucket",
    "rank_buckets",
    "round_half_up",
    # Schemas
    "Ratings",
    "RatingDimension",
    "MediaKind",
    "BucketSet",
    "BucketKey",
    "ViewingRecord",
    "ViewingToggles",
    "MediaMetadata",
    "AggregateBucket",
    "UnknownDimensionError",
    "parse_dimension",
    # Constants
    "DIMENSIONS",
    "DIMENSION_LABELS",
    "DEFAULT_RATING",
    "DEFAULT_LIMIT",
    "SHOW_ID_PREFIX",
]
