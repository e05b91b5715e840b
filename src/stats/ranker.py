"""Bucket finalization and ranking.

Finalization turns running totals into rounded averages with display
enrichment. Ranking only sorts finalized buckets, so switching the
ranked dimension never touches the totals again.
"""

from collections.abc import Callable, Iterable, Mapping

from src.stats.accumulator import RatingTotals
from src.stats.schemas import (
    AggregateBucket,
    BucketKey,
    BucketSet,
    MediaMetadata,
    RatingDimension,
    parse_dimension,
)

# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_LIMIT = 10
"""Rows returned by a ranking when the caller gives no limit."""

SUBTITLE_SEPARATOR = " - "
"""Joins episode code and episode title in subtitles."""


# =============================================================================
# FINALIZATION
# =============================================================================


def finalize_bucket(
    key: BucketKey,
    totals: RatingTotals,
    metadata: MediaMetadata | None = None,
) -> AggregateBucket | None:
    """Convert running totals into an aggregate bucket.

    Args:
        key: Bucket identity.
        totals: Accumulated sums and count.
        metadata: Catalog metadata for the target, if resolved.

    Returns:
        Finalized bucket, or None for an empty bucket.
    """
    if totals.is_empty:
        return None

    return AggregateBucket(
        bucket_id=key.bucket_id,
        bucket_set=key.bucket_set,
        target_id=key.target_id,
        season=key.season,
        episode=key.episode,
        display_title=(metadata.title if metadata and metadata.title else key.target_id),
        display_subtitle=_build_subtitle(key, totals, metadata),
        poster_ref=metadata.poster_path if metadata else None,
        sample_count=totals.count,
        averages=totals.averages(),
    )


def _build_subtitle(
    key: BucketKey,
    totals: RatingTotals,
    metadata: MediaMetadata | None,
) -> str | None:
    """Year for movies and shows, SxEy plus episode title for episodes."""
    if key.bucket_set is not BucketSet.EPISODE:
        if metadata and metadata.year:
            return str(metadata.year)
        return None

    parts = [f"S{key.season}E{key.episode}"]
    label = totals.top_episode_label
    if label:
        parts.append(label)
    return SUBTITLE_SEPARATOR.join(parts)


# =============================================================================
# RANKING
# =============================================================================


def ranking_key(
    dimension: str | RatingDimension,
) -> Callable[[AggregateBucket], tuple[float, str, int, int]]:
    """Build the sort key for one dimension.

    Orders by average descending, then by BucketKey.sort_key ascending.

    Raises:
        UnknownDimensionError: If the dimension does not exist.
    """
    dim = parse_dimension(dimension)

    def key(bucket: AggregateBucket) -> tuple[float, str, int, int]:
        return (-bucket.average(dim), *bucket.sort_key)

    return key


def rank_buckets(
    buckets: Iterable[AggregateBucket],
    dimension: str | RatingDimension,
    limit: int | None = DEFAULT_LIMIT,
) -> list[AggregateBucket]:
    """Rank finalized buckets by one dimension.

    Args:
        buckets: Finalized buckets of one bucket set.
        dimension: Dimension to rank by.
        limit: Maximum rows returned; None returns every bucket.

    Returns:
        Buckets highest average first, ties by bucket identity.

    Raises:
        UnknownDimensionError: If the dimension does not exist.
        ValueError: If limit is negative.
    """
    key = ranking_key(dimension)
    if limit is not None and limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")

    ranked = sorted((b for b in buckets if b.sample_count > 0), key=key)
    return ranked if limit is None else ranked[:limit]


def finalize_all(
    items: Iterable[tuple[BucketKey, RatingTotals]],
    metadata: Mapping[str, MediaMetadata | None] | None = None,
) -> list[AggregateBucket]:
    """Finalize a sequence of buckets, dropping empty ones."""
    metadata = metadata or {}
    finalized = (finalize_bucket(k, t, metadata.get(k.target_id)) for k, t in items)
    return [bucket for bucket in finalized if bucket is not None]
