"""Viewing statistics engine.

Runs the full pass over a snapshot of viewing records:
normalize -> classify -> accumulate -> finalize. The resulting
snapshot can then be ranked by any dimension without recomputing sums.
"""

import logging
from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from src.stats.accumulator import Accumulator
from src.stats.classifier import Classifier
from src.stats.normalizer import RecordNormalizer
from src.stats.ranker import DEFAULT_LIMIT, finalize_all, rank_buckets
from src.stats.schemas import (
    AggregateBucket,
    BucketSet,
    MediaMetadata,
    RatingDimension,
    ViewingRecord,
)

logger = logging.getLogger(__name__)


# =============================================================================
# ENGINE STATISTICS
# =============================================================================


@dataclass
class EngineStats:
    """Statistics for one aggregation pass.

    Attributes:
        total_input: Records received.
        accepted: Records folded into buckets.
        skipped: Malformed records left out.
        defaulted: Accepted records with defaulted dimensions.
        cleared: Accepted records with a bad descriptive field dropped.
        ambiguous: Records classified as movies for lack of any signal.
        unresolved_metadata: Distinct targets without catalog metadata.
        movie_buckets: Movie buckets produced.
        show_buckets: Show-cumulative buckets produced.
        episode_buckets: Episode buckets produced.
        skip_reasons: Skipped records per offending field.
    """

    total_input: int = 0
    accepted: int = 0
    skipped: int = 0
    defaulted: int = 0
    cleared: int = 0
    ambiguous: int = 0
    unresolved_metadata: int = 0
    movie_buckets: int = 0
    show_buckets: int = 0
    episode_buckets: int = 0
    skip_reasons: Counter[str] = field(default_factory=Counter)

    @property
    def has_defects(self) -> bool:
        """Check if any record was skipped."""
        return self.skipped > 0

    def to_dict(self) -> dict[str, Any]:
        """Convert stats to dictionary for JSON export."""
        return {
            "input": {
                "total": self.total_input,
                "accepted": self.accepted,
                "skipped": self.skipped,
                "defaulted": self.defaulted,
                "cleared": self.cleared,
                "ambiguous": self.ambiguous,
                "skip_reasons": dict(self.skip_reasons),
            },
            "unresolved_metadata": self.unresolved_metadata,
            "buckets": {
                BucketSet.MOVIE.value: self.movie_buckets,
                BucketSet.SHOW.value: self.show_buckets,
                BucketSet.EPISODE.value: self.episode_buckets,
            },
        }

    def log_summary(self) -> None:
        """Log complete aggregation summary."""
        logger.info(
            "Stats pass: %d records (accepted=%d, skipped=%d, defaulted=%d, ambiguous=%d) "
            "-> %d movies, %d shows, %d episodes",
            self.total_input,
            self.accepted,
            self.skipped,
            self.defaulted,
            self.ambiguous,
            self.movie_buckets,
            self.show_buckets,
            self.episode_buckets,
        )
        if self.has_defects:
            logger.warning("%d viewing records skipped: %s", self.skipped, dict(self.skip_reasons))
        logger.debug("Stats detail: %s", self.to_dict())


# =============================================================================
# SNAPSHOT
# =============================================================================


@dataclass(frozen=True)
class StatsSnapshot:
    """Finalized buckets of one aggregation pass.

    Attributes:
        movies: Movie buckets in identity order.
        shows: Show-cumulative buckets in identity order.
        episodes: Per-episode buckets in identity order.
        stats: Pass statistics, including the skip count.
    """

    movies: tuple[AggregateBucket, ...] = ()
    shows: tuple[AggregateBucket, ...] = ()
    episodes: tuple[AggregateBucket, ...] = ()
    stats: EngineStats = field(default_factory=EngineStats)

    @property
    def is_empty(self) -> bool:
        """Check if no bucket was produced."""
        return not (self.movies or self.shows or self.episodes)

    def buckets(self, bucket_set: BucketSet | str) -> tuple[AggregateBucket, ...]:
        """Return the finalized buckets of one set.

        Raises:
            ValueError: If bucket_set is not a known set.
        """
        match BucketSet(bucket_set):
            case BucketSet.MOVIE:
                return self.movies
            case BucketSet.SHOW:
                return self.shows
            case BucketSet.EPISODE:
                return self.episodes

    def rank(
        self,
        bucket_set: BucketSet | str,
        dimension: str | RatingDimension,
        limit: int | None = DEFAULT_LIMIT,
    ) -> list[AggregateBucket]:
        """Rank one bucket set by one dimension.

        Args:
            bucket_set: Movie, show or episode.
            dimension: Dimension to rank by.
            limit: Maximum rows; None for all.

        Returns:
            Ranked buckets.
        """
        return rank_buckets(self.buckets(bucket_set), dimension, limit)

    def rankings(
        self,
        dimension: str | RatingDimension,
        limit: int | None = DEFAULT_LIMIT,
    ) -> dict[BucketSet, list[AggregateBucket]]:
        """Rank all three bucket sets by the same dimension."""
        return {bucket_set: self.rank(bucket_set, dimension, limit) for bucket_set in BucketSet}


# =============================================================================
# ENGINE
# =============================================================================


class StatsEngine:
    """Aggregates viewing records into ranked buckets.

    The engine keeps no state between calls; each call builds its own
    normalizer and accumulator, so concurrent calls are independent.
    """

    def __init__(self, classifier: Classifier | None = None) -> None:
        """Initialize engine.

        Args:
            classifier: Classifier to use (default Classifier()).
        """
        self._classifier = classifier or Classifier()

    # =========================================================================
    # Public API
    # =========================================================================

    def aggregate(
        self,
        records: Iterable[ViewingRecord | Mapping[str, Any]],
        metadata: Mapping[str, MediaMetadata | None] | None = None,
    ) -> StatsSnapshot:
        """Execute the full aggregation pass.

        Args:
            records: Viewing records or raw stored documents.
            metadata: Resolved catalog metadata per target id.

        Returns:
            Snapshot of finalized buckets plus pass statistics.
        """
        metadata = metadata or {}
        accumulator, stats = self.accumulate(records, metadata)

        movies = tuple(finalize_all(accumulator.items(BucketSet.MOVIE), metadata))
        shows = tuple(finalize_all(accumulator.items(BucketSet.SHOW), metadata))
        episodes = tuple(finalize_all(accumulator.items(BucketSet.EPISODE), metadata))

        stats.movie_buckets = len(movies)
        stats.show_buckets = len(shows)
        stats.episode_buckets = len(episodes)
        stats.log_summary()

        return StatsSnapshot(movies=movies, shows=shows, episodes=episodes, stats=stats)

    def accumulate(
        self,
        records: Iterable[ViewingRecord | Mapping[str, Any]],
        metadata: Mapping[str, MediaMetadata | None] | None = None,
    ) -> tuple[Accumulator, EngineStats]:
        """Normalize, classify and fold records without finalizing.

        Args:
            records: Viewing records or raw stored documents.
            metadata: Resolved catalog metadata per target id.

        Returns:
            Tuple of (accumulator, partial statistics).
        """
        metadata = metadata or {}
        normalizer = RecordNormalizer()
        accumulator = Accumulator()
        stats = EngineStats()
        targets: set[str] = set()

        for raw in records:
            record = normalizer.normalize(raw)
            if record is None:
                continue

            target_metadata = metadata.get(record.target_id)
            classification = self._classifier.classify(record, target_metadata)
            if classification.ambiguous:
                stats.ambiguous += 1
                logger.debug("No kind signal for %s, counted as movie", record.target_id)

            for key in classification.keys:
                accumulator.add(key, record)
            targets.add(record.target_id)

        stats.total_input = normalizer.stats.total
        stats.accepted = normalizer.stats.accepted
        stats.skipped = normalizer.stats.skipped
        stats.defaulted = normalizer.stats.defaulted
        stats.cleared = normalizer.stats.cleared
        stats.skip_reasons = normalizer.stats.skip_reasons
        stats.unresolved_metadata = sum(1 for t in targets if metadata.get(t) is None)

        return accumulator, stats
