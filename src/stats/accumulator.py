"""Running rating totals per bucket.

Sums are kept as exact fractions so that folding the same records in
any order produces identical averages.
"""

import math
from collections import Counter
from collections.abc import Iterator
from dataclasses import dataclass, field
from fractions import Fraction

from src.stats.schemas import (
    DIMENSIONS,
    BucketKey,
    BucketSet,
    RatingDimension,
    Ratings,
    ViewingRecord,
    parse_dimension,
)

# =============================================================================
# CONSTANTS
# =============================================================================

AVERAGE_DECIMALS = 1
"""Decimal places kept in finalized averages."""


def _zero_sums() -> dict[RatingDimension, Fraction]:
    return {dimension: Fraction(0) for dimension in DIMENSIONS}


def round_half_up(value: Fraction, places: int = AVERAGE_DECIMALS) -> float:
    """Round a non-negative fraction half-up to a number of decimals.

    Args:
        value: Exact value to round.
        places: Decimal places to keep.

    Returns:
        Rounded value as float.
    """
    scale = 10**places
    return float(Fraction(math.floor(value * scale + Fraction(1, 2)), scale))


# =============================================================================
# RATING TOTALS
# =============================================================================


@dataclass
class RatingTotals:
    """Sum and count of the ratings folded into one bucket.

    Every record contributes to every dimension, so a single count is
    shared by all sums.

    Attributes:
        count: Records folded so far.
        sums: Exact running total per dimension.
        episode_labels: Episode titles seen, with occurrence counts.
    """

    count: int = 0
    sums: dict[RatingDimension, Fraction] = field(default_factory=_zero_sums)
    episode_labels: Counter[str] = field(default_factory=Counter)

    @property
    def is_empty(self) -> bool:
        """Check if no record was folded."""
        return self.count == 0

    def add(self, ratings: Ratings, episode_label: str | None = None) -> None:
        """Fold one rating vector into the totals.

        Args:
            ratings: Validated rating vector.
            episode_label: Episode title carried by the record, if any.
        """
        self.count += 1
        for dimension in DIMENSIONS:
            self.sums[dimension] += Fraction(getattr(ratings, dimension.value))
        if episode_label:
            self.episode_labels[episode_label] += 1

    def average(self, dimension: str | RatingDimension) -> float:
        """Return the rounded average of one dimension.

        Raises:
            ValueError: If the bucket is empty.
        """
        if self.is_empty:
            raise ValueError("Cannot average an empty bucket")
        return round_half_up(self.sums[parse_dimension(dimension)] / self.count)

    def averages(self) -> Ratings:
        """Return the full rounded average vector.

        Raises:
            ValueError: If the bucket is empty.
        """
        return Ratings.model_validate({d.value: self.average(d) for d in DIMENSIONS})

    @property
    def top_episode_label(self) -> str | None:
        """Most frequent episode title, alphabetical on ties."""
        if not self.episode_labels:
            return None
        return min(self.episode_labels, key=lambda label: (-self.episode_labels[label], label))


# =============================================================================
# ACCUMULATOR
# =============================================================================


class Accumulator:
    """Map of bucket key to running totals.

    Iteration always follows BucketKey.sort_key so that downstream
    output never depends on insertion order.
    """

    def __init__(self) -> None:
        """Initialize an empty accumulator."""
        self._totals: dict[BucketKey, RatingTotals] = {}

    def add(self, key: BucketKey, record: ViewingRecord) -> None:
        """Fold one record into the bucket for key.

        Args:
            key: Bucket the record belongs to.
            record: Classified viewing record.
        """
        totals = self._totals.setdefault(key, RatingTotals())
        label = record.episode_label if key.bucket_set is BucketSet.EPISODE else None
        totals.add(record.ratings, label)

    def items(self, bucket_set: BucketSet | None = None) -> Iterator[tuple[BucketKey, RatingTotals]]:
        """Iterate buckets in tie-break order.

        Args:
            bucket_set: Restrict to one granularity.

        Yields:
            (key, totals) pairs.
        """
        keys = sorted(self._totals, key=lambda k: (k.bucket_set.value, k.sort_key))
        for key in keys:
            if bucket_set is None or key.bucket_set is bucket_set:
                yield key, self._totals[key]
