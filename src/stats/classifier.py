"""Bucket classification for viewing records.

Decides whether a viewing counts toward a movie bucket or a show
bucket, and whether it also counts toward a per-episode bucket.
"""

from dataclasses import dataclass
from enum import StrEnum

from src.stats.schemas import BucketKey, MediaKind, MediaMetadata, ViewingRecord

# =============================================================================
# CONSTANTS
# =============================================================================

SHOW_ID_PREFIX = "tv_"
"""Identifier prefix the catalog gives to TV shows."""

_SHOW_KINDS = frozenset({MediaKind.TV, MediaKind.SHOW, MediaKind.EPISODE})


class ClassificationSource(StrEnum):
    """Signal that decided a classification, strongest first."""

    METADATA = "metadata"
    RECORD_KIND = "record_kind"
    ID_PREFIX = "id_prefix"
    EPISODE_NUMBERS = "episode_numbers"
    FALLBACK = "fallback"


# =============================================================================
# CLASSIFICATION RESULT
# =============================================================================


@dataclass(frozen=True)
class Classification:
    """Bucket memberships of one viewing record.

    Attributes:
        is_show: True when the record belongs to a show.
        source: Signal that decided is_show.
        keys: Bucket keys the record contributes to.
    """

    is_show: bool
    source: ClassificationSource
    keys: tuple[BucketKey, ...]

    @property
    def ambiguous(self) -> bool:
        """Check if no signal was available and the movie default applied."""
        return self.source is ClassificationSource.FALLBACK


# =============================================================================
# CLASSIFIER
# =============================================================================


class Classifier:
    """Maps viewing records to bucket keys.

    Precedence for movie vs show:
    1. Kind stated by resolved catalog metadata
    2. Kind tag stored on the record
    3. Show identifier prefix
    4. Presence of both season and episode numbers
    5. Movie (explicit default for unclassifiable records)
    """

    def classify(
        self,
        record: ViewingRecord,
        metadata: MediaMetadata | None = None,
    ) -> Classification:
        """Classify one record.

        Args:
            record: Viewing record.
            metadata: Resolved catalog metadata for its target, if any.

        Returns:
            Classification with one movie key, or a show key plus an
            episode key when season and episode are both present.
        """
        is_show, source = self.resolve_kind(record, metadata)

        if not is_show:
            return Classification(False, source, (BucketKey.for_movie(record.target_id),))

        keys = [BucketKey.for_show(record.target_id)]
        if record.has_episode_numbers:
            keys.append(
                BucketKey.for_episode(record.target_id, record.season, record.episode)
            )
        return Classification(True, source, tuple(keys))

    @staticmethod
    def resolve_kind(
        record: ViewingRecord,
        metadata: MediaMetadata | None = None,
    ) -> tuple[bool, ClassificationSource]:
        """Decide whether a record belongs to a show.

        Args:
            record: Viewing record.
            metadata: Resolved catalog metadata, if any.

        Returns:
            Tuple of (is_show, deciding signal).
        """
        if metadata is not None and metadata.kind is not None:
            return metadata.kind in _SHOW_KINDS, ClassificationSource.METADATA

        if record.kind is not None:
            return record.kind in _SHOW_KINDS, ClassificationSource.RECORD_KIND

        if record.target_id.startswith(SHOW_ID_PREFIX):
            return True, ClassificationSource.ID_PREFIX

        if record.has_episode_numbers:
            return True, ClassificationSource.EPISODE_NUMBERS

        return False, ClassificationSource.FALLBACK
