"""Viewing record normalization.

Turns raw stored documents into validated ViewingRecord instances,
applying the rating default policy and counting the records that
cannot be used.
"""

import logging
from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import AliasChoices, ValidationError

from src.stats.schemas import ViewingRecord, missing_dimensions

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

REASON_NOT_A_MAPPING = "not_a_mapping"
"""Skip reason for inputs that are neither records nor mappings."""

CLEARABLE_FIELDS = (
    "record_id",
    "kind",
    "watched_on",
    "toggles",
    "notes",
    "season",
    "episode",
    "episode_label",
)
"""Record fields whose bad values are dropped instead of skipping the record."""


def _input_keys(field_names: Iterable[str]) -> frozenset[str]:
    """Collect the field names and every alias they are read from."""
    keys: set[str] = set()
    for name in field_names:
        keys.add(name)
        alias = ViewingRecord.model_fields[name].validation_alias
        if isinstance(alias, AliasChoices):
            keys.update(choice for choice in alias.choices if isinstance(choice, str))
    return frozenset(keys)


_CLEARABLE_KEYS = _input_keys(CLEARABLE_FIELDS)


# =============================================================================
# NORMALIZATION STATISTICS
# =============================================================================


@dataclass
class NormalizationStats:
    """Statistics for one normalization pass.

    Attributes:
        total: Inputs seen.
        accepted: Inputs turned into records.
        skipped: Inputs rejected as malformed.
        defaulted: Accepted records with at least one defaulted dimension.
        cleared: Accepted records with a bad value dropped from a
            field the engine does not rank on.
        skip_reasons: Skipped inputs per offending field.
        cleared_fields: Dropped values per input key.
    """

    total: int = 0
    accepted: int = 0
    skipped: int = 0
    defaulted: int = 0
    cleared: int = 0
    skip_reasons: Counter[str] = field(default_factory=Counter)
    cleared_fields: Counter[str] = field(default_factory=Counter)

    def log_summary(self) -> None:
        """Log normalization statistics summary."""
        logger.info(
            "Normalization: %d records -> %d accepted, %d skipped, %d defaulted, %d cleared",
            self.total,
            self.accepted,
            self.skipped,
            self.defaulted,
            self.cleared,
        )
        if self.skip_reasons:
            logger.info("Skip reasons: %s", dict(self.skip_reasons))
        if self.cleared_fields:
            logger.info("Cleared fields: %s", dict(self.cleared_fields))


# =============================================================================
# NORMALIZER
# =============================================================================


class RecordNormalizer:
    """Validates raw viewing documents one at a time.

    A document with a bad rating or a missing identifier is counted and
    dropped; it never aborts the pass. Bad values in descriptive fields
    (dates, toggles, notes, kind tag, episode numbers) are dropped from
    the document and the record is kept.

    Attributes:
        stats: Statistics of the current pass.
    """

    def __init__(self) -> None:
        """Initialize normalizer with empty statistics."""
        self.stats = NormalizationStats()

    def normalize_many(
        self, raw_records: Iterable[ViewingRecord | Mapping[str, Any]]
    ) -> list[ViewingRecord]:
        """Normalize a batch, resetting statistics first.

        Args:
            raw_records: Records or raw documents.

        Returns:
            Valid records in input order.
        """
        self.stats = NormalizationStats()
        records = [r for r in map(self.normalize, raw_records) if r is not None]
        self.stats.log_summary()
        return records

    def normalize(self, raw: ViewingRecord | Mapping[str, Any] | Any) -> ViewingRecord | None:
        """Normalize a single record.

        Args:
            raw: ViewingRecord or raw document.

        Returns:
            Validated record, or None when it was skipped.
        """
        self.stats.total += 1

        if isinstance(raw, ViewingRecord):
            self.stats.accepted += 1
            return raw

        if not isinstance(raw, Mapping):
            self._skip(REASON_NOT_A_MAPPING, raw)
            return None

        record = self._validate(raw)
        if record is None:
            return None

        self.stats.accepted += 1
        if self._has_defaults(raw):
            self.stats.defaulted += 1
        return record

    # =========================================================================
    # Internal Methods
    # =========================================================================

    def _skip(self, reason: str, raw: Any) -> None:
        self.stats.skipped += 1
        self.stats.skip_reasons[reason] += 1
        logger.debug("Skipped viewing (%s): %r", reason, raw)

    def _validate(self, raw: Mapping[str, Any]) -> ViewingRecord | None:
        """Validate a document, retrying once without clearable bad values."""
        try:
            return ViewingRecord.model_validate(raw)
        except ValidationError as e:
            errors = e.errors()

        blocking = [
            err for err in errors if not err["loc"] or err["loc"][0] not in _CLEARABLE_KEYS
        ]
        if blocking:
            self._skip(self._error_location(blocking[0]), raw)
            return None

        bad_keys = {err["loc"][0] for err in errors}
        cleaned = {key: value for key, value in raw.items() if key not in bad_keys}
        try:
            record = ViewingRecord.model_validate(cleaned)
        except ValidationError as e:
            self._skip(self._error_location(e.errors()[0]), raw)
            return None

        self.stats.cleared += 1
        self.stats.cleared_fields.update(str(key) for key in bad_keys)
        logger.debug("Cleared %s on viewing %s", sorted(map(str, bad_keys)), record.record_id)
        return record

    @staticmethod
    def _error_location(error: Mapping[str, Any]) -> str:
        """Build a dotted field path from one validation error."""
        if not error["loc"]:
            return "record"
        return ".".join(str(part) for part in error["loc"])

    @staticmethod
    def _has_defaults(raw: Mapping[str, Any]) -> bool:
        ratings = raw.get("ratings")
        if ratings is not None and not isinstance(ratings, Mapping):
            return False
        return bool(missing_dimensions(ratings))
