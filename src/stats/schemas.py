"""Pydantic schemas for viewing statistics.

Defines the rating vector, viewing records as they come out of the
viewing store, catalog metadata used for enrichment, and the
aggregate buckets produced by the ranking engine.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from typing import Annotated, Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

# =============================================================================
# CONSTANTS
# =============================================================================

MIN_RATING = 0.0
"""Lowest value a rating dimension may take."""

MAX_RATING = 10.0
"""Highest value a rating dimension may take."""

DEFAULT_RATING = 5.0
"""Value used for a dimension absent from a stored record."""


# =============================================================================
# ENUMS
# =============================================================================


class RatingDimension(StrEnum):
    """Named axes of the rating vector, in display order."""

    OVERALL = "overall"
    ENJOYMENT = "enjoyment"
    JUMP = "jump"
    DREAD = "dread"
    GORE = "gore"
    ATMOSPHERE = "atmosphere"
    STORY = "story"
    REWATCH = "rewatch"
    WTF = "wtf"
    COZY = "cozy"


class MediaKind(StrEnum):
    """Kind of entity a viewing or catalog entry refers to."""

    MOVIE = "movie"
    TV = "tv"
    SHOW = "show"
    EPISODE = "episode"


class BucketSet(StrEnum):
    """Granularity of an aggregate bucket."""

    MOVIE = "movie"
    SHOW = "show"
    EPISODE = "episode"


DIMENSIONS: tuple[RatingDimension, ...] = tuple(RatingDimension)
"""All rating dimensions in display order."""

ENJOYMENT_FALLBACK_SOURCES: tuple[RatingDimension, ...] = (
    RatingDimension.STORY,
    RatingDimension.REWATCH,
    RatingDimension.COZY,
)
"""Dimensions averaged to derive a missing enjoyment value."""

DIMENSION_LABELS: dict[RatingDimension, str] = {
    RatingDimension.OVERALL: "Overall Scare",
    RatingDimension.ENJOYMENT: "Enjoyment",
    RatingDimension.JUMP: "Jump Scares",
    RatingDimension.DREAD: "Dread / Tension",
    RatingDimension.GORE: "Gore / Visceral Stuff",
    RatingDimension.ATMOSPHERE: "Atmosphere",
    RatingDimension.STORY: "Story",
    RatingDimension.REWATCH: "Rewatchability",
    RatingDimension.WTF: "WTF Factor",
    RatingDimension.COZY: "Cozy / Fun",
}


# =============================================================================
# DIMENSION PARSING
# =============================================================================


class UnknownDimensionError(ValueError):
    """Raised when a caller asks for a rating dimension that does not exist."""

    pass


def parse_dimension(value: str | RatingDimension) -> RatingDimension:
    """Resolve a dimension name to its enum member.

    Args:
        value: Dimension name (case-insensitive) or enum member.

    Returns:
        Matching RatingDimension.

    Raises:
        UnknownDimensionError: If the name matches no dimension.
    """
    if isinstance(value, RatingDimension):
        return value
    try:
        return RatingDimension(str(value).strip().lower())
    except ValueError:
        valid = ", ".join(d.value for d in DIMENSIONS)
        raise UnknownDimensionError(
            f"Unknown rating dimension {value!r}. Valid: {valid}"
        ) from None


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def missing_dimensions(raw_ratings: Mapping[str, Any] | None) -> list[RatingDimension]:
    """List the dimensions a raw ratings mapping leaves unset.

    Args:
        raw_ratings: Ratings as stored, possibly partial or None.

    Returns:
        Dimensions that are absent or null.
    """
    if raw_ratings is None:
        return list(DIMENSIONS)
    return [d for d in DIMENSIONS if raw_ratings.get(d.value) is None]


# =============================================================================
# RATINGS
# =============================================================================

RatingValue = Annotated[
    float,
    Field(strict=True, ge=MIN_RATING, le=MAX_RATING, allow_inf_nan=False),
]


class Ratings(BaseModel):
    """Fixed-shape rating vector, every value within [0, 10].

    Absent or null dimensions are filled before validation: each takes
    DEFAULT_RATING, except enjoyment which takes the mean of story,
    rewatch and cozy. Present values that are out of range or not
    numbers are rejected.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    overall: RatingValue
    enjoyment: RatingValue
    jump: RatingValue
    dread: RatingValue
    gore: RatingValue
    atmosphere: RatingValue
    story: RatingValue
    rewatch: RatingValue
    wtf: RatingValue
    cozy: RatingValue

    @model_validator(mode="before")
    @classmethod
    def apply_defaults(cls, data: Any) -> Any:
        """Fill unset dimensions according to the default policy."""
        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            return data

        filled = dict(data)
        for dimension in DIMENSIONS:
            if dimension is RatingDimension.ENJOYMENT:
                continue
            if filled.get(dimension.value) is None:
                filled[dimension.value] = DEFAULT_RATING

        if filled.get(RatingDimension.ENJOYMENT.value) is None:
            sources = [filled[d.value] for d in ENJOYMENT_FALLBACK_SOURCES]
            if all(_is_number(v) for v in sources):
                filled[RatingDimension.ENJOYMENT.value] = sum(sources) / len(sources)
            else:
                # A bad source value fails validation on its own field.
                filled[RatingDimension.ENJOYMENT.value] = DEFAULT_RATING

        return filled

    def get(self, dimension: str | RatingDimension) -> float:
        """Return the value of one dimension.

        Raises:
            UnknownDimensionError: If the dimension does not exist.
        """
        return getattr(self, parse_dimension(dimension).value)

    def as_dict(self) -> dict[str, float]:
        """Return the vector as a plain dict in display order."""
        return {d.value: getattr(self, d.value) for d in DIMENSIONS}


# =============================================================================
# VIEWING RECORD
# =============================================================================


class ViewingToggles(BaseModel):
    """Boolean flags logged with a viewing."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    would_watch_again: bool = Field(
        default=False,
        validation_alias=AliasChoices("would_watch_again", "wouldWatchAgain"),
    )
    would_recommend: bool = Field(
        default=False,
        validation_alias=AliasChoices("would_recommend", "wouldRecommend"),
    )


class ViewingRecord(BaseModel):
    """One logged viewing of a movie, show, or episode.

    Accepts both snake_case names and the camelCase names used by
    stored documents (movieId, userId, mediaType, watchedAt, ...).

    Attributes:
        record_id: Store identifier, when known.
        target_id: Rated entity; show-level id for shows and episodes.
        kind: Explicit kind tag, when stored.
        rater_id: Person who logged the viewing.
        watched_on: Viewing date.
        ratings: Rating vector.
        toggles: Would-watch-again / would-recommend flags.
        notes: Free text.
        season: Season number for episode logs.
        episode: Episode number for episode logs.
        episode_label: Episode title for episode logs.
    """

    model_config = ConfigDict(
        extra="ignore",
        frozen=True,
        str_strip_whitespace=True,
        coerce_numbers_to_str=True,
    )

    record_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("record_id", "id"),
    )
    target_id: str = Field(
        min_length=1,
        validation_alias=AliasChoices("target_id", "targetId", "movieId", "movie_id"),
    )
    kind: MediaKind | None = Field(
        default=None,
        validation_alias=AliasChoices("kind", "mediaType", "media_type"),
    )
    rater_id: str = Field(
        min_length=1,
        validation_alias=AliasChoices("rater_id", "raterId", "userId", "user_id"),
    )
    watched_on: date | None = Field(
        default=None,
        validation_alias=AliasChoices("watched_on", "watchedOn", "watchedAt", "watched_at"),
    )
    ratings: Ratings = Field(default_factory=lambda: Ratings.model_validate({}))
    toggles: ViewingToggles = Field(default_factory=ViewingToggles)
    notes: str | None = None
    season: int | None = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("season", "seasonNumber", "season_number"),
    )
    episode: int | None = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("episode", "episodeNumber", "episode_number"),
    )
    episode_label: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "episode_label", "episodeLabel", "episodeTitle", "episode_title"
        ),
    )

    @field_validator("watched_on", mode="before")
    @classmethod
    def strip_time_of_day(cls, v: Any) -> Any:
        """Keep only the date part of an ISO timestamp."""
        if isinstance(v, str) and len(v) > 10 and v[10] in "T ":
            return v[:10]
        return v

    @property
    def has_episode_numbers(self) -> bool:
        """Check if both season and episode numbers are present."""
        return self.season is not None and self.episode is not None


# =============================================================================
# CATALOG METADATA
# =============================================================================


class MediaMetadata(BaseModel):
    """Display metadata resolved for a target identifier.

    Attributes:
        target_id: Identifier the metadata was resolved for.
        tmdb_id: TMDB identifier.
        title: Display title (movie title or show name).
        year: Release or first-air year.
        poster_path: TMDB poster path.
        kind: Entity kind when the catalog knows it.
    """

    model_config = ConfigDict(
        extra="ignore",
        frozen=True,
        str_strip_whitespace=True,
        coerce_numbers_to_str=True,
    )

    target_id: str = Field(min_length=1)
    tmdb_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("tmdb_id", "tmdbId"),
    )
    title: str | None = None
    year: int | None = None
    poster_path: str | None = Field(
        default=None,
        validation_alias=AliasChoices("poster_path", "posterPath"),
    )
    kind: MediaKind | None = Field(
        default=None,
        validation_alias=AliasChoices("kind", "mediaType", "media_type"),
    )

    @field_validator("year")
    @classmethod
    def drop_unknown_year(cls, v: int | None) -> int | None:
        """Treat a zero or negative year as unknown."""
        if v is not None and v <= 0:
            return None
        return v


# =============================================================================
# BUCKETS
# =============================================================================


@dataclass(frozen=True)
class BucketKey:
    """Identity of one aggregate bucket.

    Attributes:
        bucket_set: Movie, show-cumulative, or episode granularity.
        target_id: Movie or show identifier.
        season: Season number (episode buckets only).
        episode: Episode number (episode buckets only).
    """

    bucket_set: BucketSet
    target_id: str
    season: int | None = None
    episode: int | None = None

    @classmethod
    def for_movie(cls, target_id: str) -> "BucketKey":
        """Build a movie bucket key."""
        return cls(BucketSet.MOVIE, target_id)

    @classmethod
    def for_show(cls, target_id: str) -> "BucketKey":
        """Build a show-cumulative bucket key."""
        return cls(BucketSet.SHOW, target_id)

    @classmethod
    def for_episode(cls, target_id: str, season: int, episode: int) -> "BucketKey":
        """Build a per-episode bucket key."""
        return cls(BucketSet.EPISODE, target_id, season, episode)

    @property
    def bucket_id(self) -> str:
        """Stable string identity of the bucket."""
        if self.bucket_set is BucketSet.EPISODE:
            return f"{self.target_id}::s{self.season}e{self.episode}"
        return self.target_id

    @property
    def sort_key(self) -> tuple[str, int, int]:
        """Ascending tie-break key used when averages are equal."""
        return (
            self.target_id,
            -1 if self.season is None else self.season,
            -1 if self.episode is None else self.episode,
        )


class AggregateBucket(BaseModel):
    """One finalized row of a ranked result.

    Attributes:
        bucket_id: Stable bucket identity (see BucketKey.bucket_id).
        bucket_set: Granularity of the bucket.
        target_id: Movie or show identifier.
        season: Season number (episode buckets only).
        episode: Episode number (episode buckets only).
        display_title: Catalog title, or the raw target id.
        display_subtitle: Year, or SxEy plus episode title.
        poster_ref: Catalog poster path.
        sample_count: Viewings folded into the bucket.
        averages: Rating vector averaged and rounded to one decimal.
    """

    model_config = ConfigDict(frozen=True)

    bucket_id: str
    bucket_set: BucketSet
    target_id: str
    season: int | None = None
    episode: int | None = None
    display_title: str
    display_subtitle: str | None = None
    poster_ref: str | None = None
    sample_count: int = Field(ge=1)
    averages: Ratings

    @property
    def key(self) -> BucketKey:
        """Rebuild the bucket key."""
        return BucketKey(self.bucket_set, self.target_id, self.season, self.episode)

    @property
    def sort_key(self) -> tuple[str, int, int]:
        """Tie-break key (see BucketKey.sort_key)."""
        return self.key.sort_key

    def average(self, dimension: str | RatingDimension) -> float:
        """Return the rounded average for one dimension."""
        return self.averages.get(dimension)
