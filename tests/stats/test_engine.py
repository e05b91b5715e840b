"""End-to-end tests for StatsEngine.

Covers the aggregation properties: bounded averages, order
independence, default policy, re-ranking, show/episode buckets,
empty input, limits and deterministic ties.
"""

import itertools
import random

import pytest

from src.stats import (
    DIMENSIONS,
    BucketSet,
    MediaMetadata,
    StatsEngine,
    StatsSnapshot,
    UnknownDimensionError,
)
from src.stats.ranker import rank_buckets
from tests.conftest import full_ratings, load_fixture


@pytest.fixture
def engine() -> StatsEngine:
    """Default engine."""
    return StatsEngine()


@pytest.fixture
def mixed_viewings(make_viewing) -> list[dict]:
    """Movies, a show with episodes, and a few defective documents."""
    return [
        make_viewing(movie_id="694", ratings=full_ratings(8.0, gore=3.0)),
        make_viewing(movie_id="694", ratings=full_ratings(7.0, gore=4.5), user_id="uid-2"),
        make_viewing(movie_id="948", ratings=full_ratings(6.5, gore=9.0)),
        make_viewing(movie_id="tv_1399", seasonNumber=1, episodeNumber=1, ratings=full_ratings(4.0)),
        make_viewing(movie_id="tv_1399", seasonNumber=1, episodeNumber=2, ratings=full_ratings(9.0)),
        make_viewing(movie_id="tv_1399", seasonNumber=1, episodeNumber=2, ratings=full_ratings(8.0)),
        make_viewing(movie_id="tv_1399", ratings=full_ratings(6.0)),
        make_viewing(movie_id="777", ratings={"overall": 9, "story": 7, "cozy": 6}),
        make_viewing(movie_id="bad", ratings=full_ratings(overall=15)),
        {"ratings": full_ratings()},
    ]


# =============================================================================
# PROPERTIES
# =============================================================================


class TestAggregationProperties:
    """Invariants that hold for any input."""

    @staticmethod
    def test_averages_within_bounds(engine: StatsEngine, mixed_viewings: list[dict]) -> None:
        snapshot = engine.aggregate(mixed_viewings)
        for bucket_set in BucketSet:
            for bucket in snapshot.buckets(bucket_set):
                for dimension in DIMENSIONS:
                    assert 0.0 <= bucket.average(dimension) <= 10.0

    @staticmethod
    def test_permutation_invariant(engine: StatsEngine, mixed_viewings: list[dict]) -> None:
        baseline = engine.aggregate(mixed_viewings)
        rng = random.Random(1234)
        for _ in range(5):
            shuffled = list(mixed_viewings)
            rng.shuffle(shuffled)
            snapshot = engine.aggregate(shuffled)
            assert snapshot.movies == baseline.movies
            assert snapshot.shows == baseline.shows
            assert snapshot.episodes == baseline.episodes

    @staticmethod
    def test_float_sums_order_independent(engine: StatsEngine, make_viewing) -> None:
        values = [0.1, 0.2, 0.7, 9.9, 3.3, 6.05]
        results = set()
        for perm in itertools.permutations(values):
            docs = [make_viewing(ratings=full_ratings(v)) for v in perm]
            results.add(engine.aggregate(docs).movies[0].average("overall"))
        assert len(results) == 1

    @staticmethod
    def test_enjoyment_fallback(engine: StatsEngine, make_viewing) -> None:
        doc = make_viewing(ratings={"overall": 9, "story": 7, "cozy": 6})
        snapshot = engine.aggregate([doc])
        bucket = snapshot.movies[0]
        # mean(story 7, rewatch 5 default, cozy 6)
        assert bucket.average("enjoyment") == 6.0
        assert bucket.average("jump") == 5.0
        assert snapshot.stats.defaulted == 1

    @staticmethod
    def test_rerank_matches_fresh_ranking(engine: StatsEngine, mixed_viewings: list[dict]) -> None:
        snapshot = engine.aggregate(mixed_viewings)
        snapshot.rank(BucketSet.MOVIE, "overall")
        by_gore = snapshot.rank(BucketSet.MOVIE, "gore")
        fresh = engine.aggregate(mixed_viewings).rank(BucketSet.MOVIE, "gore")
        assert by_gore == fresh
        assert by_gore == rank_buckets(snapshot.movies, "gore")


# =============================================================================
# SHOWS AND EPISODES
# =============================================================================


class TestShowsAndEpisodes:
    """Tests for show-cumulative and per-episode buckets."""

    @staticmethod
    def test_three_show_viewings_two_episodes(engine: StatsEngine, make_viewing) -> None:
        docs = [
            make_viewing(movie_id="tv_1399", seasonNumber=1, episodeNumber=1, ratings=full_ratings(4.0)),
            make_viewing(movie_id="tv_1399", seasonNumber=1, episodeNumber=2, ratings=full_ratings(6.0)),
            make_viewing(movie_id="tv_1399", seasonNumber=1, episodeNumber=2, ratings=full_ratings(8.0)),
        ]
        snapshot = engine.aggregate(docs)

        assert len(snapshot.shows) == 1
        assert snapshot.shows[0].sample_count == 3
        assert snapshot.shows[0].average("overall") == 6.0

        assert [b.bucket_id for b in snapshot.episodes] == ["tv_1399::s1e1", "tv_1399::s1e2"]
        assert [b.sample_count for b in snapshot.episodes] == [1, 2]
        assert snapshot.episodes[1].average("overall") == 7.0
        assert snapshot.movies == ()

    @staticmethod
    def test_show_level_viewing_only_in_show_bucket(engine: StatsEngine, make_viewing) -> None:
        snapshot = engine.aggregate([make_viewing(movie_id="tv_1", mediaType="tv")])
        assert len(snapshot.shows) == 1
        assert snapshot.episodes == ()

    @staticmethod
    def test_show_kind_tag_reaches_show_and_episode(engine: StatsEngine) -> None:
        doc = {
            "movieId": "1399",
            "userId": "u",
            "kind": "show",
            "season": 1,
            "episode": 1,
            "ratings": full_ratings(6.0),
        }
        snapshot = engine.aggregate([doc])
        assert snapshot.stats.skipped == 0
        assert [b.bucket_id for b in snapshot.shows] == ["1399"]
        assert [b.bucket_id for b in snapshot.episodes] == ["1399::s1e1"]

    @staticmethod
    def test_metadata_overrides_show_prefix(engine: StatsEngine, make_viewing) -> None:
        metadata = {"tv_9": MediaMetadata(target_id="tv_9", title="Odd Movie", kind="movie")}
        snapshot = engine.aggregate([make_viewing(movie_id="tv_9")], metadata)
        assert [b.display_title for b in snapshot.movies] == ["Odd Movie"]
        assert snapshot.shows == ()


# =============================================================================
# EDGE CASES
# =============================================================================


class TestEdgeCases:
    """Empty input, defects, limits and ties."""

    @staticmethod
    def test_empty_input(engine: StatsEngine) -> None:
        snapshot = engine.aggregate([])
        assert snapshot.is_empty
        for bucket_set in BucketSet:
            assert snapshot.rank(bucket_set, "overall") == []
        assert snapshot.stats.total_input == 0

    @staticmethod
    def test_malformed_records_skipped_and_counted(
        engine: StatsEngine, mixed_viewings: list[dict]
    ) -> None:
        snapshot = engine.aggregate(mixed_viewings)
        assert snapshot.stats.total_input == 10
        assert snapshot.stats.skipped == 2
        assert snapshot.stats.accepted == 8
        assert snapshot.stats.has_defects
        assert "bad" not in {b.target_id for b in snapshot.movies}

    @staticmethod
    def test_bad_descriptive_fields_keep_ratings(engine: StatsEngine, make_viewing) -> None:
        docs = [
            make_viewing(movie_id="694", watchedAt="", ratings=full_ratings(8.0)),
            make_viewing(movie_id="695", toggles={"wouldWatchAgain": "maybe"}),
        ]
        snapshot = engine.aggregate(docs)
        assert snapshot.stats.skipped == 0
        assert snapshot.stats.cleared == 2
        assert [b.target_id for b in snapshot.movies] == ["694", "695"]
        assert snapshot.movies[0].average("overall") == 8.0

    @staticmethod
    def test_unresolved_metadata_counted(engine: StatsEngine, make_viewing) -> None:
        metadata = {"694": MediaMetadata(target_id="694", title="The Shining", year=1980)}
        docs = [make_viewing(movie_id="694"), make_viewing(movie_id="948")]
        snapshot = engine.aggregate(docs, metadata)
        assert snapshot.stats.unresolved_metadata == 1
        titles = {b.target_id: b.display_title for b in snapshot.movies}
        assert titles == {"694": "The Shining", "948": "948"}

    @staticmethod
    def test_ambiguous_counted(engine: StatsEngine, make_viewing) -> None:
        snapshot = engine.aggregate([make_viewing(movie_id="694"), make_viewing(movie_id="tv_1")])
        assert snapshot.stats.ambiguous == 1

    @staticmethod
    def test_eleven_movies_limit_ten(engine: StatsEngine, make_viewing) -> None:
        docs = [make_viewing(movie_id=f"m{i:02d}", ratings=full_ratings(float(i))) for i in range(11)]
        ranked = engine.aggregate(docs).rank(BucketSet.MOVIE, "overall", limit=10)
        values = [b.average("overall") for b in ranked]
        assert len(ranked) == 10
        assert values == sorted(values, reverse=True)
        assert len(set(values)) == 10
        assert "m00" not in {b.target_id for b in ranked}

    @staticmethod
    def test_ties_deterministic(engine: StatsEngine, make_viewing) -> None:
        docs = [make_viewing(movie_id=m) for m in ["300", "100", "200"]]
        first = engine.aggregate(docs).rank(BucketSet.MOVIE, "overall")
        second = engine.aggregate(list(reversed(docs))).rank(BucketSet.MOVIE, "overall")
        assert [b.target_id for b in first] == ["100", "200", "300"]
        assert first == second

    @staticmethod
    def test_unknown_dimension(engine: StatsEngine, make_viewing) -> None:
        snapshot = engine.aggregate([make_viewing()])
        with pytest.raises(UnknownDimensionError):
            snapshot.rank(BucketSet.MOVIE, "terror")

    @staticmethod
    def test_unknown_bucket_set(engine: StatsEngine) -> None:
        with pytest.raises(ValueError):
            StatsSnapshot().buckets("season")


# =============================================================================
# STATISTICS
# =============================================================================


class TestEngineStats:
    """Tests for pass statistics."""

    @staticmethod
    def test_bucket_counts(engine: StatsEngine, mixed_viewings: list[dict]) -> None:
        stats = engine.aggregate(mixed_viewings).stats
        assert stats.movie_buckets == 3
        assert stats.show_buckets == 1
        assert stats.episode_buckets == 2

    @staticmethod
    def test_to_dict(engine: StatsEngine, mixed_viewings: list[dict]) -> None:
        data = engine.aggregate(mixed_viewings).stats.to_dict()
        assert data["input"]["skipped"] == 2
        assert data["buckets"] == {"movie": 3, "show": 1, "episode": 2}

    @staticmethod
    def test_rankings_cover_all_sets(engine: StatsEngine, mixed_viewings: list[dict]) -> None:
        rankings = engine.aggregate(mixed_viewings).rankings("cozy", limit=None)
        assert set(rankings) == set(BucketSet)
        assert len(rankings[BucketSet.MOVIE]) == 3

    @staticmethod
    def test_exported_documents(engine: StatsEngine) -> None:
        snapshot = engine.aggregate(load_fixture("viewings.json"))
        assert snapshot.stats.accepted == 3
        assert snapshot.stats.skip_reasons == {"ratings.overall": 1}
        assert [b.bucket_id for b in snapshot.episodes] == ["tv_1399::s1e9"]
