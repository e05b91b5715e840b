"""Tests for RatingTotals, Accumulator and half-up rounding."""

from fractions import Fraction

import pytest

from src.stats.accumulator import Accumulator, RatingTotals, round_half_up
from src.stats.schemas import BucketKey, BucketSet, Ratings, ViewingRecord
from tests.conftest import full_ratings

# ---------------------------------------------------------------------------
# Rounding
# ---------------------------------------------------------------------------


class TestRoundHalfUp:
    """Tests for round_half_up."""

    @staticmethod
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (Fraction(25, 4), 6.3),  # 6.25
            (Fraction(5, 4), 1.3),  # 1.25
            (Fraction(22, 3), 7.3),  # 7.333...
            (Fraction(20, 3), 6.7),  # 6.666...
            (Fraction(0), 0.0),
            (Fraction(10), 10.0),
        ],
    )
    def test_rounds_half_up(value: Fraction, expected: float) -> None:
        assert round_half_up(value) == expected

    @staticmethod
    def test_custom_places() -> None:
        assert round_half_up(Fraction(1, 8), places=2) == pytest.approx(0.13)


# ---------------------------------------------------------------------------
# Totals
# ---------------------------------------------------------------------------


def _ratings(value: float = 5.0, **overrides: float) -> Ratings:
    return Ratings.model_validate(full_ratings(value, **overrides))


class TestRatingTotals:
    """Tests for RatingTotals."""

    @staticmethod
    def test_empty_totals() -> None:
        totals = RatingTotals()
        assert totals.is_empty
        with pytest.raises(ValueError, match="empty"):
            totals.average("overall")

    @staticmethod
    def test_average_of_two() -> None:
        totals = RatingTotals()
        totals.add(_ratings(7.0))
        totals.add(_ratings(8.5))
        assert totals.count == 2
        assert totals.average("overall") == 7.8  # 7.75 half-up

    @staticmethod
    def test_averages_vector() -> None:
        totals = RatingTotals()
        totals.add(_ratings(4.0, gore=10.0))
        totals.add(_ratings(6.0, gore=9.0))
        averages = totals.averages()
        assert averages.overall == 5.0
        assert averages.gore == 9.5

    @staticmethod
    def test_top_episode_label_most_frequent_then_alphabetical() -> None:
        totals = RatingTotals()
        for label in ["Zeta", "Alpha", "Zeta", "Alpha", "Mid"]:
            totals.add(_ratings(), label)
        assert totals.top_episode_label == "Alpha"

    @staticmethod
    def test_top_episode_label_none_without_labels() -> None:
        totals = RatingTotals()
        totals.add(_ratings())
        assert totals.top_episode_label is None

    @staticmethod
    def test_sums_are_exact() -> None:
        totals = RatingTotals()
        for _ in range(3):
            totals.add(_ratings(0.1))
        assert totals.average("overall") == 0.1


# ---------------------------------------------------------------------------
# Accumulator
# ---------------------------------------------------------------------------


def _record(make_viewing, **kwargs) -> ViewingRecord:
    return ViewingRecord.model_validate(make_viewing(**kwargs))


class TestAccumulator:
    """Tests for Accumulator."""

    @staticmethod
    def test_add_creates_bucket(make_viewing) -> None:
        acc = Accumulator()
        key = BucketKey.for_movie("694")
        acc.add(key, _record(make_viewing))
        assert [(k, t.count) for k, t in acc.items()] == [(key, 1)]

    @staticmethod
    def test_episode_label_only_on_episode_keys(make_viewing) -> None:
        acc = Accumulator()
        record = _record(
            make_viewing, movie_id="tv_1", seasonNumber=1, episodeNumber=1, episodeTitle="Pilot"
        )
        show_key = BucketKey.for_show("tv_1")
        episode_key = BucketKey.for_episode("tv_1", 1, 1)
        acc.add(show_key, record)
        acc.add(episode_key, record)
        totals = dict(acc.items())
        assert not totals[show_key].episode_labels
        assert totals[episode_key].top_episode_label == "Pilot"

    @staticmethod
    def test_items_sorted_and_filtered(make_viewing) -> None:
        acc = Accumulator()
        record = _record(make_viewing)
        for key in [
            BucketKey.for_movie("b"),
            BucketKey.for_show("tv_1"),
            BucketKey.for_movie("a"),
        ]:
            acc.add(key, record)
        movies = [k.target_id for k, _ in acc.items(BucketSet.MOVIE)]
        assert movies == ["a", "b"]
        assert len(list(acc.items())) == 3

    @staticmethod
    def test_fold_order_does_not_change_sums(make_viewing) -> None:
        key = BucketKey.for_movie("694")
        records = [
            _record(make_viewing, ratings=full_ratings(value))
            for value in (0.1, 0.2, 0.7, 9.9, 3.3)
        ]
        forward, backward = Accumulator(), Accumulator()
        for record in records:
            forward.add(key, record)
        for record in reversed(records):
            backward.add(key, record)
        left = dict(forward.items())[key]
        right = dict(backward.items())[key]
        assert left.sums == right.sums
        assert left.count == right.count == 5
