"""Tests for TMDBNormalizer and id/URL helpers."""

from typing import Any

import pytest

from src.catalog.normalizer import (
    TMDBNormalizer,
    backdrop_url,
    media_document_id,
    poster_url,
)
from src.settings import settings


@pytest.fixture
def normalizer() -> TMDBNormalizer:
    """Normalizer instance."""
    return TMDBNormalizer()


@pytest.fixture
def movie_payload() -> dict[str, Any]:
    """Movie details response with credits."""
    return {
        "id": 694,
        "title": "  The Shining ",
        "release_date": "1980-05-23",
        "poster_path": "/shining.jpg",
        "overview": "Jack Torrance becomes winter caretaker...",
        "runtime": 144,
        "genres": [{"id": 27, "name": "Horror"}, {"id": 53, "name": "Thriller"}],
        "credits": {
            "crew": [
                {"job": "Producer", "name": "Jan Harlan"},
                {"job": "Director", "name": "Stanley Kubrick"},
            ],
            "cast": [
                {"name": f"Actor {i}", "character": f"Role {i}", "profile_path": None}
                for i in range(15)
            ],
        },
    }


@pytest.fixture
def tv_payload() -> dict[str, Any]:
    """TV details response with credits."""
    return {
        "id": 1399,
        "name": "Game of Thrones",
        "first_air_date": "2011-04-17",
        "episode_run_time": [60, 55],
        "created_by": [{"name": "David Benioff"}, {"name": "D. B. Weiss"}],
        "number_of_seasons": 8,
        "number_of_episodes": 73,
        "credits": {"crew": [], "cast": []},
    }


class TestHelpers:
    """Tests for module-level helpers."""

    @staticmethod
    def test_document_ids() -> None:
        assert media_document_id(694, "movie") == "694"
        assert media_document_id(1399, "tv") == "tv_1399"

    @staticmethod
    def test_image_urls() -> None:
        assert poster_url("/p.jpg") == f"{settings.tmdb.image_base_url}/p.jpg"
        assert backdrop_url("/b.jpg") == f"{settings.tmdb.backdrop_base_url}/b.jpg"
        assert poster_url(None) is None
        assert backdrop_url("") is None


class TestNormalizeMedia:
    """Tests for normalize_media."""

    @staticmethod
    def test_movie(normalizer: TMDBNormalizer, movie_payload: dict[str, Any]) -> None:
        values = normalizer.normalize_media(movie_payload, "movie", created_by="uid-1")
        assert values["tmdb_id"] == "694"
        assert values["media_type"] == "movie"
        assert values["title"] == "The Shining"
        assert values["year"] == 1980
        assert values["runtime"] == 144
        assert values["genres"] == ["Horror", "Thriller"]
        assert values["director"] == "Stanley Kubrick"
        assert len(values["cast"]) == TMDBNormalizer.MAX_ACTORS
        assert values["cast"][0] == {"name": "Actor 0", "role": "Role 0", "profile_path": None}
        assert values["created_by"] == "uid-1"

    @staticmethod
    def test_tv(normalizer: TMDBNormalizer, tv_payload: dict[str, Any]) -> None:
        values = normalizer.normalize_media(tv_payload, "tv", created_by="uid-2")
        assert values["media_type"] == "tv"
        assert values["title"] == "Game of Thrones"
        assert values["year"] == 2011
        assert values["runtime"] == 60
        assert values["director"] == "David Benioff"
        assert values["number_of_seasons"] == 8
        assert values["first_air_date"] == "2011-04-17"

    @staticmethod
    def test_missing_title_and_dates(normalizer: TMDBNormalizer) -> None:
        values = normalizer.normalize_media({"id": 1, "release_date": ""}, "movie", created_by="u")
        assert values["title"] == "Unknown Title"
        assert values["year"] is None
        assert values["director"] is None
        assert values["cast"] == []

    @staticmethod
    def test_invalid_date(normalizer: TMDBNormalizer) -> None:
        values = normalizer.normalize_media(
            {"id": 1, "title": "X", "release_date": "unknown"}, "movie", created_by="u"
        )
        assert values["year"] is None
