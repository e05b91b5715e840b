"""Shared pytest fixtures."""

import json
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
from sqlalchemy.orm import Session

from src.database import DatabaseConnection

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_fixture(name: str) -> Any:
    """Load a JSON fixture file from tests/fixtures/.

    Args:
        name: Filename (e.g. "viewings.json").

    Returns:
        Parsed JSON content.
    """
    return json.loads((FIXTURES_DIR / name).read_text(encoding="utf-8"))


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True, scope="function")
def mock_env_for_tests(monkeypatch: pytest.MonkeyPatch) -> None:
    """Mock env variables for reproducible tests."""
    monkeypatch.setenv("TMDB_API_KEY", "test_api_key_12345678901234567890")
    monkeypatch.setenv("TMDB_BASE_URL", "https://api.themoviedb.org/3")
    monkeypatch.setenv("TMDB_LANGUAGE", "en-US")
    monkeypatch.setenv("DATABASE_URL", "sqlite://")
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("DEBUG", "false")
    monkeypatch.setenv("LOG_LEVEL", "INFO")


# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------


def full_ratings(value: float = 5.0, **overrides: float) -> dict[str, float]:
    """Build a complete ratings mapping with every dimension set."""
    ratings = {
        "overall": value,
        "enjoyment": value,
        "jump": value,
        "dread": value,
        "gore": value,
        "atmosphere": value,
        "story": value,
        "rewatch": value,
        "wtf": value,
        "cozy": value,
    }
    ratings.update(overrides)
    return ratings


@pytest.fixture
def make_viewing() -> Callable[..., dict[str, Any]]:
    """Factory for raw viewing documents in their stored camelCase shape."""
    counter = iter(range(1, 10_000))

    def _make(
        movie_id: str = "694",
        ratings: dict[str, Any] | None = None,
        user_id: str = "uid-1",
        **extra: Any,
    ) -> dict[str, Any]:
        document: dict[str, Any] = {
            "id": f"v{next(counter)}",
            "movieId": movie_id,
            "userId": user_id,
            "watchedAt": "2024-10-31",
            "ratings": full_ratings() if ratings is None else ratings,
            "toggles": {"wouldWatchAgain": True, "wouldRecommend": False},
        }
        document.update(extra)
        return document

    return _make


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest.fixture
def db() -> Generator[DatabaseConnection, None, None]:
    """In-memory SQLite store with the schema created."""
    connection = DatabaseConnection("sqlite://")
    connection.create_schema()
    yield connection
    connection.dispose()


@pytest.fixture
def session(db: DatabaseConnection) -> Generator[Session, None, None]:
    """Transactional session on the in-memory store."""
    with db.session() as s:
        yield s
