"""TMDB API configuration settings.

Metadata lookup source: REST API for movie and TV show metadata.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TMDBSettings(BaseSettings):
    """TMDB API configuration.

    Attributes:
        api_key: TMDB API key.
        base_url: TMDB API base URL.
        image_base_url: TMDB image CDN base URL (posters).
        backdrop_base_url: TMDB image CDN base URL (backdrops).
        language: Language for API responses.
        include_adult: Include adult titles in search results.
    """

    api_key: str = Field(default="", alias="TMDB_API_KEY")
    base_url: str = Field(
        default="https://api.themoviedb.org/3",
        alias="TMDB_BASE_URL",
    )
    image_base_url: str = Field(
        default="https://image.tmdb.org/t/p/w500",
        alias="TMDB_IMAGE_BASE_URL",
    )
    backdrop_base_url: str = Field(
        default="https://image.tmdb.org/t/p/original",
        alias="TMDB_BACKDROP_BASE_URL",
    )

    language: str = Field(default="en-US", alias="TMDB_LANGUAGE")
    include_adult: bool = Field(default=False, alias="TMDB_INCLUDE_ADULT")

    # Rate limiting
    requests_per_period: int = Field(default=40, alias="TMDB_REQUESTS_PER_PERIOD")
    period_seconds: int = Field(default=10, alias="TMDB_PERIOD_SECONDS")
    min_request_delay: float = Field(default=0.25, alias="TMDB_MIN_REQUEST_DELAY")
    timeout_seconds: float = Field(default=30.0, alias="TMDB_TIMEOUT")
    user_agent: str = Field(default="FrightLog/1.0", alias="TMDB_USER_AGENT")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def is_configured(self) -> bool:
        """Check if TMDB API key is configured."""
        return bool(self.api_key and self.api_key != "your_api_key_here")
