"""TMDB API client with rate limiting.

Handles HTTP communication with The Movie Database API
including authentication, rate limiting, and retries.
"""

import logging
import time
from types import TracebackType
from typing import Any

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.settings import settings

logger = logging.getLogger(__name__)

SEARCHABLE_MEDIA_TYPES = frozenset({"movie", "tv"})
"""Multi-search result types kept (people are dropped)."""


class TMDBClientError(Exception):
    """Base exception for TMDB client errors."""

    pass


class TMDBRateLimitError(TMDBClientError):
    """Raised when rate limit is exceeded."""

    pass


class TMDBNotFoundError(TMDBClientError):
    """Raised when resource is not found."""

    pass


class TMDBClient:
    """HTTP client for TMDB API with rate limiting.

    Keeps a sliding window of request times to respect TMDB's
    limits, and caches multi-search pages for the client lifetime.

    Attributes:
        base_url: TMDB API base URL.
        api_key: TMDB API key.
    """

    def __init__(self, http_client: httpx.Client | None = None) -> None:
        """Initialize TMDB client with settings.

        Args:
            http_client: Pre-built HTTP client (tests); created on
                context entry when None.
        """
        self._base_url = settings.tmdb.base_url
        self._api_key = settings.tmdb.api_key
        self._language = settings.tmdb.language

        # Rate limiting state
        self._requests_per_period = settings.tmdb.requests_per_period
        self._period_seconds = settings.tmdb.period_seconds
        self._min_delay = settings.tmdb.min_request_delay
        self._request_times: list[float] = []

        self._client: httpx.Client | None = http_client
        self._owns_client = http_client is None
        self._search_cache: dict[tuple[str, int], list[dict[str, Any]]] = {}

    # -------------------------------------------------------------------------
    # Context Manager
    # -------------------------------------------------------------------------

    def __enter__(self) -> "TMDBClient":
        """Enter context and create HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                timeout=settings.tmdb.timeout_seconds,
                headers={"User-Agent": settings.tmdb.user_agent},
            )
        return self

    def __exit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc_val: BaseException | None,
        _exc_tb: TracebackType | None,
    ) -> None:
        """Exit context and close HTTP client if this instance created it."""
        if self._client and self._owns_client:
            self._client.close()
            self._client = None

    # -------------------------------------------------------------------------
    # Rate Limiting
    # -------------------------------------------------------------------------

    def _wait_for_rate_limit(self) -> None:
        """Wait if necessary to respect rate limits."""
        now = time.time()

        cutoff = now - self._period_seconds
        self._request_times = [t for t in self._request_times if t > cutoff]

        if len(self._request_times) >= self._requests_per_period:
            oldest = self._request_times[0]
            wait_time = oldest + self._period_seconds - now
            if wait_time > 0:
                logger.debug("Rate limit: waiting %.2fs", wait_time)
                time.sleep(wait_time)

        if self._request_times:
            elapsed = now - self._request_times[-1]
            if elapsed < self._min_delay:
                time.sleep(self._min_delay - elapsed)

        self._request_times.append(time.time())

    # -------------------------------------------------------------------------
    # HTTP Methods
    # -------------------------------------------------------------------------

    @retry(
        retry=retry_if_exception_type((httpx.TimeoutException, TMDBRateLimitError)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _get(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Execute GET request with rate limiting and retries.

        Args:
            endpoint: API endpoint path.
            params: Optional query parameters.

        Returns:
            JSON response as dictionary.

        Raises:
            TMDBClientError: On API errors or missing context.
            TMDBNotFoundError: When resource not found.
            TMDBRateLimitError: When rate limit exceeded after retries.
        """
        if self._client is None:
            msg = "Client not initialized. Use context manager."
            raise TMDBClientError(msg)

        self._wait_for_rate_limit()

        request_params: dict[str, Any] = {"api_key": self._api_key, "language": self._language}
        if params:
            request_params.update(params)

        url = f"{self._base_url}{endpoint}"

        try:
            response = self._client.get(url, params=request_params)
        except httpx.TimeoutException:
            logger.warning("Request timeout: %s", endpoint)
            raise

        return self._handle_response(response, endpoint)

    @staticmethod
    def _handle_response(
        response: httpx.Response,
        endpoint: str,
    ) -> dict[str, Any]:
        """Handle HTTP response and extract JSON.

        Raises:
            TMDBClientError: On API errors.
            TMDBNotFoundError: When resource not found (404).
            TMDBRateLimitError: When rate limit exceeded (429).
        """
        if response.status_code == 200:
            return response.json()

        if response.status_code == 404:
            raise TMDBNotFoundError(f"Not found: {endpoint}")

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After", "10")
            logger.warning("Rate limited. Retry after %ss", retry_after)
            raise TMDBRateLimitError(f"Rate limited: {endpoint}")

        error_msg = f"TMDB API error {response.status_code}: {endpoint}"
        logger.error(error_msg)
        raise TMDBClientError(error_msg)

    # -------------------------------------------------------------------------
    # API Endpoints
    # -------------------------------------------------------------------------

    def search_multi(self, query: str, page: int = 1) -> list[dict[str, Any]]:
        """Search movies and TV shows by title.

        Args:
            query: Search query string.
            page: Result page (1-based).

        Returns:
            Movie and TV results; blank queries return an empty list.
        """
        if not query.strip():
            return []

        cache_key = (query.strip().lower(), page)
        if cache_key in self._search_cache:
            return self._search_cache[cache_key]

        params: dict[str, Any] = {
            "query": query,
            "page": page,
            "include_adult": str(settings.tmdb.include_adult).lower(),
        }
        data = self._get("/search/multi", params)
        results = [
            item
            for item in data.get("results", [])
            if item.get("media_type") in SEARCHABLE_MEDIA_TYPES
        ]

        self._search_cache[cache_key] = results
        return results

    def get_movie_details(self, movie_id: int | str) -> dict[str, Any]:
        """Get movie details with credits (single request).

        Args:
            movie_id: TMDB movie ID.

        Returns:
            Movie details response.
        """
        return self._get(f"/movie/{movie_id}", {"append_to_response": "credits"})

    def get_tv_details(self, tv_id: int | str) -> dict[str, Any]:
        """Get TV show details with credits (single request).

        Args:
            tv_id: TMDB TV show ID.

        Returns:
            TV show details response.
        """
        return self._get(f"/tv/{tv_id}", {"append_to_response": "credits"})

    def get_season(self, tv_id: int | str, season_number: int) -> dict[str, Any]:
        """Get one season of a TV show with its episodes.

        Args:
            tv_id: TMDB TV show ID.
            season_number: Season number.

        Returns:
            Season response including an episodes list.
        """
        return self._get(f"/tv/{tv_id}/season/{season_number}")
