"""The Movie Database (TMDB) metadata provider."""

from datetime import date
from typing import Any

import httpx

from movienight.errors import MetadataError
from movienight.logging import get_logger
from movienight.metadata.base import CandidateMetadata, MovieDetails, MovieSearchResult

log = get_logger(__name__)


def _parse_date(value: str | None) -> date | None:
    # TMDB sends "" for unknown release dates
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


class TMDBMetadata(CandidateMetadata):
    """Searches TMDB's v3 API with an API key."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.themoviedb.org/3",
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ):
        self.api_key = api_key
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        try:
            response = self._client.get(path, params={"api_key": self.api_key, **params})
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            log.warning("metadata_http_error", path=path, status=e.response.status_code)
            raise MetadataError(f"Movie lookup failed: HTTP {e.response.status_code}") from e
        except httpx.RequestError as e:
            log.warning("metadata_unreachable", path=path, error=str(e))
            raise MetadataError(f"Error reaching movie database: {e}") from e
        return response.json()

    def search(self, query: str) -> list[MovieSearchResult]:
        query = query.strip()
        if not query:
            return []
        data = self._get("/search/movie", {"query": query, "include_adult": "false"})
        return [
            MovieSearchResult(
                external_id=str(item["id"]),
                title=item.get("title") or item.get("original_title", ""),
                release_date=_parse_date(item.get("release_date")),
            )
            for item in data.get("results", [])
        ]

    def fetch_details(self, external_id: str) -> MovieDetails:
        data = self._get(f"/movie/{external_id}", {})
        return MovieDetails(
            external_id=str(data.get("id", external_id)),
            title=data.get("title") or data.get("original_title", ""),
            release_date=_parse_date(data.get("release_date")),
            overview=data.get("overview") or "",
            poster_ref=data.get("poster_path"),
            runtime_minutes=data.get("runtime") or None,
        )
