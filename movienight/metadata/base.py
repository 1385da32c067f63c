"""Abstract base class for movie metadata providers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Any


@dataclass(frozen=True)
class MovieSearchResult:
    external_id: str
    title: str
    release_date: date | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "external_id": self.external_id,
            "title": self.title,
            "release_date": self.release_date.isoformat() if self.release_date else None,
        }


@dataclass(frozen=True)
class MovieDetails:
    """Display details for one movie.

    Attributes:
        poster_ref: Provider-relative poster path, not a full URL
        runtime_minutes: None when the provider doesn't know it
    """
    external_id: str
    title: str
    release_date: date | None = None
    overview: str = ""
    poster_ref: str | None = None
    runtime_minutes: int | None = None


class CandidateMetadata(ABC):
    """Looks up movies by free-text query or external id.

    Never consulted by the tally; only used to label candidates.
    """

    @abstractmethod
    def search(self, query: str) -> list[MovieSearchResult]:
        """Search for movies, best match first.

        Raises:
            MetadataError: If the provider can't be reached or rejects the request
        """
        pass

    @abstractmethod
    def fetch_details(self, external_id: str) -> MovieDetails:
        """Fetch details for one movie.

        Raises:
            MetadataError: If the movie is unknown or the provider fails
        """
        pass
