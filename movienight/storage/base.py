"""Abstract base class for stores."""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime

from movienight.models import Ballot, Candidate, Night


class Store(ABC):
    """Abstract base class for the night/submission/ballot store.

    Each store implementation backs one kind of storage. Stores are
    registered via the @register_store decorator in
    movienight/storage/__init__.py and chosen by URL.

    Implementations raise StorageUnavailable when the backend can't be
    reached and DuplicateKeyError when a create collides with an existing
    row. Nothing here retries.
    """

    @classmethod
    @abstractmethod
    def can_open(cls, url: str) -> bool:
        """Check if this store class handles the given URL."""
        pass

    @classmethod
    @abstractmethod
    def open(cls, url: str, **options) -> "Store":
        """Create a store connected to `url`."""
        pass

    # --- nights ---

    @abstractmethod
    def get_night(self, night_id: int) -> Night | None:
        pass

    @abstractmethod
    def create_night(self, night_id: int, created_at: datetime) -> Night:
        """Insert a night with no decided movie.

        Raises:
            DuplicateKeyError: If the night already exists
        """
        pass

    @abstractmethod
    def set_night_movie(self, night_id: int, movie_ref: str | None) -> None:
        pass

    # --- candidates ---

    @abstractmethod
    def list_candidates(self, night_id: int) -> list[Candidate]:
        """Candidates for a night, in submission order."""
        pass

    @abstractmethod
    def get_candidate(self, candidate_id: int) -> Candidate | None:
        pass

    @abstractmethod
    def create_candidate(
        self, night_id: int, user_id: int, movie_ref: str, title: str | None = None,
    ) -> Candidate:
        pass

    @abstractmethod
    def delete_candidate(self, candidate_id: int, owner_id: int) -> bool:
        """Delete a candidate owned by `owner_id`.

        Returns:
            True if a row was deleted, False if none matched
        """
        pass

    # --- ballots ---

    @abstractmethod
    def list_ballots(
        self,
        user_id: int | None = None,
        candidate_ids: Iterable[int] | None = None,
    ) -> list[Ballot]:
        """List ballots, optionally filtered by user and/or candidate set."""
        pass

    @abstractmethod
    def delete_ballots(self, user_id: int, candidate_ids: Iterable[int]) -> None:
        pass

    @abstractmethod
    def insert_ballots(self, ballots: Iterable[Ballot]) -> None:
        pass

    def close(self) -> None:
        """Release any connections held by the store."""
        pass
