"""In-process store, used for local runs and tests."""

from collections.abc import Iterable
from datetime import datetime, timezone
from itertools import count

from movienight.errors import DuplicateKeyError
from movienight.models import Ballot, Candidate, Night
from movienight.storage import register_store
from movienight.storage.base import Store


@register_store
class MemoryStore(Store):
    """Keeps nights, candidates and ballots in dictionaries.

    Candidate ids are assigned sequentially from 1. Deleting a candidate
    leaves its ballots in place, like the hosted database does.

    URL format:
        memory://
    """

    EXAMPLE_URL = "memory://"

    def __init__(self):
        self._nights: dict[int, Night] = {}
        self._candidates: dict[int, Candidate] = {}
        self._ballots: list[Ballot] = []
        self._next_candidate_id = count(1)

    @classmethod
    def can_open(cls, url: str) -> bool:
        return url.startswith("memory://")

    @classmethod
    def open(cls, url: str, **options) -> "MemoryStore":
        return cls()

    def get_night(self, night_id: int) -> Night | None:
        return self._nights.get(night_id)

    def create_night(self, night_id: int, created_at: datetime) -> Night:
        if night_id in self._nights:
            raise DuplicateKeyError(f"Night {night_id} already exists")
        night = Night(night_id=night_id, created_at=created_at)
        self._nights[night_id] = night
        return night

    def set_night_movie(self, night_id: int, movie_ref: str | None) -> None:
        night = self._nights[night_id]
        self._nights[night_id] = Night(
            night_id=night.night_id,
            created_at=night.created_at,
            movie_ref=movie_ref,
        )

    def list_candidates(self, night_id: int) -> list[Candidate]:
        return [c for c in self._candidates.values() if c.night_id == night_id]

    def get_candidate(self, candidate_id: int) -> Candidate | None:
        return self._candidates.get(candidate_id)

    def create_candidate(
        self, night_id: int, user_id: int, movie_ref: str, title: str | None = None,
    ) -> Candidate:
        candidate = Candidate(
            candidate_id=next(self._next_candidate_id),
            night_id=night_id,
            user_id=user_id,
            movie_ref=movie_ref,
            title=title,
            created_at=datetime.now(timezone.utc),
        )
        self._candidates[candidate.candidate_id] = candidate
        return candidate

    def delete_candidate(self, candidate_id: int, owner_id: int) -> bool:
        candidate = self._candidates.get(candidate_id)
        if candidate is None or candidate.user_id != owner_id:
            return False
        del self._candidates[candidate_id]
        return True

    def list_ballots(
        self,
        user_id: int | None = None,
        candidate_ids: Iterable[int] | None = None,
    ) -> list[Ballot]:
        wanted = set(candidate_ids) if candidate_ids is not None else None
        return [
            b for b in self._ballots
            if (user_id is None or b.user_id == user_id)
            and (wanted is None or b.candidate_id in wanted)
        ]

    def delete_ballots(self, user_id: int, candidate_ids: Iterable[int]) -> None:
        doomed = set(candidate_ids)
        self._ballots = [
            b for b in self._ballots
            if not (b.user_id == user_id and b.candidate_id in doomed)
        ]

    def insert_ballots(self, ballots: Iterable[Ballot]) -> None:
        self._ballots.extend(ballots)
