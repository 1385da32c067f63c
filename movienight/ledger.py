"""Submission ledger: per-user quota and lazy night creation."""

from collections.abc import Callable
from datetime import datetime

from movienight.config import MAX_SUBMISSIONS
from movienight.errors import DuplicateKeyError, NotOwner, QuotaExceeded, UnknownCandidate
from movienight.logging import get_logger
from movienight.models import Candidate, Night
from movienight.storage.base import Store

log = get_logger(__name__)


class SubmissionLedger:
    """Records movie submissions against a store.

    Args:
        store: Where nights and submissions live
        max_submissions: Live submissions allowed per user per night
    """

    def __init__(self, store: Store, max_submissions: int = MAX_SUBMISSIONS):
        self.store = store
        self.max_submissions = max_submissions

    def ensure_night_exists(self, night_id: int, now: datetime) -> Night:
        """Return the night, creating it if this is its first submission.

        Two first submissions can race here. Whoever loses gets a
        DuplicateKeyError from the store, which just means the night exists.
        """
        night = self.store.get_night(night_id)
        if night is not None:
            return night

        try:
            night = self.store.create_night(night_id, now)
        except DuplicateKeyError:
            log.info("night_create_raced", night_id=night_id)
            night = self.store.get_night(night_id)
            if night is None:
                # Duplicate reported but not readable yet; the row is there.
                return Night(night_id=night_id, created_at=now)
            return night

        log.info("night_created", night_id=night_id)
        return night

    def candidates(self, night_id: int) -> list[Candidate]:
        return self.store.list_candidates(night_id)

    def user_candidates(self, night_id: int, user_id: int) -> list[Candidate]:
        return [c for c in self.store.list_candidates(night_id) if c.user_id == user_id]

    def submit(
        self,
        night_id: int,
        user_id: int,
        movie_ref: str,
        now: datetime,
        title: str | None = None,
        lookup_title: Callable[[str], str | None] | None = None,
    ) -> Candidate:
        """Submit a movie for the night.

        The same movie may be submitted more than once; each submission is a
        separate candidate.

        Args:
            lookup_title: Called with movie_ref to fill in a missing title,
                only once the quota check has passed

        Raises:
            QuotaExceeded: If the user already has max_submissions live candidates
        """
        self.ensure_night_exists(night_id, now)

        if len(self.user_candidates(night_id, user_id)) >= self.max_submissions:
            log.info("submission_rejected", night_id=night_id, user_id=user_id,
                     reason="quota")
            raise QuotaExceeded(user_id, night_id, self.max_submissions)

        if title is None and lookup_title is not None:
            title = lookup_title(movie_ref)

        candidate = self.store.create_candidate(night_id, user_id, movie_ref, title)
        log.info("candidate_submitted", night_id=night_id, user_id=user_id,
                 candidate_id=candidate.candidate_id, movie_ref=movie_ref)
        return candidate

    def withdraw(self, night_id: int, candidate_id: int, user_id: int) -> None:
        """Withdraw the user's own submission.

        Ballots already cast for it stay in the store; the tally skips them.

        Raises:
            UnknownCandidate: If no such candidate exists in the night
            NotOwner: If the candidate belongs to someone else
        """
        candidate = self.store.get_candidate(candidate_id)
        if candidate is None or candidate.night_id != night_id:
            raise UnknownCandidate(f"No submission {candidate_id} in night {night_id}")
        if candidate.user_id != user_id:
            raise NotOwner(f"Submission {candidate_id} belongs to another user")

        if not self.store.delete_candidate(candidate_id, user_id):
            # Already gone by the time the delete ran.
            raise UnknownCandidate(f"No submission {candidate_id} in night {night_id}")
        log.info("candidate_withdrawn", night_id=night_id, user_id=user_id,
                 candidate_id=candidate_id)
