"""Orchestrator: phase-gated operations for the active movie night."""

from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Any

from movienight import phases
from movienight.config import Settings
from movienight.errors import InvalidPhase, MetadataError, StorageError
from movienight.ledger import SubmissionLedger
from movienight.logging import get_logger
from movienight.metadata.base import CandidateMetadata
from movienight.models import Ballot, Candidate, Outcome, Phase
from movienight.ranking import RankingEditor, reorder, submit_ranking
from movienight.storage import detect_store, get_supported_store_urls
from movienight.storage.base import Store
from movienight.voting import get_tally_system
from movienight.voting.base import TallySystem, group_by_candidate

# Import tally systems and stores to register them
from movienight.storage import memory  # noqa: F401
from movienight.storage import supabase  # noqa: F401
from movienight.voting import irv  # noqa: F401
from movienight.voting import legacy  # noqa: F401

log = get_logger(__name__)


def open_store(settings: Settings) -> Store:
    """Open the store named by settings.store_url.

    Raises:
        StorageError: If no registered store handles the URL
    """
    store_class = detect_store(settings.store_url)
    if store_class is None:
        raise StorageError(
            f"Unsupported store URL: {settings.store_url}\n{get_supported_store_urls()}"
        )
    return store_class.open(
        settings.store_url,
        api_key=settings.supabase_key,
        timeout=settings.http_timeout,
    )


class MovieNight:
    """Everything a request needs to act on the active night.

    The phase, night id, candidates and ballots are worked out fresh on
    every call; only the admin override is held between calls.

    Args:
        settings: Runtime settings
        store: Store to use; opened from settings.store_url when omitted
        clock: Returns the current time; defaults to now in settings.timezone
        metadata: Optional movie lookup, used to fill in titles on submit
        table: Day-of-week phase table
    """

    def __init__(
        self,
        settings: Settings,
        store: Store | None = None,
        clock: Callable[[], datetime] | None = None,
        metadata: CandidateMetadata | None = None,
        table: phases.PhaseTable = phases.DEFAULT_PHASE_TABLE,
    ):
        self.settings = settings
        self.store = store if store is not None else open_store(settings)
        self.clock = clock or (lambda: datetime.now(settings.tz))
        self.metadata = metadata
        self.table = table
        self.override: Phase | None = settings.phase_override
        self.ledger = SubmissionLedger(self.store, settings.max_submissions)
        self.tally_system: TallySystem = get_tally_system(settings.tally_method)

    # --- phase and night ---

    def set_override(self, phase: Phase | str) -> None:
        """Force a phase until clear_override() is called."""
        self.override = Phase(phase)
        log.warning("phase_override_set", phase=self.override.value)

    def clear_override(self) -> None:
        self.override = None
        log.info("phase_override_cleared")

    def current_phase(self) -> Phase:
        return phases.phase(self.clock(), self.override, self.table)

    def current_night_id(self) -> int:
        return phases.current_night_id(self.clock(), self.settings.anchor_date)

    def next_transition(self) -> datetime | None:
        """When the phase next changes, or None while an override is set."""
        if self.override is not None:
            return None
        now = self.clock()
        return phases.next_transition(phases.phase(now, table=self.table), now, self.table)

    def _require(self, operation: str, allowed: Phase) -> None:
        current = self.current_phase()
        if current != allowed:
            raise InvalidPhase(operation, current, allowed)

    # --- submissions ---

    def submit(self, user_id: int, movie_ref: str, title: str | None = None) -> Candidate:
        """Submit a movie for the active night.

        When no title is given and a metadata provider is set, the title is
        looked up once the quota check has passed. A failed lookup leaves the
        candidate untitled rather than rejecting it.
        """
        self._require("submit a movie", Phase.SUBMISSION)
        lookup = None
        if title is None and self.metadata is not None:
            lookup = self._lookup_title
        return self.ledger.submit(
            self.current_night_id(), user_id, movie_ref, self.clock(),
            title=title, lookup_title=lookup,
        )

    def _lookup_title(self, movie_ref: str) -> str | None:
        try:
            return self.metadata.fetch_details(movie_ref).title
        except MetadataError as e:
            log.warning("title_lookup_failed", movie_ref=movie_ref, error=str(e))
            return None

    def withdraw(self, user_id: int, candidate_id: int) -> None:
        self._require("withdraw a movie", Phase.SUBMISSION)
        self.ledger.withdraw(self.current_night_id(), candidate_id, user_id)

    def candidates(self) -> list[Candidate]:
        return self.ledger.candidates(self.current_night_id())

    # --- ranking ---

    @staticmethod
    def reorder(items: Sequence[Any], from_index: int, to_index: int) -> list[Any]:
        return reorder(items, from_index, to_index)

    def editor(self, user_id: int) -> RankingEditor:
        """A ranking editor for the user, seeded with their current ordering."""
        self._require("rank movies", Phase.VOTING)
        editor = RankingEditor(self.store, user_id, self.current_night_id())
        editor.load()
        return editor

    def submit_ranking(self, user_id: int, ordering: Sequence[int]) -> list[Ballot]:
        self._require("rank movies", Phase.VOTING)
        return submit_ranking(self.store, user_id, self.current_night_id(), ordering)

    # --- outcome ---

    def tally(self, night_id: int) -> Outcome:
        """Tally a night from a fresh snapshot of the store. Not phase-gated."""
        candidates = self.store.list_candidates(night_id)
        ballots = self.store.list_ballots(candidate_ids=[c.candidate_id for c in candidates])
        result = self.tally_system.calculate(candidates, group_by_candidate(ballots))
        log.info(
            "night_tallied",
            night_id=night_id,
            system=self.tally_system.KEY,
            winner=result.winner.candidate_id if result.winner else None,
            rounds=len(result.rounds),
        )
        return Outcome(night_id=night_id, result=result, candidates=candidates)

    def reveal(self) -> Outcome:
        """Tally the active night and record the decided movie on it."""
        self._require("see the winner", Phase.WINNER)
        night_id = self.current_night_id()
        outcome = self.tally(night_id)
        if outcome.winner is not None and self.store.get_night(night_id) is not None:
            self.store.set_night_movie(night_id, outcome.winner.movie_ref)
        return outcome

    def status(self) -> dict[str, Any]:
        """What a participant's screen needs right now.

        Read-only: in the winner phase the outcome is tallied but not
        recorded on the night; that is reveal()'s job.
        """
        current = self.current_phase()
        transition = self.next_transition()
        candidates = sorted(
            self.candidates(),
            key=lambda c: (c.created_at is not None, c.created_at, c.candidate_id),
            reverse=True,
        )
        status = {
            "phase": current.value,
            "night_id": self.current_night_id(),
            "next_transition": transition.isoformat() if transition else None,
            "override": self.override is not None,
            "submissions": [c.to_dict() for c in candidates],
        }
        if current == Phase.WINNER:
            status["outcome"] = self.tally(self.current_night_id()).to_dict()
        return status
