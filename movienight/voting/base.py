"""Abstract base class for tally systems."""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping, Sequence

from movienight.logging import get_logger
from movienight.models import Ballot, Candidate, TallyResult

log = get_logger(__name__)


def group_by_candidate(ballots: Iterable[Ballot]) -> dict[int, list[Ballot]]:
    """Group a flat ballot list into {candidate_id: [ballots]}."""
    grouped: dict[int, list[Ballot]] = {}
    for ballot in ballots:
        grouped.setdefault(ballot.candidate_id, []).append(ballot)
    return grouped


class TallySystem(ABC):
    """Abstract base class for single-winner elimination tallies.

    Every round counts first-place ballots (rank == 1) for the remaining
    candidates. A candidate with more than half of those wins; otherwise
    the first candidate in order with the fewest is eliminated and the
    ballots are re-ranked. Subclasses only decide how ballots are re-ranked
    after an elimination.

    Ballot snapshots are tuples of frozen Ballots. Each round builds a new
    one, so the caller's ballots are never touched.
    """

    KEY: str = ""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name of this tally system."""
        pass

    @property
    def description(self) -> str:
        """Optional description of how this tally system works."""
        return ""

    def prepare(self, ballots: tuple[Ballot, ...]) -> tuple[Ballot, ...]:
        """Adjust the filtered ballots before round 1."""
        return ballots

    @abstractmethod
    def collapse(
        self, ballots: tuple[Ballot, ...], eliminated: int, eliminated_count: int,
    ) -> tuple[Ballot, ...]:
        """Return the ballot snapshot for the next round.

        Args:
            ballots: Current snapshot
            eliminated: Candidate id removed this round
            eliminated_count: First-place count it had when removed
        """
        pass

    def calculate(
        self,
        candidates: Sequence[Candidate],
        ballots_by_candidate: Mapping[int, Iterable[Ballot]],
    ) -> TallyResult:
        """Find the winner among `candidates`.

        Ballots filed under a candidate that isn't in `candidates` (e.g. a
        withdrawn submission), filed under the wrong key, or with a
        non-positive rank are ignored.

        Args:
            candidates: Candidates in tie-break order (earlier is eliminated first)
            ballots_by_candidate: {candidate_id: ballots cast for it}

        Returns:
            TallyResult whose winner is None if nobody reached a majority
        """
        remaining = list(candidates)
        known = {c.candidate_id for c in remaining}
        ballots = self.prepare(tuple(
            ballot
            for candidate_id, cast in ballots_by_candidate.items()
            if candidate_id in known
            for ballot in cast
            if ballot.candidate_id == candidate_id and ballot.rank >= 1
        ))

        rounds = []
        winner = None
        round_num = 0
        while remaining and winner is None:
            round_num += 1
            counts = self._count_first_place(ballots, remaining)
            total = sum(counts.values())
            round_info = {
                "round": round_num,
                "counts": dict(counts),
                "total": total,
                "majority_needed": total // 2 + 1,
            }

            for candidate in remaining:
                if 2 * counts[candidate.candidate_id] > total:
                    winner = candidate
                    round_info["winner"] = candidate.candidate_id
                    round_info["method"] = "majority"
                    break
            else:
                min_count = min(counts.values())
                index = next(
                    i for i, c in enumerate(remaining)
                    if counts[c.candidate_id] == min_count
                )
                eliminated = remaining.pop(index)
                round_info["eliminated"] = eliminated.candidate_id
                round_info["method"] = "elimination"
                ballots = self.collapse(ballots, eliminated.candidate_id, min_count)

            log.debug("tally_round", system=self.KEY, **round_info)
            rounds.append(round_info)

        return TallyResult(
            system_name=self.name,
            winner=winner,
            details={"rounds": rounds},
        )

    @staticmethod
    def _count_first_place(
        ballots: tuple[Ballot, ...], remaining: list[Candidate],
    ) -> dict[int, int]:
        counts = {c.candidate_id: 0 for c in remaining}
        for ballot in ballots:
            if ballot.rank == 1 and ballot.candidate_id in counts:
                counts[ballot.candidate_id] += 1
        return counts
