"""Instant Runoff Voting (IRV) tally."""

from dataclasses import replace
from itertools import groupby

from movienight.models import Ballot
from movienight.voting import register_tally_system
from movienight.voting.base import TallySystem


def compact_ranks(ballots: tuple[Ballot, ...]) -> tuple[Ballot, ...]:
    """Renumber each voter's ballots to 1..k, keeping their relative order.

    If a voter has several ballots for the same candidate only the best
    ranked one is kept.
    """
    def voter_key(b: Ballot):
        return (b.user_id, b.rank)

    compacted = []
    for _, own in groupby(sorted(ballots, key=voter_key), key=lambda b: b.user_id):
        seen = set()
        rank = 0
        for ballot in own:
            if ballot.candidate_id in seen:
                continue
            seen.add(ballot.candidate_id)
            rank += 1
            compacted.append(ballot if ballot.rank == rank else replace(ballot, rank=rank))
    return tuple(compacted)


@register_tally_system
class InstantRunoffSystem(TallySystem):
    """Standard Instant Runoff Voting.

    Each voter's ballot counts for their highest-ranked remaining candidate:
    1. Count first-choice votes among remaining candidates
    2. If someone has a majority (>50%), they win
    3. Otherwise, eliminate the candidate with fewest votes (the earliest
       submitted one on a tie), strike it from every ballot, and move each
       voter's later choices up
    4. Repeat until a majority winner emerges or nobody is left

    Voters who only ranked eliminated candidates drop out of the count, so
    the majority is of the ballots still in play.
    """

    KEY = "irv"

    @property
    def name(self) -> str:
        return "Instant Runoff"

    @property
    def description(self) -> str:
        return "Eliminate the least-preferred movie and move its voters to their next choice"

    def prepare(self, ballots: tuple[Ballot, ...]) -> tuple[Ballot, ...]:
        # Ballots for withdrawn movies are already gone; close the gaps they left.
        return compact_ranks(ballots)

    def collapse(
        self, ballots: tuple[Ballot, ...], eliminated: int, eliminated_count: int,
    ) -> tuple[Ballot, ...]:
        return compact_ranks(tuple(b for b in ballots if b.candidate_id != eliminated))
