"""Shared test helpers."""

from datetime import datetime, timezone

from movienight.models import Ballot, Candidate, TallyResult
from movienight.voting.base import group_by_candidate

# Candidate ids used across tally tests
A, B, C, D = 1, 2, 3, 4


def make_candidates(*ids: int, night_id: int = 1) -> list[Candidate]:
    """Build candidates with the given ids, in that order."""
    return [
        Candidate(candidate_id=i, night_id=night_id, user_id=100 + i, movie_ref=f"movie-{i}")
        for i in ids
    ]


def make_ballots(rankings: list[list[int]]) -> dict[int, list[Ballot]]:
    """Build {candidate_id: ballots} from one ordering per voter.

    Args:
        rankings: [[candidate_id, ...], ...], most preferred first. Voter
            user ids are 1, 2, 3, ... in list order.
    """
    ballots = [
        Ballot(candidate_id=candidate_id, user_id=voter, rank=rank)
        for voter, ordering in enumerate(rankings, start=1)
        for rank, candidate_id in enumerate(ordering, start=1)
    ]
    return group_by_candidate(ballots)


def winner_id(result: TallyResult) -> int | None:
    return result.winner.candidate_id if result.winner else None


def at(year: int, month: int, day: int, hour: int = 12, minute: int = 0) -> datetime:
    """A UTC datetime; noon by default."""
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)
