"""Tally that reproduces the first movie-night app's re-ranking rule."""

from dataclasses import replace

from movienight.models import Ballot
from movienight.voting import register_tally_system
from movienight.voting.base import TallySystem


@register_tally_system
class LegacyRunoffSystem(TallySystem):
    """Elimination runoff with the original count-based re-ranking.

    Rounds work like Instant Runoff, but after an elimination every ballot
    whose rank is greater than the eliminated movie's first-place count
    moves up by one. That compares a vote count against a rank position,
    so voters don't always move to their next choice. Kept so that past
    nights can be recounted the way they were decided.
    """

    KEY = "legacy"

    @property
    def name(self) -> str:
        return "Legacy Runoff"

    @property
    def description(self) -> str:
        return "Runoff as decided by the first version of the app"

    def collapse(
        self, ballots: tuple[Ballot, ...], eliminated: int, eliminated_count: int,
    ) -> tuple[Ballot, ...]:
        return tuple(
            replace(b, rank=b.rank - 1) if b.rank > eliminated_count else b
            for b in ballots
        )
