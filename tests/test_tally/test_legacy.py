"""Tests for the legacy count-based runoff."""

from tests.conftest import A, B, C, make_ballots, make_candidates, winner_id

from movienight.models import Ballot
from movienight.voting.irv import InstantRunoffSystem
from movienight.voting.legacy import LegacyRunoffSystem


class TestLegacyRunoff:
    def setup_method(self):
        self.system = LegacyRunoffSystem()

    def test_name(self):
        assert self.system.name == "Legacy Runoff"
        assert self.system.KEY == "legacy"

    def test_no_candidates(self):
        assert self.system.calculate([], {}).winner is None

    def test_majority_wins_immediately(self, abc, clear_majority):
        result = self.system.calculate(abc, clear_majority)
        assert winner_id(result) == A
        assert len(result.rounds) == 1

    def test_five_three_two(self, abc, five_three_two_to_b):
        """Ranks above C's count (2) move up, so the 2 C voters' A moves to 2.

        Round 1: A=5, B=3, C=2. Eliminate C; decrement every rank > 2.
        Round 2: rank-1 ballots are A=5, B=3 (C voters' B stays at 2).
                 5 > 8/2, A wins.
        """
        result = self.system.calculate(abc, five_three_two_to_b)
        assert result.eliminated() == [C]
        assert result.rounds[1]["counts"] == {A: 5, B: 3}
        assert winner_id(result) == A

    def test_five_three_two_differs_from_irv(self, abc, five_three_two_to_b):
        """The same night goes to B under standard IRV."""
        irv = InstantRunoffSystem().calculate(abc, five_three_two_to_b)
        legacy = self.system.calculate(abc, five_three_two_to_b)
        assert winner_id(irv) == B
        assert winner_id(legacy) == A

    def test_zero_count_elimination_shifts_every_rank(self, abc, unranked_third):
        """Eliminating a zero-vote movie moves every ballot up one place.

        Round 1: A=2, B=2, C=0. Eliminate C; every rank > 0 drops by one,
                 so first choices fall to rank 0 and nobody has a rank-1 ballot.
        Round 2: A=0, B=0. Eliminate A.
        Round 3: B=0. Eliminate B. No winner.
        """
        result = self.system.calculate(abc, unranked_third)
        assert result.rounds[1]["counts"] == {A: 0, B: 0}
        assert result.eliminated() == [C, A, B]
        assert result.winner is None

        irv = InstantRunoffSystem().calculate(abc, unranked_third)
        assert winner_id(irv) == B

    def test_single_candidate_without_ballots(self):
        result = self.system.calculate(make_candidates(A), {})
        assert result.winner is None
        assert result.eliminated() == [A]

    def test_elimination_tie_takes_earliest(self):
        ballots = make_ballots([[C], [C], [A, C], [B, C]])
        result = self.system.calculate(make_candidates(C, B, A), ballots)
        assert result.eliminated()[0] == B

    def test_orphan_ballots_ignored(self, abc):
        ballots = make_ballots([[9], [9], [9], [A], [B, A]])
        result = self.system.calculate(abc, ballots)
        assert result.rounds[0]["counts"] == {A: 1, B: 1, C: 0}

    def test_does_not_modify_ballots(self, abc, five_three_two_to_b):
        ranks_before = sorted(
            (b.user_id, b.candidate_id, b.rank)
            for cast in five_three_two_to_b.values() for b in cast
        )
        self.system.calculate(abc, five_three_two_to_b)
        ranks_after = sorted(
            (b.user_id, b.candidate_id, b.rank)
            for cast in five_three_two_to_b.values() for b in cast
        )
        assert ranks_before == ranks_after

    def test_collapse(self):
        ballots = (
            Ballot(candidate_id=A, user_id=1, rank=1),
            Ballot(candidate_id=B, user_id=1, rank=2),
            Ballot(candidate_id=C, user_id=1, rank=3),
        )
        result = self.system.collapse(ballots, eliminated=C, eliminated_count=1)
        assert [b.rank for b in result] == [1, 1, 2]
