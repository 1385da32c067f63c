"""Shared fixtures for tally system tests."""

import pytest
from tests.conftest import A, B, C, make_ballots, make_candidates


@pytest.fixture
def abc():
    return make_candidates(A, B, C)


@pytest.fixture
def clear_majority():
    """A has 3 of 5 first choices.

        V1  A B C
        V2  A C B
        V3  A B
        V4  B A C
        V5  C B A
    """
    return make_ballots([
        [A, B, C],
        [A, C, B],
        [A, B],
        [B, A, C],
        [C, B, A],
    ])


@pytest.fixture
def five_three_two_to_b():
    """First choices A=5, B=3, C=2; C's voters prefer B over A.

        5 x  A B C
        3 x  B C A
        2 x  C B A
    """
    return make_ballots(
        [[A, B, C]] * 5
        + [[B, C, A]] * 3
        + [[C, B, A]] * 2
    )


@pytest.fixture
def five_three_two_to_a():
    """First choices A=5, B=3, C=2; C's voters prefer A over B.

        5 x  A B C
        3 x  B C A
        2 x  C A B
    """
    return make_ballots(
        [[A, B, C]] * 5
        + [[B, C, A]] * 3
        + [[C, A, B]] * 2
    )


@pytest.fixture
def unranked_third():
    """Nobody ranks C first; A and B split evenly.

        2 x  A C
        2 x  B C
    """
    return make_ballots(
        [[A, C]] * 2
        + [[B, C]] * 2
    )
