"""Ranking editor: a user's working ordering and ballot replacement."""

from collections.abc import Sequence
from typing import TypeVar

from movienight.errors import InvalidRanking, PartialReplacementFailure, StorageError
from movienight.logging import get_logger
from movienight.models import Ballot, Candidate
from movienight.storage.base import Store

log = get_logger(__name__)

T = TypeVar("T")


def reorder(items: Sequence[T], from_index: int, to_index: int) -> list[T]:
    """Move the item at `from_index` so it ends up at `to_index`.

    Returns a new list; `items` is left alone.

    Raises:
        IndexError: If either index is outside the list
    """
    size = len(items)
    for index in (from_index, to_index):
        if not 0 <= index < size:
            raise IndexError(f"Index {index} out of range for {size} items")
    moved = list(items)
    item = moved.pop(from_index)
    moved.insert(to_index, item)
    return moved


def materialize(candidate_ids: Sequence[int]) -> list[tuple[int, int]]:
    """Turn an ordering into (candidate_id, rank) pairs, ranks 1..k."""
    return [(candidate_id, position + 1) for position, candidate_id in enumerate(candidate_ids)]


def submitted_ordering(store: Store, user_id: int, candidates: Sequence[Candidate]) -> list[int]:
    """The user's last submitted ordering for these candidates, best first."""
    ids = [c.candidate_id for c in candidates]
    ballots = store.list_ballots(user_id=user_id, candidate_ids=ids)
    return [b.candidate_id for b in sorted(ballots, key=lambda b: b.rank)]


def submit_ranking(
    store: Store,
    user_id: int,
    night_id: int,
    ordering: Sequence[int],
) -> list[Ballot]:
    """Replace all of the user's ballots for the night with `ordering`.

    The store gives us no transaction, so this deletes then inserts. If the
    insert fails the previous ballots are put back where possible, and the
    caller gets PartialReplacementFailure either way.

    Args:
        ordering: Candidate ids, most preferred first. Needn't cover every
            candidate in the night.

    Returns:
        The ballots now stored for the user

    Raises:
        InvalidRanking: If the ordering repeats a candidate or names one
            that isn't in the night
        PartialReplacementFailure: If the old ballots were deleted but the
            new ones could not be written
        StorageUnavailable: If the store fails before anything changed
    """
    night_ids = [c.candidate_id for c in store.list_candidates(night_id)]

    if len(set(ordering)) != len(ordering):
        raise InvalidRanking("Each movie can only be ranked once")
    unknown = [cid for cid in ordering if cid not in night_ids]
    if unknown:
        raise InvalidRanking(f"Not submitted for night {night_id}: {unknown}")

    ballots = [
        Ballot(candidate_id=candidate_id, user_id=user_id, rank=rank)
        for candidate_id, rank in materialize(ordering)
    ]

    previous = store.list_ballots(user_id=user_id, candidate_ids=night_ids)
    store.delete_ballots(user_id, night_ids)
    try:
        store.insert_ballots(ballots)
    except StorageError as e:
        log.error("ballot_insert_failed", user_id=user_id, night_id=night_id, error=str(e))
        restored = _restore(store, previous)
        raise PartialReplacementFailure(user_id, night_id, restored) from e

    log.info("ballots_replaced", user_id=user_id, night_id=night_id,
             ranked=len(ballots), replaced=len(previous))
    return ballots


def _restore(store: Store, previous: list[Ballot]) -> bool:
    if not previous:
        return True
    try:
        store.insert_ballots(previous)
    except StorageError as e:
        log.error("ballot_restore_failed", error=str(e))
        return False
    return True


class RankingEditor:
    """One user's working ordering over the night's candidates.

    Nothing is cached between calls beyond the working list itself; load()
    re-reads candidates and ballots from the store.
    """

    def __init__(self, store: Store, user_id: int, night_id: int):
        self.store = store
        self.user_id = user_id
        self.night_id = night_id
        self.ordering: list[int] = []

    def load(self) -> list[int]:
        """Seed the working list.

        Uses the user's last submitted ranking if they have one, otherwise
        every current candidate in store order.
        """
        candidates = self.store.list_candidates(self.night_id)
        ordering = submitted_ordering(self.store, self.user_id, candidates)
        if not ordering:
            ordering = [c.candidate_id for c in candidates]
        self.ordering = ordering
        return list(self.ordering)

    def move(self, from_index: int, to_index: int) -> list[int]:
        self.ordering = reorder(self.ordering, from_index, to_index)
        return list(self.ordering)

    def materialize(self) -> list[tuple[int, int]]:
        return materialize(self.ordering)

    def submit(self) -> list[Ballot]:
        return submit_ranking(self.store, self.user_id, self.night_id, self.ordering)
