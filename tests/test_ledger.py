"""Tests for the submission ledger."""

from unittest.mock import patch

import pytest
from tests.conftest import at

from movienight.errors import DuplicateKeyError, NotOwner, QuotaExceeded, UnknownCandidate
from movienight.ledger import SubmissionLedger
from movienight.models import Night
from movienight.storage.memory import MemoryStore

NOW = at(2025, 3, 2)
NIGHT = 9
ALICE, BOB = 1, 2


class TestEnsureNightExists:
    def setup_method(self):
        self.store = MemoryStore()
        self.ledger = SubmissionLedger(self.store)

    def test_creates_missing_night(self):
        night = self.ledger.ensure_night_exists(NIGHT, NOW)
        assert night == Night(night_id=NIGHT, created_at=NOW)
        assert self.store.get_night(NIGHT) == night

    def test_existing_night_is_returned(self):
        self.ledger.ensure_night_exists(NIGHT, NOW)
        later = at(2025, 3, 3)
        assert self.ledger.ensure_night_exists(NIGHT, later).created_at == NOW

    def test_lost_create_race_is_success(self):
        """Another request created the night between our check and insert."""
        winner = Night(night_id=NIGHT, created_at=at(2025, 3, 2, 11))
        with patch.object(self.store, "get_night", side_effect=[None, winner]), \
                patch.object(self.store, "create_night", side_effect=DuplicateKeyError("dup")):
            assert self.ledger.ensure_night_exists(NIGHT, NOW) == winner

    def test_lost_race_before_row_is_readable(self):
        with patch.object(self.store, "get_night", return_value=None), \
                patch.object(self.store, "create_night", side_effect=DuplicateKeyError("dup")):
            night = self.ledger.ensure_night_exists(NIGHT, NOW)
        assert night.night_id == NIGHT


class TestSubmit:
    def setup_method(self):
        self.store = MemoryStore()
        self.ledger = SubmissionLedger(self.store)

    def test_submit_creates_night_and_candidate(self):
        candidate = self.ledger.submit(NIGHT, ALICE, "550", NOW, title="Fight Club")
        assert self.store.get_night(NIGHT) is not None
        assert candidate.night_id == NIGHT
        assert candidate.user_id == ALICE
        assert candidate.movie_ref == "550"
        assert candidate.label == "Fight Club"

    def test_third_submission_exceeds_quota(self):
        self.ledger.submit(NIGHT, ALICE, "550", NOW)
        self.ledger.submit(NIGHT, ALICE, "603", NOW)
        with pytest.raises(QuotaExceeded) as exc_info:
            self.ledger.submit(NIGHT, ALICE, "680", NOW)
        assert exc_info.value.limit == 2
        assert len(self.ledger.user_candidates(NIGHT, ALICE)) == 2

    def test_quota_is_per_user(self):
        self.ledger.submit(NIGHT, ALICE, "550", NOW)
        self.ledger.submit(NIGHT, ALICE, "603", NOW)
        self.ledger.submit(NIGHT, BOB, "680", NOW)
        assert len(self.ledger.candidates(NIGHT)) == 3

    def test_quota_is_per_night(self):
        self.ledger.submit(NIGHT, ALICE, "550", NOW)
        self.ledger.submit(NIGHT, ALICE, "603", NOW)
        self.ledger.submit(NIGHT + 1, ALICE, "680", NOW)
        assert len(self.ledger.user_candidates(NIGHT + 1, ALICE)) == 1

    def test_custom_quota(self):
        ledger = SubmissionLedger(self.store, max_submissions=1)
        ledger.submit(NIGHT, ALICE, "550", NOW)
        with pytest.raises(QuotaExceeded):
            ledger.submit(NIGHT, ALICE, "603", NOW)

    def test_same_movie_twice_is_allowed(self):
        first = self.ledger.submit(NIGHT, ALICE, "550", NOW)
        second = self.ledger.submit(NIGHT, BOB, "550", NOW)
        assert first.candidate_id != second.candidate_id

    def test_withdrawing_frees_quota(self):
        first = self.ledger.submit(NIGHT, ALICE, "550", NOW)
        self.ledger.submit(NIGHT, ALICE, "603", NOW)
        self.ledger.withdraw(NIGHT, first.candidate_id, ALICE)
        self.ledger.submit(NIGHT, ALICE, "680", NOW)
        assert len(self.ledger.user_candidates(NIGHT, ALICE)) == 2

    def test_lookup_fills_missing_title(self):
        candidate = self.ledger.submit(NIGHT, ALICE, "550", NOW,
                                       lookup_title=lambda ref: "Fight Club")
        assert candidate.title == "Fight Club"

    def test_lookup_skipped_when_title_given(self):
        lookups = []
        self.ledger.submit(NIGHT, ALICE, "550", NOW, title="Fight Club",
                           lookup_title=lookups.append)
        assert lookups == []

    def test_lookup_runs_after_quota_check(self):
        self.ledger.submit(NIGHT, ALICE, "550", NOW)
        self.ledger.submit(NIGHT, ALICE, "603", NOW)
        lookups = []
        with pytest.raises(QuotaExceeded):
            self.ledger.submit(NIGHT, ALICE, "680", NOW, lookup_title=lookups.append)
        assert lookups == []


class TestWithdraw:
    def setup_method(self):
        self.store = MemoryStore()
        self.ledger = SubmissionLedger(self.store)
        self.candidate = self.ledger.submit(NIGHT, ALICE, "550", NOW)

    def test_withdraw_own(self):
        self.ledger.withdraw(NIGHT, self.candidate.candidate_id, ALICE)
        assert self.ledger.candidates(NIGHT) == []

    def test_withdraw_others(self):
        with pytest.raises(NotOwner):
            self.ledger.withdraw(NIGHT, self.candidate.candidate_id, BOB)
        assert self.ledger.candidates(NIGHT) == [self.candidate]

    def test_withdraw_unknown(self):
        with pytest.raises(UnknownCandidate):
            self.ledger.withdraw(NIGHT, 999, ALICE)

    def test_withdraw_from_other_night(self):
        with pytest.raises(UnknownCandidate):
            self.ledger.withdraw(NIGHT + 1, self.candidate.candidate_id, ALICE)

    def test_withdraw_already_deleted(self):
        with patch.object(self.store, "delete_candidate", return_value=False):
            with pytest.raises(UnknownCandidate):
                self.ledger.withdraw(NIGHT, self.candidate.candidate_id, ALICE)
