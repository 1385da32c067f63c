"""Core data models for nights, submissions, ballots and tally outcomes."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class Phase(str, Enum):
    """The currently legal operation set for a night."""
    SUBMISSION = "submission"
    VOTING = "voting"
    WINNER = "winner"


@dataclass(frozen=True)
class User:
    """A participant. Identity is issued elsewhere; we only keep references."""
    user_id: int
    name: str
    email: str | None = None


@dataclass(frozen=True)
class Night:
    """One weekly tally cycle.

    Attributes:
        night_id: Week number since the anchor date (1-indexed)
        created_at: When the night row was first created
        movie_ref: External movie id of the decided movie, once revealed
    """
    night_id: int
    created_at: datetime
    movie_ref: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "night_id": self.night_id,
            "created_at": self.created_at.isoformat(),
            "movie_ref": self.movie_ref,
        }


@dataclass(frozen=True)
class Candidate:
    """A movie submitted by one user for one night.

    Attributes:
        candidate_id: Store-assigned submission id
        night_id: Night this candidate competes in
        user_id: Submitting user
        movie_ref: Opaque external movie identifier
        title: Cached display title, if known at submission time
        created_at: Submission timestamp
    """
    candidate_id: int
    night_id: int
    user_id: int
    movie_ref: str
    title: str | None = None
    created_at: datetime | None = None

    @property
    def label(self) -> str:
        return self.title or self.movie_ref

    def to_dict(self) -> dict[str, Any]:
        return {
            "candidate_id": self.candidate_id,
            "night_id": self.night_id,
            "user_id": self.user_id,
            "movie_ref": self.movie_ref,
            "title": self.title,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class Ballot:
    """One user's rank for one candidate (1 = most preferred)."""
    candidate_id: int
    user_id: int
    rank: int


@dataclass
class TallyResult:
    """Result from a tally system.

    Attributes:
        system_name: Human-readable name of the tally system
        winner: The winning candidate, or None when nobody won
        details: Per-round counts and eliminations for auditing
    """
    system_name: str
    winner: Candidate | None
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def rounds(self) -> list[dict[str, Any]]:
        return self.details.get("rounds", [])

    def eliminated(self) -> list[int]:
        """Candidate ids in the order they were eliminated."""
        return [r["eliminated"] for r in self.rounds if "eliminated" in r]


@dataclass
class Outcome:
    """The derived result of a night: a winner or no winner."""
    night_id: int
    result: TallyResult
    candidates: list[Candidate]

    @property
    def winner(self) -> Candidate | None:
        return self.result.winner

    def to_dict(self) -> dict[str, Any]:
        return {
            "night_id": self.night_id,
            "system_name": self.result.system_name,
            "winner": self.winner.to_dict() if self.winner else None,
            "candidates": [c.to_dict() for c in self.candidates],
            "details": self.result.details,
        }
