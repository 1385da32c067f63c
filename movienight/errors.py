"""Exceptions raised by the decision engine and its collaborators."""

from movienight.models import Phase


class MovieNightError(Exception):
    """Base class for every error the engine raises on purpose."""
    pass


class QuotaExceeded(MovieNightError):
    """The user already has the maximum number of submissions this night."""

    def __init__(self, user_id: int, night_id: int, limit: int):
        self.user_id = user_id
        self.night_id = night_id
        self.limit = limit
        super().__init__(
            f"User {user_id} already has {limit} submissions for night {night_id}"
        )


class InvalidPhase(MovieNightError):
    """An operation was attempted outside the phase it is allowed in."""

    def __init__(self, operation: str, current: Phase, allowed: Phase):
        self.operation = operation
        self.current = current
        self.allowed = allowed
        super().__init__(
            f"Can't {operation} during the {current.value} phase; "
            f"wait for the {allowed.value} phase"
        )


class InvalidRanking(MovieNightError, ValueError):
    """A submitted ordering references unknown or repeated candidates."""
    pass


class UnknownCandidate(MovieNightError):
    """The candidate does not exist (or not in the active night)."""
    pass


class NotOwner(MovieNightError):
    """A user tried to withdraw somebody else's submission."""
    pass


class PartialReplacementFailure(MovieNightError):
    """Ballots were deleted but the new set could not be inserted.

    Attributes:
        restored: Whether the previous ballots were put back. When False the
            user has no ballots for the night until they resubmit.
    """

    def __init__(self, user_id: int, night_id: int, restored: bool):
        self.user_id = user_id
        self.night_id = night_id
        self.restored = restored
        state = "your previous ranking was kept" if restored else "you have no ranking saved"
        super().__init__(
            f"Saving the ranking for night {night_id} failed ({state}); please submit it again"
        )


class StorageError(MovieNightError):
    """Error reported by a store."""
    pass


class StorageUnavailable(StorageError):
    """The store could not be reached or failed server-side."""
    pass


class DuplicateKeyError(StorageError):
    """A row with the same primary key already exists."""
    pass


class MetadataError(MovieNightError):
    """Movie metadata lookup failed."""
    pass
