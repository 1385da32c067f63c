"""Phase scheduling and night numbering.

Everything here is a pure function of the wall clock. Each participant
evaluates it independently; there is no shared signal.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from movienight.config import DEFAULT_ANCHOR_DATE
from movienight.models import Phase


def day_of_week(moment: datetime | date) -> int:
    """Day of week with 0=Sunday .. 6=Saturday."""
    return (moment.weekday() + 1) % 7


@dataclass(frozen=True)
class PhaseTable:
    """Phase for each day of the week, indexed 0=Sunday .. 6=Saturday.

    Both phase() and next_transition() read this table, so the phase shown to
    users and the time of the next change can't disagree.
    """
    days: tuple[Phase, ...]

    def __post_init__(self):
        if len(self.days) != 7:
            raise ValueError("A phase table needs exactly 7 entries")

    def phase_for(self, moment: datetime | date) -> Phase:
        return self.days[day_of_week(moment)]


DEFAULT_PHASE_TABLE = PhaseTable(days=(
    Phase.SUBMISSION,  # Sunday
    Phase.SUBMISSION,  # Monday
    Phase.VOTING,      # Tuesday
    Phase.VOTING,      # Wednesday
    Phase.WINNER,      # Thursday
    Phase.VOTING,      # Friday
    Phase.VOTING,      # Saturday
))


def phase(
    now: datetime,
    admin_override: Phase | None = None,
    table: PhaseTable = DEFAULT_PHASE_TABLE,
) -> Phase:
    """Return the phase in effect at `now`.

    An admin override replaces the computed phase outright.
    """
    if admin_override is not None:
        return Phase(admin_override)
    return table.phase_for(now)


def next_transition(
    current_phase: Phase,
    now: datetime,
    table: PhaseTable = DEFAULT_PHASE_TABLE,
) -> datetime | None:
    """Return the start of the next day whose phase differs from `current_phase`.

    The result keeps the tzinfo of `now`. Returns None if no day in the
    coming week has a different phase (e.g. a table with one phase
    everywhere), or if `current_phase` is an override the table never
    leaves.
    """
    today = now.date()
    for offset in range(1, 8):
        day = today + timedelta(days=offset)
        if table.phase_for(day) != current_phase:
            return datetime.combine(day, time.min, tzinfo=now.tzinfo)
    return None


def current_night_id(now: datetime, anchor: date = DEFAULT_ANCHOR_DATE) -> int:
    """Night number for `now`: ceil(weeks since anchor), at least 1.

    Non-decreasing in `now`. Times before the anchor all map to night 1.

    Weeks are closed at their end: the exact instant of Sunday 00:00 (the
    submission transition next_transition() reports) still belongs to the
    previous night, and the new night starts just after it. A submission
    stamped exactly on the boundary is filed under last week's night.
    """
    anchor_start = datetime.combine(anchor, time.min, tzinfo=now.tzinfo)
    weeks = (now - anchor_start) / timedelta(weeks=1)
    return max(1, math.ceil(weeks))
