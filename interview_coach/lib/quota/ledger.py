"""Daily quota ledger: the reset rule and the consume step.

The ledger day is the UTC calendar date. A user's count resets lazily: the
first consume on a day strictly later than ``last_call_date`` starts again
from zero. Nothing runs on a schedule.
"""

from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from ..exceptions import QuotaExceededError


@dataclass(frozen=True)
class QuotaState:
    """Snapshot of one user's ledger row.

    Attributes:
        user_id: Owner of the ledger
        call_count: Calls consumed on ``last_call_date``
        last_call_date: Day of the most recent successful call, None if never
    """

    user_id: str
    call_count: int = 0
    last_call_date: Optional[date] = None

    @classmethod
    def initial(cls, user_id: str) -> "QuotaState":
        """Implicit state for a user without a stored ledger row."""
        return cls(user_id=user_id)


def quota_today() -> date:
    """Current quota day (UTC calendar date)."""
    return datetime.now(timezone.utc).date()


def next_reset(today: date) -> date:
    return today + timedelta(days=1)


def effective_count(state: QuotaState, today: date) -> int:
    """Calls already consumed on ``today``.

    Compares calendar days, not elapsed time: a call at 23:59 and one at 00:01
    the next day fall on different quota days.
    """
    if state.last_call_date is None or today > state.last_call_date:
        return 0
    return state.call_count


def remaining(state: QuotaState, today: date, limit: int) -> int:
    return max(limit - effective_count(state, today), 0)


def try_consume(state: QuotaState, today: date, limit: int) -> QuotaState:
    """Return the state after consuming one call on ``today``.

    Raises:
        QuotaExceededError: ``limit`` calls were already consumed today. The
            given state is left as it was.
    """
    used = effective_count(state, today)
    if used >= limit:
        raise QuotaExceededError(
            f"Daily limit of {limit} feedback requests reached. Please try again tomorrow.",
            limit=limit,
            used=used,
        )
    # A stale clock never moves the ledger day backwards
    ledger_day = today
    if state.last_call_date is not None and state.last_call_date > today:
        ledger_day = state.last_call_date
    return replace(state, call_count=used + 1, last_call_date=ledger_day)
