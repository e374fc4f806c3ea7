"""
Month-partition fetch cache behind the calendar view.

State only changes through ``calendar_reducer``. Records are merged
first-seen-wins by id, so a record edited server-side after its month was
fetched keeps the cached version even if a later fetch of a neighbouring
month returns it again. Marking a month fetched is a separate action the
caller dispatches after a successful fetch; the reducer never gates fetches.
"""

import calendar
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import Optional, Union

from collections_utils import merge_unique_by_id
from config import DATE_FORMAT, MONTH_KEY_FORMAT, _today_local


@dataclass(frozen=True)
class CalendarCacheState:
    workouts: tuple = ()
    pain_scores: tuple = ()
    sleep_scores: tuple = ()
    loading: bool = True
    error: Optional[str] = None
    current_month: date = field(default_factory=_today_local)
    fetched_months: frozenset = frozenset()


@dataclass(frozen=True)
class SetLoading:
    value: bool


@dataclass(frozen=True)
class SetError:
    message: Optional[str]


@dataclass(frozen=True)
class SetMonth:
    month: date


@dataclass(frozen=True)
class AppendMonthData:
    month_key: str
    workouts: tuple = ()
    pain_scores: tuple = ()
    sleep_scores: tuple = ()


@dataclass(frozen=True)
class MarkMonthFetched:
    month_key: str


CalendarAction = Union[SetLoading, SetError, SetMonth, AppendMonthData, MarkMonthFetched]


def create_initial_calendar_state(today: Optional[date] = None) -> CalendarCacheState:
    return CalendarCacheState(current_month=today or _today_local())


def calendar_reducer(state: CalendarCacheState, action: CalendarAction) -> CalendarCacheState:
    if isinstance(action, SetLoading):
        return replace(state, loading=action.value)
    if isinstance(action, SetError):
        return replace(state, error=action.message)
    if isinstance(action, SetMonth):
        return replace(state, current_month=action.month)
    if isinstance(action, AppendMonthData):
        return replace(
            state,
            workouts=tuple(merge_unique_by_id(state.workouts, action.workouts)),
            pain_scores=tuple(merge_unique_by_id(state.pain_scores, action.pain_scores)),
            sleep_scores=tuple(merge_unique_by_id(state.sleep_scores, action.sleep_scores)),
        )
    if isinstance(action, MarkMonthFetched):
        if action.month_key in state.fetched_months:
            return state
        return replace(state, fetched_months=state.fetched_months | {action.month_key})
    return state


# ── Month arithmetic ─────────────────────────────────────────────────────────

def month_key(d: date) -> str:
    return d.strftime(MONTH_KEY_FORMAT)


def parse_month_key(key: str) -> date:
    year, month = key.split("-", 1)
    return date(int(year), int(month), 1)


def add_months(d: date, delta: int) -> date:
    """Shift by whole months, rolling the year and clamping the day."""
    index = d.year * 12 + (d.month - 1) + delta
    year, month = divmod(index, 12)
    month += 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def month_bounds(d: date) -> tuple[str, str]:
    """Inclusive first/last day of the month containing ``d``, as YYYY-MM-DD."""
    first = d.replace(day=1)
    last = d.replace(day=calendar.monthrange(d.year, d.month)[1])
    return first.strftime(DATE_FORMAT), last.strftime(DATE_FORMAT)


def month_keys_for_week(week_start: date) -> list[str]:
    """Month partitions touched by the seven days starting at ``week_start``."""
    keys = []
    for offset in (0, 6):
        key = month_key(week_start + timedelta(days=offset))
        if key not in keys:
            keys.append(key)
    return keys
