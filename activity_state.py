"""
Paginated activity feed state.

One ``AppendData`` is one page, whatever it holds: the offset counts pages
(months on the server side), not items. Filters never drop stored items;
``visible_items`` applies them at render time.
"""

from dataclasses import dataclass, replace
from typing import Optional, Union

from collections_utils import merge_unique_by_key
from models import PAIN_SCORE, SLEEP_SCORE, WORKOUT, activity_key

FILTER_KINDS = ("workouts", "pain_scores", "sleep_scores")
FILTER_FOR_TYPE = {WORKOUT: "workouts", PAIN_SCORE: "pain_scores", SLEEP_SCORE: "sleep_scores"}


@dataclass(frozen=True)
class ActivityFeedState:
    items: tuple = ()
    loading: bool = True
    error: Optional[str] = None
    offset: int = 0
    is_loading_more: bool = False
    total_count: int = 0
    show_workouts: bool = True
    show_pain_scores: bool = True
    show_sleep_scores: bool = True
    is_deleting: Optional[tuple] = None  # (type, id)
    fab_open: bool = False
    month_label: Optional[str] = None


@dataclass(frozen=True)
class SetLoading:
    value: bool


@dataclass(frozen=True)
class SetError:
    message: Optional[str]


@dataclass(frozen=True)
class SetLoadingMore:
    value: bool


@dataclass(frozen=True)
class SetFabOpen:
    value: bool


@dataclass(frozen=True)
class SetDeleting:
    target: Optional[tuple]


@dataclass(frozen=True)
class ToggleFilter:
    kind: str


@dataclass(frozen=True)
class ShowAllFilters:
    pass


@dataclass(frozen=True)
class LoadInitialData:
    items: tuple
    total: int
    month_label: Optional[str] = None


@dataclass(frozen=True)
class AppendData:
    items: tuple
    total: Optional[int] = None
    month_label: Optional[str] = None


@dataclass(frozen=True)
class DeleteItem:
    type: str
    id: int


ActivityAction = Union[
    SetLoading, SetError, SetLoadingMore, SetFabOpen, SetDeleting,
    ToggleFilter, ShowAllFilters, LoadInitialData, AppendData, DeleteItem,
]


def create_initial_activity_state() -> ActivityFeedState:
    return ActivityFeedState()


def activity_reducer(state: ActivityFeedState, action: ActivityAction) -> ActivityFeedState:
    if isinstance(action, SetLoading):
        return replace(state, loading=action.value)
    if isinstance(action, SetError):
        return replace(state, error=action.message)
    if isinstance(action, SetLoadingMore):
        return replace(state, is_loading_more=action.value)
    if isinstance(action, SetFabOpen):
        return replace(state, fab_open=action.value)
    if isinstance(action, SetDeleting):
        return replace(state, is_deleting=action.target)
    if isinstance(action, ToggleFilter):
        if action.kind not in FILTER_KINDS:
            return state
        attr = f"show_{action.kind}"
        return replace(state, **{attr: not getattr(state, attr)})
    if isinstance(action, ShowAllFilters):
        return replace(state, show_workouts=True, show_pain_scores=True, show_sleep_scores=True)
    if isinstance(action, LoadInitialData):
        return replace(
            state,
            items=tuple(merge_unique_by_key([], action.items, activity_key)),
            total_count=action.total,
            offset=0,
            loading=False,
            is_loading_more=False,
            error=None,
            month_label=action.month_label,
        )
    if isinstance(action, AppendData):
        return replace(
            state,
            items=tuple(merge_unique_by_key(state.items, action.items, activity_key)),
            offset=state.offset + 1,
            total_count=state.total_count if action.total is None else action.total,
            is_loading_more=False,
            month_label=action.month_label,
        )
    if isinstance(action, DeleteItem):
        # total_count is left as the server reported it; the next page refreshes it
        return replace(
            state,
            items=tuple(i for i in state.items if not (i.type == action.type and i.id == action.id)),
            is_deleting=None,
        )
    return state


def is_filter_on(state: ActivityFeedState, item_type: str) -> bool:
    kind = FILTER_FOR_TYPE.get(item_type)
    return kind is not None and getattr(state, f"show_{kind}")


def visible_items(state: ActivityFeedState) -> list:
    return [i for i in state.items if is_filter_on(state, i.type)]


def has_more(state: ActivityFeedState) -> bool:
    return state.month_label is not None and len(state.items) < state.total_count
