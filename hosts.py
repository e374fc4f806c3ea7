"""
Host pages that own the calendar cache and the activity feed.

Both hosts change state only through their reducers. Network calls run
outside the lock. Each fetch takes a generation number; only the newest
request may touch the loading/error flags, so a slow response for a month
the user already left cannot flip the page back to "loading" or show its
error. Fetched month data is merged regardless of age since it is still
valid for its own month.
"""

import logging
import threading
from datetime import date, timedelta
from typing import Callable, Optional

import api
import ui
from activity_state import (
    AppendData,
    DeleteItem,
    LoadInitialData,
    SetDeleting,
    SetFabOpen,
    SetLoadingMore,
    ShowAllFilters,
    ToggleFilter,
    FILTER_KINDS,
    activity_reducer,
    create_initial_activity_state,
    has_more,
)
from activity_state import SetError as FeedSetError
from activity_state import SetLoading as FeedSetLoading
from api import ApiError
from calendar_state import (
    AppendMonthData,
    MarkMonthFetched,
    SetError,
    SetLoading,
    SetMonth,
    calendar_reducer,
    create_initial_calendar_state,
    month_bounds,
    month_key,
    month_keys_for_week,
    parse_month_key,
)
from models import PAIN_SCORE, SLEEP_SCORE, WORKOUT, calendar_items
from view_controller import CalendarViewController, group_items_by_date
from viewport import Viewport

logger = logging.getLogger(__name__)

CALENDAR_LOAD_ERROR = "Failed to load calendar data. Please try again later."
ACTIVITY_LOAD_ERROR = "Failed to load activity. Please try again later."
RECORD_LABELS = {WORKOUT: "workout", PAIN_SCORE: "pain score", SLEEP_SCORE: "sleep score"}


class CalendarHost:
    def __init__(
        self,
        viewport: Viewport,
        fetch_month_range: Optional[Callable] = None,
        today: Optional[date] = None,
    ):
        self.state = create_initial_calendar_state(today)
        self._fetch = fetch_month_range or (lambda start, end: api.fetch_month_range(start, end))
        self._lock = threading.RLock()
        self._in_flight: set[str] = set()
        self._generation = 0
        self.controller = CalendarViewController(
            viewport=viewport,
            current_month=self.state.current_month,
            on_month_change=self.change_month,
            on_week_change=self.handle_week_change,
            group_items_by_date=group_items_by_date,
            render_grid_item=ui.render_grid_item,
            render_vertical_item=ui.render_vertical_item,
            empty_state_message="No data",
        )

    def dispatch(self, action):
        with self._lock:
            self.state = calendar_reducer(self.state, action)
            return self.state

    def mount(self):
        self.controller.mount()
        self.load_visible_months()

    def teardown(self):
        self.controller.teardown()

    def change_month(self, month: date):
        self.dispatch(SetMonth(month))
        self.dispatch(SetError(None))
        self.controller.set_current_month(month)
        self.load_month(month)

    def handle_week_change(self, week_start: date):
        mid_week = week_start + timedelta(days=3)
        if month_key(mid_week) != month_key(self.state.current_month):
            self.dispatch(SetMonth(mid_week))
            self.controller.set_current_month(mid_week)
        for key in month_keys_for_week(week_start):
            self.load_month(parse_month_key(key))

    def load_visible_months(self):
        """Load every partition on screen; cached months are skipped, failed ones retried."""
        keys = [month_key(self.state.current_month)]
        if self.controller.is_vertical:
            keys += [k for k in month_keys_for_week(self.controller.current_week) if k not in keys]
        for key in keys:
            self.load_month(parse_month_key(key))

    def load_month(self, month: date) -> bool:
        """Fetch one month partition unless it is cached or already in flight."""
        key = month_key(month)
        with self._lock:
            if key in self.state.fetched_months or key in self._in_flight:
                logger.debug("Month %s already fetched or in flight, skipping", key)
                return False
            self._in_flight.add(key)
            self._generation += 1
            generation = self._generation
            self.dispatch(SetLoading(True))
            self.dispatch(SetError(None))

        start, end = month_bounds(month)
        try:
            result = self._fetch(start, end)
        except ApiError as e:
            with self._lock:
                self._in_flight.discard(key)
                if generation == self._generation:
                    self.dispatch(SetError(CALENDAR_LOAD_ERROR))
                    self.dispatch(SetLoading(False))
            logger.warning("Fetching month %s failed: %s", key, e)
            return False

        with self._lock:
            self._in_flight.discard(key)
            self.dispatch(AppendMonthData(
                month_key=key,
                workouts=result.workouts,
                pain_scores=result.pain_scores,
                sleep_scores=result.sleep_scores,
            ))
            self.dispatch(MarkMonthFetched(key))
            if generation == self._generation:
                self.dispatch(SetLoading(False))
            else:
                logger.debug("Month %s resolved after a newer request; flags left alone", key)
        logger.debug(
            "Fetched month %s: %d workouts, %d pain scores, %d sleep scores",
            key, len(result.workouts), len(result.pain_scores), len(result.sleep_scores),
        )
        return True

    def items(self) -> list:
        state = self.state
        return calendar_items(state.workouts, state.pain_scores, state.sleep_scores)

    def render(self) -> str:
        if self.state.error:
            return self.controller.render_notice(ui.error_block(self.state.error))
        return self.controller.render(self.items())


class ActivityFeedHost:
    def __init__(
        self,
        fetch_activity_page: Optional[Callable] = None,
        deleters: Optional[dict] = None,
    ):
        self.state = create_initial_activity_state()
        self._fetch = fetch_activity_page or (lambda offset: api.fetch_activity_page(offset))
        self._deleters = deleters or {
            WORKOUT: lambda i: api.delete_workout(i),
            PAIN_SCORE: lambda i: api.delete_pain_score(i),
            SLEEP_SCORE: lambda i: api.delete_sleep_score(i),
        }
        self._lock = threading.RLock()
        self._generation = 0
        self.loaded = False

    def dispatch(self, action):
        with self._lock:
            self.state = activity_reducer(self.state, action)
            return self.state

    def ensure_loaded(self):
        if not self.loaded:
            self.load_initial()

    def load_initial(self) -> bool:
        with self._lock:
            self._generation += 1
            generation = self._generation
            self.dispatch(FeedSetLoading(True))
        try:
            page = self._fetch(0)
        except ApiError as e:
            logger.warning("Fetching activity page 0 failed: %s", e)
            with self._lock:
                if generation == self._generation:
                    self.dispatch(FeedSetError(ACTIVITY_LOAD_ERROR))
                    self.dispatch(FeedSetLoading(False))
            return False
        with self._lock:
            if generation != self._generation:
                logger.debug("Discarding superseded initial activity page")
                return False
            self.dispatch(LoadInitialData(items=page.items, total=page.total, month_label=page.month_label))
            self.loaded = True
        return True

    def load_more(self) -> bool:
        with self._lock:
            if self.state.is_loading_more or not has_more(self.state):
                return False
            generation = self._generation
            offset = self.state.offset + 1
            self.dispatch(SetLoadingMore(True))
        try:
            page = self._fetch(offset)
        except ApiError as e:
            logger.warning("Fetching activity page %d failed: %s", offset, e)
            with self._lock:
                self.dispatch(SetLoadingMore(False))
                if generation == self._generation:
                    self.dispatch(FeedSetError(ACTIVITY_LOAD_ERROR))
            return False
        with self._lock:
            if generation != self._generation:
                logger.debug("Discarding activity page %d from a superseded feed", offset)
                self.dispatch(SetLoadingMore(False))
                return False
            self.dispatch(AppendData(items=page.items, total=page.total, month_label=page.month_label))
        logger.debug("Fetched activity page %d: %d items", offset, len(page.items))
        return True

    def delete_item(self, item_type: str, item_id: int) -> Optional[str]:
        """Delete remotely, then locally. Returns a notice string on failure."""
        deleter = self._deleters.get(item_type)
        if deleter is None:
            raise ValueError(f"Unknown activity type: {item_type!r}")
        self.dispatch(SetDeleting((item_type, item_id)))
        try:
            deleter(item_id)
        except ApiError as e:
            self.dispatch(SetDeleting(None))
            logger.warning("Deleting %s %s failed: %s", item_type, item_id, e)
            return f"Failed to delete {RECORD_LABELS[item_type]}. Please try again."
        self.dispatch(DeleteItem(type=item_type, id=item_id))
        logger.info("Deleted %s %s", item_type, item_id)
        return None

    def toggle_filter(self, kind: str):
        if kind not in FILTER_KINDS:
            raise ValueError(f"Unknown filter: {kind!r}")
        self.dispatch(ToggleFilter(kind))

    def show_all_filters(self):
        self.dispatch(ShowAllFilters())

    def toggle_fab(self):
        self.dispatch(SetFabOpen(not self.state.fab_open))
