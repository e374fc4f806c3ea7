"""
Dual-mode calendar view controller.

Two mutually exclusive modes chosen by viewport width:
- GRID      month calendar grid, width >= breakpoint
- VERTICAL  one week as a list of seven days, width < breakpoint

The mode is re-evaluated on mount and on every resize event. The host owns
the current month: grid navigation only reports the new month through
``on_month_change``. The current week is owned here; after it changes,
``on_week_change`` lets the host fetch any month partition the week reaches
into. Entering VERTICAL re-synchronises the week to the host's month.

The controller never decides how an item looks: items are bucketed by the
host's ``group_items_by_date`` and drawn by ``render_grid_item`` /
``render_vertical_item``.
"""

import html
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Callable, Optional

from calendar_state import add_months
from config import DATE_FORMAT, VIEWPORT_BREAKPOINT, _today_local
from viewport import Viewport

logger = logging.getLogger(__name__)

WEEKDAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


class ViewMode(str, Enum):
    GRID = "grid"
    VERTICAL = "vertical"


def mode_for_width(width: int, breakpoint: int = VIEWPORT_BREAKPOINT) -> ViewMode:
    return ViewMode.VERTICAL if width < breakpoint else ViewMode.GRID


def start_of_week(d: date) -> date:
    """Sunday on or before ``d``."""
    return d - timedelta(days=(d.weekday() + 1) % 7)


def end_of_week(d: date) -> date:
    return start_of_week(d) + timedelta(days=6)


def group_items_by_date(items) -> dict[str, list]:
    """Bucket items by calendar day, ignoring any time component of ``date``."""
    buckets: dict[str, list] = {}
    for item in items:
        day = str(item.date).split("T", 1)[0]
        buckets.setdefault(day, []).append(item)
    return buckets


@dataclass
class DayCell:
    day: date
    in_month: bool
    is_today: bool
    items: list = field(default_factory=list)

    @property
    def date_str(self) -> str:
        return self.day.strftime(DATE_FORMAT)


class CalendarViewController:
    def __init__(
        self,
        viewport: Viewport,
        current_month: date,
        on_month_change: Callable[[date], None],
        group_items_by_date: Callable[[list], dict],
        render_grid_item: Callable[[object, str], str],
        render_vertical_item: Callable[[object, str], str],
        on_week_change: Optional[Callable[[date], None]] = None,
        empty_state_message: str = "No data",
        nav_url: str = "/calendar/nav",
        breakpoint: int = VIEWPORT_BREAKPOINT,
        today_fn: Callable[[], date] = _today_local,
    ):
        self.viewport = viewport
        self.current_month = current_month
        self.on_month_change = on_month_change
        self.on_week_change = on_week_change
        self.group_items_by_date = group_items_by_date
        self.render_grid_item = render_grid_item
        self.render_vertical_item = render_vertical_item
        self.empty_state_message = empty_state_message
        self.nav_url = nav_url
        self.breakpoint = breakpoint
        self._today = today_fn
        self.mode: Optional[ViewMode] = None
        self.current_week = start_of_week(today_fn())
        self._unsubscribe: Optional[Callable[[], None]] = None

    # ── Lifecycle ────────────────────────────────────────────────────────────

    def mount(self):
        if self._unsubscribe is not None:
            return
        self._unsubscribe = self.viewport.subscribe(self._handle_resize)
        self._handle_resize(self.viewport.width)

    def teardown(self):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    @property
    def mounted(self) -> bool:
        return self._unsubscribe is not None

    def _handle_resize(self, width: int):
        new_mode = mode_for_width(width, self.breakpoint)
        entering_vertical = new_mode is ViewMode.VERTICAL and self.mode is not ViewMode.VERTICAL
        if new_mode is not self.mode:
            logger.debug("Calendar mode %s -> %s at %spx", self.mode, new_mode, width)
        self.mode = new_mode
        if entering_vertical:
            self.current_week = start_of_week(self.current_month)

    @property
    def is_vertical(self) -> bool:
        return self.mode is ViewMode.VERTICAL

    def set_current_month(self, month: date):
        """Host-side month update; the week is only re-synced on entering VERTICAL."""
        self.current_month = month

    # ── Navigation ───────────────────────────────────────────────────────────

    def previous_month(self):
        self.on_month_change(add_months(self.current_month.replace(day=1), -1))

    def next_month(self):
        self.on_month_change(add_months(self.current_month.replace(day=1), 1))

    def today_month(self):
        self.on_month_change(self._today())

    def previous_week(self):
        self._set_week(self.current_week - timedelta(days=7))

    def next_week(self):
        self._set_week(self.current_week + timedelta(days=7))

    def today_week(self):
        self._set_week(start_of_week(self._today()))

    def _set_week(self, week: date):
        self.current_week = start_of_week(week)
        if self.on_week_change is not None:
            self.on_week_change(self.current_week)

    def navigate(self, action: str):
        """Route a prev/next/today button to the handler for the current mode."""
        if self.is_vertical:
            handlers = {"prev": self.previous_week, "next": self.next_week, "today": self.today_week}
        else:
            handlers = {"prev": self.previous_month, "next": self.next_month, "today": self.today_month}
        if action not in handlers:
            raise ValueError(f"Unknown navigation action: {action!r}")
        handlers[action]()

    # ── Layout ───────────────────────────────────────────────────────────────

    def title(self) -> str:
        if self.is_vertical:
            week_end = self.current_week + timedelta(days=6)
            return (
                f"{self.current_week.strftime('%B')} {self.current_week.day} - "
                f"{week_end.strftime('%B')} {week_end.day}, {week_end.year}"
            )
        return self.current_month.strftime("%B %Y")

    def grid_weeks(self, items) -> list[list[DayCell]]:
        by_date = self.group_items_by_date(items)
        today = self._today()
        month_start = self.current_month.replace(day=1)
        month_end = add_months(month_start, 1) - timedelta(days=1)
        day = start_of_week(month_start)
        last = end_of_week(month_end)
        weeks = []
        while day <= last:
            row = []
            for _ in range(7):
                key = day.strftime(DATE_FORMAT)
                row.append(DayCell(
                    day=day,
                    in_month=day.month == month_start.month and day.year == month_start.year,
                    is_today=day == today,
                    items=by_date.get(key, []),
                ))
                day += timedelta(days=1)
            weeks.append(row)
        return weeks

    def week_days(self, items) -> list[DayCell]:
        by_date = self.group_items_by_date(items)
        today = self._today()
        days = []
        for i in range(7):
            day = self.current_week + timedelta(days=i)
            days.append(DayCell(
                day=day,
                in_month=True,
                is_today=day == today,
                items=by_date.get(day.strftime(DATE_FORMAT), []),
            ))
        return days

    # ── Rendering ────────────────────────────────────────────────────────────

    def render(self, items) -> str:
        if self.is_vertical:
            return f'<div class="calendar calendar-vertical">{self._render_header("week")}{self._render_week(items)}</div>'
        return f'<div class="calendar calendar-grid">{self._render_header("month")}{self._render_grid(items)}</div>'

    def render_notice(self, body_html: str) -> str:
        """Navigation header over ``body_html`` in place of the grid/week."""
        if self.is_vertical:
            return f'<div class="calendar calendar-vertical">{self._render_header("week")}{body_html}</div>'
        return f'<div class="calendar calendar-grid">{self._render_header("month")}{body_html}</div>'

    def _render_header(self, unit: str) -> str:
        def btn(action, label, aria):
            return (
                f'<form method="post" action="{self.nav_url}" style="margin:0;">'
                f'<input type="hidden" name="action" value="{action}">'
                f'<button type="submit" class="nav-btn" aria-label="{aria}">{label}</button></form>'
            )
        return (
            '<div class="cal-nav">'
            '<div class="cal-nav-buttons">'
            + btn("prev", "&#8592;", f"Previous {unit}")
            + btn("today", "Today", "Go to today")
            + btn("next", "&#8594;", f"Next {unit}")
            + '</div>'
            f'<h2 class="cal-month">{html.escape(self.title())}</h2>'
            '</div>'
        )

    def _render_grid(self, items) -> str:
        head = "".join(f"<th>{d}</th>" for d in WEEKDAY_NAMES)
        rows = []
        for week in self.grid_weeks(items):
            cells = []
            for cell in week:
                classes = []
                if not cell.in_month:
                    classes.append("other-month")
                if cell.is_today:
                    classes.append("today")
                inner = "".join(self.render_grid_item(item, cell.date_str) for item in cell.items)
                cells.append(
                    f'<td class="{" ".join(classes)}" data-date="{cell.date_str}">'
                    f'<span class="day-num">{cell.day.day}</span>'
                    f'<div class="cal-items">{inner}</div></td>'
                )
            rows.append(f"<tr>{''.join(cells)}</tr>")
        return f'<table class="cal-grid"><thead><tr>{head}</tr></thead><tbody>{"".join(rows)}</tbody></table>'

    def _render_week(self, items) -> str:
        out = []
        for cell in self.week_days(items):
            if cell.items:
                inner = "".join(self.render_vertical_item(item, cell.date_str) for item in cell.items)
            else:
                inner = f'<div class="no-items">{html.escape(self.empty_state_message)}</div>'
            today_cls = " today" if cell.is_today else ""
            out.append(
                f'<div class="vertical-day{today_cls}" data-date="{cell.date_str}">'
                f'<div class="vertical-day-header">'
                f'<span class="vertical-day-name">{cell.day.strftime("%A")}</span>'
                f'<span class="vertical-day-date">{cell.day.strftime("%B")} {cell.day.day}, {cell.day.year}</span>'
                f'</div><div class="vertical-items">{inner}</div></div>'
            )
        return f'<div class="vertical-days">{"".join(out)}</div>'
