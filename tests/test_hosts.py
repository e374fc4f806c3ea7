import unittest
from datetime import date

from api import ActivityPage, ApiError, MonthRangeResult
from hosts import ACTIVITY_LOAD_ERROR, CALENDAR_LOAD_ERROR, ActivityFeedHost, CalendarHost
from models import ActivityItem, PainScore, Workout
from viewport import Viewport

TODAY = date(2024, 3, 15)
EMPTY = MonthRangeResult(workouts=(), pain_scores=(), sleep_scores=())


class FakeMonthFetcher:
    def __init__(self, results=None, fail=()):
        self.calls = []
        self.results = results or {}
        self.fail = set(fail)
        self.on_call = None

    def __call__(self, start, end):
        self.calls.append((start, end))
        key = start[:7]
        if self.on_call is not None:
            self.on_call(key)
        if key in self.fail:
            raise ApiError("boom")
        return self.results.get(key, EMPTY)


class CalendarHostTests(unittest.TestCase):
    def _host(self, fetcher, width=1024):
        return CalendarHost(Viewport(width), fetch_month_range=fetcher, today=TODAY)

    def test_mount_fetches_current_month(self):
        fetcher = FakeMonthFetcher({"2024-03": MonthRangeResult((Workout(1, "2024-03-02"),), (), ())})
        host = self._host(fetcher)
        host.mount()
        self.assertEqual(fetcher.calls, [("2024-03-01", "2024-03-31")])
        self.assertEqual(host.state.fetched_months, frozenset({"2024-03"}))
        self.assertFalse(host.state.loading)
        self.assertEqual([w.id for w in host.state.workouts], [1])

    def test_cached_month_is_not_refetched(self):
        fetcher = FakeMonthFetcher()
        host = self._host(fetcher)
        host.mount()
        host.change_month(date(2024, 4, 1))
        host.change_month(date(2024, 3, 1))
        self.assertEqual(len(fetcher.calls), 2)
        self.assertEqual(host.state.current_month, date(2024, 3, 1))
        self.assertEqual(host.controller.current_month, date(2024, 3, 1))

    def test_failed_month_is_not_marked_and_can_retry(self):
        fetcher = FakeMonthFetcher(fail={"2024-03"})
        host = self._host(fetcher)
        host.mount()
        self.assertEqual(host.state.error, CALENDAR_LOAD_ERROR)
        self.assertFalse(host.state.loading)
        self.assertNotIn("2024-03", host.state.fetched_months)
        self.assertIn('class="alert"', host.render())

        fetcher.fail.clear()
        self.assertTrue(host.load_month(TODAY))
        self.assertIn("2024-03", host.state.fetched_months)
        self.assertIsNone(host.state.error)

    def test_overlapping_months_merge_without_duplicates(self):
        shared = Workout(5, "2024-03-31")
        fetcher = FakeMonthFetcher({
            "2024-03": MonthRangeResult((shared,), (PainScore(1, "2024-03-30", 4),), ()),
            "2024-04": MonthRangeResult((shared, Workout(6, "2024-04-01")), (), ()),
        })
        host = self._host(fetcher)
        host.mount()
        host.controller.next_month()
        self.assertEqual([w.id for w in host.state.workouts], [5, 6])
        self.assertEqual(len(host.items()), 3)

    def test_stale_response_does_not_touch_flags(self):
        fetcher = FakeMonthFetcher(fail={"2024-03"})
        host = self._host(fetcher)

        def jump_ahead(key):
            if key == "2024-03":
                host.change_month(date(2024, 4, 1))

        fetcher.on_call = jump_ahead
        host.mount()
        self.assertIsNone(host.state.error)
        self.assertFalse(host.state.loading)
        self.assertEqual(host.state.fetched_months, frozenset({"2024-04"}))

    def test_stale_success_still_merges(self):
        fetcher = FakeMonthFetcher({"2024-03": MonthRangeResult((Workout(1, "2024-03-01"),), (), ())}, fail={"2024-04"})
        host = self._host(fetcher)

        def jump_ahead(key):
            if key == "2024-03":
                fetcher.on_call = None
                host.change_month(date(2024, 4, 1))

        fetcher.on_call = jump_ahead
        host.mount()
        self.assertIn("2024-03", host.state.fetched_months)
        self.assertEqual(host.state.error, CALENDAR_LOAD_ERROR)
        self.assertFalse(host.state.loading)

    def test_week_change_into_next_month(self):
        fetcher = FakeMonthFetcher()
        host = self._host(fetcher, width=600)
        host.mount()
        self.assertTrue(host.controller.is_vertical)
        for _ in range(3):
            host.controller.next_week()
        self.assertEqual(host.controller.current_week, date(2024, 3, 31))
        self.assertEqual(host.state.current_month, date(2024, 4, 3))
        self.assertEqual(fetcher.calls, [("2024-03-01", "2024-03-31"), ("2024-04-01", "2024-04-30")])

    def test_error_render_keeps_navigation(self):
        fetcher = FakeMonthFetcher(fail={"2024-03"})
        host = self._host(fetcher)
        host.mount()
        out = host.render()
        self.assertIn('class="alert"', out)
        self.assertIn('action="/calendar/nav"', out)
        self.assertIn('aria-label="Next month"', out)

    def test_failed_month_refetched_when_navigation_returns(self):
        fetcher = FakeMonthFetcher(fail={"2024-03"})
        host = self._host(fetcher)
        host.mount()
        fetcher.fail.clear()
        host.controller.navigate("next")
        self.assertIsNone(host.state.error)
        host.controller.navigate("prev")
        self.assertEqual(host.state.fetched_months, frozenset({"2024-03", "2024-04"}))
        self.assertEqual(len(fetcher.calls), 3)

    def test_load_visible_months_retries_only_failed(self):
        fetcher = FakeMonthFetcher(fail={"2024-03"})
        host = self._host(fetcher)
        host.mount()
        fetcher.fail.clear()
        host.load_visible_months()
        host.load_visible_months()
        self.assertEqual(len(fetcher.calls), 2)
        self.assertIsNone(host.state.error)
        self.assertIn("2024-03", host.state.fetched_months)

    def test_vertical_mount_loads_every_month_in_week(self):
        fetcher = FakeMonthFetcher()
        host = CalendarHost(Viewport(600), fetch_month_range=fetcher, today=date(2024, 3, 1))
        host.mount()
        self.assertEqual(host.controller.current_week, date(2024, 2, 25))
        self.assertEqual(fetcher.calls, [("2024-03-01", "2024-03-31"), ("2024-02-01", "2024-02-29")])
        self.assertEqual(host.state.current_month, date(2024, 3, 1))

    def test_resize_into_vertical_then_revisit_loads_spanned_month(self):
        fetcher = FakeMonthFetcher()
        viewport = Viewport(1024)
        host = CalendarHost(viewport, fetch_month_range=fetcher, today=date(2024, 3, 1))
        host.mount()
        viewport.resize(600)
        host.load_visible_months()
        self.assertEqual(host.state.fetched_months, frozenset({"2024-02", "2024-03"}))

    def test_teardown_unsubscribes(self):
        viewport = Viewport(1024)
        host = CalendarHost(viewport, fetch_month_range=FakeMonthFetcher(), today=TODAY)
        host.mount()
        self.assertEqual(viewport.listener_count, 1)
        host.teardown()
        self.assertEqual(viewport.listener_count, 0)


def _item(item_type, item_id):
    return ActivityItem(type=item_type, id=item_id, date="2024-03-01")


class FakePageFetcher:
    def __init__(self, pages):
        self.pages = pages
        self.calls = []
        self.fail = False
        self.on_call = None

    def __call__(self, offset):
        self.calls.append(offset)
        if self.on_call is not None:
            self.on_call(offset)
        if self.fail:
            raise ApiError("boom")
        return self.pages[offset]


class FakeDeleter:
    def __init__(self, fail=False):
        self.fail = fail
        self.deleted = []

    def __call__(self, item_id):
        if self.fail:
            raise ApiError("nope")
        self.deleted.append(item_id)


class ActivityFeedHostTests(unittest.TestCase):
    def setUp(self):
        self.fetcher = FakePageFetcher({
            0: ActivityPage(items=(_item("workout", 1), _item("painScore", 1)), total=3, month_label="2024-03"),
            1: ActivityPage(items=(_item("painScore", 1), _item("sleepScore", 2)), total=3, month_label="2024-02"),
        })
        self.deleter = FakeDeleter()
        self.host = ActivityFeedHost(
            fetch_activity_page=self.fetcher,
            deleters={"workout": self.deleter, "painScore": self.deleter, "sleepScore": self.deleter},
        )

    def test_ensure_loaded_fetches_once(self):
        self.host.ensure_loaded()
        self.host.ensure_loaded()
        self.assertEqual(self.fetcher.calls, [0])
        self.assertFalse(self.host.state.loading)
        self.assertEqual(self.host.state.total_count, 3)

    def test_load_more_appends_next_page(self):
        self.host.load_initial()
        self.assertTrue(self.host.load_more())
        state = self.host.state
        self.assertEqual(self.fetcher.calls, [0, 1])
        self.assertEqual(state.offset, 1)
        self.assertEqual([i.key for i in state.items], ["workout:1", "painScore:1", "sleepScore:2"])
        self.assertFalse(self.host.load_more())
        self.assertEqual(self.fetcher.calls, [0, 1])

    def test_initial_failure_sets_error(self):
        self.fetcher.fail = True
        self.assertFalse(self.host.load_initial())
        self.assertEqual(self.host.state.error, ACTIVITY_LOAD_ERROR)
        self.assertFalse(self.host.state.loading)
        self.assertFalse(self.host.loaded)

    def test_load_more_failure_clears_flag(self):
        self.host.load_initial()
        self.fetcher.fail = True
        self.assertFalse(self.host.load_more())
        self.assertFalse(self.host.state.is_loading_more)
        self.assertEqual(self.host.state.offset, 0)

    def test_refresh_during_load_more_releases_flag(self):
        self.host.load_initial()

        def refresh(offset):
            if offset == 1:
                self.fetcher.on_call = None
                self.host.load_initial()

        self.fetcher.on_call = refresh
        self.assertFalse(self.host.load_more())
        self.assertFalse(self.host.state.is_loading_more)
        self.assertEqual(self.host.state.offset, 0)
        self.assertEqual(len(self.host.state.items), 2)
        self.assertTrue(self.host.load_more())
        self.assertEqual(self.fetcher.calls, [0, 1, 0, 1])

    def test_refresh_during_failing_load_more_releases_flag(self):
        self.host.load_initial()

        def refresh_then_fail(offset):
            if offset == 1:
                self.fetcher.on_call = None
                self.host.load_initial()
                self.fetcher.fail = True

        self.fetcher.on_call = refresh_then_fail
        self.assertFalse(self.host.load_more())
        self.assertFalse(self.host.state.is_loading_more)
        self.assertIsNone(self.host.state.error)

    def test_delete_success(self):
        self.host.load_initial()
        self.assertIsNone(self.host.delete_item("painScore", 1))
        self.assertEqual(self.deleter.deleted, [1])
        self.assertEqual([i.key for i in self.host.state.items], ["workout:1"])
        self.assertEqual(self.host.state.total_count, 3)
        self.assertIsNone(self.host.state.is_deleting)

    def test_delete_failure_leaves_items(self):
        self.deleter.fail = True
        self.host.load_initial()
        before = self.host.state.items
        notice = self.host.delete_item("workout", 1)
        self.assertEqual(notice, "Failed to delete workout. Please try again.")
        self.assertEqual(self.host.state.items, before)
        self.assertIsNone(self.host.state.is_deleting)

    def test_delete_unknown_type(self):
        with self.assertRaises(ValueError):
            self.host.delete_item("steps", 1)

    def test_filters_and_fab(self):
        self.host.toggle_filter("sleep_scores")
        self.assertFalse(self.host.state.show_sleep_scores)
        self.host.show_all_filters()
        self.assertTrue(self.host.state.show_sleep_scores)
        with self.assertRaises(ValueError):
            self.host.toggle_filter("steps")
        self.host.toggle_fab()
        self.assertTrue(self.host.state.fab_open)
        self.host.toggle_fab()
        self.assertFalse(self.host.state.fab_open)


if __name__ == "__main__":
    unittest.main()
