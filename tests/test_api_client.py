import unittest
from unittest import mock

import requests

from api import ApiClient, ApiError


def _response(status=200, body=None, bad_json=False):
    resp = mock.Mock()
    resp.status_code = status
    if bad_json:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = body
    return resp


class ApiClientTests(unittest.TestCase):
    def setUp(self):
        self.session = mock.MagicMock()
        self.client = ApiClient(base_url="http://api.test/api/", token="tok", timeout=3, session=self.session)

    def test_token_sent_as_cookie(self):
        self.session.cookies.set.assert_called_once_with("token", "tok")

    def test_fetch_month_range(self):
        self.session.request.return_value = _response(body={
            "workouts": [{"id": 1, "date": "2024-03-05T00:00:00.000Z", "withInstructor": True,
                          "exercises": [{"name": "Squat", "reps": 10, "weight": 40}]}],
            "painScores": [{"id": 2, "date": "2024-03-06", "score": 4, "notes": None}],
            "sleepScores": [],
            "hasMore": False,
        })
        result = self.client.fetch_month_range("2024-03-01", "2024-03-31")
        self.session.request.assert_called_once_with(
            "GET", "http://api.test/api/timeline",
            params={"startDate": "2024-03-01", "endDate": "2024-03-31"},
            timeout=3, headers={"Accept": "application/json"},
        )
        workout = result.workouts[0]
        self.assertEqual(workout.date, "2024-03-05")
        self.assertTrue(workout.with_instructor)
        self.assertEqual(workout.exercises[0].name, "Squat")
        self.assertEqual(result.pain_scores[0].notes, "")
        self.assertEqual(result.sleep_scores, ())

    def test_fetch_activity_page(self):
        self.session.request.return_value = _response(body={
            "items": [
                {"type": "workout", "id": 1, "date": "2024-03-05", "workout": {"id": 1, "date": "2024-03-05"}},
                {"type": "sleepScore", "id": 1, "date": "2024-03-04", "sleepScore": {"id": 1, "date": "2024-03-04", "score": 4}},
            ],
            "total": 12,
            "offset": 1,
            "month": "2024-02",
        })
        page = self.client.fetch_activity_page(1)
        _, kwargs = self.session.request.call_args
        self.assertEqual(kwargs["params"], {"offset": 1})
        self.assertEqual([i.key for i in page.items], ["workout:1", "sleepScore:1"])
        self.assertEqual(page.items[1].record.score, 4)
        self.assertEqual(page.total, 12)
        self.assertEqual(page.month_label, "2024-02")

    def test_unknown_item_type_is_unexpected_response(self):
        self.session.request.return_value = _response(body={"items": [{"type": "steps", "id": 1}], "total": 1})
        with self.assertRaisesRegex(ApiError, "Unexpected response"):
            self.client.fetch_activity_page(0)

    def test_delete_paths(self):
        self.session.request.return_value = _response(body={})
        self.client.delete_workout(3)
        self.client.delete_pain_score(4)
        self.client.delete_sleep_score(5)
        urls = [c.args[:2] for c in self.session.request.call_args_list]
        self.assertEqual(urls, [
            ("DELETE", "http://api.test/api/workouts/3"),
            ("DELETE", "http://api.test/api/pain-scores/4"),
            ("DELETE", "http://api.test/api/sleep-scores/5"),
        ])

    def test_error_field_becomes_message(self):
        self.session.request.return_value = _response(404, {"error": "Workout not found"})
        with self.assertRaisesRegex(ApiError, "Workout not found"):
            self.client.delete_workout(9)

    def test_generic_message_without_error_field(self):
        self.session.request.return_value = _response(500, bad_json=True)
        with self.assertRaisesRegex(ApiError, "An error occurred"):
            self.client.fetch_activity_page(0)

    def test_transport_failure(self):
        self.session.request.side_effect = requests.ConnectionError("refused")
        with self.assertRaisesRegex(ApiError, "Could not reach"):
            self.client.fetch_month_range("2024-03-01", "2024-03-31")

    def test_bad_json_on_success(self):
        self.session.request.return_value = _response(200, bad_json=True)
        with self.assertRaisesRegex(ApiError, "Unexpected response"):
            self.client.fetch_month_range("2024-03-01", "2024-03-31")


if __name__ == "__main__":
    unittest.main()
