"""
Client for the fitness REST API.

Every failure (transport error, non-2xx status, unparseable body) surfaces as
``ApiError`` with a human-readable message; callers do not see ``requests``
exceptions.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests

import config
from models import ActivityItem, PainScore, SleepScore, Workout

logger = logging.getLogger(__name__)


class ApiError(Exception):
    pass


@dataclass(frozen=True)
class MonthRangeResult:
    workouts: tuple
    pain_scores: tuple
    sleep_scores: tuple


@dataclass(frozen=True)
class ActivityPage:
    items: tuple
    total: int
    month_label: Optional[str]


class ApiClient:
    def __init__(self, base_url: Optional[str] = None, token: Optional[str] = None,
                 timeout: Optional[float] = None, session: Optional[requests.Session] = None):
        self.base_url = (base_url or config.API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else config.API_TIMEOUT_SECONDS
        self.session = session or requests.Session()
        token = token if token is not None else config.API_TOKEN
        if token:
            self.session.cookies.set(config.API_TOKEN_COOKIE, token)

    def request(self, method: str, path: str, params: Optional[dict] = None) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        logger.debug("%s %s params=%s", method, url, params)
        try:
            resp = self.session.request(
                method, url, params=params, timeout=self.timeout,
                headers={"Accept": "application/json"},
            )
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise ApiError("Could not reach the fitness API") from e
        if not 200 <= resp.status_code < 300:
            message = _error_message(resp)
            logger.warning("%s %s returned %s: %s", method, url, resp.status_code, message)
            raise ApiError(message)
        try:
            return resp.json()
        except ValueError as e:
            raise ApiError("Unexpected response from the fitness API") from e

    def fetch_month_range(self, start_date: str, end_date: str) -> MonthRangeResult:
        data = self.request("GET", "/timeline", params={"startDate": start_date, "endDate": end_date})
        try:
            return MonthRangeResult(
                workouts=tuple(Workout.from_api(w) for w in data.get("workouts") or []),
                pain_scores=tuple(PainScore.from_api(p) for p in data.get("painScores") or []),
                sleep_scores=tuple(SleepScore.from_api(s) for s in data.get("sleepScores") or []),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ApiError("Unexpected response from the fitness API") from e

    def fetch_activity_page(self, offset: int) -> ActivityPage:
        data = self.request("GET", "/activity", params={"offset": offset})
        try:
            return ActivityPage(
                items=tuple(ActivityItem.from_api(i) for i in data.get("items") or []),
                total=int(data.get("total") or 0),
                month_label=data.get("month"),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ApiError("Unexpected response from the fitness API") from e

    def delete_workout(self, workout_id: int):
        self.request("DELETE", f"/workouts/{workout_id}")

    def delete_pain_score(self, pain_score_id: int):
        self.request("DELETE", f"/pain-scores/{pain_score_id}")

    def delete_sleep_score(self, sleep_score_id: int):
        self.request("DELETE", f"/sleep-scores/{sleep_score_id}")


def _error_message(resp) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return "An error occurred"


_client: Optional[ApiClient] = None


def get_client() -> ApiClient:
    global _client
    if _client is None:
        _client = ApiClient()
    return _client


def fetch_month_range(start_date: str, end_date: str) -> MonthRangeResult:
    return get_client().fetch_month_range(start_date, end_date)


def fetch_activity_page(offset: int) -> ActivityPage:
    return get_client().fetch_activity_page(offset)


def delete_workout(workout_id: int):
    get_client().delete_workout(workout_id)


def delete_pain_score(pain_score_id: int):
    get_client().delete_pain_score(pain_score_id)


def delete_sleep_score(sleep_score_id: int):
    get_client().delete_sleep_score(sleep_score_id)
