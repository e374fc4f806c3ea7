from config import FORMS_BASE_URL


def _url(path: str) -> str:
    return f"{FORMS_BASE_URL}{path}"


def to_workout_path(workout) -> str:
    return _url(f"/workouts/{workout.id}")


def to_workout_edit_path(workout) -> str:
    return _url(f"/workouts/{workout.id}/edit")


def to_workout_new_path() -> str:
    return _url("/workouts/new")


def to_pain_score_edit_path(pain_score) -> str:
    return _url(f"/pain-scores/{pain_score.id}/edit")


def to_pain_score_new_path() -> str:
    return _url("/pain-scores/new")


def to_sleep_score_edit_path(sleep_score) -> str:
    return _url(f"/sleep-scores/{sleep_score.id}/edit")


def to_sleep_score_new_path() -> str:
    return _url("/sleep-scores/new")
