"""
Data models for the fitness timeline.

Records are read-only copies of what the backend returns:
- Workout (with its Exercise rows), PainScore, SleepScore
- ActivityItem: one record tagged with its type, used by the activity list
- CalendarItem: one record tagged with its type, used by the calendar views

Ids are unique within a record type only, so anything that mixes types keys
on ``type:id``.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

WORKOUT = "workout"
PAIN_SCORE = "painScore"
SLEEP_SCORE = "sleepScore"
RECORD_TYPES = (WORKOUT, PAIN_SCORE, SLEEP_SCORE)


def _day(value) -> str:
    # API dates may arrive as full ISO timestamps
    return str(value or "").split("T", 1)[0]


@dataclass(frozen=True)
class Exercise:
    name: str
    reps: int = 0
    weight: Optional[float] = None
    time_seconds: Optional[int] = None

    @classmethod
    def from_api(cls, data: dict) -> "Exercise":
        return cls(
            name=str(data.get("name", "")),
            reps=int(data.get("reps") or 0),
            weight=data.get("weight"),
            time_seconds=data.get("time_seconds"),
        )


@dataclass(frozen=True)
class Workout:
    id: int
    date: str
    with_instructor: bool = False
    exercises: tuple = field(default_factory=tuple)

    @classmethod
    def from_api(cls, data: dict) -> "Workout":
        return cls(
            id=int(data["id"]),
            date=_day(data.get("date")),
            with_instructor=bool(data.get("withInstructor", False)),
            exercises=tuple(Exercise.from_api(e) for e in data.get("exercises") or [] if e),
        )


@dataclass(frozen=True)
class PainScore:
    id: int
    date: str
    score: int
    notes: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "PainScore":
        return cls(
            id=int(data["id"]),
            date=_day(data.get("date")),
            score=int(data.get("score") or 0),
            notes=str(data.get("notes") or ""),
        )


@dataclass(frozen=True)
class SleepScore:
    id: int
    date: str
    score: int
    notes: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "SleepScore":
        return cls(
            id=int(data["id"]),
            date=_day(data.get("date")),
            score=int(data.get("score") or 0),
            notes=str(data.get("notes") or ""),
        )


TemporalRecord = Union[Workout, PainScore, SleepScore]

_RECORD_CLASSES = {WORKOUT: Workout, PAIN_SCORE: PainScore, SLEEP_SCORE: SleepScore}


@dataclass(frozen=True)
class ActivityItem:
    type: str
    id: int
    date: str
    record: Optional[TemporalRecord] = None

    @property
    def key(self) -> str:
        return activity_key(self)

    @classmethod
    def from_api(cls, data: dict) -> "ActivityItem":
        item_type = data.get("type")
        if item_type not in _RECORD_CLASSES:
            raise ValueError(f"Unknown activity type: {item_type!r}")
        payload = data.get(item_type)
        record = _RECORD_CLASSES[item_type].from_api(payload) if payload else None
        return cls(type=item_type, id=int(data["id"]), date=_day(data.get("date")), record=record)


@dataclass(frozen=True)
class CalendarItem:
    type: str
    id: int
    date: str
    record: TemporalRecord

    @property
    def key(self) -> str:
        return activity_key(self)


def activity_key(item) -> str:
    """Composite identity: two types may share a numeric id without colliding."""
    return f"{item.type}:{item.id}"


def calendar_items(workouts, pain_scores, sleep_scores) -> list[CalendarItem]:
    items = [CalendarItem(WORKOUT, w.id, w.date, w) for w in workouts]
    items += [CalendarItem(PAIN_SCORE, p.id, p.date, p) for p in pain_scores]
    items += [CalendarItem(SLEEP_SCORE, s.id, s.date, s) for s in sleep_scores]
    return items
