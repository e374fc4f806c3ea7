import html
from datetime import datetime
from typing import Optional

from config import VIEWPORT_BREAKPOINT, VIEWPORT_COOKIE_NAME
from models import PAIN_SCORE, SLEEP_SCORE, WORKOUT
from paths import (
    to_pain_score_edit_path,
    to_pain_score_new_path,
    to_sleep_score_edit_path,
    to_sleep_score_new_path,
    to_workout_edit_path,
    to_workout_new_path,
    to_workout_path,
)

PAIN_DESCRIPTIONS = [
    "Pain free",
    "Very mild pain, barely noticeable",
    "Minor pain with occasional stronger twinges",
    "Noticeable and distracting pain",
    "Moderate pain, can be ignored temporarily",
    "Moderately strong pain, can't be ignored for long",
    "Moderately strong pain interfering with daily activities",
    "Severe pain limiting normal activities",
    "Intense pain, physical activity severely limited",
    "Excruciating pain, unable to converse normally",
    "Unspeakable pain, bedridden",
]

SLEEP_LABELS = {1: "Very poor", 2: "Poor", 3: "Fair", 4: "Good", 5: "Excellent"}


def _pain_color(score: int) -> str:
    if score == 0: return "#4caf50"   # no pain
    if score <= 3: return "#8bc34a"   # mild
    if score <= 5: return "#ffc107"   # moderate
    if score <= 7: return "#ff9800"   # severe
    return "#f44336"                  # extreme


def _sleep_color(score: int) -> str:
    if score <= 1: return "#f44336"
    if score == 2: return "#ff9800"
    if score == 3: return "#ffc107"
    return "#4caf50"


def _pain_description(score: int) -> str:
    if 0 <= score < len(PAIN_DESCRIPTIONS):
        return PAIN_DESCRIPTIONS[score]
    return ""


def _long_date(date_str: str) -> str:
    # "Mar 5, 2024 (Tuesday)"
    try:
        d = datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError:
        return html.escape(date_str)
    return f"{d.strftime('%b')} {d.day}, {d.year} ({d.strftime('%A')})"


def _exercise_line(exercise) -> str:
    line = f"{html.escape(exercise.name)} - {exercise.reps} reps"
    if exercise.weight:
        line += f" - {exercise.weight:g} lbs"
    return line


def error_block(message: str) -> str:
    return f'<div class="alert">{html.escape(message)}</div>'


# ── Calendar item renderers ──────────────────────────────────────────────────

def render_grid_item(item, date_str: str) -> str:
    record = item.record
    if item.type == PAIN_SCORE:
        return (
            f'<a href="{to_pain_score_edit_path(record)}" class="cal-pain"'
            f' style="background:{_pain_color(record.score)}"'
            f' aria-label="Edit pain score {record.score} for {date_str}">Pain: {record.score}</a>'
        )
    if item.type == SLEEP_SCORE:
        return (
            f'<a href="{to_sleep_score_edit_path(record)}" class="cal-sleep"'
            f' style="background:{_sleep_color(record.score)}"'
            f' aria-label="Edit sleep score {record.score} for {date_str}">Sleep: {record.score}</a>'
        )
    names = "".join(f'<div class="cal-exercise">{html.escape(e.name)}</div>' for e in record.exercises)
    instructor = " with-instructor" if record.with_instructor else ""
    return f'<a href="{to_workout_path(record)}" class="cal-workout{instructor}">{names or "Workout"}</a>'


def render_vertical_item(item, date_str: str) -> str:
    record = item.record
    if item.type in (PAIN_SCORE, SLEEP_SCORE):
        # same chip as the grid, wider
        return render_grid_item(item, date_str).replace('class="cal-', 'class="vertical-chip cal-', 1)
    rows = "".join(
        f'<div class="vertical-exercise"><span class="exercise-name">{html.escape(e.name)}</span>'
        f'<span class="exercise-details">{e.reps} reps'
        f'{f" - {e.weight:g} lbs" if e.weight else ""}</span></div>'
        for e in record.exercises
    )
    instructor = " with-instructor" if record.with_instructor else ""
    return f'<a href="{to_workout_path(record)}" class="vertical-workout{instructor}">{rows or "Workout"}</a>'


# ── Activity list cards ──────────────────────────────────────────────────────

def render_activity_card(item, deleting: Optional[tuple] = None) -> str:
    record = item.record
    busy = deleting == (item.type, item.id)
    if item.type == WORKOUT:
        label, edit_href = "Workout", to_workout_edit_path(item)
        border = "#3b82f6"
        if record is not None:
            body = "<ul>" + "".join(f"<li>{_exercise_line(e)}</li>" for e in record.exercises) + "</ul>"
        else:
            body = ""
    elif item.type == PAIN_SCORE:
        label, edit_href = "Pain Score", to_pain_score_edit_path(item)
        score = record.score if record is not None else 0
        border = _pain_color(score)
        body = (
            f'<div class="card-notes"><strong>Pain Level: {score}</strong> - {html.escape(_pain_description(score))}</div>'
        )
        if record is not None and record.notes:
            body += f'<div class="card-notes"><strong>Notes:</strong> {html.escape(record.notes)}</div>'
    else:
        label, edit_href = "Sleep Score", to_sleep_score_edit_path(item)
        score = record.score if record is not None else 0
        border = _sleep_color(score)
        body = (
            f'<div class="card-notes"><strong>Sleep Quality: {score}/5</strong>'
            f' - {html.escape(SLEEP_LABELS.get(score, ""))}</div>'
        )
        if record is not None and record.notes:
            body += f'<div class="card-notes"><strong>Notes:</strong> {html.escape(record.notes)}</div>'
    disabled = " disabled" if busy else ""
    button_text = "..." if busy else "x"
    return f"""<div class="card activity-card" data-key="{item.type}:{item.id}" style="border-left:4px solid {border};">
  <div class="card-header">
    <div style="flex:1;">
      <div class="card-name">{_long_date(item.date)}</div>
      <div class="card-ts">{label}</div>
    </div>
    <a href="{edit_href}" class="btn-edit" title="Edit {label.lower()}">Edit</a>
    <form method="post" action="/activity/delete" style="margin:0;"
          onsubmit="return confirm('Are you sure you want to delete this {label.lower()}?');">
      <input type="hidden" name="type" value="{item.type}">
      <input type="hidden" name="id" value="{item.id}">
      <button type="submit" class="btn-delete" title="Delete {label.lower()}"{disabled}>{button_text}</button>
    </form>
  </div>
  {body}
</div>"""


def render_fab(open_: bool) -> str:
    menu = ""
    if open_:
        menu = (
            '<div class="fab-menu">'
            f'<a href="{to_workout_new_path()}" class="btn-log">New Workout</a>'
            f'<a href="{to_pain_score_new_path()}" class="btn-log">New Pain Score</a>'
            f'<a href="{to_sleep_score_new_path()}" class="btn-log">New Sleep Score</a>'
            '</div>'
        )
    return (
        f'<div class="fab">{menu}'
        '<form method="post" action="/activity/fab" style="margin:0;">'
        f'<button type="submit" class="fab-btn" aria-label="{"Close" if open_ else "Add"}">'
        f'{"&#10005;" if open_ else "+"}</button></form></div>'
    )


def _nav_bar(active: str = "") -> str:
    def lnk(href, label, key):
        if active == key:
            s = "color:#fff; font-weight:600; border-bottom:2px solid rgba(255,255,255,0.8); padding-bottom:2px;"
        else:
            s = "color:rgba(255,255,255,0.7); font-weight:500;"
        return f'<a href="{href}" style="text-decoration:none; font-size:14px; {s}">{label}</a>'
    return (
        '<nav style="background:#1e3a8a;">'
        '<div style="padding:0 24px; height:52px; display:flex; align-items:center; gap:20px;">'
        '<span style="font-weight:800; color:#fff; font-size:15px; flex-shrink:0; margin-right:8px;">'
        'Fitness Tracker</span>'
        + lnk("/timeline?view=calendar", "Calendar", "calendar")
        + lnk("/timeline?view=list", "List", "list")
        + '</div>'
        '</nav>'
    )


PAGE_STYLE = """
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <script>
    (function () {
      var BREAKPOINT = __BREAKPOINT__;
      function setCookie(name, value) {
        document.cookie = name + "=" + encodeURIComponent(value) + "; path=/; max-age=31536000; SameSite=Lax";
      }
      var renderedWidth = window.innerWidth;
      setCookie("__COOKIE__", String(renderedWidth));
      window.addEventListener("resize", function () {
        var w = window.innerWidth;
        setCookie("__COOKIE__", String(w));
        if ((w < BREAKPOINT) !== (renderedWidth < BREAKPOINT)) {
          renderedWidth = w;
          window.location.reload();
        }
      });
    })();
  </script>
  <style>
    body { font-family: system-ui, sans-serif; background: #f5f5f5; margin: 0; padding: 0; color: #222; }
    .container { max-width: 900px; margin: 0 auto; padding: 24px; }
    h1 { margin-bottom: 4px; }
    .card { background: #fff; border: 1px solid #e0e0e0; border-radius: 8px; padding: 16px; margin: 12px 0; }
    .card-header { display: flex; align-items: center; gap: 10px; }
    .card-name { font-size: 17px; font-weight: 600; }
    .card-ts { font-size: 12px; color: #888; margin-top: 2px; }
    .card-notes { margin: 10px 0 0; font-size: 14px; color: #444; }
    .btn-delete { background: none; border: 1px solid #e0e0e0;
                  border-radius: 6px; padding: 4px 10px; font-size: 13px; color: #888;
                  cursor: pointer; }
    .btn-delete:hover { background: #fee2e2; border-color: #ef4444; color: #ef4444; }
    .btn-edit { font-size: 13px; color: #3b82f6; border: 1px solid #d1d5db;
                border-radius: 6px; padding: 4px 10px; text-decoration: none; display: inline-block; }
    .btn-log { display: inline-block; background: #3b82f6; color: #fff; text-decoration: none;
               border-radius: 8px; padding: 8px 16px; font-size: 14px; font-weight: 600;
               margin-bottom: 8px; }
    .alert { background: #fee2e2; border: 1px solid #fca5a5; color: #b91c1c;
             border-radius: 6px; padding: 10px 14px; margin-bottom: 16px; font-size: 14px; }
    .empty { color: #888; font-style: italic; margin-top: 16px; }
    .view-toggle, .filters { display: flex; gap: 8px; margin: 12px 0; flex-wrap: wrap; }
    .chip { background: #fff; border: 1px solid #d1d5db; border-radius: 20px; padding: 4px 12px;
            font-size: 13px; cursor: pointer; color: #374151; text-decoration: none; }
    .chip.active { background: #1e3a8a; border-color: #1e3a8a; color: #fff; }
    .cal-nav { display: flex; align-items: center; justify-content: space-between; margin: 16px 0 8px; }
    .cal-nav-buttons { display: flex; gap: 6px; }
    .nav-btn { background: #fff; border: 1px solid #d1d5db; border-radius: 6px;
      padding: 6px 14px; font-size: 15px; cursor: pointer; color: #374151; }
    .cal-month { font-size: 18px; font-weight: 700; color: #111; margin: 0; }
    .cal-grid { width: 100%; border-collapse: collapse; table-layout: fixed; }
    .cal-grid th { padding: 6px 0; text-align: center; font-size: 12px; font-weight: 600;
      color: #6b7280; border-bottom: 2px solid #e5e7eb; }
    .cal-grid td { height: 84px; vertical-align: top; padding: 5px 6px;
      border: 1px solid #e5e7eb; background: #fff; }
    .cal-grid td.other-month { background: #f9fafb; }
    .cal-grid td.other-month .day-num { color: #d1d5db; }
    .cal-grid td.today { outline: 2px solid #3b82f6; outline-offset: -2px; }
    .day-num { font-size: 12px; font-weight: 600; color: #374151; }
    .cal-workout, .cal-pain, .cal-sleep { display: block; font-size: 11px; border-radius: 4px;
      padding: 2px 4px; margin-top: 3px; text-decoration: none; color: #fff; }
    .cal-workout { background: #3b82f6; }
    .with-instructor { background: #7c3aed; }
    .vertical-day { background: #fff; border: 1px solid #e5e7eb; border-radius: 8px;
      padding: 10px 12px; margin-bottom: 8px; }
    .vertical-day.today { border-color: #3b82f6; }
    .vertical-day-header { display: flex; justify-content: space-between; font-size: 13px;
      font-weight: 600; color: #374151; margin-bottom: 6px; }
    .vertical-workout { display: block; background: #eff6ff; border-radius: 6px; padding: 6px 8px;
      text-decoration: none; color: #1e3a8a; margin-top: 4px; }
    .vertical-exercise { display: flex; justify-content: space-between; font-size: 13px; }
    .no-items { color: #9ca3af; font-size: 13px; font-style: italic; }
    .fab { position: fixed; right: 24px; bottom: 24px; display: flex; flex-direction: column;
      align-items: flex-end; gap: 8px; }
    .fab-menu { display: flex; flex-direction: column; align-items: flex-end; }
    .fab-btn { width: 52px; height: 52px; border-radius: 50%; background: #1e3a8a; color: #fff;
      font-size: 24px; border: none; cursor: pointer; }
  </style>
""".replace("__BREAKPOINT__", str(VIEWPORT_BREAKPOINT)).replace("__COOKIE__", VIEWPORT_COOKIE_NAME)
