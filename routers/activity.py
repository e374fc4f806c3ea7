import html
from urllib.parse import quote_plus

from fastapi import APIRouter, Form, Request
from fastapi.responses import JSONResponse, RedirectResponse

from activity_state import FILTER_KINDS, has_more, visible_items
from models import RECORD_TYPES
from ui import error_block, render_activity_card, render_fab

router = APIRouter()

FILTER_LABELS = {"workouts": "Workouts", "pain_scores": "Pain Scores", "sleep_scores": "Sleep Scores"}
LIST_URL = "/timeline?view=list"


def _redirect(error: str = "") -> RedirectResponse:
    url = LIST_URL
    if error:
        url += "&error=" + quote_plus(error)
    return RedirectResponse(url=url, status_code=303)


def render_activity_section(session) -> str:
    host = session.activity
    host.ensure_loaded()
    state = host.state
    if state.error:
        return error_block(state.error)
    if state.loading:
        return '<div class="empty">Loading...</div>'

    chips = []
    for kind in FILTER_KINDS:
        active = " active" if getattr(state, f"show_{kind}") else ""
        chips.append(
            '<form method="post" action="/activity/filters" style="margin:0;">'
            f'<input type="hidden" name="kind" value="{kind}">'
            f'<button type="submit" class="chip{active}">{FILTER_LABELS[kind]}</button></form>'
        )
    chips.append(
        '<form method="post" action="/activity/filters" style="margin:0;">'
        '<input type="hidden" name="kind" value="all">'
        '<button type="submit" class="chip">Show all</button></form>'
    )

    items = visible_items(state)
    if not state.items:
        body = '<p class="empty">No activity recorded yet.</p>'
    elif not items:
        body = '<p class="empty">No activity matches the selected filters.</p>'
    else:
        body = "".join(render_activity_card(i, state.is_deleting) for i in items)

    more = ""
    if has_more(state):
        label = "Loading..." if state.is_loading_more else "Load more"
        more = (
            '<form method="post" action="/activity/more" style="margin:12px 0;">'
            f'<button type="submit" class="btn-log">{label}</button></form>'
        )
    counts = f'<div class="card-ts">{len(state.items)} loaded of {state.total_count}</div>'
    if state.month_label:
        counts += f'<div class="card-ts">Through {html.escape(state.month_label)}</div>'
    return f'<div class="filters">{"".join(chips)}</div>{counts}{body}{more}{render_fab(state.fab_open)}'


@router.post("/activity/more")
def activity_more(request: Request):
    request.state.session.activity.load_more()
    return _redirect()


@router.post("/activity/refresh")
def activity_refresh(request: Request):
    request.state.session.activity.load_initial()
    return _redirect()


@router.post("/activity/filters")
def activity_filters(request: Request, kind: str = Form(...)):
    host = request.state.session.activity
    if kind == "all":
        host.show_all_filters()
    elif kind in FILTER_KINDS:
        host.toggle_filter(kind)
    else:
        return _redirect("Unknown filter")
    return _redirect()


@router.post("/activity/fab")
def activity_fab(request: Request):
    request.state.session.activity.toggle_fab()
    return _redirect()


@router.post("/activity/delete")
def activity_delete(request: Request, type: str = Form(...), id: int = Form(...)):
    if type not in RECORD_TYPES:
        return _redirect("Unknown record type")
    notice = request.state.session.activity.delete_item(type, id)
    return _redirect(notice or "")


@router.get("/api/activity")
def api_activity(request: Request):
    host = request.state.session.activity
    host.ensure_loaded()
    state = host.state
    return JSONResponse({
        "items": [{"type": i.type, "id": i.id, "date": i.date} for i in state.items],
        "visible": [f"{i.type}:{i.id}" for i in visible_items(state)],
        "offset": state.offset,
        "total": state.total_count,
        "month": state.month_label,
        "has_more": has_more(state),
        "filters": {kind: getattr(state, f"show_{kind}") for kind in FILTER_KINDS},
        "loading": state.loading,
        "error": state.error,
    })
