from fastapi import APIRouter, Form, Request
from fastapi.responses import JSONResponse, RedirectResponse

from calendar_state import month_key
from config import DATE_FORMAT

router = APIRouter()


def _show_calendar(session):
    # a revisit retries months that failed and loads ones a resize brought on screen
    if session.mounted:
        session.calendar.load_visible_months()
    else:
        session.mount()


def render_calendar_section(session) -> str:
    _show_calendar(session)
    host = session.calendar
    loading = ""
    if host.state.loading and not host.state.error:
        loading = '<div class="empty">Loading...</div>'
    return loading + host.render()


@router.post("/calendar/nav")
def calendar_nav(request: Request, action: str = Form(...)):
    session = request.state.session
    session.mount()
    try:
        session.calendar.controller.navigate(action)
    except ValueError:
        return JSONResponse({"error": "Unknown navigation action"}, status_code=400)
    return RedirectResponse(url="/timeline?view=calendar", status_code=303)


@router.get("/api/calendar")
def api_calendar(request: Request):
    session = request.state.session
    _show_calendar(session)
    host = session.calendar
    state = host.state
    controller = host.controller
    by_date = controller.group_items_by_date(host.items())
    return JSONResponse({
        "mode": controller.mode.value if controller.mode else None,
        "title": controller.title(),
        "current_month": month_key(state.current_month),
        "current_week": controller.current_week.strftime(DATE_FORMAT),
        "fetched_months": sorted(state.fetched_months),
        "loading": state.loading,
        "error": state.error,
        "days": {
            day: [{"type": i.type, "id": i.id} for i in items]
            for day, items in sorted(by_date.items())
        },
    })
