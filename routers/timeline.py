import html

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from routers.activity import render_activity_section
from routers.calendar import render_calendar_section
from ui import PAGE_STYLE, _nav_bar

router = APIRouter()


@router.get("/")
def root():
    return RedirectResponse(url="/timeline?view=calendar", status_code=303)


@router.get("/timeline", response_class=HTMLResponse)
def timeline(request: Request, view: str = "calendar", error: str = ""):
    view_mode = "list" if view == "list" else "calendar"
    session = request.state.session
    if view_mode == "list":
        content = render_activity_section(session)
    else:
        content = render_calendar_section(session)
    error_html = f'<div class="alert">{html.escape(error)}</div>' if error else ""

    def toggle(mode, label):
        active = " active" if view_mode == mode else ""
        return f'<a href="/timeline?view={mode}" class="chip{active}">{label}</a>'

    return f"""<!DOCTYPE html>
<html>
<head>{PAGE_STYLE}
  <title>Activity Timeline</title>
</head>
<body>
  {_nav_bar(view_mode)}
  <div class="container">
    <h1>Activity Timeline</h1>
    <div class="view-toggle">{toggle('calendar', 'Calendar')}{toggle('list', 'List')}</div>
    {error_html}
    {content}
  </div>
</body>
</html>"""
