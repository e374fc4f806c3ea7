import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse

from config import (
    LOG_LEVEL,
    PUBLIC_PATHS,
    SESSION_COOKIE_NAME,
    SESSION_TTL_SECONDS,
    VIEWPORT_COOKIE_NAME,
    _current_viewport_width,
    _set_client_viewport,
    _viewport_width,
)
from routers.activity import router as activity_router
from routers.calendar import router as calendar_router
from routers.timeline import router as timeline_router
from security import _is_same_origin, _set_session_cookie
from sessions import SessionStore

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI()
app.state.sessions = SessionStore()


@app.middleware("http")
async def session_middleware(request: Request, call_next):
    if request.method in {"POST", "PUT", "PATCH", "DELETE"} and not _is_same_origin(request):
        logger.warning("Rejected cross-origin %s %s", request.method, request.url.path)
        return JSONResponse({"error": "forbidden"}, status_code=403)

    _set_client_viewport(request.cookies.get(VIEWPORT_COOKIE_NAME, ""))
    if request.url.path in PUBLIC_PATHS:
        return await call_next(request)

    store: SessionStore = request.app.state.sessions
    token = request.cookies.get(SESSION_COOKIE_NAME, "")
    session = store.get(token)
    created = session is None
    if created:
        session = store.create(_current_viewport_width())
    elif _viewport_width.get() is not None:
        session.viewport.resize(_current_viewport_width())
    request.state.session = session

    response = await call_next(request)
    if created:
        _set_session_cookie(response, request, SESSION_COOKIE_NAME, session.token, SESSION_TTL_SECONDS)
    return response


app.include_router(timeline_router)
app.include_router(calendar_router)
app.include_router(activity_router)


@app.post("/session/end")
def session_end(request: Request):
    request.app.state.sessions.end(request.cookies.get(SESSION_COOKIE_NAME, ""))
    resp = RedirectResponse(url="/", status_code=303)
    resp.delete_cookie(SESSION_COOKIE_NAME)
    return resp
