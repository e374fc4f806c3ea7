import os
from contextvars import ContextVar
from datetime import date
from typing import Optional

API_BASE_URL = os.environ.get("FITNESS_API_URL", "http://localhost:5001/api").rstrip("/")
API_TOKEN = os.environ.get("FITNESS_API_TOKEN", "").strip()
API_TIMEOUT_SECONDS = float(os.environ.get("FITNESS_API_TIMEOUT", "15"))
API_TOKEN_COOKIE = "token"
FORMS_BASE_URL = os.environ.get("FITNESS_FORMS_URL", "").rstrip("/")

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

VIEWPORT_BREAKPOINT = 768
DEFAULT_VIEWPORT_WIDTH = 1024
MONTH_KEY_FORMAT = "%Y-%m"
DATE_FORMAT = "%Y-%m-%d"

SESSION_COOKIE_NAME = "fitness_session"
VIEWPORT_COOKIE_NAME = "viewport_width"
SESSION_TTL_SECONDS = 60 * 60 * 2

PUBLIC_PATHS = {"/session/end"}

_viewport_width: ContextVar[Optional[int]] = ContextVar("_viewport_width", default=None)


def _set_client_viewport(width_cookie: str):
    """Set per-request viewport width from the cookie the page script maintains."""
    width = None
    try:
        width = int((width_cookie or "").strip())
    except ValueError:
        width = None
    if width is not None and 0 < width <= 10000:
        _viewport_width.set(width)
        return
    _viewport_width.set(None)


def _current_viewport_width() -> int:
    return _viewport_width.get() or DEFAULT_VIEWPORT_WIDTH


def _today_local() -> date:
    return date.today()
