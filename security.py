import secrets

from fastapi import Request


def _request_origin_host(request: Request) -> str:
    header = request.headers.get("origin") or request.headers.get("referer") or ""
    if "://" not in header:
        return ""
    return header.split("://", 1)[1].split("/", 1)[0].lower()


def _is_same_origin(request: Request) -> bool:
    origin_host = _request_origin_host(request)
    if not origin_host:
        return False
    return origin_host == request.url.netloc.lower()


def _new_session_token() -> str:
    return secrets.token_urlsafe(32)


def _set_session_cookie(response, request: Request, cookie_name: str, token: str, max_age: int):
    response.set_cookie(
        cookie_name,
        token,
        max_age=max_age,
        httponly=True,
        samesite="lax",
        secure=request.url.scheme == "https",
    )
