"""
Auth cookie helpers.

The JWT pair travels in http-only cookies (``access_token``,
``refresh_token``). The device's copy of the active session token is stored in
``device_session_token``, which the page may read so it can echo it in the
``X-Device-Session`` header.
"""

from django.conf import settings

AUTH_COOKIE_NAMES = (
    settings.AUTH_COOKIE_ACCESS,
    settings.AUTH_COOKIE_REFRESH,
    settings.DEVICE_SESSION_COOKIE,
)


def _lifetime(key: str) -> int:
    return int(settings.SIMPLE_JWT[key].total_seconds())


def set_auth_cookies(response, access: str = None, refresh: str = None, session_token: str = None):
    """Attach the JWT pair (and optionally the device session token) to ``response``."""
    common = {
        "secure": settings.AUTH_COOKIE_SECURE,
        "samesite": settings.AUTH_COOKIE_SAMESITE,
        "path": "/",
    }
    if refresh:
        response.set_cookie(
            settings.AUTH_COOKIE_REFRESH,
            refresh,
            httponly=True,
            max_age=_lifetime("REFRESH_TOKEN_LIFETIME"),
            **common,
        )
    if access:
        response.set_cookie(
            settings.AUTH_COOKIE_ACCESS,
            access,
            httponly=True,
            max_age=_lifetime("ACCESS_TOKEN_LIFETIME"),
            **common,
        )
    if session_token:
        response.set_cookie(
            settings.DEVICE_SESSION_COOKIE,
            session_token,
            httponly=False,
            max_age=_lifetime("REFRESH_TOKEN_LIFETIME"),
            **common,
        )
    return response


def clear_auth_cookies(response):
    for name in AUTH_COOKIE_NAMES:
        response.delete_cookie(name, path="/", samesite=settings.AUTH_COOKIE_SAMESITE)
    return response


def device_session_token(request) -> str:
    """Session token held by the calling device (header first, then cookie)."""
    return (
        request.headers.get(settings.DEVICE_SESSION_HEADER)
        or request.COOKIES.get(settings.DEVICE_SESSION_COOKIE)
        or ""
    )
