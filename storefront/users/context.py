"""
Explicit authentication context.

Code that needs the caller's identity receives an ``AuthContext`` value
instead of reaching for request globals: the playback session guard, order
placement and enrollment all take it as an argument.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from django.conf import settings
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

logger = logging.getLogger(__name__)


def revoke_refresh_token(raw_token: Optional[str]) -> bool:
    """
    Blacklist a refresh token.

    Returns:
        True if a token was blacklisted, False if there was none

    Raises:
        TokenError: The token is malformed, expired or already blacklisted
    """
    if not raw_token:
        return False
    RefreshToken(raw_token).blacklist()
    return True


def _no_sign_out() -> None:
    return None


@dataclass(frozen=True)
class AuthContext:
    """
    Identity of the current caller plus a way to end its session.

    Attributes:
        user: Django user, or None for anonymous callers
        sign_out: Callable that ends this device's session
    """

    user: Optional[object] = None
    sign_out: Callable[[], None] = field(default=_no_sign_out, compare=False, repr=False)

    @classmethod
    def from_request(cls, request) -> "AuthContext":
        user = getattr(request, "user", None)
        if user is None or not user.is_authenticated:
            return cls()
        refresh_cookie = request.COOKIES.get(settings.AUTH_COOKIE_REFRESH)
        return cls(user=user, sign_out=lambda: revoke_refresh_token(refresh_cookie))

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def is_admin(self) -> bool:
        return bool(self.user is not None and self.user.is_staff)

    @property
    def identifier(self) -> str:
        """Account identifier shown to the user (email, else username)."""
        if self.user is None:
            return ""
        return self.user.email or self.user.get_username()


def sign_out_quietly(auth: AuthContext) -> None:
    """End the session; an unusable refresh token is logged and ignored."""
    try:
        auth.sign_out()
    except TokenError as exc:
        logger.info("Refresh token not revoked: %s", exc)
