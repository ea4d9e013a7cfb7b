"""
Single-active-session enforcement for course playback.

Every sign-in writes a fresh token to the account profile and to the
signing-in device. The playback page compares the two on mount and whenever
the page comes back to the foreground; there is no polling. When the profile
holds a different, non-empty token while the page is visible, this device's
session has been superseded: it is signed out, the user is told why, and the
page navigates to the site root. Supersession is terminal for the page.

Failure handling:
- Profile read fails: no action, playback continues.
- Sign-out fails: logged, notification and navigation still happen.

This is an advisory control. Playback content is not gated on the token, so
a client that never runs the check keeps playing.

Author: CraftHub Development Team
Version: 1.0.0
"""

import logging
from typing import Callable, Optional

from ..users.context import AuthContext, sign_out_quietly

logger = logging.getLogger(__name__)

SUPERSEDED_MESSAGE = "You have been signed in on another device."
HOME_PATH = "/"

TRIGGER_MOUNT = "mount"
TRIGGER_FOCUS = "focus"
TRIGGER_VISIBILITY = "visibility"
TRIGGERS = (TRIGGER_MOUNT, TRIGGER_FOCUS, TRIGGER_VISIBILITY)


class SessionGuard:
    """Decision rule for supersession."""

    @staticmethod
    def is_superseded(profile_token: Optional[str], local_token: Optional[str], visible: bool) -> bool:
        """
        True when the page is visible and the profile holds a non-empty
        token that differs from the device's token (exact comparison).
        """
        if not visible:
            return False
        if not profile_token:
            return False
        return profile_token != (local_token or "")


class PlaybackSession:
    """
    Controller for one mounted playback page.

    Args:
        auth: Identity of the viewer and how to sign it out
        read_profile_token: Callable(user) returning the profile's token
            (None when there is no profile); may raise on read failure
        local_token: Token held by this device
        notify: Callable(message) showing the blocking notification
        navigate: Callable(path) leaving the page
        visible: Whether the page is currently the foreground document
    """

    def __init__(
        self,
        auth: AuthContext,
        read_profile_token: Callable[[object], Optional[str]],
        local_token: Optional[str],
        notify: Callable[[str], None],
        navigate: Callable[[str], None],
        visible: bool = True,
    ) -> None:
        self.auth = auth
        self.read_profile_token = read_profile_token
        self.local_token = local_token or ""
        self.notify = notify
        self.navigate = navigate
        self.visible = visible
        self.superseded = False

    def mount(self) -> bool:
        return self.check(TRIGGER_MOUNT)

    def focus(self) -> bool:
        return self.check(TRIGGER_FOCUS)

    def visibility_changed(self, visible: bool) -> bool:
        self.visible = visible
        if not visible:
            return self.superseded
        return self.check(TRIGGER_VISIBILITY)

    def check(self, trigger: str) -> bool:
        """
        Run one comparison.

        Returns:
            True if this session is (now or already) superseded
        """
        if self.superseded:
            return True
        if not self.auth.is_authenticated:
            return False

        try:
            profile_token = self.read_profile_token(self.auth.user)
        except Exception:
            logger.warning(
                "Session check (%s) could not read profile of user %s; continuing playback",
                trigger, self.auth.user.pk, exc_info=True,
            )
            return False

        if not SessionGuard.is_superseded(profile_token, self.local_token, self.visible):
            return False

        self.superseded = True
        logger.info("Session of user %s superseded (trigger=%s)", self.auth.user.pk, trigger)
        try:
            sign_out_quietly(self.auth)
        except Exception:
            logger.exception("Sign-out after supersession failed for user %s", self.auth.user.pk)
        self.notify(SUPERSEDED_MESSAGE)
        self.navigate(HOME_PATH)
        return True

    def dispatch(self, trigger: str, visible: bool = True) -> bool:
        """Run the handler for a named trigger."""
        if trigger == TRIGGER_MOUNT:
            self.visible = visible
            return self.mount()
        if trigger == TRIGGER_FOCUS:
            self.visible = visible
            return self.focus()
        if trigger == TRIGGER_VISIBILITY:
            return self.visibility_changed(visible)
        raise ValueError(f"Unknown trigger: {trigger}")
