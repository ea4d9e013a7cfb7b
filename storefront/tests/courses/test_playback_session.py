from types import SimpleNamespace
from unittest import mock

from django.test import SimpleTestCase
from rest_framework_simplejwt.exceptions import TokenError

from storefront.courses.playback import HOME_PATH, SUPERSEDED_MESSAGE, PlaybackSession, SessionGuard
from storefront.users.context import AuthContext


class SessionGuardTests(SimpleTestCase):
    def test_decision_rule(self):
        self.assertFalse(SessionGuard.is_superseded("abc", "abc", visible=True))
        self.assertTrue(SessionGuard.is_superseded("new", "abc", visible=True))
        self.assertFalse(SessionGuard.is_superseded("new", "abc", visible=False))
        self.assertFalse(SessionGuard.is_superseded("", "abc", visible=True))
        self.assertFalse(SessionGuard.is_superseded(None, "abc", visible=True))
        self.assertTrue(SessionGuard.is_superseded("new", None, visible=True))


class PlaybackSessionTests(SimpleTestCase):
    def setUp(self):
        self.user = SimpleNamespace(pk=7)
        self.sign_out = mock.Mock()
        self.notify = mock.Mock()
        self.navigate = mock.Mock()
        self.profile_token = "device-a"

    def session(self, local_token="device-a", visible=True, read=None, auth=None):
        return PlaybackSession(
            auth=auth or AuthContext(user=self.user, sign_out=self.sign_out),
            read_profile_token=read or (lambda user: self.profile_token),
            local_token=local_token,
            notify=self.notify,
            navigate=self.navigate,
            visible=visible,
        )

    def test_matching_tokens_keep_playing(self):
        session = self.session()
        self.assertFalse(session.mount())
        self.assertFalse(session.focus())
        self.sign_out.assert_not_called()
        self.navigate.assert_not_called()

    def test_superseded_session_signs_out_exactly_once(self):
        session = self.session()
        session.mount()

        self.profile_token = "device-b"
        self.assertTrue(session.focus())
        self.assertTrue(session.focus())
        self.assertTrue(session.visibility_changed(True))

        self.sign_out.assert_called_once_with()
        self.notify.assert_called_once_with(SUPERSEDED_MESSAGE)
        self.navigate.assert_called_once_with(HOME_PATH)
        self.assertEqual(HOME_PATH, "/")

    def test_hidden_page_waits_until_visible_again(self):
        self.profile_token = "device-b"
        session = self.session(visible=False)

        self.assertFalse(session.mount())
        self.assertFalse(session.visibility_changed(False))
        self.sign_out.assert_not_called()

        self.assertTrue(session.visibility_changed(True))
        self.sign_out.assert_called_once_with()
        self.navigate.assert_called_once_with("/")

    def test_empty_profile_token_never_supersedes(self):
        self.profile_token = ""
        self.assertFalse(self.session(local_token="device-a").mount())
        self.sign_out.assert_not_called()

    def test_profile_read_failure_keeps_playing(self):
        def broken_read(user):
            raise ConnectionError("database unavailable")

        session = self.session(read=broken_read)

        self.assertFalse(session.mount())
        self.assertFalse(session.superseded)
        self.sign_out.assert_not_called()

    def test_sign_out_failure_still_notifies_and_navigates(self):
        self.sign_out.side_effect = RuntimeError("token already revoked")
        self.profile_token = "device-b"

        with self.assertLogs("storefront.courses.playback", level="ERROR"):
            self.assertTrue(self.session().mount())

        self.notify.assert_called_once_with(SUPERSEDED_MESSAGE)
        self.navigate.assert_called_once_with("/")

    def test_expired_refresh_token_is_signed_out_quietly(self):
        self.sign_out.side_effect = TokenError("Token is blacklisted")
        self.profile_token = "device-b"

        with self.assertLogs("storefront.users.context", level="INFO") as logs:
            self.assertTrue(self.session().mount())

        self.assertFalse([line for line in logs.output if line.startswith("ERROR")])
        self.sign_out.assert_called_once_with()
        self.navigate.assert_called_once_with(HOME_PATH)

    def test_anonymous_viewer_is_never_checked(self):
        read = mock.Mock(return_value="device-b")
        session = self.session(read=read, auth=AuthContext())
        self.assertFalse(session.mount())
        read.assert_not_called()

    def test_dispatch_routes_triggers(self):
        self.profile_token = "device-b"
        session = self.session()
        self.assertFalse(session.dispatch("visibility", visible=False))
        self.assertTrue(session.dispatch("focus", visible=True))
        with self.assertRaises(ValueError):
            self.session().dispatch("poll")
