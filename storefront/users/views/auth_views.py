"""
Storefront Authentication Views

Secure authentication endpoints for customers and the shop operator. JWTs are
never returned in response bodies; they are stored in http-only cookies.
Every successful sign-in (email, social or fresh sign-up) rotates the
account's active session token and hands the new value to the signing-in
device.

Views:
- SignInView: Email + password sign-in
- SignUpView: Email registration (signs the new user in)
- SocialSignInView: Google ID-token sign-in
- CookieTokenRefreshView: Refresh the JWT pair from the refresh cookie
- SignOutView: Blacklist the refresh token and clear cookies

Author: CraftHub Development Team
Version: 1.0.0
"""

import logging

from django.contrib.auth.models import update_last_login
from django.utils.translation import gettext_lazy as _
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.serializers import TokenRefreshSerializer
from rest_framework_simplejwt.views import TokenObtainPairView
from django.conf import settings

from core.exceptions import SocialAuthError
from ..context import revoke_refresh_token
from ..cookies import clear_auth_cookies, set_auth_cookies
from ..models import get_profile
from ..serializers import (
    SignInSerializer,
    SignUpSerializer,
    SocialSignInSerializer,
    UserSerializer,
)
from ..social import GoogleIdentityVerifier, user_from_google_claims

logger = logging.getLogger(__name__)


def issue_session(user, access: str, refresh: str, status_code: int = status.HTTP_200_OK) -> Response:
    """
    Build the sign-in response for ``user``.

    Rotates the active session token (overwriting the previous device's
    token) and sets the auth cookies.
    """
    session_token = get_profile(user).rotate_session_token()
    logger.info("Issued new session for user %s", user.pk)
    response = Response(
        {"user": UserSerializer(user).data, "session_token": session_token},
        status=status_code,
    )
    return set_auth_cookies(response, access=access, refresh=refresh, session_token=session_token)


def issue_session_for(user, status_code: int = status.HTTP_200_OK) -> Response:
    """Mint a fresh JWT pair for ``user`` and issue the session."""
    refresh = SignInSerializer.get_token(user)
    if settings.SIMPLE_JWT.get("UPDATE_LAST_LOGIN"):
        update_last_login(None, user)
    return issue_session(user, str(refresh.access_token), str(refresh), status_code)


class SignInView(TokenObtainPairView):
    """
    Email + password sign-in.

    - Validates the credentials through SimpleJWT (EmailBackend).
    - Removes the tokens from the payload and stores them in http-only
      cookies instead.
    - Rotates the session token and returns it with the user payload.
    """

    serializer_class = SignInSerializer

    def post(self, request: Request, *args, **kwargs) -> Response:
        serializer = self.get_serializer(data=request.data)
        try:
            serializer.is_valid(raise_exception=True)
        except TokenError as e:
            raise InvalidToken(e.args[0])

        data = serializer.validated_data
        return issue_session(serializer.user, data["access"], data["refresh"])


class SignUpView(APIView):
    """
    Public registration endpoint.

    Request Body Example (JSON):
    {
        "email": "asha@example.com",
        "first_name": "Asha",
        "password": "s3cret-Pass",
        "password_confirm": "s3cret-Pass"
    }

    On success the new account is signed in immediately (201 + cookies).
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request: Request) -> Response:
        serializer = SignUpSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        user = serializer.save()
        logger.info("Registered user %s", user.pk)
        return issue_session_for(user, status_code=status.HTTP_201_CREATED)


class SocialSignInView(APIView):
    """
    Social sign-in with an identity token obtained by the frontend popup.

    Body: {"provider": "google", "id_token": "..."}
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request: Request) -> Response:
        serializer = SocialSignInSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            claims = GoogleIdentityVerifier().verify(serializer.validated_data["id_token"])
        except SocialAuthError as e:
            return Response(e.to_dict(), status=e.status_code)

        user, created = user_from_google_claims(claims)
        if not user.is_active:
            return Response({"detail": _("This account is disabled.")}, status=status.HTTP_403_FORBIDDEN)
        return issue_session_for(user, status_code=status.HTTP_201_CREATED if created else status.HTTP_200_OK)


class CookieTokenRefreshView(APIView):
    """
    Refresh the JWT pair using the ``refresh_token`` cookie and store the
    new pair in cookies again. The session token is not rotated.
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request: Request) -> Response:
        refresh_token = request.COOKIES.get(settings.AUTH_COOKIE_REFRESH)
        if not refresh_token:
            return Response(
                {"detail": "Refresh token not provided"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        serializer = TokenRefreshSerializer(data={"refresh": refresh_token})
        try:
            serializer.is_valid(raise_exception=True)
        except TokenError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        response = Response({"detail": "Token refreshed."}, status=status.HTTP_200_OK)
        return set_auth_cookies(response, access=data.get("access"), refresh=data.get("refresh"))


class SignOutView(APIView):
    """
    Sign out by blacklisting the refresh token and deleting the auth cookies.
    Always answers 200, also for already expired sessions.
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request: Request) -> Response:
        try:
            revoke_refresh_token(request.COOKIES.get(settings.AUTH_COOKIE_REFRESH))
        except TokenError as exc:
            logger.info("Sign-out with unusable refresh token: %s", exc)
        response = Response({"detail": _("Successfully signed out.")}, status=status.HTTP_200_OK)
        return clear_auth_cookies(response)
