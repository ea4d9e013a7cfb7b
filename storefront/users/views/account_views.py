"""
Storefront Account Views

Views:
- CurrentUserView: identity of the caller (``null`` when signed out)
- PasswordResetRequestView: email a reset link
- PasswordResetConfirmView: set the new password from the link

Author: CraftHub Development Team
Version: 1.0.0
"""

import logging
from smtplib import SMTPException

from django.conf import settings
from django.contrib.auth.models import User
from django.contrib.auth.tokens import default_token_generator
from django.core.mail import send_mail
from django.utils.encoding import force_bytes
from django.utils.http import urlsafe_base64_encode
from django.utils.translation import gettext_lazy as _
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from ..context import AuthContext
from ..serializers import (
    PasswordResetConfirmSerializer,
    PasswordResetRequestSerializer,
    UserSerializer,
)

logger = logging.getLogger(__name__)

RESET_SENT_MESSAGE = _("If an account exists for this email, a reset link has been sent.")


class CurrentUserView(APIView):
    """Replacement for the auth-state listener: who is signed in right now."""

    permission_classes = [AllowAny]

    def get(self, request: Request) -> Response:
        auth = AuthContext.from_request(request)
        if not auth.is_authenticated:
            return Response({"user": None, "is_admin": False})
        return Response({"user": UserSerializer(auth.user).data, "is_admin": auth.is_admin})


def build_reset_link(user: User) -> str:
    uid = urlsafe_base64_encode(force_bytes(user.pk))
    token = default_token_generator.make_token(user)
    return f"{settings.FRONTEND_URL.rstrip('/')}/reset-password?uid={uid}&token={token}"


class PasswordResetRequestView(APIView):
    """
    Sends a password reset email. The answer does not reveal whether the
    address belongs to an account.
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request: Request) -> Response:
        serializer = PasswordResetRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        email = serializer.validated_data["email"]

        user = User.objects.filter(email__iexact=email, is_active=True).order_by("id").first()
        if user is not None:
            try:
                send_mail(
                    subject="Reset your CraftHub password",
                    message=(
                        "We received a request to reset your password.\n\n"
                        f"Open this link to choose a new one:\n{build_reset_link(user)}\n\n"
                        "If you did not ask for this, you can ignore this email."
                    ),
                    from_email=None,
                    recipient_list=[user.email],
                )
            except (SMTPException, OSError):
                logger.exception("Password reset email to user %s failed", user.pk)
                return Response(
                    {"detail": _("The reset email could not be sent. Please try again later.")},
                    status=status.HTTP_502_BAD_GATEWAY,
                )
            logger.info("Password reset email sent to user %s", user.pk)

        return Response({"detail": RESET_SENT_MESSAGE}, status=status.HTTP_200_OK)


class PasswordResetConfirmView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request: Request) -> Response:
        serializer = PasswordResetConfirmSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        user = serializer.save()
        logger.info("Password reset completed for user %s", user.pk)
        return Response({"detail": _("Password has been reset.")}, status=status.HTTP_200_OK)
