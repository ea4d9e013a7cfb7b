"""
Email authentication backend.

Customers sign in with their email address; usernames are an internal detail
(sign-up stores the email as username too).
"""

import logging

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend

logger = logging.getLogger(__name__)


class EmailBackend(ModelBackend):
    """Authenticate against ``User.email`` (case-insensitive)."""

    def authenticate(self, request, username=None, password=None, email=None, **kwargs):
        email = email or username
        if not email or password is None:
            return None

        UserModel = get_user_model()
        user = (
            UserModel._default_manager.filter(email__iexact=email.strip())
            .order_by("id")
            .first()
        )
        if user is None:
            UserModel().set_password(password)
            return None

        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        logger.info("Rejected sign-in for %s", email)
        return None
