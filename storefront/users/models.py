"""
Storefront User Models

This module extends Django's built-in User model with a profile holding the
account's active session token, and keeps profiles in sync through signals.

Models:
- Profile: per-user record mirrored from the most recent sign-in

The active session token is rotated on every successful sign-in and
unconditionally overwrites the previous value; the course playback page
compares it with the token held by the device to detect a superseded
session.

Author: CraftHub Development Team
Version: 1.0.0
"""

import secrets

from django.conf import settings
from django.db import models
from django.db.models.signals import post_save
from django.dispatch import receiver
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

__all__ = ["Profile"]


class Profile(models.Model):
    """
    Extended user profile for the storefront.

    Attributes:
        user: One-to-one relationship with Django User model
        phone: Optional contact number used to prefill checkout
        active_session_token: Opaque token of the most recent sign-in
        session_rotated_at: When the token was last rotated
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
        verbose_name=_("User"),
    )

    phone = models.CharField(_("Phone"), max_length=32, blank=True, default="")

    active_session_token = models.CharField(
        _("Active Session Token"),
        max_length=128,
        blank=True,
        default="",
        help_text=_("Token of the most recently signed-in device"),
    )

    session_rotated_at = models.DateTimeField(_("Session Rotated At"), null=True, blank=True)

    class Meta:
        verbose_name = _("User Profile")
        verbose_name_plural = _("User Profiles")

    def __str__(self) -> str:
        return f"{self.user.username} Profile"

    def __repr__(self) -> str:
        return f"<Profile(user={self.user.username}, rotated={self.session_rotated_at})>"

    def rotate_session_token(self) -> str:
        """
        Issue a fresh session token for a new sign-in.

        Returns:
            The new token, which the caller hands to the signing-in device
        """
        self.active_session_token = secrets.token_urlsafe(32)
        self.session_rotated_at = timezone.now()
        self.save(update_fields=["active_session_token", "session_rotated_at"])
        return self.active_session_token


# --- Signal Handlers for Automatic Profile Management ---


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def create_user_profile(sender, instance, created: bool, **kwargs) -> None:
    """Create a profile for every new user."""
    if created:
        Profile.objects.get_or_create(user=instance)


def get_profile(user) -> Profile:
    profile, _ = Profile.objects.get_or_create(user=user)
    return profile


def read_active_session_token(user):
    """
    Fresh read of the account's active session token.

    Returns:
        The token, or None when the user has no profile row
    """
    return (
        Profile.objects.filter(user_id=user.pk)
        .values_list("active_session_token", flat=True)
        .first()
    )
