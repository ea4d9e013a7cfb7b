"""
Social sign-in (Google).

The frontend runs Google's sign-in popup and posts the resulting ID token.
The token is verified with Google's tokeninfo endpoint; the audience must be
our client id and the email must be verified.

Author: CraftHub Development Team
Version: 1.0.0
"""

import logging
from typing import Any, Dict

import requests
from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils.crypto import get_random_string

from core.exceptions import SocialAuthError

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ("google",)


class GoogleIdentityVerifier:
    """Verifies Google ID tokens via the tokeninfo endpoint."""

    def __init__(self, client_id: str = None, timeout: int = 10) -> None:
        self.client_id = client_id if client_id is not None else settings.GOOGLE_CLIENT_ID
        self.timeout = timeout

    def verify(self, id_token: str) -> Dict[str, Any]:
        """
        Verify ``id_token`` and return its claims.

        Raises:
            SocialAuthError: Token rejected, wrong audience, unverified email,
                or Google unreachable
        """
        if not id_token:
            raise SocialAuthError("Missing identity token.", status_code=400)

        try:
            response = requests.get(
                settings.GOOGLE_TOKENINFO_URL,
                params={"id_token": id_token},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("Google tokeninfo request failed: %s", exc)
            raise SocialAuthError("Google sign-in is currently unavailable.", status_code=502) from exc

        if response.status_code != 200:
            logger.info("Google rejected identity token (%s)", response.status_code)
            raise SocialAuthError("Invalid Google identity token.")

        claims = response.json()
        if not self.client_id or claims.get("aud") != self.client_id:
            logger.warning("Google token audience mismatch: %s", claims.get("aud"))
            raise SocialAuthError("Google identity token was issued for another application.")

        if str(claims.get("email_verified")).lower() != "true" or not claims.get("email"):
            raise SocialAuthError("Google account email is not verified.")
        return claims


@transaction.atomic
def user_from_google_claims(claims: Dict[str, Any]):
    """
    Return the user for a verified Google identity, creating it on first
    sign-in.

    Returns:
        Tuple of (user, created)
    """
    User = get_user_model()
    email = claims["email"].strip().lower()
    user = User.objects.filter(email__iexact=email).order_by("id").first()
    if user is not None:
        return user, False

    # An unrelated account may already hold the address as its username.
    username = email[:150]
    if User.objects.filter(username__iexact=username).exists():
        username = f"{email[:141]}-{get_random_string(8).lower()}"
        logger.info("Username %s taken; Google account gets %s", email, username)

    user = User(
        username=username,
        email=email,
        first_name=claims.get("given_name", "")[:150],
        last_name=claims.get("family_name", "")[:150],
    )
    user.set_unusable_password()
    user.save()
    logger.info("Created account %s from Google sign-in", email)
    return user, True
