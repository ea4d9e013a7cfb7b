"""
Storefront Users Views Package

Authentication (email, social, refresh, sign-out) and account endpoints
(current user, password reset).

Author: CraftHub Development Team
Version: 1.0.0
"""

from .auth_views import (
    SignInView,
    SignUpView,
    SocialSignInView,
    CookieTokenRefreshView,
    SignOutView,
)
from .account_views import (
    CurrentUserView,
    PasswordResetRequestView,
    PasswordResetConfirmView,
)
