from typing import Optional, TypeVar

from django.conf import settings
from django.contrib.auth.models import AbstractBaseUser
from rest_framework import HTTP_HEADER_ENCODING
from rest_framework.request import Request

from rest_framework_simplejwt.authentication import JWTAuthentication as HeaderJWTAuthentication
from rest_framework_simplejwt.models import TokenUser
from rest_framework_simplejwt.tokens import Token

AuthUser = TypeVar("AuthUser", AbstractBaseUser, TokenUser)


class JWTAuthentication(HeaderJWTAuthentication):
    """
    Cookie-based JWT authentication. The access token is read from the
    http-only ``access_token`` cookie set at sign-in instead of the
    Authorization header; validation and user lookup are simplejwt's.

    Requests without the cookie fall through to the next authentication
    class (the header variant, used by non-browser clients).
    """

    www_authenticate_realm = "api"
    media_type = "application/json"

    def authenticate(self, request: Request) -> Optional[tuple[AuthUser, Token]]:
        cookie = request.COOKIES.get(settings.AUTH_COOKIE_ACCESS) or None
        if cookie is None:
            return None

        raw_token = cookie.encode(HTTP_HEADER_ENCODING)
        validated_token = self.get_validated_token(raw_token)

        return self.get_user(validated_token), validated_token
