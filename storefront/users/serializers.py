"""
Storefront User Serializers

This module provides the serializers for account sign-up, email sign-in,
social sign-in, password reset and the current-user payload.

Serializers:
- SignInSerializer: JWT pair from email + password
- UserSerializer: Public account data (with admin flag)
- SignUpSerializer: Email/password registration with confirmation
- SocialSignInSerializer: Provider + identity token
- PasswordResetRequestSerializer / PasswordResetConfirmSerializer

Author: CraftHub Development Team
Version: 1.0.0
"""

from typing import Any, Dict

from django.contrib.auth.models import User
from django.contrib.auth.password_validation import validate_password
from django.contrib.auth.tokens import default_token_generator
from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils.encoding import force_str
from django.utils.http import urlsafe_base64_decode
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from rest_framework_simplejwt.tokens import RefreshToken

from .models import Profile
from .social import SUPPORTED_PROVIDERS


class SignInSerializer(TokenObtainPairSerializer):
    """
    JWT pair serializer that authenticates by email instead of username.

    The token payload carries the admin flag so the frontend can show the
    back office entry without an extra request.
    """

    username_field = "email"

    @classmethod
    def get_token(cls, user: User) -> RefreshToken:
        token = super().get_token(user)
        token["email"] = user.email
        token["is_admin"] = user.is_staff
        return token


class UserSerializer(serializers.ModelSerializer):
    """
    Account data returned by sign-in, sign-up and ``/auth/me/``.
    """

    full_name = serializers.SerializerMethodField()
    is_admin = serializers.BooleanField(source="is_staff", read_only=True)
    phone = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ("id", "username", "email", "first_name", "last_name", "full_name", "is_admin", "phone")
        read_only_fields = fields

    def get_full_name(self, obj: User) -> str:
        return obj.get_full_name() or obj.email or obj.username

    def get_phone(self, obj: User) -> str:
        try:
            return obj.profile.phone
        except Profile.DoesNotExist:
            return ""


class SignUpSerializer(serializers.ModelSerializer):
    """
    Email/password registration.

    The email doubles as username. Passwords must match and pass Django's
    password validators.
    """

    email = serializers.EmailField(required=True)
    password = serializers.CharField(write_only=True, required=True, style={"input_type": "password"})
    password_confirm = serializers.CharField(write_only=True, required=True, style={"input_type": "password"})

    class Meta:
        model = User
        fields = ["email", "first_name", "last_name", "password", "password_confirm"]

    def validate_email(self, value: str) -> str:
        value = value.strip().lower()
        if User.objects.filter(email__iexact=value).exists() or User.objects.filter(username=value).exists():
            raise serializers.ValidationError(_("A user with this email already exists."))
        return value

    def validate_password(self, value: str) -> str:
        try:
            validate_password(value)
        except DjangoValidationError as e:
            raise serializers.ValidationError(list(e.messages))
        return value

    def validate(self, data: Dict[str, Any]) -> Dict[str, Any]:
        if data["password"] != data["password_confirm"]:
            raise serializers.ValidationError({"password_confirm": _("Passwords do not match.")})
        return data

    def create(self, validated_data: Dict[str, Any]) -> User:
        password = validated_data.pop("password")
        validated_data.pop("password_confirm")
        email = validated_data.pop("email")
        return User.objects.create_user(username=email, email=email, password=password, **validated_data)


class SocialSignInSerializer(serializers.Serializer):
    provider = serializers.ChoiceField(choices=SUPPORTED_PROVIDERS)
    id_token = serializers.CharField()


class PasswordResetRequestSerializer(serializers.Serializer):
    email = serializers.EmailField()


class PasswordResetConfirmSerializer(serializers.Serializer):
    """
    Completes a password reset from the emailed link.

    Fields:
    - uid: base64 user id from the link
    - token: reset token from the link
    - password / password_confirm: the new password
    """

    uid = serializers.CharField()
    token = serializers.CharField()
    password = serializers.CharField(write_only=True, style={"input_type": "password"})
    password_confirm = serializers.CharField(write_only=True, style={"input_type": "password"})

    def validate(self, data: Dict[str, Any]) -> Dict[str, Any]:
        try:
            user_id = force_str(urlsafe_base64_decode(data["uid"]))
            user = User.objects.get(pk=user_id)
        except (TypeError, ValueError, OverflowError, User.DoesNotExist):
            raise serializers.ValidationError({"uid": _("Invalid reset link.")})

        if not default_token_generator.check_token(user, data["token"]):
            raise serializers.ValidationError({"token": _("Reset link is invalid or has expired.")})

        if data["password"] != data["password_confirm"]:
            raise serializers.ValidationError({"password_confirm": _("Passwords do not match.")})

        try:
            validate_password(data["password"], user=user)
        except DjangoValidationError as e:
            raise serializers.ValidationError({"password": list(e.messages)})

        data["user"] = user
        return data

    def save(self) -> User:
        user = self.validated_data["user"]
        user.set_password(self.validated_data["password"])
        user.save(update_fields=["password"])
        return user
