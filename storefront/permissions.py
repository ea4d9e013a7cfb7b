"""
Storefront permission classes.

The shop operator is any staff account (``is_staff``); the Django admin and
the back-office endpoints share this notion of "admin".
"""

from rest_framework import permissions


class IsAdminOrReadOnly(permissions.BasePermission):
    """Read access for everyone, writes for staff only."""

    def has_permission(self, request, view) -> bool:
        if request.method in permissions.SAFE_METHODS:
            return True
        return bool(request.user and request.user.is_authenticated and request.user.is_staff)
