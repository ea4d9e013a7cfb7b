"""
CraftHub Storefront Application Configuration

Django application configuration for the storefront: the craft-supplies shop
(catalog, cart, checkout, orders), the paid video-course platform
(courses, enrollments, playback) and the accounts that use both.

Author: CraftHub Development Team
Version: 1.0.0
"""

from django.apps import AppConfig


class StorefrontConfig(AppConfig):
    """
    Configuration class for the storefront Django application.

    Attributes:
        default_auto_field: Default primary key field type for models
        name: Application name for Django registration
        verbose_name: Human-readable application name for admin interface
    """

    default_auto_field: str = "django.db.models.BigAutoField"
    name: str = "storefront"
    verbose_name: str = "Storefront"
