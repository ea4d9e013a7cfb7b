"""
Payments AppConfig
==================

Registers ``core.payments`` with Django and imports the signal handlers at
startup so the ``post_save`` receiver for dj-stripe's ``Event`` is connected
exactly once per process.

Author: CraftHub Development Team
Version: 1.0.0
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    """
    App configuration for the ``core.payments`` package.
    """

    default_auto_field = "django.db.models.BigAutoField"
    name = "core.payments"
    label = "payments"
    verbose_name = "Payments"

    def ready(self):
        # Import signals so Django registers the post_save handler for dj-stripe Event
        from . import signals  # noqa: F401
