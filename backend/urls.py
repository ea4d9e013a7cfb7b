"""
CraftHub URL Configuration

- /admin/        → Django admin (jazzmin back office)
- /api/          → storefront REST API (auth, products, cart, orders, courses)
- /api/payments/ → payment widget configuration
- /stripe/       → dj-stripe webhook endpoint
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include("storefront.urls")),
    path("api/payments/", include("core.payments.urls")),
    path("stripe/", include("djstripe.urls", namespace="djstripe")),
]
