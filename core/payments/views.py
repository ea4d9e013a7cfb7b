"""
Payments Views (core.payments)
==============================

1. PaymentConfigView
   - URL: /api/payments/config/
   - Method: GET
   - Auth: None
   - Purpose:
       Returns the publishable key and currency so the frontend can
       initialize the Stripe payment widget.

Intent creation lives with the purchase it belongs to
(``/api/courses/<id>/enroll/``); card data never touches this backend.

Author: CraftHub Development Team
Version: 1.0.0
"""

from django.conf import settings
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from .gateway import publishable_key


class PaymentConfigView(APIView):
    """
    endpoint so the frontend can initialize Stripe.js
    """
    permission_classes = [AllowAny]

    def get(self, request):
        return Response(
            {
                "publishableKey": publishable_key(),
                "currency": settings.DEFAULT_CURRENCY,
                "liveMode": settings.STRIPE_LIVE_MODE,
            },
            status=status.HTTP_200_OK,
        )
