"""
Stripe Payment Gateway (core.payments)
======================================

Server side of the payment widget. The storefront creates a PaymentIntent for
the amount in minor units (paise for INR), hands ``client_secret`` and the
publishable key to the frontend widget, and later verifies the confirmation id
the widget's success handler posts back.

- ``PaymentGateway.create_intent``  → new PaymentIntent with metadata
- ``PaymentGateway.retrieve``       → fetch a PaymentIntent by id
- ``PaymentGateway.verify``         → retrieve and check status/metadata/amount

All ``stripe`` errors are translated into ``PaymentGatewayError``.

Author: CraftHub Development Team
Version: 1.0.0
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional

import stripe
from django.conf import settings

from core.exceptions import PaymentGatewayError

stripe.api_key = settings.STRIPE_SECRET_KEY

logger = logging.getLogger(__name__)

SUCCEEDED = "succeeded"


def to_minor_units(amount) -> int:
    """Convert a major-unit amount (Decimal, float, str) to integer minor units."""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def publishable_key() -> str:
    return (
        settings.STRIPE_LIVE_PUBLISHABLE_KEY
        if settings.STRIPE_LIVE_MODE
        else settings.STRIPE_TEST_PUBLISHABLE_KEY
    )


class PaymentGateway:
    """Creates and verifies Stripe PaymentIntents."""

    def __init__(self, currency: Optional[str] = None) -> None:
        self.currency = (currency or settings.DEFAULT_CURRENCY).lower()

    def create_intent(
        self,
        amount_minor: int,
        currency: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        """
        Create a PaymentIntent.

        Args:
            amount_minor: Amount in minor currency units
            currency: ISO currency code, defaults to DEFAULT_CURRENCY
            metadata: Values stored on the intent (stringified)

        Returns:
            The Stripe PaymentIntent object

        Raises:
            PaymentGatewayError: On any Stripe failure
        """
        metadata = {key: str(value) for key, value in (metadata or {}).items()}
        try:
            intent = stripe.PaymentIntent.create(
                amount=amount_minor,
                currency=(currency or self.currency).lower(),
                metadata=metadata,
                automatic_payment_methods={"enabled": True},
            )
        except stripe.StripeError as exc:
            logger.error("PaymentIntent creation failed: %s", exc)
            raise PaymentGatewayError(
                "Payment could not be started.",
                details={"stripe_error": getattr(exc, "user_message", None) or str(exc)},
            ) from exc

        logger.info("Created PaymentIntent %s (%s %s)", intent["id"], amount_minor, currency or self.currency)
        return intent

    def retrieve(self, payment_id: str):
        try:
            return stripe.PaymentIntent.retrieve(payment_id, expand=["latest_charge"])
        except stripe.StripeError as exc:
            logger.error("PaymentIntent %s could not be retrieved: %s", payment_id, exc)
            raise PaymentGatewayError(
                "Payment could not be verified.",
                details={"payment_id": payment_id},
            ) from exc

    def verify(
        self,
        payment_id: str,
        expected_metadata: Optional[Dict[str, Any]] = None,
        expected_amount: Optional[int] = None,
    ):
        """
        Retrieve ``payment_id`` and make sure it is a succeeded payment for
        the expected purchase.

        Raises:
            PaymentGatewayError: Unknown intent, not succeeded, refunded, or
                mismatching metadata/amount
        """
        if not payment_id:
            raise PaymentGatewayError("Missing payment id.", status_code=400)

        intent = self.retrieve(payment_id)
        status = intent.get("status")
        if status != SUCCEEDED:
            raise PaymentGatewayError(
                "Payment has not succeeded.",
                status_code=400,
                details={"payment_id": payment_id, "status": status},
            )

        # Refunded intents keep status "succeeded"; the charge carries the refund.
        charge = intent.get("latest_charge")
        if isinstance(charge, dict) and (charge.get("refunded") or charge.get("amount_refunded")):
            logger.warning("PaymentIntent %s was refunded; rejecting confirmation", payment_id)
            raise PaymentGatewayError(
                "Payment has been refunded.",
                status_code=400,
                details={"payment_id": payment_id},
            )

        metadata = intent.get("metadata") or {}
        for key, value in (expected_metadata or {}).items():
            if str(metadata.get(key)) != str(value):
                logger.warning(
                    "PaymentIntent %s metadata mismatch on %s (%s != %s)",
                    payment_id, key, metadata.get(key), value,
                )
                raise PaymentGatewayError(
                    "Payment does not belong to this purchase.",
                    status_code=400,
                    details={"payment_id": payment_id},
                )

        if expected_amount is not None and intent.get("amount") != expected_amount:
            raise PaymentGatewayError(
                "Payment amount does not match.",
                status_code=400,
                details={"payment_id": payment_id},
            )
        return intent
