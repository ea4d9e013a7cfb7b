"""
Course purchase flow.

1. ``start_enrollment`` creates a payment intent for the course price in minor
   units and returns the parameters the payment widget is opened with.
2. The widget's success handler posts the payment id back;
   ``confirm_enrollment`` verifies it with the gateway and marks the
   enrollment paid (idempotent).

Author: CraftHub Development Team
Version: 1.0.0
"""

import logging
from typing import Any, Dict, Optional, Tuple

from django.db import transaction

from core.exceptions import ValidationFailed
from core.messaging import build_operator_link, enrollment_confirmation_text
from core.payments.gateway import PaymentGateway, publishable_key, to_minor_units
from ..users.context import AuthContext
from .access import is_enrolled
from .models import Course, Enrollment

logger = logging.getLogger(__name__)

COURSE_PAYMENT_PURPOSE = "course"


def _payment_metadata(user, course: Course) -> Dict[str, Any]:
    return {"user_id": user.pk, "course_id": course.pk, "purpose": COURSE_PAYMENT_PURPOSE}


def _reject_refunded_payment(payment_id: str, lock: bool = False) -> None:
    refunded = Enrollment.objects.filter(payment_id=payment_id, status=Enrollment.Status.REFUNDED)
    if lock:
        refunded = refunded.select_for_update()
    if payment_id and refunded.exists():
        logger.warning("Refunded payment %s posted for confirmation again", payment_id)
        raise ValidationFailed(
            "This payment was refunded and cannot be used again.",
            details={"payment_id": payment_id},
        )


def start_enrollment(
    auth: AuthContext, course: Course, gateway: Optional[PaymentGateway] = None
) -> Dict[str, Any]:
    """
    Create the payment intent for ``course``.

    Returns:
        Widget parameters (payment id, client secret, amount in minor units,
        currency, publishable key, prefill data)

    Raises:
        ValidationFailed: Already enrolled
        PaymentGatewayError: Intent could not be created
    """
    user = auth.user
    if is_enrolled(user, course):
        raise ValidationFailed("You are already enrolled in this course.")

    gateway = gateway or PaymentGateway()
    amount_minor = to_minor_units(course.price)
    intent = gateway.create_intent(amount_minor, metadata=_payment_metadata(user, course))

    Enrollment.objects.update_or_create(
        user=user,
        course=course,
        defaults={"status": Enrollment.Status.PENDING, "payment_id": intent["id"]},
    )
    logger.info("Enrollment payment started for %s_%s (pi=%s)", user.pk, course.pk, intent["id"])

    return {
        "payment_id": intent["id"],
        "client_secret": intent["client_secret"],
        "amount": amount_minor,
        "currency": gateway.currency,
        "publishable_key": publishable_key(),
        "description": course.title,
        "prefill": {"name": user.get_full_name(), "email": user.email},
    }


def confirm_enrollment(
    auth: AuthContext,
    course: Course,
    payment_id: str,
    gateway: Optional[PaymentGateway] = None,
) -> Tuple[Enrollment, str]:
    """
    Verify ``payment_id`` and record the paid enrollment.

    A payment that was refunded never grants access again.

    Returns:
        Tuple of (enrollment, operator deep link)

    Raises:
        ValidationFailed: The payment was refunded
        PaymentGatewayError: Verification failed
    """
    user = auth.user
    _reject_refunded_payment(payment_id)

    gateway = gateway or PaymentGateway()
    gateway.verify(
        payment_id,
        expected_metadata={"user_id": user.pk, "course_id": course.pk},
        expected_amount=to_minor_units(course.price),
    )

    with transaction.atomic():
        _reject_refunded_payment(payment_id, lock=True)
        enrollment = Enrollment.objects.select_for_update().filter(user=user, course=course).first()
        if enrollment is not None and enrollment.is_paid and enrollment.payment_id == payment_id:
            logger.info("Enrollment %s already paid (pi=%s)", enrollment.enrollment_key, payment_id)
        else:
            enrollment, _ = Enrollment.objects.update_or_create(
                user=user,
                course=course,
                defaults={"status": Enrollment.Status.PAID, "payment_id": payment_id},
            )
            logger.info("Enrollment %s paid (pi=%s)", enrollment.enrollment_key, payment_id)
    return enrollment, build_operator_link(enrollment_confirmation_text(enrollment))
