"""
Stripe Webhook Signal Handlers (core.payments)
==============================================

Processes verified Stripe events that dj-stripe has already validated and
stored. We react to persisted ``djstripe.models.Event`` rows through Django's
``post_save`` signal.

Handled event types (idempotent):
- ``payment_intent.succeeded`` → mark the course enrollment named in the
  intent metadata as paid
- ``charge.refunded``          → mark the enrollment paid by that intent as
  refunded (access is revoked, the row stays for the records)

Checkout of physical goods is confirmed synchronously by the checkout
endpoint; intents without ``course_id`` metadata are only logged here.

Safety:
- Never re-raise from the signal handler (prevents webhook retry storms).
- All writes occur inside small ``transaction.atomic()`` blocks.

Author: CraftHub Development Team
Version: 1.0.0
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from django.apps import apps
from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models.signals import post_save
from django.dispatch import receiver

from djstripe.models import Event

logger = logging.getLogger(__name__)


# ---------- helpers ----------


def _extract_data_object(event) -> Dict[str, Any]:
    """
    Extract the Stripe event's ``data.object`` payload from a dj-stripe Event.

    Returns:
        A dict representing the ``data.object`` (or ``{}`` if not found).
    """
    data = event.data or {}
    if not isinstance(data, dict):
        return {}
    # Standard Stripe event shape: {"data": {"object": {...}}}
    inner = data.get("data")
    if isinstance(inner, dict) and isinstance(inner.get("object"), dict):
        return inner["object"]
    if isinstance(data.get("object"), dict):
        return data["object"]
    return {}


def _enrollment_model():
    return apps.get_model("storefront", "Enrollment")


# ---------- signal entrypoint ----------


@receiver(post_save, sender=Event)
def on_djstripe_event_created(sender, instance, created: bool, **kwargs):
    """
    Post-save hook for dj-stripe Event.

    Runs once for each *new* event saved by dj-stripe and dispatches to the
    handler for its type. Never re-raises.
    """
    if not created:
        return

    event_type = instance.type
    obj = _extract_data_object(instance)

    logger.info("[webhook] %s (event_id=%s)", event_type, instance.id)

    try:
        if event_type == "payment_intent.succeeded":
            _handle_payment_intent_succeeded(obj)

        elif event_type == "charge.refunded":
            _handle_charge_refunded(obj)

        else:
            logger.debug("Unhandled event type: %s", event_type)

    except Exception as exc:
        # Stripe retries on failure responses; we only log.
        logger.exception("Error handling event %s: %s", event_type, exc)


# ---------- concrete handlers ----------


def _handle_payment_intent_succeeded(payment_intent: Dict[str, Any]) -> bool:
    """
    Handle ``payment_intent.succeeded``.

    Returns:
        True if an enrollment was written, False if the intent carries no
        course purchase or the referenced rows are gone.
    """
    pi_id = payment_intent.get("id")
    metadata = payment_intent.get("metadata") or {}
    user_id = metadata.get("user_id")
    course_id = metadata.get("course_id")

    logger.info("payment_intent.succeeded pi=%s", pi_id)

    if not user_id or not course_id:
        logger.debug("PaymentIntent %s has no course metadata. Skipping.", pi_id)
        return False

    Enrollment = _enrollment_model()
    Course = apps.get_model("storefront", "Course")
    User = get_user_model()

    user = User.objects.filter(pk=user_id).first()
    course = Course.objects.filter(pk=course_id).first()
    if user is None or course is None:
        logger.error(
            "Stripe webhook: user %s or course %s not found for pi=%s.",
            user_id, course_id, pi_id,
        )
        return False

    with transaction.atomic():
        enrollment, created = Enrollment.objects.update_or_create(
            user=user,
            course=course,
            defaults={"status": Enrollment.Status.PAID, "payment_id": pi_id},
        )
    logger.info(
        "Enrollment %s %s via webhook (pi=%s).",
        enrollment.enrollment_key,
        "created" if created else "marked paid",
        pi_id,
    )
    return True


def _handle_charge_refunded(charge: Dict[str, Any]) -> int:
    """
    Handle ``charge.refunded``.

    Returns:
        Number of enrollments downgraded to refunded.
    """
    pi_id = charge.get("payment_intent")
    refunded = charge.get("refunded")

    logger.info("refund event charge=%s pi=%s refunded=%s", charge.get("id"), pi_id, refunded)

    if not pi_id or not refunded:
        return 0

    Enrollment = _enrollment_model()
    with transaction.atomic():
        count = Enrollment.objects.filter(payment_id=pi_id).update(status=Enrollment.Status.REFUNDED)
    if count:
        logger.info("Marked %s enrollment(s) as refunded for pi=%s.", count, pi_id)
    return count
