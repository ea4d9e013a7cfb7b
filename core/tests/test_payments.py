"""
Tests für das Payment-Gateway (Stripe gemockt) und die dj-stripe
Webhook-Handler.
"""

from decimal import Decimal
from types import SimpleNamespace
from unittest import mock

import stripe
from django.test import SimpleTestCase, TestCase, override_settings
from rest_framework import status
from rest_framework.test import APITestCase

from core.exceptions import PaymentGatewayError
from core.payments import signals
from core.payments.gateway import PaymentGateway, to_minor_units
from storefront.models import Enrollment
from storefront.tests.helpers import enroll, make_course, make_user


class MinorUnitTests(SimpleTestCase):
    def test_conversion(self):
        self.assertEqual(to_minor_units(Decimal("1999.00")), 199900)
        self.assertEqual(to_minor_units("250.5"), 25050)
        self.assertEqual(to_minor_units(0.1), 10)


@override_settings(DEFAULT_CURRENCY="INR")
class PaymentGatewayTests(SimpleTestCase):
    def setUp(self):
        self.gateway = PaymentGateway()

    @mock.patch("core.payments.gateway.stripe.PaymentIntent.create")
    def test_create_intent_stringifies_metadata(self, create):
        create.return_value = {"id": "pi_1", "client_secret": "secret"}

        intent = self.gateway.create_intent(25000, metadata={"user_id": 3, "purpose": "order"})

        self.assertEqual(intent["id"], "pi_1")
        create.assert_called_once_with(
            amount=25000,
            currency="inr",
            metadata={"user_id": "3", "purpose": "order"},
            automatic_payment_methods={"enabled": True},
        )

    @mock.patch("core.payments.gateway.stripe.PaymentIntent.create")
    def test_stripe_errors_are_translated(self, create):
        create.side_effect = stripe.StripeError("No such API key")
        with self.assertRaises(PaymentGatewayError) as ctx:
            self.gateway.create_intent(100)
        self.assertEqual(ctx.exception.status_code, 502)

    @mock.patch("core.payments.gateway.stripe.PaymentIntent.retrieve")
    def test_verify_checks_status_metadata_and_amount(self, retrieve):
        retrieve.return_value = {
            "id": "pi_1",
            "status": "succeeded",
            "amount": 199900,
            "metadata": {"user_id": "3", "course_id": "9"},
        }

        intent = self.gateway.verify("pi_1", expected_metadata={"user_id": 3, "course_id": 9}, expected_amount=199900)
        self.assertEqual(intent["id"], "pi_1")

        for kwargs in (
            {"expected_metadata": {"user_id": 4}},
            {"expected_amount": 100},
        ):
            with self.subTest(**kwargs), self.assertRaises(PaymentGatewayError) as ctx:
                self.gateway.verify("pi_1", **kwargs)
            self.assertEqual(ctx.exception.status_code, 400)

    @mock.patch("core.payments.gateway.stripe.PaymentIntent.retrieve")
    def test_unfinished_payment_is_rejected(self, retrieve):
        retrieve.return_value = {"id": "pi_1", "status": "requires_payment_method", "metadata": {}}
        with self.assertRaisesMessage(PaymentGatewayError, "Payment has not succeeded."):
            self.gateway.verify("pi_1")

    @mock.patch("core.payments.gateway.stripe.PaymentIntent.retrieve")
    def test_refunded_payment_is_rejected(self, retrieve):
        retrieve.return_value = {
            "id": "pi_1",
            "status": "succeeded",
            "amount": 199900,
            "metadata": {"user_id": "3", "course_id": "9"},
            "latest_charge": {"id": "ch_1", "refunded": True, "amount_refunded": 199900},
        }

        with self.assertRaisesMessage(PaymentGatewayError, "Payment has been refunded."):
            self.gateway.verify("pi_1", expected_metadata={"user_id": 3, "course_id": 9}, expected_amount=199900)
        retrieve.assert_called_once_with("pi_1", expand=["latest_charge"])

    def test_missing_payment_id(self):
        with self.assertRaises(PaymentGatewayError):
            self.gateway.verify("")


def stripe_event(event_type, obj, created=True):
    instance = SimpleNamespace(id="evt_1", type=event_type, data={"data": {"object": obj}})
    return dict(sender=None, instance=instance, created=created)


class WebhookSignalTests(TestCase):
    def setUp(self):
        self.user = make_user()
        self.course = make_course()

    def test_payment_succeeded_marks_enrollment_paid(self):
        enroll(self.user, self.course, status=Enrollment.Status.PENDING, payment_id="pi_1")

        signals.on_djstripe_event_created(**stripe_event(
            "payment_intent.succeeded",
            {"id": "pi_1", "metadata": {"user_id": str(self.user.pk), "course_id": str(self.course.pk)}},
        ))

        self.assertEqual(Enrollment.objects.get().status, Enrollment.Status.PAID)

    def test_intent_without_course_metadata_is_ignored(self):
        handled = signals._handle_payment_intent_succeeded({"id": "pi_2", "metadata": {"purpose": "order"}})
        self.assertFalse(handled)
        self.assertFalse(Enrollment.objects.exists())

    def test_refund_revokes_access(self):
        enroll(self.user, self.course, payment_id="pi_1")

        signals.on_djstripe_event_created(**stripe_event(
            "charge.refunded", {"id": "ch_1", "payment_intent": "pi_1", "refunded": True}
        ))

        self.assertEqual(Enrollment.objects.get().status, Enrollment.Status.REFUNDED)

    def test_updates_of_existing_events_are_skipped(self):
        with mock.patch.object(signals, "_handle_payment_intent_succeeded") as handler:
            signals.on_djstripe_event_created(**stripe_event("payment_intent.succeeded", {}, created=False))
        handler.assert_not_called()

    def test_handler_errors_are_logged_not_raised(self):
        with mock.patch.object(signals, "_handle_charge_refunded", side_effect=RuntimeError("db down")):
            with self.assertLogs("core.payments.signals", level="ERROR"):
                signals.on_djstripe_event_created(**stripe_event("charge.refunded", {}))


@override_settings(STRIPE_LIVE_MODE=False, STRIPE_TEST_PUBLISHABLE_KEY="pk_test_123", DEFAULT_CURRENCY="inr")
class PaymentConfigViewTests(APITestCase):
    def test_config_is_public(self):
        response = self.client.get("/api/payments/config/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json(), {"publishableKey": "pk_test_123", "currency": "inr", "liveMode": False})
