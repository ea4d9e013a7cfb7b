"""
Tests for the core service layer: exceptions, operator links, image host
client and live model subscriptions.
"""

from decimal import Decimal
from unittest import mock
from urllib.parse import unquote

from botocore.exceptions import ClientError
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import SimpleTestCase, TestCase, override_settings

from core.exceptions import ImageUploadError, PaymentGatewayError, ValidationFailed
from core.messaging import build_operator_link, order_confirmation_text
from core.storage import ImageHostClient
from core.subscriptions import subscribe
from storefront.models import Order


class ExceptionTests(SimpleTestCase):
    def test_payload_shape(self):
        error = ValidationFailed("Your cart is empty.")
        self.assertEqual(error.status_code, 400)
        self.assertEqual(error.to_dict(), {"detail": "Your cart is empty.", "error_code": "validation_failed"})

    def test_remote_errors_name_the_service(self):
        error = PaymentGatewayError(details={"payment_id": "pi_1"})
        self.assertEqual(error.status_code, 502)
        self.assertEqual(error.to_dict()["service"], "payment_gateway")
        self.assertEqual(error.to_dict()["details"], {"payment_id": "pi_1"})


@override_settings(OPERATOR_WHATSAPP_NUMBER="+91 98450-12345", CURRENCY_SYMBOL="₹")
class MessagingTests(SimpleTestCase):
    def test_operator_link_uses_digits_and_encodes_text(self):
        link = build_operator_link("New order #7\nTotal: ₹250.00")
        self.assertTrue(link.startswith("https://wa.me/919845012345?text="))
        self.assertEqual(unquote(link.split("text=", 1)[1]), "New order #7\nTotal: ₹250.00")

    def test_order_text_lists_items_and_total(self):
        order = Order(
            pk=7,
            items=[{"name": "Paint", "price": "100.00", "quantity": 2}],
            total=Decimal("200.00"),
            shipping_info={"fullName": "Asha Rao", "city": "Bengaluru", "zipCode": "560001"},
        )
        text = order_confirmation_text(order)
        self.assertIn("New order #7", text)
        self.assertIn("- Paint x2 @ ₹100.00", text)
        self.assertIn("Total: ₹200.00", text)
        self.assertIn("Ship to: Bengaluru, 560001", text)


@override_settings(
    IMAGE_HOST_BUCKET="crafthub-test",
    IMAGE_HOST_PUBLIC_BASE_URL="https://images.crafthub.test/",
    MAX_IMAGE_UPLOAD_BYTES=1024,
)
class ImageHostClientTests(SimpleTestCase):
    def setUp(self):
        self.s3 = mock.Mock()
        self.host = ImageHostClient(client=self.s3)

    def test_upload_returns_public_url(self):
        upload = SimpleUploadedFile("Paint.PNG", b"png-bytes", content_type="image/png")

        url = self.host.upload(upload)

        self.assertTrue(url.startswith("https://images.crafthub.test/products/"))
        self.assertTrue(url.endswith(".png"))
        args, kwargs = self.s3.upload_fileobj.call_args
        self.assertEqual(args[1], "crafthub-test")
        self.assertEqual(kwargs["ExtraArgs"]["ContentType"], "image/png")

    def test_non_images_and_large_files_are_rejected(self):
        with self.assertRaises(ValidationFailed):
            self.host.upload(SimpleUploadedFile("notes.txt", b"text", content_type="text/plain"))
        with self.assertRaises(ValidationFailed):
            self.host.upload(SimpleUploadedFile("big.jpg", b"x" * 2048, content_type="image/jpeg"))
        self.s3.upload_fileobj.assert_not_called()

    def test_host_failure_becomes_image_upload_error(self):
        self.s3.upload_fileobj.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject"
        )
        with self.assertRaises(ImageUploadError) as ctx:
            self.host.upload(SimpleUploadedFile("a.jpg", b"jpg", content_type="image/jpeg"))
        self.assertEqual(ctx.exception.status_code, 502)


class SubscriptionTests(TestCase):
    def make_order(self, total="10.00"):
        return Order.objects.create(items=[], total=Decimal(total), shipping_info={})

    def test_snapshot_on_subscribe_and_on_every_change(self):
        snapshots = []
        first = self.make_order("10.00")
        first_pk = first.pk

        subscription = subscribe(Order, lambda rows: snapshots.append([r.pk for r in rows]), ordering=("total",))
        second = self.make_order("5.00")
        first.delete()
        subscription.cancel()
        self.make_order("1.00")

        self.assertEqual(snapshots, [[first_pk], [second.pk, first_pk], [second.pk]])
        self.assertFalse(subscription.active)

    def test_refresh_only_delivers_changes(self):
        callback = mock.Mock()
        with subscribe(Order, callback) as subscription:
            self.assertFalse(subscription.refresh())
            Order.objects.bulk_create([Order(items=[], total=Decimal("3.00"), shipping_info={})])
            self.assertTrue(subscription.refresh())
        self.assertEqual(callback.call_count, 2)
        self.assertFalse(subscription.refresh())
