from decimal import Decimal
from unittest import mock

from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APITestCase

from core.exceptions import PaymentGatewayError, ValidationFailed
from storefront.models import CartItem, Order
from storefront.shop.pricing import cart_total, format_price
from storefront.shop.services import add_to_cart, change_quantity, search_orders, set_order_status
from storefront.tests.helpers import make_product, make_staff, make_user, sign_in_client

SHIPPING = {
    "fullName": "Asha Rao",
    "email": "asha@example.com",
    "phone": "+91 98450 00000",
    "address": "12 MG Road",
    "city": "Bengaluru",
    "state": "Karnataka",
    "zipCode": "560001",
}


@override_settings(CURRENCY_SYMBOL="₹")
class PricingTests(TestCase):
    def test_order_total_and_display(self):
        lines = [{"price": "100", "quantity": 2}, {"price": "50", "quantity": 1}]
        total = cart_total(lines)
        self.assertEqual(total, Decimal("250.00"))
        self.assertEqual(format_price(total), "₹250.00")

    def test_format_price_always_shows_two_decimals(self):
        self.assertEqual(format_price(Decimal("99.5")), "₹99.50")
        self.assertEqual(format_price(0), "₹0.00")


class CartServiceTests(TestCase):
    def setUp(self):
        self.user = make_user()
        self.product = make_product(price="100.00")

    def test_adding_twice_bumps_quantity(self):
        add_to_cart(self.user, self.product)
        item = add_to_cart(self.user, self.product)
        self.assertEqual(item.quantity, 2)
        self.assertEqual(CartItem.objects.filter(user=self.user).count(), 1)
        self.assertEqual(item.image, self.product.cover_image)

    def test_quantity_floor_removes_the_line(self):
        item = add_to_cart(self.user, self.product)
        self.assertIsNone(change_quantity(self.user, item.pk, -1))
        self.assertFalse(CartItem.objects.filter(pk=item.pk).exists())

    def test_out_of_stock_product_cannot_be_added(self):
        self.product.in_stock = False
        self.product.save()
        with self.assertRaises(ValidationFailed):
            add_to_cart(self.user, self.product)


class CartApiTests(APITestCase):
    def setUp(self):
        self.user = make_user()
        sign_in_client(self.client, self.user)
        self.paint = make_product(name="Paint", price="100.00")
        self.cord = make_product(name="Cord", price="50.00")

    def add(self, product):
        return self.client.post("/api/cart/items/", {"product_id": product.pk}, format="json")

    def test_cart_requires_sign_in(self):
        self.client.cookies.clear()
        self.assertEqual(self.client.get("/api/cart/").status_code, status.HTTP_401_UNAUTHORIZED)

    def test_cart_summary_totals(self):
        self.add(self.paint)
        self.add(self.paint)
        self.add(self.cord)

        body = self.client.get("/api/cart/").json()

        self.assertEqual(body["total_items"], 3)
        self.assertEqual(Decimal(body["total"]), Decimal("250.00"))
        self.assertEqual(body["total_display"], "₹250.00")

    def test_decrement_to_zero_removes_line(self):
        line_id = self.add(self.paint).json()["id"]

        response = self.client.patch(f"/api/cart/items/{line_id}/", {"delta": -1}, format="json")

        self.assertEqual(response.json(), {"removed": True, "id": line_id})
        self.assertEqual(self.client.get("/api/cart/").json()["items"], [])

    def test_increment_and_delete(self):
        line_id = self.add(self.paint).json()["id"]

        bumped = self.client.patch(f"/api/cart/items/{line_id}/", {"delta": 2}, format="json")
        self.assertEqual(bumped.json()["quantity"], 3)

        deleted = self.client.delete(f"/api/cart/items/{line_id}/")
        self.assertEqual(deleted.status_code, status.HTTP_204_NO_CONTENT)

    def test_other_users_lines_are_not_found(self):
        other = make_user("other@example.com")
        foreign = add_to_cart(other, self.paint)
        response = self.client.patch(f"/api/cart/items/{foreign.pk}/", {"delta": 1}, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


@override_settings(OPERATOR_WHATSAPP_NUMBER="+91 98450 12345")
class CheckoutApiTests(APITestCase):
    def setUp(self):
        self.user = make_user()
        sign_in_client(self.client, self.user)
        self.paint = make_product(name="Paint", price="100.00")
        self.cord = make_product(name="Cord", price="50.00")

    def fill_cart(self):
        add_to_cart(self.user, self.paint)
        add_to_cart(self.user, self.paint)
        add_to_cart(self.user, self.cord)

    def test_missing_shipping_fields_are_listed(self):
        self.fill_cart()
        response = self.client.post(
            "/api/checkout/", {"shipping_info": {"fullName": "Asha Rao", "city": ""}}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(response.json()["detail"].startswith("Please fill in all required fields:"))
        self.assertIn("city", response.json()["details"]["missing"])
        self.assertFalse(Order.objects.exists())

    def test_empty_cart_is_rejected(self):
        response = self.client.post("/api/checkout/", {"shipping_info": SHIPPING}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()["detail"], "Your cart is empty.")

    def test_checkout_creates_order_and_clears_cart(self):
        self.fill_cart()

        response = self.client.post("/api/checkout/", {"shipping_info": SHIPPING}, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        order = Order.objects.get()
        self.assertEqual(order.total, Decimal("250.00"))
        self.assertEqual(order.status, "processing")
        self.assertEqual(len(order.items), 2)
        self.assertFalse(CartItem.objects.filter(user=self.user).exists())
        self.assertTrue(response.json()["operator_link"].startswith("https://wa.me/919845012345?text="))

    def test_buy_now_keeps_the_cart(self):
        self.fill_cart()

        response = self.client.post(
            "/api/checkout/",
            {"shipping_info": SHIPPING, "buy_now_product_id": self.cord.pk},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Order.objects.get().total, Decimal("50.00"))
        self.assertEqual(CartItem.objects.filter(user=self.user).count(), 2)

    @mock.patch("storefront.shop.services.PaymentGateway")
    def test_payment_is_verified_and_recorded(self, gateway_cls):
        gateway_cls.return_value.verify.return_value = {"id": "pi_123", "status": "succeeded"}
        self.fill_cart()

        response = self.client.post(
            "/api/checkout/", {"shipping_info": SHIPPING, "payment_id": "pi_123"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        gateway_cls.return_value.verify.assert_called_once_with(
            "pi_123",
            expected_metadata={"user_id": self.user.pk, "purpose": "order"},
            expected_amount=25000,
        )
        self.assertEqual(Order.objects.get().payment_info, {"paymentId": "pi_123", "status": "succeeded"})

    @mock.patch("storefront.shop.services.PaymentGateway")
    def test_payment_backs_only_one_order(self, gateway_cls):
        gateway_cls.return_value.verify.return_value = {"id": "pi_9", "status": "succeeded"}
        payload = {"shipping_info": SHIPPING, "buy_now_product_id": self.cord.pk, "payment_id": "pi_9"}

        first = self.client.post("/api/checkout/", payload, format="json")
        second = self.client.post("/api/checkout/", payload, format="json")

        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        self.assertEqual(second.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(second.json()["detail"], "This payment has already been used for another order.")
        self.assertEqual(Order.objects.filter(payment_info__paymentId="pi_9").count(), 1)
        self.assertEqual(gateway_cls.return_value.verify.call_count, 1)

    @mock.patch("storefront.shop.services.PaymentGateway")
    def test_unverified_payment_creates_no_order(self, gateway_cls):
        gateway_cls.return_value.verify.side_effect = PaymentGatewayError(
            "Payment has not succeeded.", status_code=400
        )
        self.fill_cart()

        response = self.client.post(
            "/api/checkout/", {"shipping_info": SHIPPING, "payment_id": "pi_123"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Order.objects.exists())
        self.assertEqual(CartItem.objects.filter(user=self.user).count(), 2)

    @mock.patch("storefront.shop.services.PaymentGateway")
    def test_payment_intent_for_cart_total(self, gateway_cls):
        gateway_cls.return_value.create_intent.return_value = {
            "id": "pi_456",
            "client_secret": "pi_456_secret",
            "currency": "inr",
        }
        self.fill_cart()

        response = self.client.post("/api/checkout/payment-intent/", {}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["amount"], 25000)
        self.assertEqual(response.json()["client_secret"], "pi_456_secret")
        gateway_cls.return_value.create_intent.assert_called_once_with(
            25000, metadata={"user_id": self.user.pk, "purpose": "order"}
        )

    def test_my_orders_lists_only_own_orders(self):
        self.fill_cart()
        self.client.post("/api/checkout/", {"shipping_info": SHIPPING}, format="json")
        Order.objects.create(user=make_user("other@example.com"), items=[], total=Decimal("1.00"), shipping_info={})

        orders = self.client.get("/api/orders/mine/").json()

        self.assertEqual(len(orders), 1)
        self.assertEqual(orders[0]["total_display"], "₹250.00")


class OrderAdminTests(APITestCase):
    def setUp(self):
        self.staff = make_staff()
        self.customer = make_user("meera@example.com")
        self.small = Order.objects.create(
            user=self.customer,
            items=[{"name": "Cord", "price": "50.00", "quantity": 1}],
            total=Decimal("50.00"),
            shipping_info=dict(SHIPPING, fullName="Meera Iyer", city="Chennai"),
        )
        self.large = Order.objects.create(
            user=self.customer,
            items=[{"name": "Resin Kit", "price": "1499.00", "quantity": 1}],
            total=Decimal("1499.00"),
            shipping_info=SHIPPING,
        )

    def test_search_covers_shipping_fields_and_item_names(self):
        self.assertEqual(search_orders("chennai"), [self.small])
        self.assertEqual(search_orders("RESIN"), [self.large])
        self.assertEqual(len(search_orders("meera@example.com")), 2)

    def test_sort_by_total(self):
        self.assertEqual(search_orders(sort="total", direction="asc"), [self.small, self.large])
        self.assertEqual(search_orders(sort="total", direction="desc"), [self.large, self.small])

    def test_status_is_lower_cased_and_not_empty(self):
        set_order_status(self.small, "Shipped")
        self.assertEqual(Order.objects.get(pk=self.small.pk).status, "shipped")
        with self.assertRaises(ValidationFailed):
            set_order_status(self.small, "   ")

    def test_admin_endpoints_require_staff(self):
        sign_in_client(self.client, self.customer)
        self.assertEqual(self.client.get("/api/admin/orders/").status_code, status.HTTP_403_FORBIDDEN)

    def test_staff_lists_updates_and_deletes(self):
        sign_in_client(self.client, self.staff)

        listed = self.client.get("/api/admin/orders/", {"search": "resin"}).json()
        self.assertEqual([o["id"] for o in listed], [self.large.pk])

        updated = self.client.post(f"/api/admin/orders/{self.large.pk}/status/", {"status": "Delivered"}, format="json")
        self.assertEqual(updated.json()["status"], "delivered")

        deleted = self.client.delete(f"/api/admin/orders/{self.large.pk}/")
        self.assertEqual(deleted.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Order.objects.filter(pk=self.large.pk).exists())
