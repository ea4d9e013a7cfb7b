"""
Storefront Shop Models

Models:
- CartItem: one line of a user's cart (snapshot of name, price and image)
- Order: a placed order with denormalised item snapshots

Order items are stored as JSON snapshots so deleting or repricing a product
never changes an existing order.

Author: CraftHub Development Team
Version: 1.0.0
"""

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

__all__ = ["CartItem", "Order"]


class CartItem(models.Model):
    """
    A cart line. Quantity never drops below one; a line that would reach zero
    is deleted instead.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="cart_items"
    )
    product = models.ForeignKey(
        "storefront.Product",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="cart_items",
    )
    name = models.CharField(_("Name"), max_length=200)
    price = models.DecimalField(_("Price"), max_digits=10, decimal_places=2)
    image = models.URLField(_("Image"), max_length=500, blank=True, default="")
    quantity = models.PositiveIntegerField(_("Quantity"), default=1)
    added_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Cart Item")
        verbose_name_plural = _("Cart Items")
        ordering = ["added_at", "id"]
        constraints = [
            models.UniqueConstraint(fields=["user", "product"], name="unique_cart_line_per_product"),
        ]

    def __str__(self) -> str:
        return f"{self.quantity} x {self.name}"

    @property
    def line_total(self):
        return self.price * self.quantity


class Order(models.Model):
    """
    Placed order.

    Attributes:
        items: [{product_id, name, price, quantity, image}]
        total: Sum of price x quantity at placement time
        shipping_info: {fullName, email, phone, address, city, state, zipCode}
        payment_info: {paymentId, status} when paid online
        status: Free text; "processing" on placement, set by the operator later
    """

    STATUS_PROCESSING = "processing"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )
    items = models.JSONField(_("Items"), default=list)
    total = models.DecimalField(_("Total"), max_digits=12, decimal_places=2)
    shipping_info = models.JSONField(_("Shipping Info"), default=dict)
    payment_info = models.JSONField(_("Payment Info"), default=dict, blank=True)
    status = models.CharField(_("Status"), max_length=50, default=STATUS_PROCESSING)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Order")
        verbose_name_plural = _("Orders")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"Order #{self.pk} ({self.status})"

    @property
    def customer_name(self) -> str:
        return (self.shipping_info or {}).get("fullName", "")
