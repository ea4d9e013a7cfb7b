"""
Storefront Shop Services

Cart, checkout and order administration logic.

Functions:
- add_to_cart / change_quantity / remove_line / cart_summary
- missing_shipping_fields / place_order
- search_orders / set_order_status

Author: CraftHub Development Team
Version: 1.0.0
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from django.db import transaction

from core.exceptions import ValidationFailed
from core.messaging import build_operator_link, order_confirmation_text
from core.payments.gateway import PaymentGateway, to_minor_units
from ..catalog.models import Product
from ..users.context import AuthContext
from .models import CartItem, Order
from .pricing import cart_total, format_price

logger = logging.getLogger(__name__)

REQUIRED_SHIPPING_FIELDS = ("fullName", "email", "phone", "address", "city", "state", "zipCode")

ORDER_PAYMENT_PURPOSE = "order"


# --- Cart ---


def add_to_cart(user, product: Product) -> CartItem:
    """
    Add one unit of ``product`` to the cart: bump an existing line or create
    a new one with the product's cover image.
    """
    if not product.in_stock:
        raise ValidationFailed("This product is out of stock.")

    with transaction.atomic():
        item, created = CartItem.objects.select_for_update().get_or_create(
            user=user,
            product=product,
            defaults={
                "name": product.name,
                "price": product.price,
                "image": product.cover_image,
                "quantity": 1,
            },
        )
        if not created:
            item.quantity += 1
            item.save(update_fields=["quantity"])
    return item


def change_quantity(user, item_id: int, delta: int) -> Optional[CartItem]:
    """
    Change a line's quantity by ``delta``.

    Returns:
        The updated line, or None when the new quantity fell to zero or
        below and the line was removed
    """
    with transaction.atomic():
        item = CartItem.objects.select_for_update().get(pk=item_id, user=user)
        new_quantity = item.quantity + int(delta)
        if new_quantity <= 0:
            item.delete()
            return None
        item.quantity = new_quantity
        item.save(update_fields=["quantity"])
    return item


def remove_line(user, item_id: int) -> bool:
    deleted, _ = CartItem.objects.filter(pk=item_id, user=user).delete()
    return bool(deleted)


def cart_summary(user) -> Dict[str, Any]:
    lines = list(CartItem.objects.filter(user=user))
    total = cart_total(lines)
    return {
        "items": lines,
        "total_items": sum(line.quantity for line in lines),
        "total": total,
        "total_display": format_price(total),
    }


# --- Checkout ---


def missing_shipping_fields(shipping_info: Dict[str, Any]) -> List[str]:
    shipping_info = shipping_info or {}
    return [
        name for name in REQUIRED_SHIPPING_FIELDS
        if not str(shipping_info.get(name) or "").strip()
    ]


def _buy_now_lines(product_id) -> List[Dict[str, Any]]:
    product = Product.objects.filter(pk=product_id).first()
    if product is None:
        raise ValidationFailed("Product not found.", status_code=404)
    if not product.in_stock:
        raise ValidationFailed("This product is out of stock.")
    return [{
        "product_id": product.pk,
        "name": product.name,
        "price": str(product.price),
        "quantity": 1,
        "image": product.cover_image,
    }]


def _cart_lines(user) -> List[Dict[str, Any]]:
    return [
        {
            "product_id": item.product_id,
            "name": item.name,
            "price": str(item.price),
            "quantity": item.quantity,
            "image": item.image,
        }
        for item in CartItem.objects.filter(user=user)
    ]


def checkout_lines(user, buy_now_product_id=None) -> List[Dict[str, Any]]:
    """Item snapshots for checkout: the single buy-now product or the cart."""
    if buy_now_product_id:
        return _buy_now_lines(buy_now_product_id)
    lines = _cart_lines(user)
    if not lines:
        raise ValidationFailed("Your cart is empty.")
    return lines


def create_order_payment(auth: AuthContext, buy_now_product_id=None, gateway: Optional[PaymentGateway] = None):
    """
    Create the payment intent for the caller's pending checkout.

    Returns:
        Tuple of (intent, amount_minor)
    """
    lines = checkout_lines(auth.user, buy_now_product_id)
    amount_minor = to_minor_units(cart_total(lines))
    gateway = gateway or PaymentGateway()
    intent = gateway.create_intent(
        amount_minor,
        metadata={"user_id": auth.user.pk, "purpose": ORDER_PAYMENT_PURPOSE},
    )
    return intent, amount_minor


def _reject_used_payment(payment_id: str, lock: bool = False) -> None:
    """One payment backs at most one order."""
    orders = Order.objects.filter(payment_info__paymentId=payment_id)
    if lock:
        orders = orders.select_for_update()
    if orders.exists():
        logger.warning("Payment %s is already recorded on an order", payment_id)
        raise ValidationFailed(
            "This payment has already been used for another order.",
            details={"payment_id": payment_id},
        )


def place_order(
    auth: AuthContext,
    shipping_info: Dict[str, Any],
    buy_now_product_id=None,
    payment_id: Optional[str] = None,
    gateway: Optional[PaymentGateway] = None,
) -> Tuple[Order, str]:
    """
    Place an order for the signed-in user.

    Validation happens before any remote call: missing shipping fields are
    listed, an empty cart is rejected. A ``payment_id`` (from the payment
    widget) is verified with the gateway and recorded. Cart checkouts clear
    the cart.

    Returns:
        Tuple of (order, operator deep link)
    """
    missing = missing_shipping_fields(shipping_info)
    if missing:
        raise ValidationFailed(
            f"Please fill in all required fields: {', '.join(missing)}",
            details={"missing": missing},
        )

    user = auth.user
    lines = checkout_lines(user, buy_now_product_id)
    total = cart_total(lines)

    payment_info: Dict[str, Any] = {}
    if payment_id:
        _reject_used_payment(payment_id)
        gateway = gateway or PaymentGateway()
        intent = gateway.verify(
            payment_id,
            expected_metadata={"user_id": user.pk, "purpose": ORDER_PAYMENT_PURPOSE},
            expected_amount=to_minor_units(total),
        )
        payment_info = {"paymentId": payment_id, "status": intent.get("status")}

    shipping = {name: str(shipping_info.get(name, "")).strip() for name in REQUIRED_SHIPPING_FIELDS}

    with transaction.atomic():
        if payment_id:
            _reject_used_payment(payment_id, lock=True)
        order = Order.objects.create(
            user=user,
            items=lines,
            total=total,
            shipping_info=shipping,
            payment_info=payment_info,
            status=Order.STATUS_PROCESSING,
        )
        if not buy_now_product_id:
            CartItem.objects.filter(user=user).delete()

    logger.info("Order %s placed by user %s (total %s)", order.pk, user.pk, total)
    return order, build_operator_link(order_confirmation_text(order))


# --- Order administration ---

ORDER_SORT_KEYS = {
    "created_at": lambda order: order.created_at,
    "total": lambda order: order.total,
    "status": lambda order: (order.status or "").lower(),
    "id": lambda order: order.pk,
    "customer": lambda order: order.customer_name.lower(),
    "email": lambda order: (order.user.email if order.user else "").lower(),
}


def _order_haystack(order: Order) -> List[str]:
    values = [str(order.pk)]
    if order.user is not None:
        values += [
            str(order.user.pk),
            order.user.username,
            order.user.email,
            order.user.get_full_name(),
        ]
    values += [str(value) for value in (order.shipping_info or {}).values()]
    values += [str(item.get("name", "")) for item in (order.items or [])]
    return [value.lower() for value in values if value]


def search_orders(term: str = "", sort: str = "created_at", direction: str = "desc") -> List[Order]:
    """
    All orders matching ``term`` (case-insensitive substring over order id,
    user, shipping fields and item names), sorted by ``sort``.
    """
    orders = list(Order.objects.select_related("user"))
    term = (term or "").strip().lower()
    if term:
        orders = [order for order in orders if any(term in value for value in _order_haystack(order))]

    key = ORDER_SORT_KEYS.get(sort, ORDER_SORT_KEYS["created_at"])
    orders.sort(key=key, reverse=(direction or "desc").lower() != "asc")
    return orders


def set_order_status(order: Order, status: str) -> Order:
    value = (status or "").strip().lower()
    if not value:
        raise ValidationFailed("Status must not be empty.")
    order.status = value
    order.save(update_fields=["status", "updated_at"])
    logger.info("Order %s status set to %s", order.pk, value)
    return order
