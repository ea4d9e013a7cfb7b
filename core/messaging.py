"""
Operator hand-off links.

Order and enrollment confirmations are handed to the shop operator through a
pre-filled WhatsApp deep link. Nothing is sent automatically and no delivery
state is tracked.
"""

from urllib.parse import quote

from django.conf import settings

WHATSAPP_BASE_URL = "https://wa.me"


def build_operator_link(text: str, number: str = None) -> str:
    """Return a wa.me link to the operator with ``text`` pre-filled."""
    number = "".join(ch for ch in (number or settings.OPERATOR_WHATSAPP_NUMBER or "") if ch.isdigit())
    return f"{WHATSAPP_BASE_URL}/{number}?text={quote(text, safe='')}"


def order_confirmation_text(order) -> str:
    from storefront.shop.pricing import format_price

    shipping = order.shipping_info or {}
    lines = [
        f"New order #{order.pk}",
        f"Customer: {shipping.get('fullName', '')} ({shipping.get('email', '')}, {shipping.get('phone', '')})",
    ]
    for item in order.items or []:
        lines.append(f"- {item.get('name')} x{item.get('quantity')} @ {format_price(item.get('price', 0))}")
    lines.append(f"Total: {format_price(order.total)}")
    address = ", ".join(
        part for part in (
            shipping.get("address"),
            shipping.get("city"),
            shipping.get("state"),
            shipping.get("zipCode"),
        ) if part
    )
    if address:
        lines.append(f"Ship to: {address}")
    return "\n".join(lines)


def enrollment_confirmation_text(enrollment) -> str:
    from storefront.shop.pricing import format_price

    user = enrollment.user
    return "\n".join([
        f"New course enrollment: {enrollment.course.title}",
        f"Student: {user.get_full_name() or user.username} ({user.email})",
        f"Amount: {format_price(enrollment.course.price)}",
        f"Payment: {enrollment.payment_id}",
    ])
