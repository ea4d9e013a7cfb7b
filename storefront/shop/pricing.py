"""
Price arithmetic and display.

Amounts are ``Decimal`` end to end; display strings use the configured
currency symbol and exactly two decimals (``"₹250.00"``).
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from django.conf import settings

CENT = Decimal("0.01")


def to_decimal(amount) -> Decimal:
    if isinstance(amount, Decimal):
        return amount
    return Decimal(str(amount or 0))


def line_total(price, quantity) -> Decimal:
    return (to_decimal(price) * int(quantity)).quantize(CENT, rounding=ROUND_HALF_UP)


def cart_total(lines: Iterable) -> Decimal:
    """
    Sum of price x quantity over ``lines``.

    Lines may be model instances or dicts with ``price`` and ``quantity``.
    """
    total = Decimal("0")
    for line in lines:
        if isinstance(line, dict):
            total += line_total(line["price"], line["quantity"])
        else:
            total += line_total(line.price, line.quantity)
    return total.quantize(CENT, rounding=ROUND_HALF_UP)


def format_price(amount) -> str:
    value = to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)
    return f"{settings.CURRENCY_SYMBOL}{value:.2f}"
