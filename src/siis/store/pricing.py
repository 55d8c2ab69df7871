"""Pricing for carts and orders.

The shipping rule lives here only, so the cart page, the checkout summary and
the confirmation always agree on the fee.
"""

from decimal import Decimal
from typing import NamedTuple

from siis import conf
from siis.gateway.records import round_money


class OrderTotals(NamedTuple):
    """Result of order total calculation."""

    subtotal: Decimal
    shipping_fee: Decimal
    total: Decimal


def shipping_fee(subtotal: Decimal) -> Decimal:
    """Flat fee unless the subtotal is strictly above the free threshold."""
    threshold = Decimal(str(conf.get_setting("FREE_SHIPPING_THRESHOLD")))
    if subtotal > threshold:
        return Decimal("0.00")
    return round_money(Decimal(str(conf.get_setting("FLAT_SHIPPING_FEE"))))


def calculate_subtotal(lines) -> Decimal:
    return round_money(sum((line.line_total for line in lines), Decimal("0")))


def calculate_totals(lines) -> OrderTotals:
    """Calculate subtotal, shipping and total for cart lines or order items.

    Args:
        lines: objects exposing ``line_total``

    Returns:
        OrderTotals where total == subtotal + shipping_fee
    """
    subtotal = calculate_subtotal(lines)
    fee = shipping_fee(subtotal)
    return OrderTotals(
        subtotal=subtotal,
        shipping_fee=fee,
        total=round_money(subtotal + fee),
    )
