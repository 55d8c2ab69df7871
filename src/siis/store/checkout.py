"""Checkout flow.

The cart is staged in the session when the shopper leaves the cart page, the
checkout form is validated, and a valid submission produces an
``OrderConfirmation`` shown on the confirmation page. Payment is simulated.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from django.utils import timezone

from siis import conf
from siis.gateway import get_gateway
from siis.gateway.records import (
    PAYMENT_METHOD_CHOICES,
    Order,
    OrderItem,
    to_datetime,
    to_decimal,
    to_str,
)

from .cart import Cart, CartLine
from .pricing import calculate_totals

logger = logging.getLogger(__name__)

STAGED_USER_KEY = "checkoutUser"
STAGED_ITEMS_KEY = "checkoutCartItems"
CONFIRMATION_SESSION_KEY = "orderConfirmation"


class CheckoutState(str, Enum):
    AWAITING_INPUT = "awaiting-input"
    VALIDATING = "validating"
    INVALID = "invalid"
    SUBMITTING = "submitting"
    CONFIRMED = "confirmed"


def stage_checkout(session, shopper, lines: list[CartLine]):
    """Bridge the cart into the checkout page."""
    session[STAGED_USER_KEY] = shopper.to_session()
    session[STAGED_ITEMS_KEY] = [line.to_session() for line in lines]


def clear_staging(session):
    session.pop(STAGED_USER_KEY, None)
    session.pop(STAGED_ITEMS_KEY, None)


def staged_lines(session) -> list[CartLine]:
    raw = session.get(STAGED_ITEMS_KEY) or []
    return [CartLine.from_session(entry) for entry in raw if isinstance(entry, dict) and entry.get("id")]


def checkout_lines(session) -> list[CartLine]:
    """Staged lines when present, otherwise the live cart."""
    return staged_lines(session) or Cart(session).lines


def generate_order_number(now: datetime | None = None) -> str:
    now = now or timezone.now()
    return f"ORD-{int(now.timestamp() * 1000)}"


@dataclass
class OrderConfirmation:
    """Snapshot of a submitted checkout."""

    order_number: str
    customer_name: str
    customer_email: str
    customer_phone: str
    shipping_address: str
    payment_method: str
    items: list[OrderItem] = field(default_factory=list)
    subtotal: Decimal = Decimal("0.00")
    shipping_fee: Decimal = Decimal("0.00")
    total: Decimal = Decimal("0.00")
    created_at: datetime | None = None

    @property
    def payment_method_label(self) -> str:
        return dict(PAYMENT_METHOD_CHOICES).get(self.payment_method, self.payment_method)

    def to_session(self) -> dict:
        return {
            "order_number": self.order_number,
            "customer_name": self.customer_name,
            "customer_email": self.customer_email,
            "customer_phone": self.customer_phone,
            "shipping_address": self.shipping_address,
            "payment_method": self.payment_method,
            "items": [
                {**item.to_document(), "price": str(item.price)} for item in self.items
            ],
            "subtotal": str(self.subtotal),
            "shipping_fee": str(self.shipping_fee),
            "total": str(self.total),
            "created_at": self.created_at.isoformat() if self.created_at else "",
        }

    @classmethod
    def from_session(cls, data) -> "OrderConfirmation | None":
        if not isinstance(data, dict) or not data.get("order_number"):
            return None
        return cls(
            order_number=to_str(data["order_number"]),
            customer_name=to_str(data.get("customer_name")),
            customer_email=to_str(data.get("customer_email")),
            customer_phone=to_str(data.get("customer_phone")),
            shipping_address=to_str(data.get("shipping_address")),
            payment_method=to_str(data.get("payment_method")) or "credit",
            items=[OrderItem.from_document(item) for item in data.get("items") or [] if isinstance(item, dict)],
            subtotal=to_decimal(data.get("subtotal")),
            shipping_fee=to_decimal(data.get("shipping_fee")),
            total=to_decimal(data.get("total")),
            created_at=to_datetime(data.get("created_at")),
        )

    def to_order(self) -> Order:
        return Order(
            id="",
            order_number=self.order_number,
            customer_name=self.customer_name,
            customer_email=self.customer_email,
            customer_phone=self.customer_phone,
            shipping_address=self.shipping_address,
            items=list(self.items),
            subtotal=self.subtotal,
            shipping=self.shipping_fee,
            total=self.total,
            status="pending",
            payment_method=self.payment_method,
            payment_status="pending",
        )


def build_confirmation(data: dict, lines: list[CartLine], now: datetime | None = None) -> OrderConfirmation:
    """Build the confirmation from cleaned form data and cart snapshots."""
    now = now or timezone.now()
    items = [
        OrderItem(id=line.id, name=line.name, price=line.price, quantity=line.quantity, image=line.image)
        for line in lines
    ]
    totals = calculate_totals(items)
    return OrderConfirmation(
        order_number=generate_order_number(now),
        customer_name=data["name"],
        customer_email=data["email"],
        customer_phone=data["phone"],
        shipping_address=data["address"],
        payment_method=data.get("payment_method") or "credit",
        items=items,
        subtotal=totals.subtotal,
        shipping_fee=totals.shipping_fee,
        total=totals.total,
        created_at=now,
    )


def submit_checkout(session, data: dict) -> OrderConfirmation:
    """Confirm the order, then clear the staging keys and the cart."""
    confirmation = build_confirmation(data, checkout_lines(session))
    session[CONFIRMATION_SESSION_KEY] = confirmation.to_session()
    clear_staging(session)
    Cart(session).clear()
    logger.info(
        f"Checkout confirmed {confirmation.order_number}: "
        f"{len(confirmation.items)} items, total {confirmation.total}"
    )
    return confirmation


def persist_confirmation(confirmation: OrderConfirmation) -> str | None:
    """Write the order to Firestore when persistence is enabled.

    Raises:
        GatewayError: the write failed
    """
    if not conf.get_setting("PERSIST_CHECKOUT_ORDERS"):
        return None
    order_id = get_gateway().orders.create(confirmation.to_order().to_document())
    logger.info(f"Persisted checkout order {confirmation.order_number} as {order_id}")
    return order_id


def get_confirmation(session) -> OrderConfirmation | None:
    return OrderConfirmation.from_session(session.get(CONFIRMATION_SESSION_KEY))
