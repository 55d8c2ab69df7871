"""Admin console operations.

Every function takes the gateway explicitly. Views pass ``get_gateway()``;
tests pass one built on in-memory doubles.
"""

import logging
from decimal import Decimal
from typing import NamedTuple

from google.cloud.firestore_v1 import DELETE_FIELD

from siis import conf
from siis.gateway import GatewayError
from siis.gateway.records import (
    ORDER_STATUS_CHOICES,
    CatalogItem,
    Member,
    Order,
    round_money,
)
from siis.store.checkout import generate_order_number
from siis.store.pricing import calculate_totals

logger = logging.getLogger(__name__)

KNOWN_STATUSES = [value for value, _ in ORDER_STATUS_CHOICES]

# Allowed next statuses; completed and cancelled are terminal
ORDER_TRANSITIONS = {
    "pending": {"paid", "processing", "cancelled"},
    "paid": {"processing", "cancelled"},
    "processing": {"shipped", "cancelled"},
    "shipped": {"delivered"},
    "delivered": {"completed"},
    "completed": set(),
    "cancelled": set(),
}


class InvalidStatusTransition(Exception):
    """Order status change not allowed from the current status."""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot change order status from {current!r} to {requested!r}")


class DashboardStats(NamedTuple):
    product_count: int
    order_count: int
    member_count: int
    active_member_count: int
    total_revenue: Decimal
    pending_order_count: int
    low_stock_products: list
    recent_orders: list


class OrderStats(NamedTuple):
    awaiting_count: int
    completed_count: int
    completed_revenue: Decimal


def search(records, query: str, *fields: str) -> list:
    """Case-insensitive substring match over the named attributes."""
    query = (query or "").strip().lower()
    if not query:
        return list(records)
    return [
        record for record in records
        if any(query in str(getattr(record, name, "") or "").lower() for name in fields)
    ]


# Products


def _product_fields(data: dict) -> dict:
    fields = {
        "name": data["name"],
        "description": data.get("description", ""),
        "price": data["price"],
        "category": data["category"],
        "stock": data.get("stock") or 0,
        "isActive": data.get("is_active", True),
    }
    tag_text = (data.get("tag_text") or "").strip()
    fields["tag"] = {"text": tag_text} if tag_text else None
    return fields


def _image_base_path() -> str:
    return conf.get_setting("PRODUCT_IMAGE_PATH")


def create_product(gateway, data: dict, files=()) -> str:
    """Upload images, then create the product.

    Uploaded images are removed again if the record cannot be written.
    """
    urls = gateway.images.upload_many(files, _image_base_path()) if files else []
    fields = {**_product_fields(data), "images": urls}
    try:
        product_id = gateway.products.create(fields)
    except GatewayError:
        gateway.images.delete_many(urls)
        raise

    logger.info(f"Created product {product_id} with {len(urls)} images")
    return product_id


def update_product(gateway, item: CatalogItem, data: dict, files=()):
    """Save product edits; new images replace the current ones.

    New images are uploaded and saved on the record before the old ones are
    deleted, so the product is never left without images in between.
    """
    fields = _product_fields(data)
    old_images = []
    new_urls = []
    if files:
        new_urls = gateway.images.upload_many(files, _image_base_path())
        fields["images"] = new_urls
        old_images = list(item.images)
        if item.image:
            fields["image"] = ""
            old_images.append(item.image)

    try:
        gateway.products.update(item.id, fields)
    except GatewayError:
        gateway.images.delete_many(new_urls)
        raise

    gateway.images.delete_many(old_images)
    logger.info(f"Updated product {item.id} (replaced {len(old_images)} images)")


def delete_product(gateway, item: CatalogItem):
    """Delete the record, then its images best-effort."""
    gateway.products.delete(item.id)
    images = list(item.images)
    if item.image:
        images.append(item.image)
    gateway.images.delete_many(images)


def toggle_product_active(gateway, item: CatalogItem) -> bool:
    is_active = not item.is_active
    gateway.products.update(item.id, {"isActive": is_active})
    return is_active


# Orders


def allowed_transitions(current: str) -> list[str]:
    """Statuses an order may move to next, in workflow order.

    Stored statuses outside the known set may move to any known status.
    """
    if current not in ORDER_TRANSITIONS:
        return list(KNOWN_STATUSES)
    return [status for status in KNOWN_STATUSES if status in ORDER_TRANSITIONS[current]]


def can_transition(current: str, requested: str) -> bool:
    return requested in allowed_transitions(current)


def update_order_status(gateway, order: Order, new_status: str):
    """Move an order to a new status.

    Raises:
        InvalidStatusTransition: not allowed from the current status
        GatewayError: the write failed
    """
    if not can_transition(order.status, new_status):
        raise InvalidStatusTransition(order.status, new_status)

    gateway.orders.update(order.id, {"status": new_status})
    logger.info(f"Order {order.order_number or order.id}: {order.status} -> {new_status}")


def create_order(gateway, data: dict) -> str:
    """Create an order entered in the console."""
    items = data["items"]
    totals = calculate_totals(items)
    order = Order(
        id="",
        order_number=generate_order_number(),
        customer_name=data["customer_name"],
        customer_email=data["customer_email"],
        customer_phone=data.get("customer_phone", ""),
        shipping_address=data.get("shipping_address", ""),
        items=items,
        subtotal=totals.subtotal,
        shipping=totals.shipping_fee,
        total=totals.total,
        status=data.get("status") or "pending",
        payment_method=data.get("payment_method") or "credit",
        payment_status=data.get("payment_status") or "pending",
        notes=data.get("notes", ""),
    )
    return gateway.orders.create(order.to_document())


def order_stats(orders) -> OrderStats:
    completed = [order for order in orders if order.status == "completed"]
    return OrderStats(
        awaiting_count=sum(1 for order in orders if order.status in ("pending", "paid")),
        completed_count=len(completed),
        completed_revenue=round_money(sum((order.total for order in completed), Decimal("0"))),
    )


# Members


def _member_fields(data: dict) -> dict:
    return {
        "displayName": data["display_name"],
        "email": data["email"],
        "phoneNumber": data.get("phone", ""),
        "address": data.get("address", ""),
        "birthDate": data.get("birth_date"),
        "memberLevel": data.get("member_level") or "bronze",
        "points": data.get("points") or 0,
        "isActive": data.get("is_active", True),
    }


def create_member(gateway, data: dict) -> str:
    member = Member(id="")
    return gateway.members.create({**member.to_document(), **_member_fields(data)})


def update_member(gateway, member: Member, data: dict):
    fields = _member_fields(data)
    # Drop legacy field names once the record is saved in canonical shape
    fields.update({"name": DELETE_FIELD, "phone": DELETE_FIELD, "birthday": DELETE_FIELD})
    gateway.members.update(member.id, fields)


def delete_member(gateway, member: Member):
    gateway.members.delete(member.id)


# Dashboard


def dashboard_stats(gateway, recent_limit: int = 5) -> DashboardStats:
    products = gateway.products.list()
    orders = gateway.orders.list()
    members = gateway.members.list()

    low_stock = conf.get_setting("LOW_STOCK_THRESHOLD")
    revenue = sum((order.total for order in orders if order.status != "cancelled"), Decimal("0"))

    return DashboardStats(
        product_count=len(products),
        order_count=len(orders),
        member_count=len(members),
        active_member_count=sum(1 for member in members if member.is_active),
        total_revenue=round_money(revenue),
        pending_order_count=sum(1 for order in orders if order.status == "pending"),
        low_stock_products=sorted(
            (item for item in products if item.stock <= low_stock),
            key=lambda item: item.stock,
        ),
        recent_orders=gateway.orders.list_recent(recent_limit),
    )
