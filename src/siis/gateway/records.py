"""Typed records for the Firestore collections.

Documents arrive from Firestore with whatever shape the writer gave them:
prices as strings, missing flags, legacy field names. Each record is built
through ``from_document`` which coerces every field, so nothing past the
gateway has to check raw field presence again.
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timezone as dt_timezone
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation
from typing import Any

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime


# Order status values, in workflow order
ORDER_STATUS_CHOICES = [
    ("pending", "Pending payment"),
    ("paid", "Paid"),
    ("processing", "Processing"),
    ("shipped", "Shipped"),
    ("delivered", "Delivered"),
    ("completed", "Completed"),
    ("cancelled", "Cancelled"),
]

PAYMENT_METHOD_CHOICES = [
    ("credit", "Credit card"),
    ("linepay", "LINE Pay"),
    ("transfer", "Bank transfer"),
]

PAYMENT_STATUS_CHOICES = [
    ("pending", "Pending"),
    ("paid", "Paid"),
    ("failed", "Failed"),
    ("refunded", "Refunded"),
]

MEMBER_LEVEL_CHOICES = [
    ("bronze", "Bronze"),
    ("silver", "Silver"),
    ("gold", "Gold"),
    ("platinum", "Platinum"),
]


def round_money(amount: Decimal, places: int = 2) -> Decimal:
    """Round to specified decimal places using banker's rounding."""
    quantize_str = "0." + "0" * places
    return amount.quantize(Decimal(quantize_str), rounding=ROUND_HALF_EVEN)


def to_decimal(value: Any, default: str = "0") -> Decimal:
    """Coerce a number or numeric string to a 2-place Decimal."""
    if isinstance(value, bool) or value is None:
        return round_money(Decimal(default))
    if isinstance(value, float) and not math.isfinite(value):
        return round_money(Decimal(default))
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return round_money(Decimal(default))
    if not amount.is_finite():
        return round_money(Decimal(default))
    return round_money(amount)


def to_int(value: Any, default: int = 0) -> int:
    """Coerce a number or numeric string to int."""
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, int):
        return value
    try:
        number = float(str(value).strip())
    except ValueError:
        return default
    if not math.isfinite(number):
        return default
    return int(number)


def to_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def to_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def to_datetime(value: Any) -> datetime | None:
    """Coerce a Firestore timestamp, datetime or ISO string."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        if timezone.is_naive(value):
            return timezone.make_aware(value, dt_timezone.utc)
        return value
    if isinstance(value, str):
        parsed = parse_datetime(value)
        if parsed and timezone.is_naive(parsed):
            parsed = timezone.make_aware(parsed, dt_timezone.utc)
        return parsed
    # Protobuf-style timestamps expose ToDatetime()
    if hasattr(value, "ToDatetime"):
        return timezone.make_aware(value.ToDatetime(), dt_timezone.utc)
    return None


def to_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return parse_date(value[:10])
    return None


def to_string_list(value: Any) -> list[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [str(item) for item in value if isinstance(item, str) and item.strip()]


def to_firestore(value: Any) -> Any:
    """Convert a Python value into something Firestore can store."""
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: to_firestore(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_firestore(item) for item in value]
    return value


@dataclass
class CatalogItem:
    """A purchasable product in the ``products`` collection."""

    id: str
    name: str = ""
    description: str = ""
    price: Decimal = Decimal("0.00")
    category: str = ""
    stock: int = 0
    images: list[str] = field(default_factory=list)
    image: str = ""
    is_active: bool = True
    rating: Decimal | None = None
    reviews: int | None = None
    tag: dict | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_purchasable(self) -> bool:
        """Out-of-stock items are never purchasable, active or not."""
        return self.is_active and self.stock > 0

    @property
    def primary_image(self) -> str:
        if self.images:
            return self.images[0]
        return self.image

    @classmethod
    def from_document(cls, doc_id: str, data: dict) -> "CatalogItem":
        rating = data.get("rating")
        reviews = data.get("reviews")
        tag = data.get("tag")
        return cls(
            id=doc_id,
            name=to_str(data.get("name")),
            description=to_str(data.get("description")),
            price=max(to_decimal(data.get("price")), Decimal("0.00")),
            category=to_str(data.get("category")),
            stock=max(to_int(data.get("stock")), 0),
            images=to_string_list(data.get("images")),
            image=to_str(data.get("image")) if isinstance(data.get("image"), str) else "",
            is_active=to_bool(data.get("isActive"), True),
            rating=to_decimal(rating) if rating not in (None, "") else None,
            reviews=to_int(reviews) if reviews not in (None, "") else None,
            tag=tag if isinstance(tag, dict) else None,
            created_at=to_datetime(data.get("createdAt")),
            updated_at=to_datetime(data.get("updatedAt")),
        )

    def to_document(self) -> dict:
        document = {
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "category": self.category,
            "stock": self.stock,
            "images": list(self.images),
            "isActive": self.is_active,
        }
        if self.rating is not None:
            document["rating"] = self.rating
        if self.reviews is not None:
            document["reviews"] = self.reviews
        if self.tag:
            document["tag"] = self.tag
        return document


@dataclass
class OrderItem:
    """Snapshot of one purchased catalog item."""

    id: str
    name: str
    price: Decimal
    quantity: int
    image: str = ""

    @property
    def line_total(self) -> Decimal:
        return round_money(self.price * self.quantity)

    @classmethod
    def from_document(cls, data: dict) -> "OrderItem":
        images = to_string_list(data.get("images"))
        return cls(
            id=to_str(data.get("id") or data.get("productId")),
            name=to_str(data.get("name") or data.get("productName")),
            price=to_decimal(data.get("price")),
            quantity=max(to_int(data.get("quantity"), 1), 1),
            image=to_str(data.get("image")) or (images[0] if images else ""),
        )

    def to_document(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "quantity": self.quantity,
            "image": self.image,
        }


@dataclass
class Order:
    """A customer order in the ``orders`` collection."""

    id: str
    order_number: str = ""
    customer_name: str = ""
    customer_email: str = ""
    customer_phone: str = ""
    shipping_address: str = ""
    items: list[OrderItem] = field(default_factory=list)
    subtotal: Decimal = Decimal("0.00")
    shipping: Decimal = Decimal("0.00")
    total: Decimal = Decimal("0.00")
    status: str = "pending"
    payment_method: str = "credit"
    payment_status: str = "pending"
    notes: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def status_label(self) -> str:
        return dict(ORDER_STATUS_CHOICES).get(self.status, self.status)

    @property
    def payment_method_label(self) -> str:
        return dict(PAYMENT_METHOD_CHOICES).get(self.payment_method, self.payment_method)

    @classmethod
    def from_document(cls, doc_id: str, data: dict) -> "Order":
        raw_items = data.get("items") or data.get("products") or []
        items = [OrderItem.from_document(item) for item in raw_items if isinstance(item, dict)]
        return cls(
            id=doc_id,
            order_number=to_str(data.get("orderNumber")),
            customer_name=to_str(data.get("customerName")),
            customer_email=to_str(data.get("customerEmail")),
            customer_phone=to_str(data.get("customerPhone")),
            shipping_address=to_str(data.get("shippingAddress")),
            items=items,
            subtotal=to_decimal(data.get("subtotal")),
            shipping=to_decimal(data.get("shipping")),
            total=to_decimal(data.get("total", data.get("totalAmount"))),
            # Stored statuses are accepted as-is, even outside the known set
            status=to_str(data.get("status")) or "pending",
            payment_method=to_str(data.get("paymentMethod")) or "credit",
            payment_status=to_str(data.get("paymentStatus")) or "pending",
            notes=to_str(data.get("notes")),
            created_at=to_datetime(data.get("createdAt")),
            updated_at=to_datetime(data.get("updatedAt")),
        )

    def to_document(self) -> dict:
        return {
            "orderNumber": self.order_number,
            "customerName": self.customer_name,
            "customerEmail": self.customer_email,
            "customerPhone": self.customer_phone,
            "shippingAddress": self.shipping_address,
            "items": [item.to_document() for item in self.items],
            "subtotal": self.subtotal,
            "shipping": self.shipping,
            "total": self.total,
            "status": self.status,
            "paymentMethod": self.payment_method,
            "paymentStatus": self.payment_status,
            "notes": self.notes,
        }


@dataclass
class Member:
    """A shop member in the ``members`` collection.

    Members registered on the storefront carry the Firebase Auth ``uid``;
    members created from the console have an empty one. Documents written by
    the old console (``name``/``phone``) are read through the same fields.
    """

    id: str
    email: str = ""
    uid: str = ""
    display_name: str = ""
    phone: str = ""
    address: str = ""
    birth_date: date | None = None
    member_level: str = "bronze"
    total_spent: Decimal = Decimal("0.00")
    order_count: int = 0
    points: int = 0
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def member_level_label(self) -> str:
        return dict(MEMBER_LEVEL_CHOICES).get(self.member_level, self.member_level)

    @classmethod
    def from_document(cls, doc_id: str, data: dict) -> "Member":
        level = to_str(data.get("memberLevel"))
        if level not in dict(MEMBER_LEVEL_CHOICES):
            level = "bronze"
        return cls(
            id=doc_id,
            email=to_str(data.get("email")),
            uid=to_str(data.get("uid")),
            display_name=to_str(data.get("displayName") or data.get("name")),
            phone=to_str(data.get("phoneNumber") or data.get("phone")),
            address=to_str(data.get("address")),
            birth_date=to_date(data.get("birthDate") or data.get("birthday")),
            member_level=level,
            total_spent=to_decimal(data.get("totalSpent")),
            order_count=max(to_int(data.get("orderCount")), 0),
            points=max(to_int(data.get("points")), 0),
            is_active=to_bool(data.get("isActive"), True),
            created_at=to_datetime(data.get("createdAt")),
            updated_at=to_datetime(data.get("updatedAt")),
        )

    def to_document(self) -> dict:
        return {
            "uid": self.uid,
            "email": self.email,
            "displayName": self.display_name,
            "phoneNumber": self.phone,
            "address": self.address,
            "birthDate": self.birth_date,
            "memberLevel": self.member_level,
            "totalSpent": self.total_spent,
            "orderCount": self.order_count,
            "points": self.points,
            "isActive": self.is_active,
        }
