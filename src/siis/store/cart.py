"""Shopping cart held in the Django session.

Lines are kept in insertion order with at most one line per catalog item.
Prices and quantities are snapshots taken when the item was added; they are
re-coerced on every read since the session is plain JSON.
"""

from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Any

from siis.gateway.records import CatalogItem, round_money, to_decimal, to_int, to_str

CART_SESSION_KEY = "cart"
CART_IMAGES_SESSION_KEY = "cart_images"


def parse_price(value: Any) -> Decimal:
    """Coerce a stored price, falling back to 0."""
    return to_decimal(value, default="0")


def parse_quantity(value: Any) -> int:
    """Coerce a stored quantity, falling back to 1."""
    return to_int(value, default=1)


@dataclass
class CartLine:
    id: str
    name: str
    price: Decimal
    quantity: int = 1
    image: str = ""
    category: str = ""
    storage_path: str = ""
    image_url: str = ""
    photo: str = ""

    @property
    def line_total(self) -> Decimal:
        return round_money(self.price * self.quantity)

    @classmethod
    def from_item(cls, item: CatalogItem, quantity: int = 1, image: str = "") -> "CartLine":
        """Snapshot a catalog item."""
        return cls(
            id=item.id,
            name=item.name,
            price=item.price,
            quantity=quantity,
            image=image or item.primary_image,
            category=item.category,
        )

    @classmethod
    def from_session(cls, data: dict) -> "CartLine":
        return cls(
            id=to_str(data.get("id")),
            name=to_str(data.get("name")),
            price=parse_price(data.get("price")),
            quantity=max(parse_quantity(data.get("quantity")), 1),
            image=to_str(data.get("image")),
            category=to_str(data.get("category")),
            storage_path=to_str(data.get("storage_path")),
            image_url=to_str(data.get("image_url")),
            photo=to_str(data.get("photo")),
        )

    def to_session(self) -> dict:
        data = asdict(self)
        data["price"] = str(self.price)
        return data


class Cart:
    """Ordered cart lines keyed by catalog item id."""

    def __init__(self, session):
        self.session = session

    def _load(self) -> list[CartLine]:
        raw = self.session.get(CART_SESSION_KEY) or []
        return [CartLine.from_session(entry) for entry in raw if isinstance(entry, dict) and entry.get("id")]

    def _save(self, lines: list[CartLine]):
        self.session[CART_SESSION_KEY] = [line.to_session() for line in lines]

    @property
    def lines(self) -> list[CartLine]:
        return self._load()

    def __iter__(self):
        return iter(self._load())

    def __len__(self):
        return len(self._load())

    @property
    def is_empty(self) -> bool:
        return not self._load()

    def get(self, item_id: str) -> CartLine | None:
        for line in self._load():
            if line.id == item_id:
                return line
        return None

    def add(self, line: CartLine) -> CartLine:
        """Merge into the existing line for the same item, else append."""
        lines = self._load()
        for existing in lines:
            if existing.id == line.id:
                existing.quantity += line.quantity
                self._save(lines)
                return existing

        lines.append(line)
        self._save(lines)
        return line

    def set_quantity(self, item_id: str, quantity: int):
        """Replace the quantity; zero or less removes the line."""
        if quantity <= 0:
            self.remove(item_id)
            return

        lines = self._load()
        for line in lines:
            if line.id == item_id:
                line.quantity = quantity
        self._save(lines)

    def remove(self, item_id: str):
        self._save([line for line in self._load() if line.id != item_id])

    def clear(self):
        self.session.pop(CART_SESSION_KEY, None)
        self.session.pop(CART_IMAGES_SESSION_KEY, None)

    @property
    def total_quantity(self) -> int:
        return sum(line.quantity for line in self._load())

    @property
    def subtotal(self) -> Decimal:
        return round_money(sum((line.line_total for line in self._load()), Decimal("0")))
