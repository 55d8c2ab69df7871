"""Catalog display helpers: image fallbacks, ratings and cart thumbnails."""

import logging
from decimal import Decimal
from typing import NamedTuple

from siis import conf
from siis.gateway import GatewayError, get_gateway
from siis.gateway.records import CatalogItem

from .cart import CART_IMAGES_SESSION_KEY, CartLine

logger = logging.getLogger(__name__)


class Rating(NamedTuple):
    rating: Decimal
    reviews: int
    decorative: bool


def product_images(item: CatalogItem) -> list[str]:
    """Display images for an item: its images, its legacy image, or the placeholder."""
    if item.images:
        return list(item.images)
    if item.image:
        return [item.image]
    return [conf.get_placeholder_image()]


def select_image_index(value, image_count: int) -> int:
    """Clamp a requested gallery index into range."""
    try:
        index = int(value)
    except (TypeError, ValueError):
        return 0
    return min(max(index, 0), max(image_count - 1, 0))


def clamp_quantity(value, stock: int) -> int:
    """Clamp a requested quantity into [1, stock]."""
    try:
        quantity = int(value)
    except (TypeError, ValueError):
        quantity = 1
    return min(max(quantity, 1), max(stock, 1))


def virtual_rating(item_id: str) -> Rating:
    """Deterministic stand-in rating derived from the item id.

    Decorative only. It is not based on any review data.
    """
    seed = sum(ord(char) for char in item_id)
    rating = Decimal("3.5") + Decimal(seed % 15) / Decimal(10)
    return Rating(rating=rating.quantize(Decimal("0.1")), reviews=15 + seed % 200, decorative=True)


def item_rating(item: CatalogItem) -> Rating:
    """Stored rating when present, else the decorative one."""
    if item.rating is not None:
        return Rating(rating=item.rating, reviews=item.reviews or 0, decorative=False)
    return virtual_rating(item.id)


def matches_query(item: CatalogItem, query: str) -> bool:
    query = query.strip().lower()
    if not query:
        return True
    return any(query in value.lower() for value in (item.name, item.description, item.category))


def categories_of(items) -> list[str]:
    return sorted({item.category for item in items if item.category})


def _image_source(line: CartLine) -> str:
    for value in (line.storage_path, line.image, line.image_url, line.photo):
        if value:
            return value
    return ""


def resolve_line_image(line: CartLine) -> str:
    """Display URL for a cart line, or the placeholder when it cannot be resolved."""
    placeholder = conf.get_placeholder_image()
    source = _image_source(line)
    if not source:
        return placeholder
    if source.startswith(("http://", "https://")):
        return source

    try:
        return get_gateway().images.resolve(source)
    except GatewayError as e:
        logger.warning(f"Could not resolve cart image {source} for {line.id}: {e}")
        return placeholder


def cart_images(session, lines: list[CartLine]) -> dict[str, str]:
    """Display images by item id, cached until the set of items changes.

    Quantity changes reuse the cache; adding or removing an item rebuilds it.
    """
    ids = sorted({line.id for line in lines})
    cached = session.get(CART_IMAGES_SESSION_KEY)
    if isinstance(cached, dict) and cached.get("ids") == ids:
        return cached.get("images", {})

    images = {line.id: resolve_line_image(line) for line in lines}
    session[CART_IMAGES_SESSION_KEY] = {"ids": ids, "images": images}
    return images
