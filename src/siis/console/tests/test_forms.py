"""Tests for console forms."""

from django.core.files.uploadedfile import SimpleUploadedFile
from django.utils.datastructures import MultiValueDict

from siis.console.forms import OrderForm, ProductForm


def image(name="ring.jpg", content_type="image/jpeg", size=10):
    return SimpleUploadedFile(name, b"x" * size, content_type=content_type)


PRODUCT_DATA = {
    "name": "Twist Ring",
    "description": "Rose gold",
    "price": "880",
    "category": "Rings",
    "stock": "5",
    "is_active": "on",
}


def product_form(data=None, images=()):
    return ProductForm(data={**PRODUCT_DATA, **(data or {})}, files=MultiValueDict({"images": list(images)}))


class TestProductForm:
    def test_valid_without_images(self):
        form = product_form()
        assert form.is_valid(), form.errors
        assert form.cleaned_data["images"] == []

    def test_price_must_be_positive(self):
        form = product_form({"price": "0"})
        assert not form.is_valid()
        assert form.errors["price"] == ["Price must be greater than 0."]

    def test_negative_stock_rejected(self):
        form = product_form({"stock": "-1"})
        assert not form.is_valid()
        assert form.errors["stock"] == ["Stock cannot be negative."]

    def test_three_images_accepted(self):
        form = product_form(images=[image(f"{n}.jpg") for n in range(3)])
        assert form.is_valid(), form.errors
        assert len(form.cleaned_data["images"]) == 3

    def test_four_images_rejected(self):
        form = product_form(images=[image(f"{n}.jpg") for n in range(4)])
        assert not form.is_valid()
        assert form.errors["images"] == ["You can upload at most 3 images."]

    def test_unsupported_type_rejected(self):
        form = product_form(images=[image("ring.gif", content_type="image/gif")])
        assert not form.is_valid()
        assert "ring.gif" in form.errors["images"][0]

    def test_oversized_image_rejected(self, settings):
        settings.SIIS = {**settings.SIIS, "MAX_IMAGE_BYTES": 1024 * 1024}
        form = product_form(images=[image(size=1024 * 1024 + 1)])
        assert not form.is_valid()
        assert form.errors["images"] == ["ring.jpg: images must be 1MB or smaller."]


class TestOrderForm:
    DATA = {
        "customer_name": "Mei",
        "customer_email": "mei@example.com",
        "status": "pending",
        "payment_method": "credit",
        "payment_status": "pending",
    }

    def test_items_are_parsed(self):
        form = OrderForm(data={**self.DATA, "items": "Twist Ring | 880 | 2\n\nPearl Studs | 450 | 1"})

        assert form.is_valid(), form.errors
        items = form.cleaned_data["items"]
        assert [(item.name, str(item.price), item.quantity) for item in items] == [
            ("Twist Ring", "880.00", 2),
            ("Pearl Studs", "450.00", 1),
        ]

    def test_malformed_line_rejected(self):
        form = OrderForm(data={**self.DATA, "items": "Twist Ring | 880"})
        assert not form.is_valid()
        assert form.errors["items"] == ["Line 1: expected name | price | quantity."]

    def test_zero_quantity_rejected(self):
        form = OrderForm(data={**self.DATA, "items": "Twist Ring | 880 | 0"})
        assert not form.is_valid()
