"""Admin console forms.

Image files are validated here, before anything is uploaded.
"""

from decimal import Decimal

from django import forms

from siis import conf
from siis.gateway.records import (
    MEMBER_LEVEL_CHOICES,
    ORDER_STATUS_CHOICES,
    PAYMENT_METHOD_CHOICES,
    PAYMENT_STATUS_CHOICES,
    OrderItem,
    to_decimal,
    to_int,
)


class MultipleFileInput(forms.ClearableFileInput):
    allow_multiple_selected = True


class MultipleFileField(forms.FileField):
    def __init__(self, *args, **kwargs):
        kwargs.setdefault("widget", MultipleFileInput(attrs={"accept": "image/jpeg,image/png,image/webp"}))
        super().__init__(*args, **kwargs)

    def clean(self, data, initial=None):
        single_file_clean = super().clean
        if isinstance(data, (list, tuple)):
            return [single_file_clean(d, initial) for d in data]
        if not data:
            return []
        return [single_file_clean(data, initial)]


class ProductForm(forms.Form):
    name = forms.CharField(max_length=200, error_messages={"required": "Please enter a product name."})
    description = forms.CharField(widget=forms.Textarea(attrs={"rows": 4}), required=False)
    price = forms.DecimalField(
        max_digits=10,
        decimal_places=2,
        error_messages={"required": "Please enter a price."},
    )
    category = forms.CharField(max_length=100, error_messages={"required": "Please enter a category."})
    stock = forms.IntegerField(min_value=0, initial=0, error_messages={"min_value": "Stock cannot be negative."})
    is_active = forms.BooleanField(label="Active", required=False, initial=True)
    tag_text = forms.CharField(label="Tag", max_length=30, required=False)
    images = MultipleFileField(
        required=False,
        help_text="Up to 3 images, JPG, PNG or WEBP, 5MB each. New images replace the current ones.",
    )

    def clean_price(self):
        price = self.cleaned_data["price"]
        if price <= Decimal("0"):
            raise forms.ValidationError("Price must be greater than 0.")
        return price

    def clean_images(self):
        files = self.cleaned_data.get("images") or []
        max_images = conf.get_setting("MAX_PRODUCT_IMAGES")
        if len(files) > max_images:
            raise forms.ValidationError(f"You can upload at most {max_images} images.")

        allowed_types = conf.get_setting("ALLOWED_IMAGE_TYPES")
        max_bytes = conf.get_setting("MAX_IMAGE_BYTES")
        for file in files:
            if getattr(file, "content_type", None) not in allowed_types:
                raise forms.ValidationError(f"{file.name}: please choose a JPG, PNG or WEBP image.")
            if file.size > max_bytes:
                raise forms.ValidationError(
                    f"{file.name}: images must be {max_bytes // (1024 * 1024)}MB or smaller."
                )
        return files

    @classmethod
    def initial_for(cls, item) -> dict:
        return {
            "name": item.name,
            "description": item.description,
            "price": item.price,
            "category": item.category,
            "stock": item.stock,
            "is_active": item.is_active,
            "tag_text": (item.tag or {}).get("text", ""),
        }


class MemberForm(forms.Form):
    display_name = forms.CharField(label="Name", max_length=100, error_messages={"required": "Please enter a name."})
    email = forms.EmailField(error_messages={"required": "Please enter an email."})
    phone = forms.CharField(max_length=30, required=False)
    address = forms.CharField(max_length=255, required=False)
    birth_date = forms.DateField(required=False, widget=forms.DateInput(attrs={"type": "date"}))
    member_level = forms.ChoiceField(choices=MEMBER_LEVEL_CHOICES, initial="bronze")
    points = forms.IntegerField(min_value=0, initial=0)
    is_active = forms.BooleanField(label="Active", required=False, initial=True)

    @classmethod
    def initial_for(cls, member) -> dict:
        return {
            "display_name": member.display_name,
            "email": member.email,
            "phone": member.phone,
            "address": member.address,
            "birth_date": member.birth_date,
            "member_level": member.member_level,
            "points": member.points,
            "is_active": member.is_active,
        }


class OrderForm(forms.Form):
    """Order entered by hand in the console."""

    customer_name = forms.CharField(max_length=100, error_messages={"required": "Please enter the customer name."})
    customer_email = forms.EmailField(error_messages={"required": "Please enter the customer email."})
    customer_phone = forms.CharField(max_length=30, required=False)
    shipping_address = forms.CharField(max_length=255, required=False)
    items = forms.CharField(
        widget=forms.Textarea(attrs={"rows": 4}),
        help_text="One item per line: name | price | quantity",
        error_messages={"required": "Please enter at least one item."},
    )
    status = forms.ChoiceField(choices=ORDER_STATUS_CHOICES, initial="pending")
    payment_method = forms.ChoiceField(choices=PAYMENT_METHOD_CHOICES, initial="credit")
    payment_status = forms.ChoiceField(choices=PAYMENT_STATUS_CHOICES, initial="pending")
    notes = forms.CharField(widget=forms.Textarea(attrs={"rows": 2}), required=False)

    def clean_items(self):
        items = []
        for number, raw in enumerate(self.cleaned_data["items"].splitlines(), start=1):
            if not raw.strip():
                continue
            parts = [part.strip() for part in raw.split("|")]
            if len(parts) != 3 or not parts[0]:
                raise forms.ValidationError(f"Line {number}: expected name | price | quantity.")

            price = to_decimal(parts[1], default="-1")
            quantity = to_int(parts[2], default=0)
            if price < 0 or quantity < 1:
                raise forms.ValidationError(f"Line {number}: price must be 0 or more and quantity at least 1.")
            items.append(OrderItem(id="", name=parts[0], price=price, quantity=quantity))

        if not items:
            raise forms.ValidationError("Please enter at least one item.")
        return items


class OrderStatusForm(forms.Form):
    status = forms.ChoiceField(choices=ORDER_STATUS_CHOICES)
