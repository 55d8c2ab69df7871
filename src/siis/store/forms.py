"""Checkout form."""

from django import forms
from django.core.validators import RegexValidator

from siis.gateway.records import PAYMENT_METHOD_CHOICES

# Anything shaped like local@domain.tld
validate_checkout_email = RegexValidator(
    r"^\S+@\S+\.\S+$",
    message="Please enter a valid email address.",
)


class CheckoutForm(forms.Form):
    name = forms.CharField(
        max_length=100,
        error_messages={"required": "Please enter your name."},
    )
    email = forms.CharField(
        max_length=254,
        validators=[validate_checkout_email],
        error_messages={"required": "Please enter your email."},
        widget=forms.EmailInput,
    )
    phone = forms.CharField(
        max_length=30,
        error_messages={"required": "Please enter your phone number."},
    )
    address = forms.CharField(
        label="Shipping address",
        max_length=255,
        error_messages={"required": "Please enter your shipping address."},
    )
    payment_method = forms.ChoiceField(
        choices=PAYMENT_METHOD_CHOICES,
        initial="credit",
        required=False,
        widget=forms.RadioSelect,
        error_messages={"invalid_choice": "Please choose a payment method."},
    )

    def clean_payment_method(self):
        return self.cleaned_data.get("payment_method") or "credit"
