"""Tests for the checkout flow."""

from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

import pytest

from siis.gateway import GatewayError
from siis.store import checkout
from siis.store.cart import Cart, CartLine
from siis.store.forms import CheckoutForm

VALID = {
    "name": "Mei",
    "email": "mei@example.com",
    "phone": "0912345678",
    "address": "No. 1, Section 1, Taipei",
    "payment_method": "linepay",
}


class TestCheckoutForm:
    def test_valid(self):
        form = CheckoutForm(data=VALID)
        assert form.is_valid(), form.errors

    @pytest.mark.parametrize("email,valid", [
        ("a@b", False),
        ("a@b.c", True),
        ("no-at-sign.com", False),
        ("has space@b.c", False),
    ])
    def test_email_shape(self, email, valid):
        form = CheckoutForm(data={**VALID, "email": email})
        assert form.is_valid() is valid

    @pytest.mark.parametrize("field,message", [
        ("name", "Please enter your name."),
        ("email", "Please enter your email."),
        ("phone", "Please enter your phone number."),
        ("address", "Please enter your shipping address."),
    ])
    def test_each_required_field_blocks_with_its_own_message(self, field, message):
        form = CheckoutForm(data={**VALID, field: ""})

        assert not form.is_valid()
        assert form.errors == {field: [message]}

    def test_payment_method_defaults_to_credit(self):
        form = CheckoutForm(data={**VALID, "payment_method": ""})
        assert form.is_valid()
        assert form.cleaned_data["payment_method"] == "credit"

    def test_unknown_payment_method_rejected(self):
        form = CheckoutForm(data={**VALID, "payment_method": "bitcoin"})
        assert not form.is_valid()
        assert "payment_method" in form.errors


class TestOrderNumber:
    def test_uses_epoch_millis(self):
        now = datetime(2026, 1, 2, 3, 4, 5, 678000, tzinfo=dt_timezone.utc)
        assert checkout.generate_order_number(now) == f"ORD-{int(now.timestamp() * 1000)}"


class TestBuildConfirmation:
    def test_totals_and_snapshots(self):
        lines = [
            CartLine(id="p1", name="Ring", price=Decimal("250"), quantity=1, image="ring.jpg"),
            CartLine(id="p2", name="Pendant", price=Decimal("260"), quantity=1),
        ]

        confirmation = checkout.build_confirmation(VALID, lines)

        assert confirmation.subtotal == Decimal("510.00")
        assert confirmation.shipping_fee == Decimal("0.00")
        assert confirmation.total == Decimal("510.00")
        assert [item.id for item in confirmation.items] == ["p1", "p2"]
        assert confirmation.items[0].image == "ring.jpg"
        assert confirmation.payment_method_label == "LINE Pay"
        assert confirmation.order_number.startswith("ORD-")

    def test_survives_session_round_trip(self):
        lines = [CartLine(id="p1", name="Ring", price=Decimal("19.99"), quantity=3)]
        confirmation = checkout.build_confirmation(VALID, lines)

        restored = checkout.OrderConfirmation.from_session(confirmation.to_session())

        assert restored.total == confirmation.total == Decimal("119.97")
        assert restored.items[0].quantity == 3
        assert restored.created_at == confirmation.created_at


class TestSubmitCheckout:
    def test_clears_staging_and_cart(self, shopper):
        session = {}
        cart = Cart(session)
        cart.add(CartLine(id="p1", name="Ring", price=Decimal("250"), quantity=2))
        checkout.stage_checkout(session, shopper, cart.lines)

        confirmation = checkout.submit_checkout(session, VALID)

        assert confirmation.subtotal == Decimal("500.00")
        assert confirmation.shipping_fee == Decimal("60.00")
        assert confirmation.total == Decimal("560.00")
        assert checkout.STAGED_USER_KEY not in session
        assert checkout.STAGED_ITEMS_KEY not in session
        assert cart.is_empty
        assert checkout.get_confirmation(session).order_number == confirmation.order_number

    def test_staged_lines_take_precedence(self, shopper):
        session = {}
        checkout.stage_checkout(session, shopper, [CartLine(id="p1", name="Ring", price=Decimal("10"))])
        Cart(session).add(CartLine(id="p2", name="Pendant", price=Decimal("20")))

        assert [line.id for line in checkout.checkout_lines(session)] == ["p1"]


class TestPersistConfirmation:
    def test_disabled_by_default(self, gateway, fake_db):
        confirmation = checkout.build_confirmation(VALID, [CartLine(id="p1", name="Ring", price=Decimal("10"))])

        assert checkout.persist_confirmation(confirmation) is None
        assert fake_db.docs("orders") == {}

    def test_writes_pending_order_when_enabled(self, settings, gateway, fake_db):
        settings.SIIS = {**settings.SIIS, "PERSIST_CHECKOUT_ORDERS": True}
        confirmation = checkout.build_confirmation(VALID, [CartLine(id="p1", name="Ring", price=Decimal("10"))])

        order_id = checkout.persist_confirmation(confirmation)

        stored = fake_db.docs("orders")[order_id]
        assert stored["status"] == "pending"
        assert stored["paymentStatus"] == "pending"
        assert stored["total"] == 70.0
        assert stored["orderNumber"] == confirmation.order_number

    def test_write_failure_raises(self, settings, gateway, fake_db):
        settings.SIIS = {**settings.SIIS, "PERSIST_CHECKOUT_ORDERS": True}
        fake_db.fail_on.add("create")
        confirmation = checkout.build_confirmation(VALID, [CartLine(id="p1", name="Ring", price=Decimal("10"))])

        with pytest.raises(GatewayError):
            checkout.persist_confirmation(confirmation)
