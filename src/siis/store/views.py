"""Storefront views: catalog, cart, checkout."""

import logging

from django.contrib import messages
from django.http import Http404
from django.shortcuts import redirect
from django.urls import reverse
from django.utils.http import url_has_allowed_host_and_scheme
from django.views import View
from django.views.generic import FormView, TemplateView

from siis import conf
from siis.gateway import GatewayError, get_gateway

from . import catalog, checkout
from .cart import Cart, CartLine, parse_quantity
from .forms import CheckoutForm
from .pricing import calculate_totals

logger = logging.getLogger(__name__)


class CatalogStateMixin:
    """Load active catalog items into an error, empty or populated state.

    There is no automatic retry; the retry link re-issues the same GET.
    """

    def fetch_items(self, category=None):
        try:
            return get_gateway().products.list_active(category=category), None
        except GatewayError as e:
            logger.warning(f"Catalog fetch failed (category={category}): {e}")
            return [], "We could not load the catalog right now."

    def catalog_context(self, items, error):
        if error:
            state = "error"
        elif not items:
            state = "empty"
        else:
            state = "populated"
        return {
            "state": state,
            "error": error,
            "items": [self.card(item) for item in items],
            "retry_url": self.request.get_full_path(),
        }

    def card(self, item):
        return {
            "item": item,
            "image": catalog.product_images(item)[0],
            "rating": catalog.item_rating(item),
        }


class HomeView(CatalogStateMixin, TemplateView):
    """Homepage showcase."""

    template_name = "store/home.html"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        items, error = self.fetch_items()
        context.update(self.catalog_context(items[: conf.get_setting("SHOWCASE_SIZE")], error))
        context["categories"] = catalog.categories_of(items)
        return context


class ProductListView(CatalogStateMixin, TemplateView):
    """All active products, or one category, with optional search."""

    template_name = "store/product_list.html"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        category = self.kwargs.get("category_name")
        query = self.request.GET.get("q", "").strip()

        items, error = self.fetch_items(category=category)
        matching = [item for item in items if catalog.matches_query(item, query)]

        context.update(self.catalog_context(matching, error))
        context["current_category"] = category
        context["query"] = query
        return context


class ProductDetailView(TemplateView):
    """Product detail with gallery and quantity picker."""

    template_name = "store/product_detail.html"

    def get_item(self):
        try:
            item = get_gateway().products.get(self.kwargs["product_id"])
        except GatewayError as e:
            logger.warning(f"Product fetch failed for {self.kwargs['product_id']}: {e}")
            return None, "We could not load this product right now."

        if item is None or not item.is_active:
            raise Http404("Product not found")
        return item, None

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        item, error = self.get_item()
        context["error"] = error
        context["retry_url"] = self.request.get_full_path()
        if item is None:
            return context

        images = catalog.product_images(item)
        context.update({
            "item": item,
            "images": images,
            "selected_index": catalog.select_image_index(self.request.GET.get("image"), len(images)),
            "quantity": catalog.clamp_quantity(self.request.GET.get("quantity"), item.stock),
            "rating": catalog.item_rating(item),
        })
        context["selected_image"] = images[context["selected_index"]]
        return context


def _safe_next(request, default):
    next_url = request.POST.get("next")
    if next_url and url_has_allowed_host_and_scheme(
        next_url,
        allowed_hosts={request.get_host()},
        require_https=request.is_secure(),
    ):
        return next_url
    return default


class CartView(TemplateView):
    template_name = "store/cart.html"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        lines = Cart(self.request.session).lines
        images = catalog.cart_images(self.request.session, lines)
        context.update({
            "lines": [{"line": line, "image": images.get(line.id)} for line in lines],
            "totals": calculate_totals(lines),
            "total_quantity": sum(line.quantity for line in lines),
            "free_shipping_threshold": conf.get_setting("FREE_SHIPPING_THRESHOLD"),
        })
        return context


class CartAddView(View):
    """Add a product to the cart.

    The line snapshots the first display image, whichever gallery image was
    being viewed.
    """

    def post(self, request):
        product_id = request.POST.get("product_id", "")
        try:
            item = get_gateway().products.get(product_id)
        except GatewayError as e:
            logger.warning(f"Add to cart failed for {product_id}: {e}")
            messages.error(request, "Could not add the item to your cart, please try again.")
            return redirect(_safe_next(request, "store:cart"))

        if item is None or not item.is_active:
            raise Http404("Product not found")

        if not item.is_purchasable:
            messages.error(request, f"{item.name} is out of stock.")
            return redirect(_safe_next(request, "store:cart"))

        first_image = catalog.product_images(item)[0]
        if first_image == conf.get_placeholder_image():
            first_image = ""

        quantity = catalog.clamp_quantity(request.POST.get("quantity"), item.stock)
        Cart(request.session).add(CartLine.from_item(item, quantity=quantity, image=first_image))
        checkout.clear_staging(request.session)
        messages.success(request, f"Added {item.name} to your cart.")
        return redirect(_safe_next(request, "store:cart"))


class CartUpdateView(View):
    """Set, increment or decrement a line quantity."""

    def post(self, request):
        cart = Cart(request.session)
        product_id = request.POST.get("product_id", "")
        line = cart.get(product_id)
        if line is None:
            return redirect("store:cart")

        action = request.POST.get("action")
        if action == "increment":
            quantity = line.quantity + 1
        elif action == "decrement":
            quantity = line.quantity - 1
        else:
            quantity = parse_quantity(request.POST.get("quantity"))

        cart.set_quantity(product_id, quantity)
        checkout.clear_staging(request.session)
        return redirect("store:cart")


class CartRemoveView(View):
    def post(self, request):
        Cart(request.session).remove(request.POST.get("product_id", ""))
        checkout.clear_staging(request.session)
        return redirect("store:cart")


class CartCheckoutView(View):
    """Stage the cart and continue to checkout."""

    def post(self, request):
        cart = Cart(request.session)
        if cart.is_empty:
            messages.info(request, "Your cart is empty.")
            return redirect("store:cart")

        if request.shopper is None:
            messages.info(request, "Please sign in to check out.")
            return redirect(f"{reverse('core:login')}?next={reverse('store:cart')}")

        checkout.stage_checkout(request.session, request.shopper, cart.lines)
        return redirect("store:checkout")


class CheckoutView(FormView):
    """Contact, shipping and payment details.

    Needs a signed-in shopper and a non-empty cart; otherwise the visitor is
    sent back to the cart. Staged lines left over after the cart was emptied
    are discarded.
    """

    template_name = "store/checkout.html"
    form_class = CheckoutForm

    def dispatch(self, request, *args, **kwargs):
        if Cart(request.session).is_empty:
            checkout.clear_staging(request.session)
        self.lines = checkout.checkout_lines(request.session)
        if request.shopper is None or not self.lines:
            if request.shopper is None:
                messages.info(request, "Please sign in to check out.")
            return redirect("store:cart")
        self.state = checkout.CheckoutState.AWAITING_INPUT
        return super().dispatch(request, *args, **kwargs)

    def set_state(self, state):
        logger.debug(f"Checkout for {self.request.shopper.uid}: {self.state.value} -> {state.value}")
        self.state = state

    def get_initial(self):
        initial = super().get_initial()
        initial.update({
            "name": self.request.shopper.display_name,
            "email": self.request.shopper.email,
            "payment_method": "credit",
        })
        return initial

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["lines"] = self.lines
        context["totals"] = calculate_totals(self.lines)
        context["state"] = self.state
        return context

    def post(self, request, *args, **kwargs):
        self.set_state(checkout.CheckoutState.VALIDATING)
        return super().post(request, *args, **kwargs)

    def form_invalid(self, form):
        self.set_state(checkout.CheckoutState.INVALID)
        return super().form_invalid(form)

    def form_valid(self, form):
        self.set_state(checkout.CheckoutState.SUBMITTING)
        confirmation = checkout.submit_checkout(self.request.session, form.cleaned_data)
        self.set_state(checkout.CheckoutState.CONFIRMED)
        try:
            checkout.persist_confirmation(confirmation)
        except GatewayError as e:
            logger.warning(f"Could not persist order {confirmation.order_number}: {e}")
            messages.warning(
                self.request,
                "Your order is confirmed but could not be saved to our records yet.",
            )
        return redirect("store:order-confirmation")


class OrderConfirmationView(TemplateView):
    template_name = "store/order_confirmation.html"

    def get(self, request, *args, **kwargs):
        confirmation = checkout.get_confirmation(request.session)
        if confirmation is None:
            checkout.clear_staging(request.session)
            return redirect("store:home")
        return self.render_to_response(self.get_context_data(
            confirmation=confirmation,
            state=checkout.CheckoutState.CONFIRMED,
        ))


class AboutView(TemplateView):
    template_name = "store/about.html"
