"""Context processors for the storefront."""

from .cart import Cart


def cart_context(request):
    """Add the cart item count to templates."""
    if not hasattr(request, "session"):
        return {}
    return {"cart_quantity": Cart(request.session).total_quantity}
