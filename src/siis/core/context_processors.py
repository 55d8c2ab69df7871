"""Context processors for SIIS core."""

from siis import conf


def session_context(request):
    """Add the signed-in shopper and shop branding to templates."""
    shopper = getattr(request, "shopper", None)
    return {
        "shopper": shopper,
        "is_admin": bool(shopper and shopper.is_admin),
        "shop_name": conf.get_setting("SHOP_NAME"),
        "currency_symbol": conf.get_setting("CURRENCY_SYMBOL"),
        "placeholder_image": conf.get_placeholder_image(),
    }
