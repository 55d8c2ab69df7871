"""SIIS shop configuration."""

from decimal import Decimal

from django.conf import settings


def get_config():
    """Get shop configuration from settings."""
    defaults = {
        # Site branding
        'SHOP_NAME': 'SIIS Jewelry',
        'CURRENCY_SYMBOL': 'NT$',

        # Pricing
        'FREE_SHIPPING_THRESHOLD': Decimal('500'),
        'FLAT_SHIPPING_FEE': Decimal('60'),

        # Catalog
        'PLACEHOLDER_IMAGE': '/static/store/placeholder.svg',
        'SHOWCASE_SIZE': 8,
        'LOW_STOCK_THRESHOLD': 5,

        # Product image uploads
        'MAX_PRODUCT_IMAGES': 3,
        'MAX_IMAGE_BYTES': 5 * 1024 * 1024,
        'ALLOWED_IMAGE_TYPES': ['image/jpeg', 'image/jpg', 'image/png', 'image/webp'],
        'PRODUCT_IMAGE_PATH': 'products',

        # Access
        'ADMIN_EMAILS': [],
        'AUTH_TIMEOUT': 10.0,

        # Checkout
        'PERSIST_CHECKOUT_ORDERS': False,
    }

    user_config = getattr(settings, 'SIIS', {})
    return {**defaults, **user_config}


def get_setting(name, default=None):
    """Get a specific shop setting."""
    config = get_config()
    return config.get(name, default)


def get_placeholder_image():
    """Get the local placeholder image URL."""
    return get_setting('PLACEHOLDER_IMAGE')


def get_admin_emails():
    """Get the lower-cased emails granted console access."""
    return [email.lower() for email in get_setting('ADMIN_EMAILS', [])]
