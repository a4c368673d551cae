"""GlowCart storefront configuration."""

from django.conf import settings


def get_config():
    """Get storefront configuration from settings."""
    defaults = {
        'SHOP_NAME': 'GlowCart',

        # Checkout proceeds without re-confirmation when stock adjustments occur
        'AUTO_CLAMP_CHECKOUT': False,

        # Per-line ceiling applied together with the stock ceiling
        'MAX_LINE_QUANTITY': 99,

        'CURRENCY': 'USD',

        # Session key holding the anonymous visitor's cart
        'GUEST_CART_SESSION_KEY': 'cart',
    }

    user_config = getattr(settings, 'GLOWCART', {})
    return {**defaults, **user_config}


def get_setting(name, default=None):
    """Get a specific storefront setting."""
    config = get_config()
    return config.get(name, default)


def auto_clamp_checkout():
    """Whether checkout silently accepts clamped or dropped lines."""
    return bool(get_setting('AUTO_CLAMP_CHECKOUT', False))


def max_line_quantity():
    """Get the per-line quantity ceiling."""
    return int(get_setting('MAX_LINE_QUANTITY', 99))


def guest_cart_session_key():
    """Get the session key for the guest cart."""
    return get_setting('GUEST_CART_SESSION_KEY', 'cart')
