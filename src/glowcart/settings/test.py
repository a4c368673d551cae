"""Test settings for GlowCart project."""

from .base import *  # noqa: F401,F403

SECRET_KEY = "test-secret-key-not-for-production"
DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

GLOWCART = {
    **GLOWCART,  # noqa: F405
    "AUTO_CLAMP_CHECKOUT": False,
    "MAX_LINE_QUANTITY": 99,
}
