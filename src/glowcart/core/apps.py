"""Core app configuration."""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    """Configuration for the core application."""

    name = "glowcart.core"
    verbose_name = "GlowCart Core"
    default_auto_field = "django.db.models.BigAutoField"
