from django.apps import AppConfig


class StoreConfig(AppConfig):
    name = "glowcart.store"
    verbose_name = "Store"
    default_auto_field = "django.db.models.BigAutoField"

    def ready(self):
        from . import signals  # noqa: F401
