"""Signal receivers for the store app."""

from django.contrib.auth.signals import user_logged_in
from django.dispatch import receiver

from .guest import merge_into_user


@receiver(user_logged_in, dispatch_uid="glowcart.store.merge_guest_cart")
def merge_guest_cart_on_login(sender, request, user, **kwargs):
    """Fold the anonymous session cart into the user's cart at sign-in."""
    if request is None or not hasattr(request, "session"):
        return

    results = merge_into_user(request.session, user)
    skipped = [r for r in results if r.error is not None]
    clamped = [r for r in results if r.change is not None and r.change.clamped]
    if skipped or clamped:
        # Kept in the session so the next page can tell the shopper
        request.session["cart_merge_notices"] = [r.as_dict() for r in skipped + clamped]
