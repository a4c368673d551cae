"""Context processors for the store app."""

from .guest import SessionCart
from .models import CartItem


def cart_context(request):
    """Add the cart item count to templates."""
    user = getattr(request, "user", None)
    if user is not None and user.is_authenticated:
        count = sum(CartItem.objects.filter(user=user).values_list("quantity", flat=True))
    elif hasattr(request, "session"):
        count = SessionCart(request.session).count()
    else:
        count = 0
    return {"cart_count": count}
