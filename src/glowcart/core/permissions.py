"""Administrative capability checks."""

from django.core.exceptions import PermissionDenied


def is_admin(user) -> bool:
    """Check whether a user may run administrative operations."""
    if user is None or not getattr(user, "is_authenticated", False):
        return False
    return bool(getattr(user, "is_admin", False))


def require_admin(user, action: str = "perform this action"):
    """Raise PermissionDenied unless the user is an administrator."""
    if not is_admin(user):
        raise PermissionDenied(f"Only administrators may {action}")
