"""Order status state machine.

pending is the only initial state; delivered and cancelled are terminal.
"""

from glowcart.exceptions import InvalidTransition

from .models import OrderStatus

TRANSITIONS = {
    OrderStatus.PENDING: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

INITIAL_STATUS = OrderStatus.PENDING
TERMINAL_STATUSES = frozenset(status for status, targets in TRANSITIONS.items() if not targets)

# Entering these statuses puts the ordered units back on the shelf
RESTOCKING_STATUSES = frozenset({OrderStatus.CANCELLED})


def allowed_transitions(status) -> frozenset:
    """Statuses reachable in one step from ``status``."""
    return TRANSITIONS.get(status, frozenset())


def can_transition(from_status, to_status) -> bool:
    try:
        return to_status in allowed_transitions(from_status)
    except TypeError:
        # unhashable status values are never valid
        return False


def check_transition(from_status, to_status):
    """Raise InvalidTransition unless ``from_status -> to_status`` is allowed."""
    if not can_transition(from_status, to_status):
        raise InvalidTransition(str(from_status), str(to_status))
