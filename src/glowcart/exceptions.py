"""Exceptions raised by the cart, checkout and order services.

Every error carries a stable ``code`` so the JSON views can return a typed
payload without inspecting the exception class.
"""


class StoreError(Exception):
    """Base error for storefront operations."""

    code = "store_error"
    status = 400

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def as_dict(self) -> dict:
        return {"error": self.code, "message": self.message, "details": self.details}


class InvalidQuantity(StoreError):
    """Requested quantity is not a positive integer."""

    code = "invalid_quantity"

    def __init__(self, quantity):
        super().__init__(
            f"Quantity must be a positive integer, got {quantity!r}",
            details={"quantity": quantity},
        )


class ProductNotFound(StoreError):
    """Product id does not resolve in the catalog."""

    code = "product_not_found"
    status = 404

    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(
            f"Product {product_id} not found",
            details={"product_id": str(product_id)},
        )


class OutOfStock(StoreError):
    """Product has no stock at the time of the call."""

    code = "out_of_stock"
    status = 409

    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(
            f"Product {product_id} is out of stock",
            details={"product_id": str(product_id)},
        )


class EmptyCart(StoreError):
    """No cart line survived validation."""

    code = "empty_cart"

    def __init__(self, adjustments=None):
        self.adjustments = list(adjustments or [])
        super().__init__(
            "Cart has no items available for checkout",
            details={"adjustments": [a.as_dict() for a in self.adjustments]},
        )


class StockConflict(StoreError):
    """Stock was consumed between validation and commit."""

    code = "stock_conflict"
    status = 409

    def __init__(self, product_id, requested: int, available: int | None = None):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for product {product_id}: requested {requested}",
            details={
                "product_id": str(product_id),
                "requested": requested,
                "available": available,
            },
        )


class InvalidTransition(StoreError):
    """Order status change is not an allowed edge of the lifecycle."""

    code = "invalid_transition"
    status = 409

    def __init__(self, from_status: str, to_status: str):
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Cannot move order from '{from_status}' to '{to_status}'",
            details={"from_status": from_status, "to_status": to_status},
        )


class ProductInUse(StoreError):
    """Product is referenced by order history and cannot be deleted."""

    code = "product_in_use"
    status = 409

    def __init__(self, product_id):
        super().__init__(
            f"Product {product_id} is referenced by existing orders",
            details={"product_id": str(product_id)},
        )


class ConfirmationRequired(StoreError):
    """Checkout adjusted the cart and the caller has not re-confirmed."""

    code = "confirmation_required"
    status = 409

    def __init__(self, validation):
        self.validation = validation
        super().__init__(
            "Some cart lines were adjusted to match available stock",
            details=validation.as_dict(),
        )


class OrderNotFound(StoreError):
    """Order id does not resolve, or belongs to someone else."""

    code = "order_not_found"
    status = 404

    def __init__(self, order_id):
        super().__init__(
            f"Order {order_id} not found",
            details={"order_id": str(order_id)},
        )
