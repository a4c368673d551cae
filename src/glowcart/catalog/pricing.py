"""Money helpers shared by cart views and order assembly."""

from decimal import Decimal, ROUND_HALF_EVEN


def round_money(amount: Decimal, places: int = 2) -> Decimal:
    """Round to specified decimal places using banker's rounding."""
    quantize_str = "0." + "0" * places
    return amount.quantize(Decimal(quantize_str), rounding=ROUND_HALF_EVEN)


def line_total(unit_price: Decimal, quantity: int) -> Decimal:
    """Price of ``quantity`` units at ``unit_price``."""
    return round_money(Decimal(unit_price) * quantity)


def sum_lines(lines) -> Decimal:
    """Total of (unit_price, quantity) pairs, rounded once at the end."""
    total = sum((Decimal(price) * quantity for price, quantity in lines), Decimal("0"))
    return round_money(total)
