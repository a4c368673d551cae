"""Catalog models: the storefront's system of record for products."""

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models


class Category(models.TextChoices):
    CLEANSER = "cleanser", "Cleanser"
    SERUM = "serum", "Serum"
    TONER = "toner", "Toner"
    MOISTURIZER = "moisturizer", "Moisturizer"
    MASK = "mask", "Mask"
    SUNSCREEN = "sunscreen", "Sunscreen"


class SkinType(models.TextChoices):
    NORMAL = "normal", "Normal"
    DRY = "dry", "Dry"
    OILY = "oily", "Oily"
    COMBINATION = "combination", "Combination"
    SENSITIVE = "sensitive", "Sensitive"


def validate_skin_types(value):
    """Skin types must be a list of distinct known values."""
    if not isinstance(value, (list, tuple)):
        raise ValidationError("Skin types must be a list")
    unknown = [v for v in value if v not in SkinType.values]
    if unknown:
        raise ValidationError(f"Unknown skin types: {', '.join(map(str, unknown))}")
    if len(set(value)) != len(value):
        raise ValidationError("Skin types must not repeat")


class Product(models.Model):
    """A product for sale.

    ``stock_quantity`` is changed only by administrators and by the
    conditional decrement/increment in ``catalog.services``.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    benefits = models.TextField(blank=True)
    ingredients = models.TextField(blank=True)
    image_url = models.URLField(max_length=500, blank=True)

    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    stock_quantity = models.PositiveIntegerField(default=0)

    category = models.CharField(max_length=20, choices=Category.choices)
    skin_type = models.JSONField(default=list, blank=True, validators=[validate_skin_types])
    featured = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name

    @property
    def in_stock(self):
        return self.stock_quantity > 0
