import uuid
from decimal import Decimal

import django.core.validators
from django.db import migrations, models

import glowcart.catalog.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("benefits", models.TextField(blank=True)),
                ("ingredients", models.TextField(blank=True)),
                ("image_url", models.URLField(blank=True, max_length=500)),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                ("stock_quantity", models.PositiveIntegerField(default=0)),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("cleanser", "Cleanser"),
                            ("serum", "Serum"),
                            ("toner", "Toner"),
                            ("moisturizer", "Moisturizer"),
                            ("mask", "Mask"),
                            ("sunscreen", "Sunscreen"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "skin_type",
                    models.JSONField(
                        blank=True,
                        default=list,
                        validators=[glowcart.catalog.models.validate_skin_types],
                    ),
                ),
                ("featured", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
    ]
