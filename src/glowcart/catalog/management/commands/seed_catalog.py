"""Management command to seed the skincare catalog with demo products."""

from decimal import Decimal

from django.core.management.base import BaseCommand

from glowcart.catalog.models import Category, Product, SkinType


PRODUCTS = [
    {
        "name": "Gentle Foaming Cleanser",
        "category": Category.CLEANSER,
        "price": Decimal("18.00"),
        "stock_quantity": 40,
        "skin_type": [SkinType.NORMAL, SkinType.OILY, SkinType.COMBINATION],
        "description": "A low-pH gel cleanser that lifts away oil without stripping.",
        "ingredients": "Glycerin, Coco-Glucoside, Panthenol",
        "featured": True,
    },
    {
        "name": "Hydrating Milk Cleanser",
        "category": Category.CLEANSER,
        "price": Decimal("20.00"),
        "stock_quantity": 25,
        "skin_type": [SkinType.DRY, SkinType.SENSITIVE],
        "description": "Creamy cleanser for dry and reactive skin.",
        "ingredients": "Oat Extract, Squalane, Ceramide NP",
    },
    {
        "name": "Vitamin C Brightening Serum",
        "category": Category.SERUM,
        "price": Decimal("42.00"),
        "stock_quantity": 15,
        "skin_type": [SkinType.NORMAL, SkinType.DRY, SkinType.COMBINATION],
        "description": "15% L-ascorbic acid with ferulic acid for an even tone.",
        "benefits": "Brightens, evens tone, supports collagen",
        "ingredients": "Ascorbic Acid, Ferulic Acid, Vitamin E",
        "featured": True,
    },
    {
        "name": "Niacinamide Balancing Toner",
        "category": Category.TONER,
        "price": Decimal("24.00"),
        "stock_quantity": 30,
        "skin_type": [SkinType.OILY, SkinType.COMBINATION],
        "description": "Alcohol-free toner that refines the look of pores.",
        "ingredients": "Niacinamide, Zinc PCA, Witch Hazel Water",
    },
    {
        "name": "Barrier Repair Moisturizer",
        "category": Category.MOISTURIZER,
        "price": Decimal("36.00"),
        "stock_quantity": 20,
        "skin_type": [SkinType.DRY, SkinType.SENSITIVE, SkinType.NORMAL],
        "description": "Rich cream with ceramides for compromised skin barriers.",
        "ingredients": "Ceramides, Cholesterol, Shea Butter",
        "featured": True,
    },
    {
        "name": "Clay Detox Mask",
        "category": Category.MASK,
        "price": Decimal("28.00"),
        "stock_quantity": 12,
        "skin_type": [SkinType.OILY],
        "description": "Kaolin and bentonite mask for weekly deep cleansing.",
        "ingredients": "Kaolin, Bentonite, Salicylic Acid",
    },
    {
        "name": "Daily Mineral Sunscreen SPF 50",
        "category": Category.SUNSCREEN,
        "price": Decimal("32.00"),
        "stock_quantity": 35,
        "skin_type": [
            SkinType.NORMAL,
            SkinType.DRY,
            SkinType.OILY,
            SkinType.COMBINATION,
            SkinType.SENSITIVE,
        ],
        "description": "Zinc oxide sunscreen with no white cast.",
        "ingredients": "Zinc Oxide, Niacinamide, Tocopherol",
    },
]


class Command(BaseCommand):
    help = "Seed the catalog with demo skincare products"

    def add_arguments(self, parser):
        parser.add_argument(
            "--force",
            action="store_true",
            help="Replace products that already exist by name",
        )

    def handle(self, *args, **options):
        self.stdout.write("\nCreating products...")
        created = 0
        for data in PRODUCTS:
            existing = Product.objects.filter(name=data["name"]).first()
            if existing:
                if not options["force"]:
                    self.stdout.write(f"  Skipping existing product: {data['name']}")
                    continue
                for field, value in data.items():
                    setattr(existing, field, value)
                existing.full_clean()
                existing.save()
                self.stdout.write(f"  Updated: {data['name']}")
                continue

            product = Product(**data)
            product.full_clean()
            product.save()
            created += 1
            self.stdout.write(self.style.SUCCESS(f"  Created: {data['name']}"))

        self.stdout.write(self.style.SUCCESS("\nCatalog seed complete!"))
        self.stdout.write(f"  Products created: {created}")
