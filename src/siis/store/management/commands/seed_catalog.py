"""Management command to seed the catalog with sample jewelry."""

from decimal import Decimal

from django.core.management.base import BaseCommand, CommandError

from siis.gateway import GatewayError, get_gateway
from siis.gateway.records import CatalogItem

DEFAULT_STOCK = 100

PRODUCTS = [
    {
        "name": "Moonlit Pearl Necklace",
        "description": "Freshwater pearls on an 18K gold-plated chain. Adjustable from 40 to 45 cm.",
        "price": Decimal("1280"),
        "category": "Necklaces",
        "images": [],
        "rating": Decimal("4.8"),
        "reviews": 126,
        "tag": {"text": "Bestseller", "color": "gold"},
    },
    {
        "name": "Starlight Stud Earrings",
        "description": "Sterling silver studs set with cubic zirconia. Hypoallergenic posts.",
        "price": Decimal("450"),
        "category": "Earrings",
        "images": [],
        "rating": Decimal("4.6"),
        "reviews": 89,
    },
    {
        "name": "Rose Gold Twist Ring",
        "description": "A slim twisted band in rose gold-plated sterling silver.",
        "price": Decimal("680"),
        "category": "Rings",
        "images": [],
        "tag": {"text": "New", "color": "rose"},
    },
    {
        "name": "Jade Leaf Bracelet",
        "description": "Hand-carved jade leaves linked on a fine silver chain.",
        "price": Decimal("1520"),
        "category": "Bracelets",
        "images": [],
        "rating": Decimal("4.9"),
        "reviews": 42,
    },
    {
        "name": "Minimal Bar Pendant",
        "description": "Brushed silver bar pendant, engravable on both sides.",
        "price": Decimal("390"),
        "category": "Necklaces",
        "images": [],
    },
    {
        "name": "Crescent Hoop Earrings",
        "description": "Lightweight gold-plated hoops with a hammered finish.",
        "price": Decimal("520"),
        "category": "Earrings",
        "images": [],
    },
]


class Command(BaseCommand):
    help = "Seed the products collection with sample jewelry"

    def add_arguments(self, parser):
        parser.add_argument(
            "--force",
            action="store_true",
            help="Delete existing products with the same name and recreate",
        )
        parser.add_argument(
            "--stock",
            type=int,
            default=DEFAULT_STOCK,
            help=f"Initial stock for each product (default {DEFAULT_STOCK})",
        )

    def handle(self, *args, **options):
        try:
            products = get_gateway().products
        except GatewayError as e:
            raise CommandError(f"Firebase is not available: {e}") from e

        created = 0
        self.stdout.write("\nSeeding products...")
        for data in PRODUCTS:
            try:
                existing = products.list({"name": data["name"]})
                if existing:
                    if options["force"]:
                        for item in existing:
                            products.delete(item.id)
                        self.stdout.write(f"  Deleted existing product: {data['name']}")
                    else:
                        self.stdout.write(f"  Skipping existing product: {data['name']}")
                        continue

                item = CatalogItem(id="", stock=options["stock"], is_active=True, **data)
                products.create(item.to_document())
            except GatewayError as e:
                self.stdout.write(self.style.ERROR(f"  Failed: {data['name']}: {e}"))
                continue

            created += 1
            self.stdout.write(self.style.SUCCESS(f"  Created: {data['name']}"))

        self.stdout.write(self.style.SUCCESS("\nCatalog seed complete!"))
        self.stdout.write(f"  Products created: {created} of {len(PRODUCTS)}")
