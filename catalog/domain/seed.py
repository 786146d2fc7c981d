"""
Seed catalog.

Installed when neither the remote store nor the local cache can provide
products, and written to an empty store by the ``seed_catalog`` command.
"""
from typing import List

from catalog.domain.category import Category
from catalog.domain.product import Product
from catalog.domain.records import utcnow
from core.domain.value_objects import CategorySlug

SEED_UPDATER = "system"

_PEXELS_PARAMS = "auto=compress&cs=tinysrgb&w=1260&h=750&dpr=1"

SEED_PRODUCT_DATA = [
    {
        "id": "1",
        "name": "Premium Basmati Rice",
        "slug": "premium-basmati-rice",
        "description": (
            "Long-grain aromatic rice known for its nutty flavor and floral aroma. "
            "Perfect for pilaf, biryani, and other rice dishes."
        ),
        "imageUrl": f"https://images.pexels.com/photos/4110251/pexels-photo-4110251.jpeg?{_PEXELS_PARAMS}",
        "category": "rice",
        "featured": True,
        "inStock": True,
    },
    {
        "id": "2",
        "name": "Organic Sunflower Seeds",
        "slug": "organic-sunflower-seeds",
        "description": (
            "High-quality organic sunflower seeds rich in nutrients and perfect "
            "for oil production or direct consumption."
        ),
        "imageUrl": f"https://images.pexels.com/photos/326158/pexels-photo-326158.jpeg?{_PEXELS_PARAMS}",
        "category": "seeds",
        "featured": True,
        "inStock": True,
    },
    {
        "id": "3",
        "name": "Refined Soybean Oil",
        "slug": "refined-soybean-oil",
        "description": (
            "Pure refined soybean oil suitable for cooking, food processing, "
            "and industrial applications."
        ),
        "imageUrl": f"https://images.pexels.com/photos/725998/pexels-photo-725998.jpeg?{_PEXELS_PARAMS}",
        "category": "oil",
        "featured": True,
        "inStock": True,
    },
    {
        "id": "4",
        "name": "High-Density Polyethylene",
        "slug": "high-density-polyethylene",
        "description": (
            "Premium HDPE resin for manufacturing durable plastic products with "
            "excellent impact resistance and tensile strength."
        ),
        "imageUrl": (
            "https://images.pexels.com/photos/39348/"
            f"plastic-waste-environment-recycling-39348.jpeg?{_PEXELS_PARAMS}"
        ),
        "category": "raw-polymers",
        "inStock": True,
    },
    {
        "id": "5",
        "name": "Calcium Bromide Solution",
        "slug": "calcium-bromide-solution",
        "description": (
            "High-purity calcium bromide solution used in drilling fluids, "
            "completion fluids, and workover fluids in oil and gas operations."
        ),
        "imageUrl": f"https://images.pexels.com/photos/6195085/pexels-photo-6195085.jpeg?{_PEXELS_PARAMS}",
        "category": "bromine-salt",
        "inStock": False,
    },
    {
        "id": "6",
        "name": "Jasmine Rice",
        "slug": "jasmine-rice",
        "description": (
            "Premium Thai jasmine rice known for its sweet aroma, soft texture, "
            "and delicate flavor. Perfect for Asian cuisine."
        ),
        "imageUrl": f"https://images.pexels.com/photos/7421213/pexels-photo-7421213.jpeg?{_PEXELS_PARAMS}",
        "category": "rice",
        "inStock": True,
    },
]


def seed_products() -> List[Product]:
    """Return a fresh copy of the seed catalog, stamped with the current time."""
    now = utcnow()
    return [
        Product.from_record(
            data["id"],
            {**data, "updatedAt": now, "updatedBy": SEED_UPDATER},
        )
        for data in SEED_PRODUCT_DATA
    ]


SEED_CATEGORY_TITLES = ("Rice", "Seeds", "Oil", "Raw Polymers", "Bromine Salt")


def seed_categories(updated_by: str = SEED_UPDATER) -> List[Category]:
    """Return the seed categories, keyed by their slugs."""
    return [
        Category.create(
            category_id=str(CategorySlug.from_title(title)), title=title, updated_by=updated_by
        )
        for title in SEED_CATEGORY_TITLES
    ]
