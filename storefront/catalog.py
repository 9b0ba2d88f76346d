"""
Seed catalog generator.

Fabricates a synthetic catalog by picking a category, a category-specific
item type and an adjective for each product, then deriving the remaining
fields from bounded random ranges. Used by the mock database (when the
remote catalog is unreachable) and by the reference server's seed endpoint.

Design decisions:
- Tables are plain module-level constants so tests can reason about them
- Pass a seeded random.Random for deterministic output
- Every generated field is within the bounds the Product model validates
"""

import random
from typing import Optional

from storefront.models import Category, Product, Review


ADJECTIVES = [
    "Premium", "Ultra", "Classic", "Modern", "Eco", "Smart", "Sleek", "Durable",
    "Professional", "Minimalist", "Elite", "Zen", "Power", "Titanium", "Aura",
]

PRODUCT_TYPES: dict[Category, list[str]] = {
    Category.ELECTRONICS: ["Headphones", "Speaker", "Monitor", "Keyboard", "Mouse", "Router", "Tablet", "Camera", "Drone", "Hub"],
    Category.FASHION: ["Sneakers", "Jacket", "T-Shirt", "Jeans", "Dress", "Scarf", "Boots", "Hat", "Watch", "Belt"],
    Category.HOME: ["Desk", "Lamp", "Chair", "Vacuum", "Purifier", "Skillet", "Blender", "Fan", "Organizer", "Clock"],
    Category.MOBILES: ["Smartphone", "Foldable", "Gaming Phone", "Budget Phone", "Charger", "Case", "Screen Protector"],
    Category.ACCESSORIES: ["Wallet", "Watch", "Bag", "Sunglasses", "Jewelry", "Cap", "Backpack"],
    Category.GROCERY: ["Coffee Beans", "Organic Honey", "Protein Bar", "Green Tea", "Pasta", "Olive Oil"],
    Category.SPORTS: ["Dumbbells", "Yoga Mat", "Cycle", "Racket", "Ball", "Gym Bag", "Treadmill"],
    Category.BEAUTY: ["Serum", "Moisturizer", "Perfume", "Lipstick", "Hair Dryer", "Shaving Kit"],
    Category.APPLIANCES: ["Refrigerator", "Microwave", "Washing Machine", "Air Conditioner", "Heater"],
    Category.HEALTH: ["Mask", "Thermometer", "Supplement", "Vitamins", "Sanitizer"],
    Category.BOOKS: ["Novel", "Biography", "Textbook", "Cookbook", "Comic", "Journal"],
}

CATEGORY_IMAGES: dict[Category, str] = {
    Category.ELECTRONICS: "https://images.unsplash.com/photo-1498049794561-7780e7231661",
    Category.FASHION: "https://images.unsplash.com/photo-1523275335684-37898b6baf30",
    Category.HOME: "https://images.unsplash.com/photo-1513519245088-0e12902e5a38",
    Category.MOBILES: "https://images.unsplash.com/photo-1511707171634-5f897ff02aa9",
    Category.ACCESSORIES: "https://images.unsplash.com/photo-1584917865442-de89df76afd3",
    Category.GROCERY: "https://images.unsplash.com/photo-1542838132-92c53300491e",
    Category.SPORTS: "https://images.unsplash.com/photo-1517836357463-d25dfeac3438",
    Category.BEAUTY: "https://images.unsplash.com/photo-1522335789203-aabd1fc54bc9",
    Category.APPLIANCES: "https://images.unsplash.com/photo-1584622650111-993a426fbf0a",
    Category.HEALTH: "https://images.unsplash.com/photo-1584036561566-baf8f5f1b144",
    Category.BOOKS: "https://images.unsplash.com/photo-1495446815901-a7297e633e8d",
}

DEFAULT_IMAGE = "https://images.unsplash.com/photo-1505740420928-5e560c06d30e"

# Bounds for the random fields
PRICE_RANGE = (10.0, 2000.0)
RATING_RANGE = (3.0, 5.0)
MAX_STOCK = 200
MAX_REVIEWS = 5000

DEFAULT_CATALOG_SIZE = 1000


def generate_product(index: int, rng: Optional[random.Random] = None) -> Product:
    """
    Build the product with 1-based position `index` in the catalog.

    Args:
        index: Position in the catalog; also the product id
        rng: Random source (a fresh unseeded generator when omitted)
    """
    rng = rng or random.Random()
    category = rng.choice(list(Category))
    item_type = rng.choice(PRODUCT_TYPES.get(category, ["Item"]))
    adjective = rng.choice(ADJECTIVES)

    name = f"{adjective} {item_type} {100 + index}"
    image = CATEGORY_IMAGES.get(category, DEFAULT_IMAGE)

    return Product(
        id=str(index),
        name=name,
        description=(
            f"Experience the future of {category.value.lower()} with the {name}. "
            f"Crafted for quality and performance, this {item_type.lower()} features "
            f"{adjective.lower()} materials and innovative design."
        ),
        price=round(rng.uniform(*PRICE_RANGE), 2),
        category=category,
        image=f"{image}?auto=format&fit=crop&q=80&w=600&sig={index}",
        rating=round(rng.uniform(*RATING_RANGE), 1),
        reviews_count=rng.randrange(MAX_REVIEWS),
        stock=rng.randrange(MAX_STOCK),
        tags=[category.value.lower(), item_type.lower(), adjective.lower()],
    )


def generate_products(
    count: int = DEFAULT_CATALOG_SIZE,
    rng: Optional[random.Random] = None,
) -> list[Product]:
    """Generate a catalog of `count` products with ids "1".."count"."""
    rng = rng or random.Random()
    return [generate_product(i, rng) for i in range(1, count + 1)]


# =============================================================================
# Seed reviews
# =============================================================================

SEED_REVIEWS: list[Review] = [
    Review(
        id="r1",
        product_id="1",
        user_name="John Doe",
        rating=5,
        comment="Exceptional quality. Definitely worth the price!",
        date="2024-03-15",
    ),
    Review(
        id="r2",
        product_id="1",
        user_name="Jane Smith",
        rating=4,
        comment="Great features, though I wish the battery lasted just a bit longer.",
        date="2024-03-10",
    ),
    Review(
        id="r3",
        product_id="2",
        user_name="Alice Runner",
        rating=5,
        comment="The performance is unmatched in this category.",
        date="2024-02-28",
    ),
    Review(
        id="r4",
        product_id="4",
        user_name="TechGuru",
        rating=5,
        comment="Top tier hardware. The display is absolutely gorgeous.",
        date="2024-04-01",
    ),
]


def seed_reviews() -> list[Review]:
    """Fresh copies of the seed reviews."""
    return [review.model_copy() for review in SEED_REVIEWS]
