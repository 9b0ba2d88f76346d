"""
Tests for the seed catalog generator.
"""

import random

from storefront.catalog import (
    ADJECTIVES,
    PRODUCT_TYPES,
    SEED_REVIEWS,
    generate_products,
    seed_reviews,
)
from storefront.models import Category


class TestGenerateProducts:
    """Tests for generate_products()."""

    def test_same_seed_same_catalog(self):
        a = generate_products(20, random.Random(7))
        b = generate_products(20, random.Random(7))

        assert [p.to_wire() for p in a] == [p.to_wire() for p in b]

    def test_ids_and_names(self):
        products = generate_products(12, random.Random(1))

        assert [p.id for p in products] == [str(i) for i in range(1, 13)]
        for i, product in enumerate(products, start=1):
            adjective, *item_type, number = product.name.split(" ")
            assert adjective in ADJECTIVES
            assert " ".join(item_type) in PRODUCT_TYPES[Category(product.category)]
            assert number == str(100 + i)

    def test_fields_within_bounds(self):
        for product in generate_products(200, random.Random(3)):
            assert 10 <= product.price <= 2000
            assert round(product.price, 2) == product.price
            assert 3.0 <= product.rating <= 5.0
            assert 0 <= product.stock < 200
            assert 0 <= product.reviews_count < 5000
            assert f"sig={product.id}" in product.image

    def test_tags_are_lowercase(self):
        for product in generate_products(30, random.Random(5)):
            assert len(product.tags) == 3
            assert all(tag == tag.lower() for tag in product.tags)
            assert product.tags[0] == Category(product.category).value.lower()


class TestSeedReviews:
    """Tests for the seed reviews."""

    def test_four_seed_reviews(self):
        assert [r.id for r in SEED_REVIEWS] == ["r1", "r2", "r3", "r4"]

    def test_returns_copies(self):
        reviews = seed_reviews()
        reviews[0].comment = "changed"

        assert SEED_REVIEWS[0].comment != "changed"
