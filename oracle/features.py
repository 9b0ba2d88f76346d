"""
AI shopping features.

Each function builds a prompt from catalog data, asks the oracle, and
returns a typed value. When the oracle is unavailable or answers with
something unusable the function returns the feature's default instead:

- search_products: case-insensitive name substring match
- consult: a canned clarifying question
- compare_products: a "comparison unavailable" verdict
- suggest_bundle / search_by_image: no products
- summarize_reviews / analyze_space / shopping_advice: a canned message
"""

import json
from typing import Any

from oracle.client import OracleClient
from oracle.responses import (
    COMPARISON_ADAPTER,
    CONSULT_ADAPTER,
    DEFAULT_CONSULT_TURN,
    DEFAULT_TEXT,
    DEFAULT_VERDICT,
    PRODUCT_IDS_ADAPTER,
    ComparisonVerdict,
    ConsultTurn,
    TextAnswer,
    decode,
    decode_text,
)
from storefront.models import CartItem, Product, Review


def _catalog(products: list[Product], *fields: str) -> str:
    return json.dumps([
        {name: getattr(p, name) for name in fields} for p in products
    ])


def _select(products: list[Product], ids: list[str]) -> list[Product]:
    """Products whose id the model returned, in catalog order."""
    wanted = set(ids)
    return [p for p in products if p.id in wanted]


async def search_products(oracle: OracleClient, query: str, products: list[Product]) -> list[Product]:
    """Semantic search over `products`."""
    prompt = (
        f'Search query: "{query}"\n'
        f"Products: {_catalog(products, 'id', 'name', 'tags', 'description')}\n\n"
        "Return ONLY a JSON array of the ids of matching products."
    )
    result = await oracle.ask(
        "search_products", prompt, lambda raw: decode(PRODUCT_IDS_ADAPTER, raw),
        payload={"query": query},
    )
    if result.is_err:
        needle = query.lower()
        return [p for p in products if needle in p.name.lower()]
    return _select(products, result.value)


async def consult(
    oracle: OracleClient,
    history: list[dict[str, str]],
    products: list[Product],
) -> ConsultTurn:
    """
    One turn of the personal-shopper conversation.

    Args:
        history: Prior turns as {"role": "user"|"assistant", "content": ...}
        products: Inventory the assistant may recommend from

    Returns:
        A QuestionTurn while the assistant is still narrowing down, then a
        RecommendationTurn with product ids
    """
    prompt = (
        "You are an elite personal shopper at NovaMart.\n"
        f"Inventory: {_catalog(products, 'id', 'name', 'category', 'tags', 'price')}\n"
        f"Conversation so far: {json.dumps(history)}\n\n"
        "Ask questions until you know enough (usually 2-3), then recommend.\n"
        'While asking, answer {"type": "question", "text": "..."}.\n'
        'When ready, answer {"type": "recommendation", "reasoning": "...", '
        '"productIds": ["id1", "id2"]}.'
    )
    result = await oracle.ask("consult", prompt, lambda raw: decode(CONSULT_ADAPTER, raw))
    return result.get_or_else(DEFAULT_CONSULT_TURN)


async def compare_products(oracle: OracleClient, product_a: Product, product_b: Product) -> ComparisonVerdict:
    prompt = (
        "Compare these two products.\n"
        f"Product A: {json.dumps(product_a.to_wire())}\n"
        f"Product B: {json.dumps(product_b.to_wire())}\n\n"
        'Answer as JSON: {"summary": ..., "comparisonPoints": [{"feature": ..., '
        '"productA": ..., "productB": ...}], "verdict": ...}. The verdict should say '
        "which product suits which kind of shopper."
    )
    result = await oracle.ask(
        "compare_products", prompt, lambda raw: decode(COMPARISON_ADAPTER, raw)
    )
    return result.get_or_else(DEFAULT_VERDICT)


async def suggest_bundle(oracle: OracleClient, main_product: Product, products: list[Product]) -> list[Product]:
    """Two products that pair well with `main_product`."""
    prompt = (
        f"Main product: {main_product.name} ({main_product.category})\n"
        f"Catalog: {_catalog(products, 'id', 'name', 'category')}\n\n"
        "Suggest 2 products that form a bundle or outfit with the main product. "
        "Return a JSON array of product ids."
    )
    result = await oracle.ask(
        "suggest_bundle", prompt, lambda raw: decode(PRODUCT_IDS_ADAPTER, raw)
    )
    ids = [pid for pid in result.get_or_else([]) if pid != main_product.id]
    return _select(products, ids)


async def summarize_reviews(oracle: OracleClient, product_name: str, reviews: list[Review]) -> str:
    lines = "\n".join(f"[Rating: {r.rating}/5] {r.comment}" for r in reviews)
    prompt = (
        f"Product: {product_name}\nReviews:\n{lines}\n\n"
        "Summarize these reviews as bullet points under: 1. Overall Sentiment, "
        "2. Key Pros, 3. Key Cons. Keep it concise."
    )
    result = await oracle.ask("summarize_reviews", prompt, decode_text)
    return result.get_or_else(DEFAULT_TEXT).text


async def analyze_space(oracle: OracleClient, image_base64: str, product_name: str) -> str:
    """Interior-design take on how a product would look in a photographed room."""
    prompt = (
        f'Analyze this room photo. How would the "{product_name}" look in this space? '
        "Consider lighting, style and placement. Give an encouraging, professional "
        "interior design perspective in 3-4 sentences."
    )
    result = await oracle.ask(
        "analyze_space", prompt, decode_text,
        payload={"image": image_base64, "mimeType": "image/jpeg"},
    )
    return result.get_or_else(DEFAULT_TEXT).text


async def search_by_image(oracle: OracleClient, image_base64: str, products: list[Product]) -> list[Product]:
    prompt = (
        "Identify the items in this image.\n"
        f"Catalog: {_catalog(products, 'id', 'name')}\n"
        "Return a JSON array of matching product ids."
    )
    result = await oracle.ask(
        "search_by_image", prompt, lambda raw: decode(PRODUCT_IDS_ADAPTER, raw),
        payload={"image": image_base64, "mimeType": "image/jpeg"},
    )
    return _select(products, result.get_or_else([]))


async def shopping_advice(
    oracle: OracleClient,
    query: str,
    products: list[Product],
    cart: list[CartItem],
) -> TextAnswer:
    cart_context: list[dict[str, Any]] = [
        {"id": item.id, "name": item.name, "quantity": item.quantity} for item in cart
    ]
    prompt = (
        f"User query: {query}\n\n"
        f"Available products: {_catalog(products, 'id', 'name', 'price', 'stock')}\n"
        f"User cart: {json.dumps(cart_context)}\n\n"
        "Act as a helpful NovaMart shopping assistant and suggest specific products "
        "from the inventory."
    )
    result = await oracle.ask("shopping_advice", prompt, decode_text)
    return result.get_or_else(DEFAULT_TEXT)
