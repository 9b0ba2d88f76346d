"""
AI shopping assistant features backed by an external text-generation service.

Every feature degrades to a typed default when the service is missing or
misbehaves, so callers never handle oracle errors.
"""

from oracle.client import OracleClient
from oracle.features import (
    analyze_space,
    compare_products,
    consult,
    search_by_image,
    search_products,
    shopping_advice,
    suggest_bundle,
    summarize_reviews,
)
from oracle.responses import (
    ComparisonPoint,
    ComparisonVerdict,
    QuestionTurn,
    RecommendationTurn,
    TextAnswer,
)

__all__ = [
    "OracleClient",
    "analyze_space",
    "compare_products",
    "consult",
    "search_by_image",
    "search_products",
    "shopping_advice",
    "suggest_bundle",
    "summarize_reviews",
    "ComparisonPoint",
    "ComparisonVerdict",
    "QuestionTurn",
    "RecommendationTurn",
    "TextAnswer",
]
