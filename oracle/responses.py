"""
Typed responses from the AI oracle.

Model output is untrusted text. Each feature declares the shape it expects;
decode() parses and validates against that shape and reports a mismatch as
an Err so the caller can substitute the feature's default.
"""

import json
from typing import Annotated, Any, Literal, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from storefront.results import Result

T = TypeVar("T")


class OracleModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Comparison
# =============================================================================

class ComparisonPoint(OracleModel):
    feature: str
    product_a: str
    product_b: str


class ComparisonVerdict(OracleModel):
    """Side-by-side comparison of two products."""
    summary: str
    comparison_points: list[ComparisonPoint] = Field(default_factory=list)
    verdict: str


# =============================================================================
# Consultation
# =============================================================================

class QuestionTurn(OracleModel):
    """The assistant needs more information."""
    type: Literal["question"] = "question"
    text: str


class RecommendationTurn(OracleModel):
    """The assistant is ready to recommend products."""
    type: Literal["recommendation"] = "recommendation"
    reasoning: str
    product_ids: list[str] = Field(default_factory=list)


ConsultTurn = Annotated[Union[QuestionTurn, RecommendationTurn], Field(discriminator="type")]


class TextAnswer(OracleModel):
    """Free-text answer (review summaries, room analysis, advice)."""
    text: str


# =============================================================================
# Adapters and defaults
# =============================================================================

COMPARISON_ADAPTER = TypeAdapter(ComparisonVerdict)
CONSULT_ADAPTER: TypeAdapter = TypeAdapter(ConsultTurn)
PRODUCT_IDS_ADAPTER = TypeAdapter(list[str])

DEFAULT_VERDICT = ComparisonVerdict(
    summary="Comparison unavailable right now.",
    comparison_points=[],
    verdict="We couldn't compare these products. Please try again later.",
)
DEFAULT_CONSULT_TURN = QuestionTurn(
    text="I'm sorry, I'm having a bit of trouble thinking. "
         "What else can you tell me about what you need?",
)
DEFAULT_TEXT = TextAnswer(text="Our assistant is unavailable right now. Please try again later.")


def decode(adapter: TypeAdapter, raw: Any) -> Result[Any, str]:
    """
    Validate model output against `adapter`.

    A string is parsed as JSON first, since models usually answer with JSON
    text rather than a structured value.
    """
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError as e:
            return Result.err(f"output is not JSON: {e}")
    try:
        return Result.ok(adapter.validate_python(raw))
    except ValidationError as e:
        return Result.err(f"output does not match the expected shape: {e.error_count()} error(s)")


def decode_text(raw: Any) -> Result[TextAnswer, str]:
    if isinstance(raw, str) and raw.strip():
        return Result.ok(TextAnswer(text=raw.strip()))
    if isinstance(raw, dict):
        try:
            return Result.ok(TextAnswer(**raw))
        except ValidationError as e:
            return Result.err(f"text answer malformed: {e.error_count()} error(s)")
    return Result.err("empty answer")
