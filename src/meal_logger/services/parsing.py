"""Meal description parsing with an LLM and normalization of its output."""

import json
import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

import pydantic

from meal_logger.domain.errors import AIParseError
from meal_logger.domain.meals import MealItem, ParsedMeal
from meal_logger.domain.parsing import RawMealItem, RawMealResponse
from meal_logger.services.aggregation import round_calories, round_macro, sum_items

_logger = logging.getLogger(__name__)

DEFAULT_ITEM_NAME = "Unknown"
DEFAULT_ITEM_QTY = "1 serving"
DEFAULT_CONFIDENCE = 0.5

SYSTEM_PROMPT = """You are a nutrition parser. Analyze the meal description and output ONLY valid JSON matching this exact schema. No markdown. No extra keys. No explanations.

Schema:
{
  "meal_summary": "Brief description of the meal",
  "items": [
    {
      "name": "Food item name",
      "qty": "Quantity description (e.g., '1 cup', '200g', '2 slices')",
      "calories": 0,
      "protein_g": 0.0,
      "carbs_g": 0.0,
      "fat_g": 0.0,
      "fiber_g": 0.0,
      "sugar_g": 0.0,
      "sodium_mg": 0.0
    }
  ],
  "totals": {
    "calories": 0,
    "protein_g": 0.0,
    "carbs_g": 0.0,
    "fat_g": 0.0,
    "fiber_g": 0.0,
    "sugar_g": 0.0,
    "sodium_mg": 0.0
  },
  "confidence": 0.5,
  "assumptions": []
}

Rules:
- If portion sizes are missing, assume common serving sizes and list them in assumptions.
- If ambiguous (e.g., "sandwich"), pick a reasonable default and lower confidence (0.3-0.6).
- Clamp all negative numbers to 0.
- Round calories to integers, macros to 1 decimal place.
- Always include totals that sum all items.
- Provide confidence 0.0-1.0 based on clarity of description.
- List any assumptions made in the assumptions array."""

_FENCE_OPEN = re.compile(r"^```(?:json)?\n?")
_FENCE_CLOSE = re.compile(r"\n?```$")


class CompletionClient(Protocol):
    """Interface for a single-shot text completion."""

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Return the raw model text for the prompts."""


@dataclass
class MealParsingService:
    """Turns free-text meal descriptions into normalized nutrition data."""

    client: CompletionClient

    async def parse(self, text: str) -> ParsedMeal:
        """Parse a description, retrying once when the output is not JSON."""
        raw = await self.client.complete(SYSTEM_PROMPT, _initial_prompt(text))
        try:
            payload = decode_model_json(raw)
        except json.JSONDecodeError as exc:
            _logger.warning("Model returned malformed JSON, retrying: %s", exc)
            raw = await self.client.complete(SYSTEM_PROMPT, _retry_prompt(text))
            try:
                payload = decode_model_json(raw)
            except json.JSONDecodeError as retry_exc:
                raise AIParseError(details=str(retry_exc)) from retry_exc
        return normalize_response(payload)


def decode_model_json(raw: str) -> object:
    """Decode model output, stripping a surrounding markdown fence."""
    content = raw.strip()
    if content.startswith("```"):
        content = _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", content, count=1))
    return json.loads(content)


def normalize_response(payload: object) -> ParsedMeal:
    """Validate and sanitize decoded model output.

    The model's own totals are discarded and recomputed from the items.
    """
    try:
        response = RawMealResponse.model_validate(payload)
    except pydantic.ValidationError as exc:
        raise AIParseError(details=f"Unexpected response shape: {exc}") from exc

    items = [_normalize_item(item) for item in response.items]
    return ParsedMeal(
        meal_summary=response.meal_summary or "Meal",
        items=items,
        totals=sum_items(items),
        confidence=_normalize_confidence(response.confidence),
        assumptions=_normalize_assumptions(response.assumptions),
    )


def _normalize_item(item: RawMealItem) -> MealItem:
    return MealItem(
        name=item.name or DEFAULT_ITEM_NAME,
        qty=item.qty or DEFAULT_ITEM_QTY,
        calories=round_calories(item.calories or 0.0),
        protein_g=round_macro(item.protein_g or 0.0),
        carbs_g=round_macro(item.carbs_g or 0.0),
        fat_g=round_macro(item.fat_g or 0.0),
        fiber_g=round_macro(item.fiber_g or 0.0),
        sugar_g=round_macro(item.sugar_g) if item.sugar_g is not None else None,
        sodium_mg=round_macro(item.sodium_mg) if item.sodium_mg is not None else None,
    )


def _normalize_confidence(value: float | None) -> float:
    return max(0.0, min(1.0, value or DEFAULT_CONFIDENCE))


def _normalize_assumptions(value: object) -> list[str]:
    if isinstance(value, Sequence) and not isinstance(value, str):
        return [str(entry) for entry in value]
    return []


def _initial_prompt(text: str) -> str:
    return f'Parse this meal description: "{text}"'


def _retry_prompt(text: str) -> str:
    return f'{SYSTEM_PROMPT}\n\nFix the JSON response for this meal: "{text}"'
