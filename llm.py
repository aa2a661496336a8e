# llm.py
import json
import logging
import os
from typing import Iterable, List, Optional
from openai import OpenAI

logger = logging.getLogger(__name__)

SWAP_COUNT = 3

FALLBACK_SWAPS = [
    "Swap refined grains for whole grains (brown rice, oats, whole wheat roti).",
    "Choose grilled, baked or steamed preparation over fried.",
    "Replace sugary drinks with water or unsweetened tea.",
]


def _client() -> Optional[OpenAI]:
    api_key = os.getenv("GROQ_API_KEY", "")
    if not api_key:
        return None
    return OpenAI(
        api_key=api_key,
        base_url=os.getenv("GROQ_BASE_URL", "https://api.groq.com/openai/v1"),
    )


def _safe_fallback() -> List[str]:
    return list(FALLBACK_SWAPS)


def _swap_prompt(meal_text: str, conditions: Iterable[str]) -> str:
    goals = ", ".join(c.replace("_", " ") for c in conditions) or "general healthy eating"
    return "\n".join([
        f"A patient is following this meal plan: {meal_text}",
        f"Their health goals: {goals}.",
        f"Suggest exactly {SWAP_COUNT} practical food swaps that keep the plan's spirit.",
        "Food only: never mention medication, dosing or diagnosis.",
        f"Reply with nothing but a JSON array of {SWAP_COUNT} strings.",
    ])


def _parse_swaps(content: str) -> Optional[List[str]]:
    try:
        data = json.loads(content)
    except ValueError:
        return None
    if not isinstance(data, list) or len(data) < SWAP_COUNT:
        return None
    if not all(isinstance(x, str) and x.strip() for x in data):
        return None
    return [x.strip() for x in data[:SWAP_COUNT]]


def suggest_meal_swaps(meal_text: str, conditions: Iterable[str] = ()) -> List[str]:
    """
    Three healthy swap ideas for a generated plan, from the Groq endpoint.
    Any failure (no key, request error, unusable reply) yields the fixed safe list.
    """
    client = _client()
    if client is None:
        return _safe_fallback()

    try:
        resp = client.chat.completions.create(
            model=os.getenv("GROQ_MODEL", "llama-3.3-70b-versatile"),
            messages=[{"role": "user", "content": _swap_prompt(meal_text, conditions)}],
            temperature=0.3,
        )
    except Exception:
        logger.warning("Swap suggestion request failed; using fallback", exc_info=True)
        return _safe_fallback()

    swaps = _parse_swaps((resp.choices[0].message.content or "").strip())
    if swaps is None:
        logger.warning("Swap suggestions were not a list of %d strings; using fallback", SWAP_COUNT)
        return _safe_fallback()
    return swaps
