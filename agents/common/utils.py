"""Shared utility functions for agents."""

import json
import logging
import math
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


def parse_json_response(response: str) -> Optional[Any]:
    """Safely parse JSON from agent response.

    Args:
        response: Agent response text that may contain JSON

    Returns:
        Parsed JSON value or None if parsing fails
    """
    if not response:
        return None

    # Try to extract JSON from markdown code blocks
    if "```" in response:
        start = response.find("```json")
        start = start + 7 if start != -1 else response.find("```") + 3
        end = response.find("```", start)
        json_str = response[start:end if end != -1 else None].strip()
        try:
            return json.loads(json_str)
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse JSON from code block: {e}")

    # Try to parse the entire response
    try:
        return json.loads(response)
    except json.JSONDecodeError:
        logger.warning("Response is not valid JSON")
        return None


def clamp_score(value: Any, default: float, low: float = 0.0, high: float = 10.0) -> float:
    """Coerce a model-supplied score into [low, high].

    Args:
        value: Raw value from the model (number, numeric string, or junk)
        default: Used when the value is missing or not numeric
        low: Lower bound
        high: Upper bound

    Returns:
        Clamped float
    """
    if isinstance(value, bool):
        value = None
    try:
        number = float(value)
    except (TypeError, ValueError):
        number = float(default)
    if math.isnan(number):
        number = float(default)
    return max(low, min(high, number))


def string_list(value: Any, fallback: List[str]) -> List[str]:
    """Keep the non-empty strings of a list, or return the fallback."""
    if not isinstance(value, list):
        return list(fallback)
    items = [str(item).strip() for item in value if isinstance(item, (str, int, float)) and str(item).strip()]
    return items or list(fallback)


def format_agent_context(context: Dict[str, Any]) -> str:
    """Format context dictionary for agent consumption.

    Args:
        context: Context data to format

    Returns:
        Formatted context string
    """
    lines = []
    for key, value in context.items():
        if value is None or value == [] or value == {}:
            continue
        label = key.replace('_', ' ').title()
        if isinstance(value, (list, dict)):
            lines.append(f"{label}:")
            lines.append(json.dumps(value, indent=2))
        else:
            lines.append(f"{label}: {value}")

    return "\n".join(lines)


def mean(values: List[float]) -> float:
    """Arithmetic mean, 0 for an empty list."""
    if not values:
        return 0.0
    return sum(values) / len(values)


def variance(values: List[float]) -> float:
    """Population variance, 0 for an empty list."""
    if not values:
        return 0.0
    avg = mean(values)
    return sum((v - avg) ** 2 for v in values) / len(values)
