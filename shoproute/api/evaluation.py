"""Request and response shaping for the external evaluation service.

The evaluation service decides which shops to visit and in which order. This
module only validates what the form sends it and pulls the ordered stop list
back out of its answer.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from shoproute.api.models import Stop

logger = logging.getLogger(__name__)

CATEGORIES = ["Beauty", "Clothing", "Electronics", "Groceries", "Medicine", "Meat"]
OPTIONS = ("categorical", "manual")
SELECTION_TYPES = ("time", "price")

_DECODER = json.JSONDecoder()


def build_evaluation_payload(
    option: str,
    items: Optional[List[Dict[str, str]]] = None,
    manual_input: str = "",
    selection_type: str = "time",
) -> Dict[str, Any]:
    """Validate form input and build the body for the evaluation call."""
    if option not in OPTIONS:
        raise ValueError(f"Invalid option. Must be one of: {', '.join(OPTIONS)}")

    if selection_type not in SELECTION_TYPES:
        raise ValueError(f"Invalid selection type. Must be one of: {', '.join(SELECTION_TYPES)}")

    if option == "categorical":
        if not items:
            raise ValueError("At least one item is required")
        data = []
        for item in items:
            category = item.get("category", CATEGORIES[0])
            if category not in CATEGORIES:
                raise ValueError(f"Invalid category '{category}'. Must be one of: {', '.join(CATEGORIES)}")
            data.append({"category": category, "name": (item.get("name") or "").strip()})
    else:
        data = (manual_input or "").strip()
        if not data:
            raise ValueError("Manual input cannot be empty")

    return {"option": option, "data": data, "selectionType": selection_type}


def extract_nlp_result(message: str) -> str:
    """Return the first complete ``{...}`` object in ``message``, or the message itself.

    The service wraps its JSON answer in prose; nested objects are kept whole.
    """
    text = message or ""
    start = text.find("{")
    while start != -1:
        try:
            _, end = _DECODER.raw_decode(text, start)
            return text[start:end]
        except json.JSONDecodeError:
            start = text.find("{", start + 1)
    return message


def stops_from_evaluation(result: Any) -> List[Stop]:
    """Read the recommended visit order (``possible_paths[0]``).

    Accepts the decoded response, or the service message text with the JSON
    answer embedded in it.
    """
    if isinstance(result, str):
        try:
            result = json.loads(extract_nlp_result(result))
        except json.JSONDecodeError as exc:
            raise ValueError(f"Evaluation result is not valid JSON: {exc}") from exc

    if not isinstance(result, dict):
        raise ValueError("Evaluation result must be an object")

    paths = result.get("possible_paths")
    if not paths or not isinstance(paths[0], list):
        raise ValueError("Evaluation result has no possible_paths")

    stops = [Stop.from_dict(entry) for entry in paths[0]]
    logger.debug(f"Evaluation suggested {len(stops)} stops")
    return stops


__all__ = [
    "CATEGORIES",
    "OPTIONS",
    "SELECTION_TYPES",
    "build_evaluation_payload",
    "extract_nlp_result",
    "stops_from_evaluation",
]
