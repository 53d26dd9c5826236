"""Extraction of the foods JSON object from free-form model replies."""

import json
import re

from keto_tracker.domain.errors import MalformedResponseError, NoItemsDetectedError

_FENCE_PATTERN = re.compile(r"```[ \t]*[\w+-]*[ \t]*\n?")
_FOODS_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\"foods\"[\s\S]*\}")


def strip_code_fences(text: str) -> str:
    """Remove triple-backtick fence markers, keeping the fenced content."""
    return _FENCE_PATTERN.sub("", text)


def locate_foods_object(text: str) -> str:
    """Return the widest ``{...}`` span containing the ``"foods"`` key."""
    match = _FOODS_OBJECT_PATTERN.search(text)
    if match:
        return match.group(0)
    return text


def extract_foods_payload(raw_text: str) -> dict[str, object]:
    """Parse the model reply into a dict with a non-empty ``foods`` list."""
    candidate = locate_foods_object(strip_code_fences(raw_text)).strip()
    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError as exc:
        raise MalformedResponseError(
            f"Model reply is not valid JSON: {exc.msg} (reply: {raw_text[:200]!r})"
        ) from exc
    except RecursionError as exc:
        raise MalformedResponseError("Model reply is nested too deeply") from exc
    if not isinstance(parsed, dict) or "foods" not in parsed:
        raise MalformedResponseError("Model reply has no 'foods' key")
    foods = parsed["foods"]
    if not isinstance(foods, list):
        raise MalformedResponseError("Model reply 'foods' is not a list")
    if not foods:
        raise NoItemsDetectedError("Model reply listed no foods")
    return parsed
