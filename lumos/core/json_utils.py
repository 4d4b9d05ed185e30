"""Pull JSON objects out of free-form LLM replies."""
import json
import logging
import re
from typing import Any, Optional

logger = logging.getLogger(__name__)

_FENCED = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.I)
_TRAILING_OBJECT = re.compile(r"\{[\s\S]*\}$")
_ANY_OBJECT = re.compile(r"\{[\s\S]*\}")
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")
_BARE_KEY = re.compile(r"([{,]\s*)(\w+):")


def _candidate(text: str) -> str:
    fenced = _FENCED.search(text)
    if fenced:
        return fenced.group(1)
    match = _TRAILING_OBJECT.search(text) or _ANY_OBJECT.search(text)
    return match.group(0) if match else text


def extract_json(text: Any) -> Optional[Any]:
    """Parse the JSON a model wrapped in a code fence or prose. None when nothing parses."""
    if not text or not isinstance(text, str):
        return None
    candidate = _candidate(text).strip()
    try:
        return json.loads(candidate)
    except json.JSONDecodeError as first_error:
        cleaned = _BARE_KEY.sub(r'\1"\2":', _TRAILING_COMMA.sub(r"\1", candidate))
        try:
            return json.loads(cleaned)
        except json.JSONDecodeError as second_error:
            logger.warning(
                f"Failed to parse JSON from LLM response ({len(candidate)} chars): "
                f"{first_error}; after cleanup: {second_error}"
            )
            return None
