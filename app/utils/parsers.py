import re
import json
import logging
from typing import Optional

logger = logging.getLogger(__name__)

# First ``` or ```json fenced block, non-greedy so trailing prose is ignored
FENCED_BLOCK_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)

def extract_fenced_block(text: str) -> Optional[str]:
    """Returns the body of the first fenced code block, or None if there is none."""
    if not text:
        return None
    match = FENCED_BLOCK_RE.search(text)
    if not match:
        return None
    body = match.group(1).strip()
    return body or None

def parse_json_object(text: str) -> Optional[dict]:
    """
    Parses `text` as a single JSON object.
    Returns None when the text is not JSON or decodes to something other than an object.
    """
    if not text or not text.strip():
        return None
    try:
        parsed = json.loads(text.strip())
    except json.JSONDecodeError as e:
        logger.warning(f"⚠️ JSON Parsing Failed: {e}")
        return None

    if not isinstance(parsed, dict):
        logger.warning(f"⚠️ Expected a JSON object, got {type(parsed).__name__}.")
        return None
    return parsed

def extract_analysis_json(text: str) -> Optional[dict]:
    """
    Finds the JSON payload inside a model reply.
    1. Fenced code block (```json ... ```).
    2. Fallback: the whole reply.
    """
    candidate = extract_fenced_block(text)
    if candidate is None:
        logger.debug("No fenced block found, parsing the whole reply.")
        candidate = text
    return parse_json_object(candidate)
