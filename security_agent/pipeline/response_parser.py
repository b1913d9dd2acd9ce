"""Parse the AI backend's free-text response into raw findings."""

import json
from typing import Any, Dict, List, Optional

from ..models import RawFinding
from ..utils import get_logger


logger = get_logger(__name__)

# Lowercased wire field -> RawFinding attribute
_FIELD_ALIASES = {
    "ruleid": "rule_id",
    "id": "rule_id",
    "title": "title",
    "description": "description",
    "severity": "severity",
    "linenumber": "line_number",
    "codesnippet": "code_snippet",
    "remediation": "remediation",
    "filepath": "file_path",
    "file": "file_path",
}

_STRING_FIELDS = ("rule_id", "title", "description", "severity", "remediation")
_OPTIONAL_STRING_FIELDS = ("code_snippet", "file_path")


class FindingDecodeError(ValueError):
    """A JSON element could not be decoded into a finding."""


def _decode_line_number(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool):
        raise FindingDecodeError(f"lineNumber must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise FindingDecodeError(f"lineNumber must be an integer, got {value!r}")


def _decode_finding(item: Any) -> RawFinding:
    """Decode one array element, matching field names case-insensitively."""
    if not isinstance(item, dict):
        raise FindingDecodeError(f"Finding must be a JSON object, got {type(item).__name__}")

    values: Dict[str, Any] = {}
    for key, value in item.items():
        attr = _FIELD_ALIASES.get(str(key).lower())
        # ruleId wins over the id alias when both are present
        if attr is None or (attr in values and str(key).lower() == "id"):
            continue
        values[attr] = value

    for attr in _STRING_FIELDS:
        value = values.get(attr)
        if value is None:
            values[attr] = ""
        elif not isinstance(value, str):
            raise FindingDecodeError(f"{attr} must be a string, got {value!r}")

    for attr in _OPTIONAL_STRING_FIELDS:
        value = values.get(attr)
        if value is not None and not isinstance(value, str):
            raise FindingDecodeError(f"{attr} must be a string, got {value!r}")

    values["line_number"] = _decode_line_number(values.get("line_number"))
    return RawFinding(**values)


def extract_findings(raw_text: str) -> List[RawFinding]:
    """
    Extract the findings array embedded in a free-text response.

    Takes everything from the first '[' to the last ']' and decodes it as a
    JSON array. Malformed output yields an empty list and is logged; this
    function never raises.

    Args:
        raw_text: Full accumulated backend response

    Returns:
        Decoded findings, in array order
    """
    if not raw_text:
        logger.warning("Empty response from AI backend")
        return []

    start = raw_text.find("[")
    end = raw_text.rfind("]")
    if start < 0 or end <= start:
        logger.warning(f"No JSON array found in response: {raw_text[:200]!r}")
        return []

    payload = raw_text[start:end + 1]
    logger.debug(f"Parsing JSON response: {payload}")

    try:
        data = json.loads(payload)
        if not isinstance(data, list):
            raise FindingDecodeError("Response JSON is not an array")
        return [_decode_finding(item) for item in data]
    except (json.JSONDecodeError, FindingDecodeError) as e:
        logger.error(f"Failed to parse AI response: {e}")
        return []
