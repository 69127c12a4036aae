from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from json_repair import repair_json

from .errors import ParseError

_EMBEDDED_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


def strip_code_fence(text: str) -> str:
    """Drop a surrounding ```json fence if the model added one anyway."""
    candidate = text.strip()
    if candidate.startswith("```"):
        lines = candidate.splitlines()
        closing = len(lines) - 1 if len(lines) > 1 and lines[-1].startswith("```") else len(lines)
        candidate = "\n".join(lines[1:closing])
    return candidate.strip()


def decode_json_payload(raw: str, *, source: str, logger: logging.Logger) -> Any:
    """Parse a provider body as JSON, repairing near-misses before giving up."""
    if raw is None or not str(raw).strip():
        raise ParseError(f"Empty response body from {source}")
    cleaned = strip_code_fence(str(raw))
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as exc:
        logger.warning("JSON parse of %s response failed, attempting repair: %s", source, exc)
        repaired = repair_json(cleaned, return_objects=True)
        if isinstance(repaired, (dict, list)) and repaired:
            return repaired
        raise ParseError(f"Response from {source} is not valid JSON: {exc}") from exc


def find_embedded_object(text: str) -> Optional[dict[str, Any]]:
    """Return the ``{...}`` fragment inside an error string, if it parses.

    SDK errors often render the payload as a Python dict repr, so the fragment
    is repaired rather than rejected when strict JSON parsing fails.
    """
    match = _EMBEDDED_OBJECT.search(text or "")
    if not match:
        return None
    fragment = match.group(0)
    try:
        parsed = json.loads(fragment)
    except json.JSONDecodeError:
        parsed = repair_json(fragment, return_objects=True)
    return parsed if isinstance(parsed, dict) and parsed else None
