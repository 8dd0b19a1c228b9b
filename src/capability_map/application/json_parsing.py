"""Extract a single JSON value from model output (best-effort)."""

from __future__ import annotations

import json
import re
from typing import Any

_FENCE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)
_BRACKETS = {"object": ("{", "}"), "array": ("[", "]")}


def extract_json(text: str, expect: str = "object") -> tuple[bool, Any, str]:
    """
    Try to parse a top-level JSON object or array from text.
    Markdown code fences and surrounding prose are tolerated.
    Returns (ok, parsed_value, error_message).
    """
    if expect not in _BRACKETS:
        raise ValueError(f"expect must be 'object' or 'array', got {expect!r}")
    if not text or not text.strip():
        return False, None, "Empty response"
    fenced = _FENCE.search(text)
    if fenced:
        text = fenced.group(1)
    try:
        return True, json.loads(text), ""
    except ValueError:
        pass
    open_ch, close_ch = _BRACKETS[expect]
    start = text.find(open_ch)
    end = text.rfind(close_ch)
    if start == -1 or end == -1 or end <= start:
        return False, None, f"No JSON {expect} found"
    try:
        return True, json.loads(text[start : end + 1]), ""
    except ValueError as e:
        return False, None, f"Failed to parse JSON: {e}"
