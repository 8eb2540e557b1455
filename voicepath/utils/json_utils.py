# voicepath/utils/json_utils.py
import json
import re
from typing import Any

from voicepath.errors import LLMResponseError
from voicepath.utils.llm_bedrock import _resolve_logger

FENCE_PATTERN = re.compile(r"```(?:json)?\s*(\{[\s\S]*?\}|\[[\s\S]*?\])\s*```", re.IGNORECASE)


def _find_balanced_json(text: str, start_char: str, end_char: str) -> str:
    start = text.find(start_char)
    while start != -1:
        depth = 0
        in_string = False
        escape = False
        for idx in range(start, len(text)):
            ch = text[idx]
            if escape:
                escape = False
                continue
            if ch == "\\":
                escape = True
                continue
            if ch == '"':
                in_string = not in_string
                continue
            if in_string:
                continue
            if ch == start_char:
                depth += 1
            elif ch == end_char:
                depth -= 1
                if depth == 0:
                    candidate = text[start : idx + 1]
                    try:
                        json.loads(candidate)
                        return candidate
                    except json.JSONDecodeError:
                        break
        start = text.find(start_char, start + 1)
    return ""


def extract_json_block(text: str) -> str:
    """
    Extracts the first complete JSON array or object from model output,
    stripping an optional markdown fence (```json ... ``` or bare ```).
    Arrays are preferred when the text opens with one, since the task and
    flowchart prompts both answer with arrays.
    Returns an empty string if no valid JSON block is found.
    """
    if not text:
        return ""
    log = _resolve_logger()

    fence_match = FENCE_PATTERN.search(text)
    if fence_match:
        potential_json = fence_match.group(1).strip()
        try:
            json.loads(potential_json)
            log.debug("[extract_json_block] Extracted JSON from fenced block.")
            return potential_json
        except json.JSONDecodeError:
            log.warning("[extract_json_block] Found fenced block, but content is invalid JSON. Falling back.")

    stripped = text.lstrip()
    order = (("[", "]"), ("{", "}")) if stripped.startswith("[") else (("{", "}"), ("[", "]"))
    for start_char, end_char in order:
        candidate = _find_balanced_json(text, start_char, end_char)
        if candidate:
            log.debug("[extract_json_block] Extracted JSON %s from freeform text.",
                      "array" if start_char == "[" else "object")
            return candidate

    log.warning("[extract_json_block] No valid JSON object or array found in the text.")
    return ""


def parse_json_response(text: str) -> Any:
    """Decode the JSON payload of a model reply or raise ``LLMResponseError``."""
    blob = extract_json_block(text)
    if not blob:
        raise LLMResponseError("AI response was not valid JSON", details=(text or "")[:500])
    return json.loads(blob)
