"""
Recover structured task commands from free-form language model output.

The model is asked to answer with JSON commands but routinely wraps them in
code fences, surrounds them with prose, or emits several objects back to back.
Extraction is best effort: anything that does not decode as JSON is dropped.
"""
import json
import re
from typing import Any, Dict, List, Optional, Tuple

CODE_FENCE_RE = re.compile(r"```json|```")
PURE_OBJECT_RE = re.compile(r"^\s*\{[\s\S]*\}\s*$")
PURE_ARRAY_RE = re.compile(r"^\s*\[.*\]\s*$", re.DOTALL)

_decoder = json.JSONDecoder()


def strip_code_fences(text: str) -> str:
    return CODE_FENCE_RE.sub("", text or "").strip()


def _decode_at(text: str, start: int) -> Tuple[Any, Optional[int]]:
    """Decode the JSON value starting exactly at ``start``; (None, None) when it is not JSON"""
    try:
        return _decoder.raw_decode(text, start)
    except ValueError:
        return None, None


def _find_command_array(text: str) -> Optional[List[Dict[str, Any]]]:
    """First array literal in the text that holds at least one object"""
    position = text.find("[")
    while position != -1:
        value, _ = _decode_at(text, position)
        if isinstance(value, list) and any(isinstance(item, dict) for item in value):
            return [item for item in value if isinstance(item, dict)]
        position = text.find("[", position + 1)
    return None


def _find_command_objects(text: str) -> List[Dict[str, Any]]:
    """
    Every top-level object literal, in order; malformed candidates are skipped.

    After a malformed object the scan resumes at the next brace, so a valid
    object nested inside it (a filter, say) comes back as a command of its own.
    The dispatcher ignores such objects since they carry no known action.
    """
    commands = []
    position = text.find("{")
    while position != -1:
        value, end = _decode_at(text, position)
        if isinstance(value, dict):
            commands.append(value)
            position = text.find("{", end)
        else:
            position = text.find("{", position + 1)
    return commands


def extract_commands(text: str) -> List[Dict[str, Any]]:
    """
    Return the command objects found in ``text`` in the order they appear.

    An array of commands wins over loose objects; without one, each object
    literal in the text is decoded on its own. An empty list means the text
    is a plain conversational reply.
    """
    cleaned = strip_code_fences(text)
    commands = _find_command_array(cleaned)
    if commands is not None:
        return commands
    return _find_command_objects(cleaned)


def is_pure_json(text: str) -> bool:
    """True when the whole reply is a single object or array literal and nothing else"""
    return bool(PURE_OBJECT_RE.match(text) or PURE_ARRAY_RE.match(text))
