"""Fast, type-safe JSON parsing for model responses."""

from typing import Any
import json

import msgspec
import orjson
from json_repair import repair_json

from .parsers import strip_code_fences

MAX_JSON_DEPTH = 20


class JSONParseError(Exception):
    """JSON parsing failed."""

    def __init__(self, message: str, original: Exception | None = None) -> None:
        super().__init__(message)
        self.original = original


def extract_json_object(text: str) -> str | None:
    """
    Locate the outermost JSON object in model output.

    Markdown fences are removed first; surrounding prose is ignored.

    Returns:
        The object text, or None if no braces were found
    """
    working_text = strip_code_fences(text)

    start = working_text.find("{")
    end = working_text.rfind("}")

    if start == -1 or end == -1 or end < start:
        return None

    return working_text[start : end + 1]


def extract_json(text: str, repair: bool = False) -> dict[str, Any]:
    """
    Extract and parse a JSON object from text.

    Args:
        text: Text containing JSON, optionally wrapped in a code fence
        repair: Attempt to repair invalid JSON with json_repair

    Returns:
        Parsed JSON dictionary

    Raises:
        JSONParseError: If parsing fails
    """
    json_str = extract_json_object(text.strip())
    if json_str is None:
        raise JSONParseError("No JSON object found in response")

    # msgspec first (fastest)
    try:
        result = msgspec.json.Decoder().decode(json_str.encode("utf-8"))
    except msgspec.DecodeError as e:
        if not repair:
            raise JSONParseError(f"Invalid JSON: {e}", e) from e
        try:
            result = json.loads(repair_json(json_str))
        except Exception as repair_error:
            raise JSONParseError(f"JSON repair failed: {repair_error}", repair_error) from repair_error

    if not isinstance(result, dict):
        raise JSONParseError(f"Expected object, got {type(result).__name__}")

    validate_json_depth(result)
    return result


def safe_json_dumps(obj: Any, **kwargs: Any) -> str:
    """
    Encode object to JSON string using the fastest available path.

    Args:
        obj: Object to encode
        **kwargs: Additional arguments (indent)

    Returns:
        JSON string
    """
    indent = kwargs.get("indent", 0)

    if indent == 0:
        try:
            return orjson.dumps(obj).decode("utf-8")
        except (TypeError, ValueError):
            # e.g. integers outside 64-bit range
            pass

    return json.dumps(obj, indent=indent if indent > 0 else None, default=str)


def validate_json_depth(obj: Any, max_depth: int = MAX_JSON_DEPTH, current_depth: int = 0) -> None:
    """
    Validate JSON nesting depth.

    Raises:
        JSONParseError: If depth exceeds limit
    """
    if current_depth > max_depth:
        raise JSONParseError(f"JSON nesting depth {current_depth} exceeds maximum {max_depth}")

    if isinstance(obj, dict):
        for value in obj.values():
            validate_json_depth(value, max_depth, current_depth + 1)
    elif isinstance(obj, list):
        for item in obj:
            validate_json_depth(item, max_depth, current_depth + 1)
