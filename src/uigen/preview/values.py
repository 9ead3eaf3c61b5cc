"""
Value model for interpreted code.

JS values map onto Python values: strings are str, numbers int/float,
booleans bool, null is None, arrays are list and plain objects dict.
undefined is the UNDEFINED singleton.
"""

import math
from typing import Any

from .errors import JSRuntimeError


class _Undefined:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "undefined"

    def __bool__(self) -> bool:
        return False


UNDEFINED = _Undefined()

MAX_ARRAY_LENGTH = 100_000
MAX_STRING_LENGTH = 1_000_000


def check_array_length(length: int | float) -> int:
    """Validate a requested array length; returns it as an int."""
    valid = is_number(length) and math.isfinite(length) and 0 <= length <= MAX_ARRAY_LENGTH
    if not valid or length != int(length):
        raise JSRuntimeError("Invalid array length")
    return int(length)


def check_string_length(length: int) -> None:
    if length > MAX_STRING_LENGTH:
        raise JSRuntimeError("Invalid string length")


def is_nullish(value: Any) -> bool:
    return value is None or value is UNDEFINED


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_callable(value: Any) -> bool:
    return callable(value)


def truthy(value: Any) -> bool:
    if value is None or value is UNDEFINED:
        return False
    if isinstance(value, bool):
        return value
    if is_number(value):
        return not (value == 0 or (isinstance(value, float) and math.isnan(value)))
    if isinstance(value, str):
        return value != ""
    return True


def format_number(value: int | float) -> str:
    if isinstance(value, int):
        return str(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def to_string(value: Any) -> str:
    """JS String() conversion."""
    if isinstance(value, str):
        return value
    if value is None:
        return "null"
    if value is UNDEFINED:
        return "undefined"
    if isinstance(value, bool):
        return "true" if value else "false"
    if is_number(value):
        return format_number(value)
    if isinstance(value, list):
        parts = ["" if is_nullish(item) else to_string(item) for item in value]
        check_string_length(sum(len(part) for part in parts) + len(parts))
        return ",".join(parts)
    if isinstance(value, dict):
        return "[object Object]"
    if callable(value):
        return "function () { [native code] }"
    return str(value)


def to_number(value: Any) -> int | float:
    """JS Number() conversion."""
    if isinstance(value, bool):
        return 1 if value else 0
    if is_number(value):
        return value
    if value is None:
        return 0
    if value is UNDEFINED:
        return math.nan
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            if text.lower().startswith("0x"):
                return int(text, 16)
            number = float(text)
        except ValueError:
            return math.nan
        return int(number) if number.is_integer() and "." not in text and "e" not in text.lower() else number
    if isinstance(value, list):
        if not value:
            return 0
        if len(value) == 1:
            return to_number(to_string(value[0]))
    return math.nan


def normalize_number(value: float) -> int | float:
    """Keep integral results as int so they print without a fraction."""
    if isinstance(value, float) and value.is_integer() and abs(value) < 2**53:
        return int(value)
    return value


def type_of(value: Any) -> str:
    if value is UNDEFINED:
        return "undefined"
    if value is None:
        return "object"
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    if callable(value):
        return "function"
    return "object"


def strict_equals(left: Any, right: Any) -> bool:
    if is_number(left) and is_number(right):
        return left == right
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, str) and isinstance(right, str):
        return left == right
    if isinstance(left, (list, dict)) or isinstance(right, (list, dict)) or callable(left):
        return left is right
    return left is right or (type(left) is type(right) and left == right)


def loose_equals(left: Any, right: Any) -> bool:
    if is_nullish(left) and is_nullish(right):
        return True
    if is_nullish(left) or is_nullish(right):
        return False
    if type_of(left) == type_of(right):
        return strict_equals(left, right)
    if isinstance(left, (list, dict)) or isinstance(right, (list, dict)):
        return to_string(left) == to_string(right)
    return to_number(left) == to_number(right)
