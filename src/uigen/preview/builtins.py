"""
Global scope for previewed components.

The scope mirrors what the browser preview exposes: a ``React`` binding,
every library component, and the handful of built-ins generated code leans
on for formatting and data shaping.
"""

import itertools
import math
import random
import re
from typing import Any

import msgspec

from uigen.core import get_logger, safe_json_dumps

from .elements import FRAGMENT, create_element
from .errors import JSRuntimeError, JSTypeError
from .dates import build_date
from .interpreter import NativeFunction, native
from .library import LIBRARY_COMPONENTS
from .values import (
    UNDEFINED,
    check_array_length,
    is_nullish,
    is_number,
    normalize_number,
    to_number,
    to_string,
    truthy,
)

logger = get_logger(__name__)


# ============================================================================
# React
# ============================================================================


def _noop(*_: Any) -> Any:
    return UNDEFINED


def _use_state(initial: Any = UNDEFINED, *_: Any) -> list:
    value = initial() if callable(initial) else initial
    return [value, NativeFunction("setState", _noop)]


def _use_reducer(reducer: Any = UNDEFINED, initial: Any = UNDEFINED, *_: Any) -> list:
    return [initial, NativeFunction("dispatch", _noop)]


def _use_memo(factory: Any = UNDEFINED, *_: Any) -> Any:
    if not callable(factory):
        raise JSTypeError(f"{to_string(factory)} is not a function")
    return factory()


def build_react() -> dict[str, Any]:
    return {
        "createElement": NativeFunction("createElement", create_element),
        "Fragment": FRAGMENT,
        "useState": NativeFunction("useState", _use_state),
        "useReducer": NativeFunction("useReducer", _use_reducer),
        "useEffect": NativeFunction("useEffect", _noop),
        "useLayoutEffect": NativeFunction("useLayoutEffect", _noop),
        "useMemo": NativeFunction("useMemo", _use_memo),
        "useCallback": NativeFunction("useCallback", lambda fn=UNDEFINED, *_: fn),
        "useRef": NativeFunction("useRef", lambda initial=UNDEFINED, *_: {"current": initial}),
    }


# ============================================================================
# Math
# ============================================================================


def _math_unary(name: str, fn: Any) -> NativeFunction:
    def apply(value: Any = UNDEFINED, *_: Any) -> Any:
        number = to_number(value)
        if isinstance(number, float) and (math.isnan(number) or math.isinf(number)):
            return number
        return normalize_number(float(fn(number)))

    return NativeFunction(name, apply)


def _round(value: Any = UNDEFINED, *_: Any) -> Any:
    number = to_number(value)
    if isinstance(number, float) and (math.isnan(number) or math.isinf(number)):
        return number
    return math.floor(number + 0.5)


def _min(*values: Any) -> Any:
    numbers = [to_number(v) for v in values]
    if any(isinstance(v, float) and math.isnan(v) for v in numbers):
        return math.nan
    return min(numbers, default=math.inf)


def _max(*values: Any) -> Any:
    numbers = [to_number(v) for v in values]
    if any(isinstance(v, float) and math.isnan(v) for v in numbers):
        return math.nan
    return max(numbers, default=-math.inf)


def _sqrt(value: Any = UNDEFINED, *_: Any) -> Any:
    number = to_number(value)
    if number < 0:
        return math.nan
    return normalize_number(math.sqrt(number))


def build_math() -> dict[str, Any]:
    return {
        "floor": _math_unary("floor", math.floor),
        "ceil": _math_unary("ceil", math.ceil),
        "trunc": _math_unary("trunc", math.trunc),
        "abs": _math_unary("abs", abs),
        "round": NativeFunction("round", _round),
        "min": NativeFunction("min", _min),
        "max": NativeFunction("max", _max),
        "pow": NativeFunction("pow", lambda a=UNDEFINED, b=UNDEFINED, *_: normalize_number(float(to_number(a) ** to_number(b)))),
        "sqrt": NativeFunction("sqrt", _sqrt),
        "random": NativeFunction("random", lambda *_: random.random()),
        "PI": math.pi,
        "E": math.e,
    }


# ============================================================================
# JSON / Object / Array / console
# ============================================================================


def to_plain(value: Any) -> Any:
    """Convert interpreter values to JSON-encodable Python values."""
    if isinstance(value, dict):
        return {k: to_plain(v) for k, v in value.items() if v is not UNDEFINED and not callable(v)}
    if isinstance(value, list):
        return [None if (item is UNDEFINED or callable(item)) else to_plain(item) for item in value]
    if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
        return None
    return value


def _stringify(value: Any = UNDEFINED, replacer: Any = UNDEFINED, space: Any = UNDEFINED, *_: Any) -> Any:
    if value is UNDEFINED or callable(value):
        return UNDEFINED
    indent = int(to_number(space)) if is_number(space) else 0
    return safe_json_dumps(to_plain(value), indent=max(min(indent, 10), 0))


def _parse_json(text: Any = UNDEFINED, *_: Any) -> Any:
    try:
        return msgspec.json.decode(to_string(text).encode("utf-8"))
    except msgspec.DecodeError as e:
        raise JSRuntimeError(f"JSON.parse: {e}") from e


def _object_keys(value: Any = UNDEFINED, *_: Any) -> list:
    if isinstance(value, dict):
        return list(value.keys())
    if isinstance(value, (list, str)):
        return [str(i) for i in range(len(value))]
    if is_nullish(value):
        raise JSTypeError("Cannot convert undefined or null to object")
    return []


def _object_values(value: Any = UNDEFINED, *_: Any) -> list:
    if isinstance(value, dict):
        return list(value.values())
    if isinstance(value, (list, str)):
        return list(value)
    if is_nullish(value):
        raise JSTypeError("Cannot convert undefined or null to object")
    return []


def _object_entries(value: Any = UNDEFINED, *_: Any) -> list:
    return [[key, item] for key, item in zip(_object_keys(value), _object_values(value))]


def _object_assign(target: Any = UNDEFINED, *sources: Any) -> Any:
    if not isinstance(target, dict):
        raise JSTypeError("Cannot convert undefined or null to object")
    for source in sources:
        if isinstance(source, dict):
            target.update(source)
    return target


def _object_from_entries(entries: Any = UNDEFINED, *_: Any) -> dict:
    if not isinstance(entries, list):
        raise JSTypeError(f"{to_string(entries)} is not iterable")
    result = {}
    for entry in entries:
        if not isinstance(entry, list) or not entry:
            raise JSTypeError(f"Iterator value {to_string(entry)} is not an entry object")
        result[to_string(entry[0])] = entry[1] if len(entry) > 1 else UNDEFINED
    return result


def _array_from(source: Any = UNDEFINED, map_fn: Any = UNDEFINED, *_: Any) -> list:
    if isinstance(source, (list, str)):
        items = list(source)
    elif isinstance(source, dict) and is_number(source.get("length")):
        length = check_array_length(source["length"])
        items = [source.get(str(i), UNDEFINED) for i in range(length)]
    elif is_nullish(source):
        raise JSTypeError(f"{to_string(source)} is not iterable")
    else:
        items = []
    if callable(map_fn):
        return [map_fn(item, index) for index, item in enumerate(items)]
    return items


def _array_constructor(*args: Any) -> list:
    if len(args) == 1 and is_number(args[0]):
        return [UNDEFINED] * check_array_length(args[0])
    return list(args)


def _console(level: str) -> NativeFunction:
    def log(*args: Any) -> Any:
        logger.debug("preview_console", level=level, message=" ".join(to_string(a) for a in args))
        return UNDEFINED

    return NativeFunction(level, log)


# ============================================================================
# Window
# ============================================================================


def _dialog(name: str, result: Any) -> NativeFunction:
    def show(message: Any = "", *_: Any) -> Any:
        logger.debug("preview_dialog", kind=name, message=to_string(message))
        return result

    return NativeFunction(name, show)


def build_timers() -> dict[str, Any]:
    """Timers hand out ids but never fire; a preview is a single render."""
    ids = itertools.count(1)

    def schedule(*_: Any) -> int:
        return next(ids)

    return {
        "setTimeout": NativeFunction("setTimeout", schedule),
        "setInterval": NativeFunction("setInterval", schedule),
        "clearTimeout": NativeFunction("clearTimeout", _noop),
        "clearInterval": NativeFunction("clearInterval", _noop),
        "requestAnimationFrame": NativeFunction("requestAnimationFrame", schedule),
        "cancelAnimationFrame": NativeFunction("cancelAnimationFrame", _noop),
    }


def _parse_int(value: Any = UNDEFINED, radix: Any = UNDEFINED, *_: Any) -> Any:
    text = to_string(value).strip()
    base = int(to_number(radix)) if is_number(radix) and radix else 10
    sign = -1 if text.startswith("-") else 1
    text = text.lstrip("+-")
    if base == 16 and text.lower().startswith("0x"):
        text = text[2:]
    digits = ""
    for ch in text:
        if ch.isalnum() and int(ch, 36) < base:
            digits += ch
        else:
            break
    return sign * int(digits, base) if digits else math.nan


_FLOAT_PREFIX = re.compile(r"[+-]?(?:Infinity|\d+\.?\d*(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?)")


def _parse_float(value: Any = UNDEFINED, *_: Any) -> Any:
    match = _FLOAT_PREFIX.match(to_string(value).strip())
    if match is None:
        return math.nan
    return normalize_number(float(match.group(0).replace("Infinity", "inf")))


@native("String")
def _string(value: Any = "", *_: Any) -> str:
    return to_string(value)


@native(
    "Number",
    isInteger=NativeFunction(
        "isInteger", lambda v=UNDEFINED, *_: is_number(v) and not math.isinf(v) and float(v).is_integer()
    ),
    isFinite=NativeFunction("isFinite", lambda v=UNDEFINED, *_: is_number(v) and math.isfinite(v)),
    isNaN=NativeFunction("isNaN", lambda v=UNDEFINED, *_: isinstance(v, float) and math.isnan(v)),
)
def _number(value: Any = 0, *_: Any) -> Any:
    return to_number(value)


def build_scope(extra: dict[str, Any] | None = None) -> dict[str, Any]:
    """Assemble the global scope: React, the component library, built-ins."""
    scope: dict[str, Any] = {
        "React": build_react(),
        "Math": build_math(),
        "JSON": {
            "stringify": NativeFunction("stringify", _stringify),
            "parse": NativeFunction("parse", _parse_json),
        },
        "Object": NativeFunction("Object", lambda value=UNDEFINED, *_: {} if is_nullish(value) else value, {
            "keys": NativeFunction("keys", _object_keys),
            "values": NativeFunction("values", _object_values),
            "entries": NativeFunction("entries", _object_entries),
            "assign": NativeFunction("assign", _object_assign),
            "freeze": NativeFunction("freeze", lambda value=UNDEFINED, *_: value),
            "fromEntries": NativeFunction("fromEntries", _object_from_entries),
        }),
        "Array": NativeFunction("Array", _array_constructor, {
            "isArray": NativeFunction("isArray", lambda value=UNDEFINED, *_: isinstance(value, list)),
            "from": NativeFunction("from", _array_from),
            "of": NativeFunction("of", lambda *items: list(items)),
        }, constructor=True),
        "console": {level: _console(level) for level in ("log", "info", "warn", "error", "debug")},
        "String": _string,
        "Boolean": NativeFunction("Boolean", lambda value=UNDEFINED, *_: truthy(value)),
        "Date": build_date(),
        "Number": _number,
        "parseInt": NativeFunction("parseInt", _parse_int),
        "parseFloat": NativeFunction("parseFloat", _parse_float),
        "isNaN": NativeFunction("isNaN", lambda v=UNDEFINED, *_: math.isnan(float(to_number(v)))),
        "NaN": math.nan,
        "Infinity": math.inf,
        "alert": _dialog("alert", UNDEFINED),
        "confirm": _dialog("confirm", False),
        "prompt": _dialog("prompt", None),
        **build_timers(),
    }
    scope.update(LIBRARY_COMPONENTS)
    if extra:
        scope.update(extra)
    return scope
