"""
Tree-walking interpreter for parsed component source.

Values follow the mapping in ``values``; functions defined in source become
``JSFunction`` objects, which are ordinary Python callables so that the
component library, the renderer and the array methods can invoke them
without knowing where they came from.
"""

import functools
import math
from typing import Any, Callable

from uigen.core import get_logger

from . import nodes as n
from .elements import Element
from .errors import JSReferenceError, JSRuntimeError, JSTypeError
from .values import (
    UNDEFINED,
    check_array_length,
    check_string_length,
    format_number,
    is_nullish,
    is_number,
    loose_equals,
    normalize_number,
    strict_equals,
    to_number,
    to_string,
    truthy,
    type_of,
)

logger = get_logger(__name__)

MAX_CALL_DEPTH = 64
MAX_LOOP_ITERATIONS = 100_000
MAX_STEPS = 200_000

# Python exceptions a native helper may raise on bad input from source code
NATIVE_FAULTS = (TypeError, ValueError, KeyError, IndexError, AttributeError, ZeroDivisionError, OverflowError)


class _ReturnSignal(Exception):
    def __init__(self, value: Any) -> None:
        self.value = value


class _BreakSignal(Exception):
    pass


class _ContinueSignal(Exception):
    pass


class _ShortCircuit(Exception):
    """Raised by a ?. link whose base is nullish."""

    pass


class Environment:
    """Variable bindings for one scope."""

    def __init__(self, parent: "Environment | None" = None) -> None:
        self.vars: dict[str, Any] = {}
        self.constants: set[str] = set()
        self.parent = parent

    def declare(self, name: str, value: Any, const: bool = False) -> None:
        self.vars[name] = value
        if const:
            self.constants.add(name)
        else:
            self.constants.discard(name)

    def _owner(self, name: str) -> "Environment | None":
        env: Environment | None = self
        while env is not None:
            if name in env.vars:
                return env
            env = env.parent
        return None

    def has(self, name: str) -> bool:
        return self._owner(name) is not None

    def lookup(self, name: str) -> Any:
        env = self._owner(name)
        if env is None:
            raise JSReferenceError(f"{name} is not defined")
        return env.vars[name]

    def assign(self, name: str, value: Any) -> None:
        env = self._owner(name)
        if env is None:
            raise JSReferenceError(f"{name} is not defined")
        if name in env.constants:
            raise JSTypeError("Assignment to constant variable.")
        env.vars[name] = value


class NativeFunction:
    """A host-provided function, optionally carrying static properties."""

    def __init__(
        self,
        name: str,
        fn: Callable[..., Any],
        properties: dict[str, Any] | None = None,
        constructor: bool = False,
    ) -> None:
        self.name = name
        self.fn = fn
        self.properties = properties or {}
        self.constructor = constructor

    def __call__(self, *args: Any) -> Any:
        return self.fn(*args)

    def __repr__(self) -> str:
        return f"<native {self.name}>"


class JSFunction:
    """A function defined in interpreted source."""

    def __init__(self, node: n.FunctionNode, closure: Environment, interpreter: "Interpreter", this: Any = UNDEFINED) -> None:
        self.node = node
        self.closure = closure
        self.interpreter = interpreter
        self.this = this
        self.name = node.name or ""

    def __call__(self, *args: Any) -> Any:
        return self.interpreter.call_function(self, list(args))

    def __repr__(self) -> str:
        return f"<function {self.name or 'anonymous'}>"


def native(name: str, **properties: Any) -> Callable[[Callable[..., Any]], NativeFunction]:
    """Decorator turning a Python function into a NativeFunction."""

    def wrap(fn: Callable[..., Any]) -> NativeFunction:
        return NativeFunction(name, fn, properties)

    return wrap


# ============================================================================
# Operators
# ============================================================================


def _number_op(operator: str, left: Any, right: Any) -> int | float:
    a, b = to_number(left), to_number(right)
    if operator == "+":
        result = a + b
    elif operator == "-":
        result = a - b
    elif operator == "*":
        result = a * b
    elif operator == "/":
        if b == 0:
            if a == 0 or (isinstance(a, float) and math.isnan(a)):
                return math.nan
            return math.copysign(math.inf, a) * math.copysign(1, b)
        result = a / b
    elif operator == "%":
        if b == 0 or (isinstance(a, float) and math.isinf(a)):
            return math.nan
        result = math.fmod(a, b)
    elif operator == "**":
        try:
            result = float(a) ** b
        except OverflowError:
            return -math.inf if a < 0 and b % 2 == 1 else math.inf
        except ZeroDivisionError:
            return math.inf
        if isinstance(result, complex):
            return math.nan
    else:
        raise JSRuntimeError(f"Unsupported operator {operator}")
    if isinstance(result, int) and abs(result) > 2**53:
        # JS numbers are doubles
        result = float(result)
    return normalize_number(result) if isinstance(result, float) else result


def _compare(operator: str, left: Any, right: Any) -> bool:
    if isinstance(left, str) and isinstance(right, str):
        a: Any = left
        b: Any = right
    else:
        a, b = to_number(left), to_number(right)
        if (isinstance(a, float) and math.isnan(a)) or (isinstance(b, float) and math.isnan(b)):
            return False
    if operator == "<":
        return a < b
    if operator == ">":
        return a > b
    if operator == "<=":
        return a <= b
    return a >= b


def add_values(left: Any, right: Any) -> Any:
    if isinstance(left, (str, list, dict)) or isinstance(right, (str, list, dict)):
        left_text, right_text = to_string(left), to_string(right)
        check_string_length(len(left_text) + len(right_text))
        return left_text + right_text
    return _number_op("+", left, right)


def binary_op(operator: str, left: Any, right: Any) -> Any:
    if operator == "+":
        return add_values(left, right)
    if operator in ("-", "*", "/", "%", "**"):
        return _number_op(operator, left, right)
    if operator == "===":
        return strict_equals(left, right)
    if operator == "!==":
        return not strict_equals(left, right)
    if operator == "==":
        return loose_equals(left, right)
    if operator == "!=":
        return not loose_equals(left, right)
    if operator in ("<", ">", "<=", ">="):
        return _compare(operator, left, right)
    if operator == "in":
        if isinstance(right, dict):
            return to_string(left) in right
        if isinstance(right, list):
            index = to_number(left)
            return isinstance(index, int) and 0 <= index < len(right) or left == "length"
        raise JSTypeError(f"Cannot use 'in' operator to search for '{to_string(left)}' in {to_string(right)}")
    raise JSRuntimeError(f"Unsupported operator {operator}")


# ============================================================================
# Property access
# ============================================================================


def _index(key: Any) -> int | None:
    if is_number(key) and float(key).is_integer():
        return int(key)
    if isinstance(key, str) and key.isdigit():
        return int(key)
    return None


def property_key(key: Any) -> str:
    if is_number(key):
        return format_number(key)
    return to_string(key)


def get_property(obj: Any, key: Any) -> Any:
    """Read obj[key] with JS semantics for the supported value kinds."""
    if is_nullish(obj):
        raise JSTypeError(f"Cannot read properties of {to_string(obj)} (reading '{property_key(key)}')")

    if isinstance(obj, dict):
        return obj.get(property_key(key), UNDEFINED)

    if isinstance(obj, (list, str)):
        index = _index(key)
        if index is not None:
            return obj[index] if 0 <= index < len(obj) else UNDEFINED
        name = property_key(key)
        if name == "length":
            return len(obj)
        methods = ARRAY_METHODS if isinstance(obj, list) else STRING_METHODS
        method = methods.get(name)
        if method is None:
            return UNDEFINED
        return NativeFunction(name, functools.partial(method, obj))

    if is_number(obj) and not isinstance(obj, bool):
        method = NUMBER_METHODS.get(property_key(key))
        return UNDEFINED if method is None else NativeFunction(property_key(key), functools.partial(method, obj))

    if isinstance(obj, NativeFunction):
        name = property_key(key)
        if name == "name":
            return obj.name
        return obj.properties.get(name, UNDEFINED)

    if isinstance(obj, JSFunction):
        name = property_key(key)
        if name == "name":
            return obj.name
        if name == "length":
            return len([p for p in obj.node.params if p.default is None and not p.rest])
        return UNDEFINED

    if isinstance(obj, Element):
        name = property_key(key)
        if name == "type":
            return obj.type
        if name == "props":
            return obj.props
        if name == "key":
            return UNDEFINED if obj.key is None else obj.key
        return UNDEFINED

    return UNDEFINED


def set_property(obj: Any, key: Any, value: Any) -> None:
    if is_nullish(obj):
        raise JSTypeError(f"Cannot set properties of {to_string(obj)} (setting '{property_key(key)}')")
    if isinstance(obj, dict):
        obj[property_key(key)] = value
        return
    if isinstance(obj, list):
        index = _index(key)
        if index is not None and index >= 0:
            if index >= len(obj):
                check_array_length(index + 1)
                obj.extend([UNDEFINED] * (index + 1 - len(obj)))
            obj[index] = value
            return
        if property_key(key) == "length":
            length = check_array_length(to_number(value))
            del obj[length:]
            obj.extend([UNDEFINED] * (length - len(obj)))
            return
    # assignments to primitives are silently ignored in sloppy mode


# ============================================================================
# Built-in methods on arrays, strings and numbers
# ============================================================================


def _require_callable(fn: Any) -> None:
    if not callable(fn):
        raise JSTypeError(f"{to_string(fn)} is not a function")


def _array_map(arr: list, fn: Any = UNDEFINED, *_: Any) -> list:
    _require_callable(fn)
    return [fn(item, i, arr) for i, item in enumerate(list(arr))]


def _array_filter(arr: list, fn: Any = UNDEFINED, *_: Any) -> list:
    _require_callable(fn)
    return [item for i, item in enumerate(list(arr)) if truthy(fn(item, i, arr))]


def _array_for_each(arr: list, fn: Any = UNDEFINED, *_: Any) -> Any:
    _require_callable(fn)
    for i, item in enumerate(list(arr)):
        fn(item, i, arr)
    return UNDEFINED


def _array_find(arr: list, fn: Any = UNDEFINED, *_: Any) -> Any:
    _require_callable(fn)
    for i, item in enumerate(list(arr)):
        if truthy(fn(item, i, arr)):
            return item
    return UNDEFINED


def _array_find_index(arr: list, fn: Any = UNDEFINED, *_: Any) -> int:
    _require_callable(fn)
    for i, item in enumerate(list(arr)):
        if truthy(fn(item, i, arr)):
            return i
    return -1


def _array_some(arr: list, fn: Any = UNDEFINED, *_: Any) -> bool:
    _require_callable(fn)
    return any(truthy(fn(item, i, arr)) for i, item in enumerate(list(arr)))


def _array_every(arr: list, fn: Any = UNDEFINED, *_: Any) -> bool:
    _require_callable(fn)
    return all(truthy(fn(item, i, arr)) for i, item in enumerate(list(arr)))


def _array_reduce(arr: list, fn: Any = UNDEFINED, *initial: Any) -> Any:
    _require_callable(fn)
    items = list(arr)
    if initial:
        accumulator, start = initial[0], 0
    elif items:
        accumulator, start = items[0], 1
    else:
        raise JSTypeError("Reduce of empty array with no initial value")
    for i in range(start, len(items)):
        accumulator = fn(accumulator, items[i], i, arr)
    return accumulator


def _array_includes(arr: list, value: Any = UNDEFINED, *_: Any) -> bool:
    return any(strict_equals(item, value) for item in arr)


def _array_index_of(arr: list, value: Any = UNDEFINED, *_: Any) -> int:
    for i, item in enumerate(arr):
        if strict_equals(item, value):
            return i
    return -1


def _array_join(arr: list, separator: Any = UNDEFINED, *_: Any) -> str:
    sep = "," if separator is UNDEFINED else to_string(separator)
    parts = ["" if is_nullish(item) else to_string(item) for item in arr]
    check_string_length(sum(len(part) for part in parts) + len(sep) * max(len(parts) - 1, 0))
    return sep.join(parts)


def _slice_bounds(length: int, start: Any, end: Any) -> tuple[int, int]:
    def clamp(value: Any, default: int) -> int:
        if value is UNDEFINED:
            return default
        number = to_number(value)
        if isinstance(number, float) and math.isnan(number):
            return 0
        number = int(number) if not math.isinf(number) else (length if number > 0 else -length)
        if number < 0:
            return max(length + number, 0)
        return min(number, length)

    return clamp(start, 0), clamp(end, length)


def _slice(seq: list | str, start: Any = UNDEFINED, end: Any = UNDEFINED, *_: Any) -> list | str:
    lo, hi = _slice_bounds(len(seq), start, end)
    return seq[lo:hi]


def _array_concat(arr: list, *others: Any) -> list:
    result = list(arr)
    for other in others:
        if isinstance(other, list):
            result.extend(other)
        else:
            result.append(other)
        check_array_length(len(result))
    return result


def _array_push(arr: list, *items: Any) -> int:
    check_array_length(len(arr) + len(items))
    arr.extend(items)
    return len(arr)


def _array_pop(arr: list, *_: Any) -> Any:
    return arr.pop() if arr else UNDEFINED


def _array_shift(arr: list, *_: Any) -> Any:
    return arr.pop(0) if arr else UNDEFINED


def _array_unshift(arr: list, *items: Any) -> int:
    check_array_length(len(arr) + len(items))
    arr[0:0] = items
    return len(arr)


def _array_splice(arr: list, *args: Any) -> list:
    if not args:
        return []
    start, _ = _slice_bounds(len(arr), args[0], UNDEFINED)
    if len(args) < 2:
        count = len(arr) - start
    else:
        number = to_number(args[1])
        count = 0 if isinstance(number, float) and math.isnan(number) else int(min(max(number, 0), len(arr) - start))
    items = args[2:]
    check_array_length(len(arr) - count + len(items))
    removed = arr[start:start + count]
    arr[start:start + count] = items
    return removed


def _array_fill(arr: list, value: Any = UNDEFINED, start: Any = UNDEFINED, end: Any = UNDEFINED, *_: Any) -> list:
    lo, hi = _slice_bounds(len(arr), start, end)
    if hi > lo:
        arr[lo:hi] = [value] * (hi - lo)
    return arr


def _at(seq: list | str, index: Any = UNDEFINED, *_: Any) -> Any:
    number = to_number(index)
    position = 0 if isinstance(number, float) and (math.isnan(number) or math.isinf(number)) else int(number)
    if position < 0:
        position += len(seq)
    return seq[position] if 0 <= position < len(seq) else UNDEFINED


def _array_last_index_of(arr: list, value: Any = UNDEFINED, *_: Any) -> int:
    for i in range(len(arr) - 1, -1, -1):
        if strict_equals(arr[i], value):
            return i
    return -1


def _array_reverse(arr: list, *_: Any) -> list:
    arr.reverse()
    return arr


def _array_sort(arr: list, compare: Any = UNDEFINED, *_: Any) -> list:
    if compare is UNDEFINED:
        arr.sort(key=to_string)
    else:
        _require_callable(compare)

        def cmp(a: Any, b: Any) -> int:
            result = to_number(compare(a, b))
            if isinstance(result, float) and math.isnan(result):
                return 0
            return (result > 0) - (result < 0)

        arr.sort(key=functools.cmp_to_key(cmp))
    return arr


def _flatten(items: list, depth: int | float) -> list:
    result: list = []
    for item in items:
        if isinstance(item, list) and depth >= 1:
            result.extend(_flatten(item, depth - 1))
        else:
            result.append(item)
        check_array_length(len(result))
    return result


def _array_flat(arr: list, depth: Any = UNDEFINED, *_: Any) -> list:
    levels = 1 if depth is UNDEFINED else to_number(depth)
    if isinstance(levels, float) and math.isnan(levels):
        levels = 0
    return _flatten(arr, min(levels, MAX_CALL_DEPTH))


def _array_flat_map(arr: list, fn: Any = UNDEFINED, *_: Any) -> list:
    return _flatten(_array_map(arr, fn), 1)


ARRAY_METHODS: dict[str, Callable[..., Any]] = {
    "map": _array_map,
    "flatMap": _array_flat_map,
    "filter": _array_filter,
    "forEach": _array_for_each,
    "find": _array_find,
    "findIndex": _array_find_index,
    "some": _array_some,
    "every": _array_every,
    "reduce": _array_reduce,
    "includes": _array_includes,
    "indexOf": _array_index_of,
    "lastIndexOf": _array_last_index_of,
    "at": _at,
    "join": _array_join,
    "slice": _slice,
    "splice": _array_splice,
    "concat": _array_concat,
    "push": _array_push,
    "pop": _array_pop,
    "shift": _array_shift,
    "unshift": _array_unshift,
    "fill": _array_fill,
    "reverse": _array_reverse,
    "sort": _array_sort,
    "flat": _array_flat,
    "keys": lambda arr, *_: list(range(len(arr))),
    "entries": lambda arr, *_: [[i, item] for i, item in enumerate(arr)],
    "toString": lambda arr, *_: to_string(arr),
}


def _string_split(text: str, separator: Any = UNDEFINED, limit: Any = UNDEFINED, *_: Any) -> list:
    if separator is UNDEFINED:
        parts = [text]
    elif to_string(separator) == "":
        parts = list(text)
    else:
        parts = text.split(to_string(separator))
    if limit is not UNDEFINED:
        parts = parts[: max(int(to_number(limit)), 0)]
    return parts


def _string_replace(text: str, pattern: Any = UNDEFINED, replacement: Any = UNDEFINED, *_: Any) -> str:
    needle = to_string(pattern)
    index = text.find(needle)
    if index == -1:
        return text
    if callable(replacement):
        value = to_string(replacement(needle, index, text))
    else:
        value = to_string(replacement)
    return text[:index] + value + text[index + len(needle):]


def _string_replace_all(text: str, pattern: Any = UNDEFINED, replacement: Any = UNDEFINED, *_: Any) -> str:
    needle, value = to_string(pattern), to_string(replacement)
    count = len(text) + 1 if not needle else text.count(needle)
    check_string_length(len(text) + count * (len(value) - len(needle)))
    return text.replace(needle, value)


def _string_repeat(text: str, count: Any = 0, *_: Any) -> str:
    number = to_number(count)
    if isinstance(number, float) and math.isnan(number):
        number = 0
    if number < 0 or math.isinf(number):
        raise JSRuntimeError(f"Invalid count value: {format_number(number)}")
    check_string_length(len(text) * int(number))
    return text * int(number)


def _string_substring(text: str, start: Any = UNDEFINED, end: Any = UNDEFINED, *_: Any) -> str:
    def clamp(value: Any, default: int) -> int:
        if value is UNDEFINED:
            return default
        number = to_number(value)
        if isinstance(number, float) and math.isnan(number):
            return 0
        return int(min(max(number, 0), len(text)))

    lo, hi = clamp(start, 0), clamp(end, len(text))
    return text[min(lo, hi):max(lo, hi)]


def _string_pad(text: str, length: Any, fill: Any, at_start: bool) -> str:
    number = to_number(length)
    if isinstance(number, float) and (math.isnan(number) or number == -math.inf):
        return text
    if number == math.inf:
        raise JSRuntimeError("Invalid string length")
    target = int(number)
    filler = " " if fill is UNDEFINED else to_string(fill)
    if target <= len(text) or not filler:
        return text
    check_string_length(target)
    needed = target - len(text)
    padding = (filler * (needed // len(filler) + 1))[:needed]
    return padding + text if at_start else text + padding


STRING_METHODS: dict[str, Callable[..., Any]] = {
    "toUpperCase": lambda s, *_: s.upper(),
    "toLowerCase": lambda s, *_: s.lower(),
    "trim": lambda s, *_: s.strip(),
    "trimStart": lambda s, *_: s.lstrip(),
    "trimEnd": lambda s, *_: s.rstrip(),
    "includes": lambda s, sub=UNDEFINED, *_: to_string(sub) in s,
    "startsWith": lambda s, sub=UNDEFINED, *_: s.startswith(to_string(sub)),
    "endsWith": lambda s, sub=UNDEFINED, *_: s.endswith(to_string(sub)),
    "indexOf": lambda s, sub=UNDEFINED, *_: s.find(to_string(sub)),
    "lastIndexOf": lambda s, sub=UNDEFINED, *_: s.rfind(to_string(sub)),
    "at": _at,
    "charAt": lambda s, i=0, *_: s[int(to_number(i))] if 0 <= int(to_number(i)) < len(s) else "",
    "slice": _slice,
    "substring": _string_substring,
    "split": _string_split,
    "replace": _string_replace,
    "replaceAll": _string_replace_all,
    "repeat": _string_repeat,
    "padStart": lambda s, length=0, fill=UNDEFINED, *_: _string_pad(s, length, fill, True),
    "padEnd": lambda s, length=0, fill=UNDEFINED, *_: _string_pad(s, length, fill, False),
    "toString": lambda s, *_: s,
}


def _to_fixed(value: int | float, digits: Any = 0, *_: Any) -> str:
    places = int(to_number(digits)) if digits is not UNDEFINED else 0
    if not 0 <= places <= 100:
        raise JSRuntimeError("toFixed() digits argument must be between 0 and 100")
    return f"{value:.{places}f}"


def _to_locale_string(value: int | float, *_: Any) -> str:
    if isinstance(value, int):
        return f"{value:,}"
    if math.isnan(value) or math.isinf(value):
        return format_number(value)
    text = f"{value:,.3f}".rstrip("0").rstrip(".")
    return text


NUMBER_METHODS: dict[str, Callable[..., Any]] = {
    "toFixed": _to_fixed,
    "toLocaleString": _to_locale_string,
    "toString": lambda value, *_: format_number(value),
}


# ============================================================================
# Interpreter
# ============================================================================


def describe_callee(node: n.Node) -> str:
    if isinstance(node, n.Identifier):
        return node.name
    if isinstance(node, n.Member):
        base = describe_callee(node.object)
        if node.computed:
            return f"{base}[...]"
        return f"{base}.{node.property}"
    if isinstance(node, n.This):
        return "this"
    if isinstance(node, n.OptionalChain):
        return describe_callee(node.expression)
    if isinstance(node, n.Call):
        return f"{describe_callee(node.callee)}(...)"
    return "(intermediate value)"


class Interpreter:
    """Evaluates a Program against a global scope."""

    def __init__(self, scope: dict[str, Any]) -> None:
        self.globals = Environment()
        for name, value in scope.items():
            self.globals.declare(name, value)
        self.depth = 0
        self.steps = 0

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def run(self, program: n.Program) -> Environment:
        """Execute top-level statements; returns the module environment."""
        env = Environment(self.globals)
        self._hoist(program.body, env)
        for statement in program.body:
            try:
                self.execute(statement, env)
            except _ReturnSignal:
                raise JSRuntimeError("Illegal return statement") from None
            except (_BreakSignal, _ContinueSignal):
                raise JSRuntimeError("Illegal break statement") from None
        return env

    def call_function(self, fn: JSFunction, args: list[Any], this: Any = UNDEFINED) -> Any:
        if self.depth >= MAX_CALL_DEPTH:
            raise JSRuntimeError("Maximum call stack size exceeded")
        self._step()
        node = fn.node
        env = Environment(fn.closure)
        if not node.is_arrow:
            env.declare("this", fn.this if this is UNDEFINED else this)
        for index, param in enumerate(node.params):
            if param.rest:
                self.bind(param.target, list(args[index:]), env, "let")
                break
            value = args[index] if index < len(args) else UNDEFINED
            if value is UNDEFINED and param.default is not None:
                value = self.evaluate(param.default, env)
            self.bind(param.target, value, env, "let")

        self.depth += 1
        try:
            if node.expression_body:
                return self.evaluate(node.body, env)
            body = node.body
            self._hoist(body, env)
            for statement in body:
                self.execute(statement, env)
            return UNDEFINED
        except _ReturnSignal as signal:
            return signal.value
        finally:
            self.depth -= 1

    def call_value(self, fn: Any, args: list[Any], this: Any = UNDEFINED, name: str = "(intermediate value)") -> Any:
        if isinstance(fn, JSFunction):
            return self.call_function(fn, args, this)
        if not callable(fn) or isinstance(fn, type):
            raise JSTypeError(f"{name} is not a function")
        try:
            return fn(*args)
        except NATIVE_FAULTS as exc:
            raise JSTypeError(str(exc) or type(exc).__name__) from exc

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _hoist(self, body: list[n.Node], env: Environment) -> None:
        for statement in body:
            if isinstance(statement, n.FunctionDecl):
                env.declare(statement.function.name, JSFunction(statement.function, env, self))

    def execute(self, node: n.Node, env: Environment) -> None:
        if isinstance(node, n.ExprStmt):
            self.evaluate(node.expression, env)
        elif isinstance(node, n.VarDecl):
            for target, init in node.declarations:
                value = UNDEFINED if init is None else self.evaluate(init, env)
                self.bind(target, value, env, node.kind)
        elif isinstance(node, n.FunctionDecl):
            pass  # hoisted
        elif isinstance(node, n.Return):
            value = UNDEFINED if node.argument is None else self.evaluate(node.argument, env)
            raise _ReturnSignal(value)
        elif isinstance(node, n.If):
            if truthy(self.evaluate(node.test, env)):
                self.execute(node.consequent, env)
            elif node.alternate is not None:
                self.execute(node.alternate, env)
        elif isinstance(node, n.Block):
            block_env = Environment(env)
            self._hoist(node.body, block_env)
            for statement in node.body:
                self.execute(statement, block_env)
        elif isinstance(node, n.ForOf):
            self._execute_for_of(node, env)
        elif isinstance(node, n.For):
            self._execute_for(node, env)
        elif isinstance(node, n.While):
            iterations = 0
            while truthy(self.evaluate(node.test, env)):
                iterations = self._tick(iterations)
                try:
                    self.execute(node.body, env)
                except _BreakSignal:
                    break
                except _ContinueSignal:
                    continue
        elif isinstance(node, n.Switch):
            self._execute_switch(node, env)
        elif isinstance(node, n.Break):
            raise _BreakSignal()
        elif isinstance(node, n.Continue):
            raise _ContinueSignal()
        elif isinstance(node, n.Empty):
            pass
        else:
            raise JSRuntimeError(f"Unsupported statement {type(node).__name__}")

    def reset_budget(self) -> None:
        """Start a fresh step budget; called once per render pass."""
        self.steps = 0

    def _step(self) -> None:
        self.steps += 1
        if self.steps > MAX_STEPS:
            raise JSRuntimeError("Execution step limit exceeded")

    def _tick(self, iterations: int) -> int:
        iterations += 1
        if iterations > MAX_LOOP_ITERATIONS:
            raise JSRuntimeError("Loop iteration limit exceeded")
        self._step()
        return iterations

    def _execute_switch(self, node: n.Switch, env: Environment) -> None:
        value = self.evaluate(node.discriminant, env)
        switch_env = Environment(env)
        for case in node.cases:
            self._hoist(case.body, switch_env)

        start = None
        for index, case in enumerate(node.cases):
            if case.test is not None and strict_equals(value, self.evaluate(case.test, switch_env)):
                start = index
                break
        if start is None:
            start = next((i for i, case in enumerate(node.cases) if case.test is None), None)
        if start is None:
            return

        try:
            for case in node.cases[start:]:
                for statement in case.body:
                    self.execute(statement, switch_env)
        except _BreakSignal:
            pass

    def _iterate(self, value: Any) -> list[Any]:
        if isinstance(value, list):
            return list(value)
        if isinstance(value, str):
            return list(value)
        raise JSTypeError(f"{to_string(value)} is not iterable")

    def _execute_for_of(self, node: n.ForOf, env: Environment) -> None:
        target = node.declaration.declarations[0][0]
        iterations = 0
        for item in self._iterate(self.evaluate(node.iterable, env)):
            iterations = self._tick(iterations)
            loop_env = Environment(env)
            self.bind(target, item, loop_env, node.declaration.kind)
            try:
                self.execute(node.body, loop_env)
            except _BreakSignal:
                break
            except _ContinueSignal:
                continue

    def _execute_for(self, node: n.For, env: Environment) -> None:
        loop_env = Environment(env)
        if node.init is not None:
            self.execute(node.init, loop_env)
        iterations = 0
        while node.test is None or truthy(self.evaluate(node.test, loop_env)):
            iterations = self._tick(iterations)
            try:
                self.execute(node.body, loop_env)
            except _BreakSignal:
                break
            except _ContinueSignal:
                pass
            if node.update is not None:
                self.evaluate(node.update, loop_env)

    # ------------------------------------------------------------------
    # Bindings
    # ------------------------------------------------------------------

    def bind(self, target: n.Node, value: Any, env: Environment, kind: str | None) -> None:
        """Bind a pattern; kind None means plain assignment."""
        if isinstance(target, n.Identifier):
            if kind is None:
                env.assign(target.name, value)
            else:
                env.declare(target.name, value, const=kind == "const")
        elif isinstance(target, n.Member):
            self._assign_member(target, value, env)
        elif isinstance(target, n.ArrayPattern):
            if is_nullish(value):
                raise JSTypeError(f"{to_string(value)} is not iterable")
            items = self._iterate(value)
            for index, element in enumerate(target.elements):
                if element is None:
                    continue
                if element.rest:
                    self.bind(element.target, items[index:], env, kind)
                    break
                item = items[index] if index < len(items) else UNDEFINED
                if item is UNDEFINED and element.default is not None:
                    item = self.evaluate(element.default, env)
                self.bind(element.target, item, env, kind)
        elif isinstance(target, n.ObjectPattern):
            if is_nullish(value):
                raise JSTypeError(f"Cannot destructure '{to_string(value)}' as it is {to_string(value)}.")
            used: set[str] = set()
            for key, binding, computed in target.properties:
                name = property_key(self.evaluate(key, env)) if computed else key
                used.add(name)
                item = get_property(value, name)
                if item is UNDEFINED and binding.default is not None:
                    item = self.evaluate(binding.default, env)
                self.bind(binding.target, item, env, kind)
            if target.rest is not None:
                remainder = {k: v for k, v in value.items() if k not in used} if isinstance(value, dict) else {}
                self.bind(target.rest, remainder, env, kind)
        else:
            raise JSRuntimeError("Invalid destructuring target")

    def _assign_member(self, target: n.Member, value: Any, env: Environment) -> None:
        obj = self.evaluate(target.object, env)
        key = self.evaluate(target.property, env) if target.computed else target.property
        set_property(obj, key, value)

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def evaluate(self, node: n.Node, env: Environment) -> Any:
        method = getattr(self, f"_eval_{type(node).__name__}", None)
        if method is None:
            raise JSRuntimeError(f"Unsupported expression {type(node).__name__}")
        return method(node, env)

    def _eval_Literal(self, node: n.Literal, env: Environment) -> Any:
        return node.value

    def _eval_TemplateLiteral(self, node: n.TemplateLiteral, env: Environment) -> str:
        parts = [node.quasis[0]]
        for expression, quasi in zip(node.expressions, node.quasis[1:]):
            parts.append(to_string(self.evaluate(expression, env)))
            parts.append(quasi)
        check_string_length(sum(len(part) for part in parts))
        return "".join(parts)

    def _eval_Identifier(self, node: n.Identifier, env: Environment) -> Any:
        return env.lookup(node.name)

    def _eval_This(self, node: n.This, env: Environment) -> Any:
        return env.lookup("this") if env.has("this") else UNDEFINED

    def _eval_ArrayLiteral(self, node: n.ArrayLiteral, env: Environment) -> list:
        result: list[Any] = []
        for element in node.elements:
            if element is None:
                result.append(UNDEFINED)
            elif isinstance(element, n.Spread):
                result.extend(self._iterate(self.evaluate(element.argument, env)))
                check_array_length(len(result))
            else:
                result.append(self.evaluate(element, env))
        return result

    def _eval_ObjectLiteral(self, node: n.ObjectLiteral, env: Environment) -> dict:
        result: dict[str, Any] = {}
        for prop in node.properties:
            if isinstance(prop, n.Spread):
                source = self.evaluate(prop.argument, env)
                if isinstance(source, dict):
                    result.update(source)
                elif isinstance(source, (list, str)):
                    result.update({str(i): v for i, v in enumerate(source)})
                continue
            key = property_key(self.evaluate(prop.key, env)) if prop.computed else prop.key
            value = self.evaluate(prop.value, env)
            if isinstance(value, JSFunction) and not value.node.is_arrow:
                value.this = result
            result[key] = value
        return result

    def _eval_FunctionNode(self, node: n.FunctionNode, env: Environment) -> JSFunction:
        if node.name and not node.is_arrow:
            # named function expressions see their own name
            inner = Environment(env)
            fn = JSFunction(node, inner, self)
            inner.declare(node.name, fn)
            return fn
        return JSFunction(node, env, self)

    def _eval_OptionalChain(self, node: n.OptionalChain, env: Environment) -> Any:
        try:
            return self.evaluate(node.expression, env)
        except _ShortCircuit:
            return UNDEFINED

    def _eval_Member(self, node: n.Member, env: Environment) -> Any:
        obj = self.evaluate(node.object, env)
        if node.optional and is_nullish(obj):
            raise _ShortCircuit()
        key = self.evaluate(node.property, env) if node.computed else node.property
        return get_property(obj, key)

    def _eval_Call(self, node: n.Call, env: Environment) -> Any:
        callee = node.callee
        this: Any = UNDEFINED
        if isinstance(callee, n.Member):
            obj = self.evaluate(callee.object, env)
            if callee.optional and is_nullish(obj):
                raise _ShortCircuit()
            key = self.evaluate(callee.property, env) if callee.computed else callee.property
            fn = get_property(obj, key)
            this = obj
        else:
            fn = self.evaluate(callee, env)
        if node.optional and is_nullish(fn):
            raise _ShortCircuit()
        args = self._arguments(node.arguments, env)
        return self.call_value(fn, args, this, describe_callee(callee))

    def _arguments(self, arguments: list[n.Node], env: Environment) -> list[Any]:
        values: list[Any] = []
        for argument in arguments:
            if isinstance(argument, n.Spread):
                values.extend(self._iterate(self.evaluate(argument.argument, env)))
            else:
                values.append(self.evaluate(argument, env))
        return values

    def _eval_New(self, node: n.New, env: Environment) -> Any:
        fn = self.evaluate(node.callee, env)
        args = self._arguments(node.arguments, env)
        if isinstance(fn, NativeFunction) and fn.constructor:
            return fn(*args)
        if isinstance(fn, JSFunction) and not fn.node.is_arrow:
            instance: dict[str, Any] = {}
            result = self.call_function(fn, args, instance)
            return result if isinstance(result, (dict, list)) else instance
        raise JSTypeError(f"{describe_callee(node.callee)} is not a constructor")

    def _eval_Unary(self, node: n.Unary, env: Environment) -> Any:
        if node.operator == "typeof":
            if isinstance(node.operand, n.Identifier) and not env.has(node.operand.name):
                return "undefined"
            return type_of(self.evaluate(node.operand, env))
        value = self.evaluate(node.operand, env)
        if node.operator == "!":
            return not truthy(value)
        if node.operator == "-":
            return -to_number(value)
        return to_number(value)

    def _eval_Update(self, node: n.Update, env: Environment) -> Any:
        old = to_number(self.evaluate(node.target, env))
        new = _number_op("+" if node.operator == "++" else "-", old, 1)
        self._store(node.target, new, env)
        return new if node.prefix else old

    def _store(self, target: n.Node, value: Any, env: Environment) -> None:
        if isinstance(target, n.Identifier):
            env.assign(target.name, value)
        elif isinstance(target, n.Member):
            self._assign_member(target, value, env)
        else:
            self.bind(target, value, env, None)

    def _eval_Binary(self, node: n.Binary, env: Environment) -> Any:
        left = self.evaluate(node.left, env)
        right = self.evaluate(node.right, env)
        return binary_op(node.operator, left, right)

    def _eval_Logical(self, node: n.Logical, env: Environment) -> Any:
        left = self.evaluate(node.left, env)
        if node.operator == "&&":
            return self.evaluate(node.right, env) if truthy(left) else left
        if node.operator == "||":
            return left if truthy(left) else self.evaluate(node.right, env)
        return self.evaluate(node.right, env) if is_nullish(left) else left

    def _eval_Conditional(self, node: n.Conditional, env: Environment) -> Any:
        if truthy(self.evaluate(node.test, env)):
            return self.evaluate(node.consequent, env)
        return self.evaluate(node.alternate, env)

    def _eval_Assign(self, node: n.Assign, env: Environment) -> Any:
        operator = node.operator
        if operator == "=":
            value = self.evaluate(node.value, env)
        else:
            current = self.evaluate(node.target, env)
            base = operator[:-1]
            if base == "&&":
                if not truthy(current):
                    return current
                value = self.evaluate(node.value, env)
            elif base == "||":
                if truthy(current):
                    return current
                value = self.evaluate(node.value, env)
            elif base == "??":
                if not is_nullish(current):
                    return current
                value = self.evaluate(node.value, env)
            else:
                value = binary_op(base, current, self.evaluate(node.value, env))
        self._store(node.target, value, env)
        return value

    def _eval_Sequence(self, node: n.Sequence, env: Environment) -> Any:
        result: Any = UNDEFINED
        for expression in node.expressions:
            result = self.evaluate(expression, env)
        return result

    def _eval_Spread(self, node: n.Spread, env: Environment) -> Any:
        raise JSRuntimeError("Unexpected spread element")
