"""
Minimal Date for previewed components.

Generated code mostly formats "now" or a fixed date for display, so a Date
here is a plain object of getter and formatting methods over a millisecond
timestamp. Getters read local time; toISOString reads UTC.
"""

import math
import time
from datetime import datetime, timedelta, timezone
from typing import Any

from .errors import JSRuntimeError
from .interpreter import NativeFunction
from .values import UNDEFINED, is_number, to_number, to_string

INVALID_DATE = "Invalid Date"
_DAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
_MONTH_NAMES = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def _now_ms() -> int:
    return int(time.time() * 1000)


def _from_components(*parts: Any) -> float:
    numbers = [to_number(part) for part in parts]
    numbers += [0] * (7 - len(numbers))
    if not all(math.isfinite(number) for number in numbers):
        return math.nan
    year, month, day, hours, minutes, seconds, millis = (int(number) for number in numbers)
    if len(parts) < 3:
        day = 1
    year += month // 12
    try:
        base = datetime(year, month % 12 + 1, 1)
        moment = base + timedelta(
            days=day - 1, hours=hours, minutes=minutes, seconds=seconds, milliseconds=millis
        )
        return float(round(moment.timestamp() * 1000))
    except (OverflowError, OSError, ValueError):
        return math.nan


def _from_string(text: str) -> float:
    text = text.strip()
    try:
        moment = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return math.nan
    if moment.tzinfo is None and len(text) == 10:
        # Date-only forms are UTC
        moment = moment.replace(tzinfo=timezone.utc)
    try:
        return float(round(moment.timestamp() * 1000))
    except (OverflowError, OSError, ValueError):
        return math.nan


def _local(ms: float) -> datetime | None:
    if not math.isfinite(ms):
        return None
    try:
        return datetime.fromtimestamp(ms / 1000)
    except (OverflowError, OSError, ValueError):
        return None


def make_date(ms: float) -> dict[str, Any]:
    """A Date instance for the given timestamp (NaN for an invalid date)."""
    moment = _local(ms)

    def getter(read: Any) -> NativeFunction:
        return NativeFunction("get", lambda *_: math.nan if moment is None else read(moment))

    def formatter(fmt: Any) -> NativeFunction:
        return NativeFunction("format", lambda *_: INVALID_DATE if moment is None else fmt(moment))

    def iso(*_: Any) -> str:
        if moment is None:
            raise JSRuntimeError("Invalid time value")
        utc = datetime.fromtimestamp(ms / 1000, tz=timezone.utc)
        return f"{utc:%Y-%m-%dT%H:%M:%S}.{int(ms) % 1000:03d}Z"

    time_value = ms if moment is None else int(ms)
    return {
        "getFullYear": getter(lambda d: d.year),
        "getMonth": getter(lambda d: d.month - 1),
        "getDate": getter(lambda d: d.day),
        "getDay": getter(lambda d: (d.weekday() + 1) % 7),
        "getHours": getter(lambda d: d.hour),
        "getMinutes": getter(lambda d: d.minute),
        "getSeconds": getter(lambda d: d.second),
        "getMilliseconds": getter(lambda d: d.microsecond // 1000),
        "getTime": NativeFunction("getTime", lambda *_: time_value),
        "valueOf": NativeFunction("valueOf", lambda *_: time_value),
        "toISOString": NativeFunction("toISOString", iso),
        "toJSON": NativeFunction("toJSON", lambda *_: None if moment is None else iso()),
        "toLocaleDateString": formatter(_date_text),
        "toLocaleTimeString": formatter(_time_text),
        "toLocaleString": formatter(lambda d: f"{_date_text(d)}, {_time_text(d)}"),
        "toDateString": formatter(lambda d: f"{_DAY_NAMES[(d.weekday() + 1) % 7]} {_MONTH_NAMES[d.month - 1]} {d.day:02d} {d.year}"),
        "toString": formatter(lambda d: f"{_DAY_NAMES[(d.weekday() + 1) % 7]} {_MONTH_NAMES[d.month - 1]} {d.day:02d} {d.year} {d:%H:%M:%S}"),
    }


def _date_text(d: datetime) -> str:
    return f"{d.month}/{d.day}/{d.year}"


def _time_text(d: datetime) -> str:
    hour = d.hour % 12 or 12
    return f"{hour}:{d.minute:02d}:{d.second:02d} {'AM' if d.hour < 12 else 'PM'}"


def _construct(*args: Any) -> dict[str, Any]:
    if not args:
        return make_date(_now_ms())
    if len(args) == 1:
        value = args[0]
        if isinstance(value, dict) and callable(value.get("getTime")):
            return make_date(value["getTime"]())
        if isinstance(value, str):
            return make_date(_from_string(value))
        number = to_number(value)
        return make_date(number if is_number(number) else math.nan)
    return make_date(_from_components(*args))


def build_date() -> NativeFunction:
    return NativeFunction("Date", _construct, {
        "now": NativeFunction("now", lambda *_: _now_ms()),
        "parse": NativeFunction("parse", lambda text=UNDEFINED, *_: _from_string(to_string(text))),
    }, constructor=True)
