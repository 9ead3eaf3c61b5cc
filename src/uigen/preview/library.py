"""
Python rendition of the fixed UI component library.

Each component takes the props object built by ``createElement`` and returns
an element tree of plain HTML tags carrying the library's Tailwind classes.
Interactive behaviour (state, handlers, charts) is reduced to its initial
static rendering; the preview only needs what the first paint shows.
"""

from typing import Any, Callable

from .elements import Element, h
from .errors import JSTypeError
from .values import UNDEFINED, is_nullish, to_number, to_string, truthy

Component = Callable[[dict[str, Any]], Element | None]

FIELD_CLASS = (
    "w-full px-3 py-2 border border-gray-300 rounded-lg focus:ring-2 focus:ring-blue-500 "
    "focus:border-transparent disabled:bg-gray-100 disabled:cursor-not-allowed"
)
LABEL_CLASS = "block text-sm font-medium text-gray-700 mb-1"
CHART_COLORS = ("#3b82f6", "#10b981", "#f59e0b", "#ef4444", "#8b5cf6", "#ec4899")
GAP_CLASSES = {"sm": "gap-2", "md": "gap-4", "lg": "gap-6"}


def _get(props: dict[str, Any], name: str, default: Any = UNDEFINED) -> Any:
    value = props.get(name, UNDEFINED)
    return default if value is UNDEFINED else value


def _pick(table: dict[str, str], props: dict[str, Any], name: str, default: str) -> str:
    """Class lookup keyed by a prop, as the library's class maps do."""
    return table.get(to_string(_get(props, name, default)), "")


def _classes(*parts: Any) -> str:
    return " ".join(to_string(part) for part in parts if part and part is not UNDEFINED)


def _children(props: dict[str, Any]) -> Any:
    return props.get("children", [])


def _items(props: dict[str, Any], name: str) -> list[Any]:
    value = _get(props, name)
    if not isinstance(value, list):
        raise JSTypeError(f"Cannot read properties of {to_string(value)} (reading 'map')")
    return value


# ============================================================================
# Layout
# ============================================================================


def Container(props: dict[str, Any]) -> Element:
    widths = {
        "sm": "max-w-screen-sm", "md": "max-w-screen-md", "lg": "max-w-screen-lg",
        "xl": "max-w-screen-xl", "2xl": "max-w-screen-2xl", "full": "max-w-full",
    }
    return h("div", _classes("mx-auto px-4", _pick(widths, props, "maxWidth", "xl"), _get(props, "className")),
             _children(props))


def Grid(props: dict[str, Any]) -> Element:
    cols = {"1": "grid-cols-1", "2": "grid-cols-2", "3": "grid-cols-3",
            "4": "grid-cols-4", "6": "grid-cols-6", "12": "grid-cols-12"}
    return h("div", _classes("grid", _pick(cols, props, "cols", "3"), _pick(GAP_CLASSES, props, "gap", "md"),
                             _get(props, "className")), _children(props))


def Flex(props: dict[str, Any]) -> Element:
    direction = {"row": "flex-row", "col": "flex-col"}
    justify = {"start": "justify-start", "center": "justify-center", "end": "justify-end",
               "between": "justify-between", "around": "justify-around"}
    align = {"start": "items-start", "center": "items-center", "end": "items-end", "stretch": "items-stretch"}
    return h("div", _classes(
        "flex",
        _pick(direction, props, "direction", "row"),
        _pick(justify, props, "justify", "start"),
        _pick(align, props, "align", "start"),
        _pick(GAP_CLASSES, props, "gap", "md"),
        "flex-wrap" if truthy(_get(props, "wrap", False)) else "",
        _get(props, "className"),
    ), _children(props))


def Stack(props: dict[str, Any]) -> Element:
    spacing = {"sm": "space-y-2", "md": "space-y-4", "lg": "space-y-6"}
    return h("div", _classes(_pick(spacing, props, "spacing", "md"), _get(props, "className")), _children(props))


# ============================================================================
# Display
# ============================================================================


def Card(props: dict[str, Any]) -> Element:
    variants = {
        "default": "bg-white border border-gray-200 rounded-lg shadow-sm",
        "elevated": "bg-white shadow-lg rounded-xl",
        "outlined": "border-2 border-gray-300 rounded-lg bg-white",
    }
    padding = {"sm": "p-4", "md": "p-6", "lg": "p-8"}
    return h("div", _classes(_pick(variants, props, "variant", "default"), _pick(padding, props, "padding", "md"),
                             _get(props, "className")), _children(props))


def Table(props: dict[str, Any]) -> Element:
    """Accepts columns/data, or the headers/rows shape."""
    if "columns" in props or "data" in props:
        columns = _items(props, "columns")
        rows = _items(props, "data")
        keys = [to_string(col.get("key", "")) if isinstance(col, dict) else to_string(col) for col in columns]
        labels = [to_string(col.get("label", col.get("key", ""))) if isinstance(col, dict) else to_string(col)
                  for col in columns]
    else:
        headers = _items(props, "headers")
        rows = _items(props, "rows")
        labels = [to_string(header) for header in headers]
        keys = [label.lower() for label in labels]

    row_class = "hover:bg-gray-50" if truthy(_get(props, "hoverable", True)) else ""
    striped = truthy(_get(props, "striped", True))

    head = h("thead", "bg-gray-50", h("tr", None, [
        h("th", "px-6 py-3 text-left text-xs font-medium text-gray-500 uppercase tracking-wider", label)
        for label in labels
    ]))
    body_rows = []
    for index, row in enumerate(rows):
        if is_nullish(row):
            raise JSTypeError(f"Cannot read properties of {to_string(row)} (reading '{keys[0] if keys else ''}')")
        cells = [
            h("td", "px-6 py-4 whitespace-nowrap text-sm text-gray-900",
              row.get(key) if isinstance(row, dict) else None)
            for key in keys
        ]
        body_rows.append(h("tr", _classes(row_class, "bg-gray-50" if striped and index % 2 else ""), cells))

    return h("div", _classes("overflow-x-auto bg-white rounded-lg shadow", _get(props, "className")),
             h("table", "min-w-full divide-y divide-gray-200", head,
               h("tbody", "bg-white divide-y divide-gray-200", body_rows)))


def Badge(props: dict[str, Any]) -> Element:
    variants = {
        "default": "bg-gray-100 text-gray-800", "success": "bg-green-100 text-green-800",
        "warning": "bg-yellow-100 text-yellow-800", "danger": "bg-red-100 text-red-800",
        "info": "bg-blue-100 text-blue-800",
    }
    sizes = {"sm": "px-2 py-0.5 text-xs", "md": "px-2.5 py-1 text-sm", "lg": "px-3 py-1.5 text-base"}
    return h("span", _classes("inline-flex items-center rounded-full font-medium",
                              _pick(variants, props, "variant", "default"), _pick(sizes, props, "size", "md"),
                              _get(props, "className")), _children(props))


def Avatar(props: dict[str, Any]) -> Element:
    sizes = {"sm": "w-8 h-8 text-xs", "md": "w-10 h-10 text-sm", "lg": "w-12 h-12 text-base", "xl": "w-16 h-16 text-lg"}
    src = _get(props, "src")
    if truthy(src):
        content: Any = h("img", "w-full h-full object-cover", src=to_string(src),
                         alt=to_string(_get(props, "alt", "Avatar")))
    else:
        content = _get(props, "fallback", "?")
    return h("div", _classes(
        "inline-flex items-center justify-center rounded-full bg-gray-300 text-gray-700 font-semibold overflow-hidden",
        _pick(sizes, props, "size", "md"), _get(props, "className"),
    ), content)


# ============================================================================
# Input
# ============================================================================


def Button(props: dict[str, Any]) -> Element:
    variants = {
        "primary": "bg-blue-600 text-white hover:bg-blue-700 shadow-md hover:shadow-lg active:scale-95",
        "secondary": "bg-gray-600 text-white hover:bg-gray-700 shadow-md hover:shadow-lg active:scale-95",
        "outline": "border-2 border-blue-600 text-blue-600 hover:bg-blue-50 active:scale-95",
        "ghost": "text-blue-600 hover:bg-blue-50 active:scale-95",
        "danger": "bg-red-600 text-white hover:bg-red-700 shadow-md hover:shadow-lg active:scale-95",
    }
    sizes = {"sm": "px-4 py-2 text-sm", "md": "px-6 py-2.5 text-base", "lg": "px-8 py-3 text-lg"}
    disabled = truthy(_get(props, "disabled", False))
    return h("button", _classes(
        "rounded-lg font-semibold transition-all duration-150",
        _pick(variants, props, "variant", "primary"),
        _pick(sizes, props, "size", "md"),
        "w-full" if truthy(_get(props, "fullWidth", False)) else "",
        "opacity-50 cursor-not-allowed" if disabled else "",
        _get(props, "className"),
    ), _children(props), disabled=disabled or None, type="button")


def _field_label(props: dict[str, Any], required: bool = False) -> Element | None:
    label = _get(props, "label")
    if not truthy(label):
        return None
    marker = h("span", "text-red-500 ml-1", "*") if required else None
    return h("label", LABEL_CLASS, label, marker)


def Input(props: dict[str, Any]) -> Element:
    required = truthy(_get(props, "required", False))
    value = _get(props, "value")
    field = h(
        "input", FIELD_CLASS,
        type=to_string(_get(props, "type", "text")),
        placeholder=None if is_nullish(_get(props, "placeholder")) else to_string(_get(props, "placeholder")),
        disabled=truthy(_get(props, "disabled", False)) or None,
        required=required or None,
        value=None if is_nullish(value) else to_string(value),
    )
    return h("div", "w-full", _field_label(props, required), field)


def Textarea(props: dict[str, Any]) -> Element:
    value = _get(props, "value")
    field = h(
        "textarea", FIELD_CLASS,
        "" if is_nullish(value) else to_string(value),
        placeholder=None if is_nullish(_get(props, "placeholder")) else to_string(_get(props, "placeholder")),
        rows=to_string(_get(props, "rows", 4)),
        disabled=truthy(_get(props, "disabled", False)) or None,
    )
    return h("div", "w-full", _field_label(props), field)


def Select(props: dict[str, Any]) -> Element:
    options = []
    placeholder = _get(props, "placeholder")
    if truthy(placeholder):
        options.append(h("option", None, placeholder, value=""))
    selected = _get(props, "value")
    for option in _items(props, "options"):
        if not isinstance(option, dict):
            raise JSTypeError(f"Cannot read properties of {to_string(option)} (reading 'value')")
        value = to_string(option.get("value", ""))
        options.append(h("option", None, option.get("label"), value=value,
                         selected=(not is_nullish(selected) and to_string(selected) == value) or None))
    field = h("select", FIELD_CLASS, options, disabled=truthy(_get(props, "disabled", False)) or None)
    return h("div", "w-full", _field_label(props), field)


def Checkbox(props: dict[str, Any]) -> Element:
    label = _get(props, "label")
    box = h("input", "w-4 h-4 text-blue-600 border-gray-300 rounded focus:ring-blue-500 disabled:cursor-not-allowed",
            type="checkbox", checked=truthy(_get(props, "checked", False)) or None,
            disabled=truthy(_get(props, "disabled", False)) or None)
    return h("label", "flex items-center space-x-2 cursor-pointer", box,
             h("span", "text-sm text-gray-700", label) if truthy(label) else None)


def Switch(props: dict[str, Any]) -> Element:
    label = _get(props, "label")
    checked = truthy(_get(props, "checked", False))
    track = h("div", _classes("w-11 h-6 rounded-full relative transition-all", "bg-blue-600" if checked else "bg-gray-200"),
              h("div", _classes("absolute top-0.5 left-0.5 bg-white border border-gray-300 rounded-full h-5 w-5",
                                "translate-x-full" if checked else "")))
    box = h("input", "sr-only peer", type="checkbox", checked=checked or None,
            disabled=truthy(_get(props, "disabled", False)) or None)
    return h("label", "flex items-center space-x-3 cursor-pointer", h("div", "relative", box, track),
             h("span", "text-sm text-gray-700", label) if truthy(label) else None)


# ============================================================================
# Feedback
# ============================================================================


def Alert(props: dict[str, Any]) -> Element:
    variants = {
        "info": "bg-blue-50 border-blue-200 text-blue-800",
        "success": "bg-green-50 border-green-200 text-green-800",
        "warning": "bg-yellow-50 border-yellow-200 text-yellow-800",
        "error": "bg-red-50 border-red-200 text-red-800",
    }
    title = _get(props, "title")
    dismiss = None
    if truthy(_get(props, "dismissible", False)):
        dismiss = h("button", "ml-4 text-current opacity-50 hover:opacity-100", "×", type="button")
    body = h("div", "flex-1", h("h4", "font-semibold mb-1", title) if truthy(title) else None,
             h("div", "text-sm", _children(props)))
    return h("div", _classes("border rounded-lg p-4", _pick(variants, props, "variant", "info")),
             h("div", "flex items-start justify-between", body, dismiss))


def Progress(props: dict[str, Any]) -> Element:
    variants = {"default": "bg-blue-600", "success": "bg-green-600", "warning": "bg-yellow-600", "error": "bg-red-600"}
    value = to_number(_get(props, "value", 0))
    maximum = to_number(_get(props, "max", 100)) or 100
    percentage = min(value / maximum * 100, 100) if value == value else 0
    percentage = max(percentage, 0)
    bar = h("div", _classes("h-2.5 rounded-full transition-all", _pick(variants, props, "variant", "default")),
            style=f"width: {percentage:g}%")
    label = None
    if truthy(_get(props, "showLabel", True)):
        label = h("p", "text-sm text-gray-600 mt-1", f"{int(percentage + 0.5)}%")
    return h("div", "w-full", h("div", "w-full bg-gray-200 rounded-full h-2.5", bar), label)


def Spinner(props: dict[str, Any]) -> Element:
    sizes = {"sm": "h-4 w-4 border-2", "md": "h-8 w-8 border-3", "lg": "h-12 w-12 border-4"}
    variants = {"default": "border-gray-300 border-t-gray-600", "primary": "border-blue-200 border-t-blue-600"}
    return h("div", _classes("animate-spin rounded-full", _pick(sizes, props, "size", "md"),
                             _pick(variants, props, "variant", "default")), role="status")


# ============================================================================
# Navigation
# ============================================================================


def Navbar(props: dict[str, Any]) -> Element:
    brand = _get(props, "brand")
    sticky = truthy(_get(props, "sticky", False))
    row = h("div", "flex items-center justify-between h-16",
            h("div", "text-xl font-bold text-gray-900", brand) if truthy(brand) else None,
            h("div", "flex items-center space-x-4", _children(props)))
    return h("nav", _classes("bg-white border-b border-gray-200", "sticky top-0 z-50" if sticky else ""),
             h("div", "max-w-7xl mx-auto px-4", row))


def Sidebar(props: dict[str, Any]) -> Element:
    widths = {"sm": "w-48", "md": "w-64", "lg": "w-80"}
    return h("aside", _classes(
        _pick(widths, props, "width", "md"),
        "order-last" if _get(props, "position", "left") == "right" else "",
        "bg-gray-50 border-r border-gray-200 p-4 min-h-screen",
    ), _children(props))


def Tabs(props: dict[str, Any]) -> Element:
    tabs = _items(props, "tabs")
    for tab in tabs:
        if not isinstance(tab, dict):
            raise JSTypeError(f"Cannot read properties of {to_string(tab)} (reading 'id')")
    default_tab = _get(props, "defaultTab")
    active = default_tab if truthy(default_tab) else (tabs[0].get("id", UNDEFINED) if tabs else UNDEFINED)

    buttons = []
    content: Any = None
    for tab in tabs:
        is_active = tab.get("id", UNDEFINED) == active
        if is_active and content is None:
            content = tab.get("content")
        buttons.append(h("button", _classes(
            "py-2 px-1 border-b-2 font-medium text-sm",
            "border-blue-500 text-blue-600" if is_active
            else "border-transparent text-gray-500 hover:text-gray-700 hover:border-gray-300",
        ), tab.get("label"), type="button"))

    return h("div", "w-full",
             h("div", "border-b border-gray-200", h("nav", "flex space-x-8", buttons)),
             h("div", "mt-4", content))


def Breadcrumb(props: dict[str, Any]) -> Element:
    entries = []
    for index, item in enumerate(_items(props, "items")):
        if not isinstance(item, dict):
            raise JSTypeError(f"Cannot read properties of {to_string(item)} (reading 'href')")
        separator = h("span", "mx-2 text-gray-400", "/") if index > 0 else None
        href = item.get("href")
        if truthy(href):
            link: Element = h("a", "text-blue-600 hover:text-blue-800", item.get("label"), href=to_string(href))
        else:
            link = h("span", "text-gray-500", item.get("label"))
        entries.append(h("li", "inline-flex items-center", separator, link))
    return h("nav", "flex", h("ol", "inline-flex items-center space-x-1 md:space-x-3", entries),
             **{"aria-label": "Breadcrumb"})


# ============================================================================
# Overlay
# ============================================================================


def _close_button(class_name: str) -> Element:
    return h("button", class_name, "×", type="button", **{"aria-label": "Close"})


def Modal(props: dict[str, Any]) -> Element | None:
    if not truthy(_get(props, "isOpen", False)):
        return None
    sizes = {"sm": "max-w-md", "md": "max-w-lg", "lg": "max-w-2xl", "xl": "max-w-4xl", "full": "max-w-full mx-4"}
    title = _get(props, "title")
    header = None
    if truthy(title):
        header = h("div", "flex items-center justify-between px-6 py-4 border-b border-gray-200",
                   h("h3", "text-lg font-semibold", title), _close_button("text-gray-400 hover:text-gray-600"))
    panel = h("div", _classes("relative bg-white rounded-lg shadow-xl", _pick(sizes, props, "size", "md"), "w-full"),
              header, h("div", "px-6 py-4", _children(props)))
    return h("div", "fixed inset-0 z-50 flex items-center justify-center p-4",
             h("div", "fixed inset-0 bg-black bg-opacity-50"), panel)


def Drawer(props: dict[str, Any]) -> Element | None:
    if not truthy(_get(props, "isOpen", False)):
        return None
    positions = {
        "left": "left-0 top-0 h-full w-80", "right": "right-0 top-0 h-full w-80",
        "top": "top-0 left-0 w-full h-80", "bottom": "bottom-0 left-0 w-full h-80",
    }
    panel = h("div", _classes("fixed bg-white shadow-xl", _pick(positions, props, "position", "right"), "p-6"),
              _close_button("absolute top-4 right-4 text-gray-400 hover:text-gray-600"), _children(props))
    return h("div", "fixed inset-0 z-50", h("div", "fixed inset-0 bg-black bg-opacity-50"), panel)


# ============================================================================
# Data visualization
# ============================================================================


def _chart_points(props: dict[str, Any]) -> list[tuple[str, float]]:
    points = []
    for entry in _items(props, "data"):
        if not isinstance(entry, dict):
            raise JSTypeError(f"Cannot read properties of {to_string(entry)} (reading 'value')")
        value = to_number(entry.get("value", 0))
        points.append((to_string(entry.get("name", "")), value if value == value else 0))
    return points


def _chart_frame(props: dict[str, Any], kind: str, *children: Any) -> Element:
    height = to_number(_get(props, "height", 300))
    return h("div", "w-full", *children, role="img", style=f"height: {height:g}px",
             **{"data-chart": kind})


def BarChart(props: dict[str, Any]) -> Element:
    points = _chart_points(props)
    color = to_string(_get(props, "color", CHART_COLORS[0]))
    peak = max((value for _, value in points), default=0) or 1
    bars = [
        h("div", "flex flex-col items-center flex-1",
          h("div", "w-full rounded-t", style=f"height: {max(value, 0) / peak * 100:g}%; background: {color}",
            title=f"{name}: {value:g}"),
          h("span", "text-xs text-gray-500 mt-1", name))
        for name, value in points
    ]
    return _chart_frame(props, "bar", h("div", "flex items-end gap-2 h-full", bars))


def LineChart(props: dict[str, Any]) -> Element:
    points = _chart_points(props)
    color = to_string(_get(props, "color", CHART_COLORS[0]))
    peak = max((value for _, value in points), default=0) or 1
    step = 100 / max(len(points) - 1, 1)
    coords = " ".join(f"{i * step:g},{100 - max(value, 0) / peak * 100:g}" for i, (_, value) in enumerate(points))
    line = h("svg", "w-full h-full", h("polyline", None, points=coords, fill="none", stroke=color,
                                       **{"stroke-width": "2"}),
             viewBox="0 0 100 100", preserveAspectRatio="none")
    labels = h("div", "flex justify-between", [h("span", "text-xs text-gray-500", name) for name, _ in points])
    return _chart_frame(props, "line", line, labels)


def PieChart(props: dict[str, Any]) -> Element:
    points = _chart_points(props)
    total = sum(max(value, 0) for _, value in points) or 1
    legend = [
        h("li", "flex items-center gap-2 text-sm",
          h("span", "inline-block w-3 h-3 rounded-full", style=f"background: {CHART_COLORS[i % len(CHART_COLORS)]}"),
          f"{name} ({max(value, 0) / total * 100:.0f}%)")
        for i, (name, value) in enumerate(points)
    ]
    return _chart_frame(props, "pie", h("ul", "space-y-1", legend))


LIBRARY_COMPONENTS: dict[str, Component] = {
    component.__name__: component
    for component in (
        Container, Grid, Flex, Stack,
        Card, Table, Badge, Avatar,
        Button, Input, Textarea, Select, Checkbox, Switch,
        Alert, Progress, Spinner,
        Navbar, Sidebar, Tabs, Breadcrumb,
        Modal, Drawer,
        BarChart, LineChart, PieChart,
    )
}
