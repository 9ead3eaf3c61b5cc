"""Expands element trees and serializes them to HTML."""

import html
from typing import Any

from .elements import FRAGMENT, Element, create_element, flatten_children
from .errors import PreviewError, RenderError
from .values import UNDEFINED, is_nullish, is_number, to_string

MAX_RENDER_DEPTH = 200
MAX_HTML_LENGTH = 5_000_000

VOID_TAGS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "track", "wbr",
})
ATTRIBUTE_ALIASES = {"className": "class", "htmlFor": "for"}
SKIPPED_PROPS = frozenset({"children", "key", "ref", "dangerouslySetInnerHTML"})


def expand(node: Any, depth: int = 0) -> Any:
    """
    Resolve component elements until only host tags and text remain.

    Raises:
        RenderError: On invalid children or runaway nesting
    """
    if depth > MAX_RENDER_DEPTH:
        raise RenderError("Maximum update depth exceeded")

    if is_nullish(node) or isinstance(node, bool):
        return None
    if isinstance(node, (str, int, float)):
        return node
    if isinstance(node, list):
        return [expand(child, depth + 1) for child in flatten_children(node)]
    if not isinstance(node, Element):
        if isinstance(node, dict):
            raise RenderError("Objects are not valid as a React child")
        # functions are not valid children and render nothing
        return None

    if node.type is FRAGMENT:
        return [expand(child, depth + 1) for child in node.children]
    if isinstance(node.type, str):
        return Element(node.type, node.props, [expand(child, depth + 1) for child in node.children], node.key)
    if callable(node.type):
        try:
            rendered = node.type(node.props)
        except (TypeError, ValueError, KeyError, IndexError, AttributeError, ZeroDivisionError) as exc:
            raise RenderError(str(exc) or type(exc).__name__) from exc
        return expand(rendered, depth + 1)
    raise RenderError(
        "Element type is invalid: expected a string (for built-in components) "
        f"or a class/function (for composite components) but got: {to_string(node.type)}"
    )


def _attribute(name: str, value: Any) -> str | None:
    if name in SKIPPED_PROPS or (name.startswith("on") and name[2:3].isupper()):
        return None
    if callable(value) or isinstance(value, (dict, list)) or is_nullish(value) or value is False:
        return None
    attr = ATTRIBUTE_ALIASES.get(name, name)
    if value is True:
        return f" {html.escape(attr)}"
    text = to_string(value) if is_number(value) else str(value)
    return f' {html.escape(attr)}="{html.escape(text, quote=True)}"'


class _Output(list):
    """Collected markup with a size ceiling."""

    size = 0

    def append(self, text: str) -> None:
        self.size += len(text)
        if self.size > MAX_HTML_LENGTH:
            raise RenderError("Rendered output is too large")
        super().append(text)


def _serialize(node: Any, parts: _Output) -> None:
    if node is None or node is UNDEFINED:
        return
    if isinstance(node, list):
        for child in node:
            _serialize(child, parts)
        return
    if not isinstance(node, Element):
        parts.append(html.escape(to_string(node), quote=False))
        return

    tag = node.type
    attrs = "".join(filter(None, (_attribute(name, value) for name, value in node.props.items())))
    parts.append(f"<{tag}{attrs}>")
    if tag in VOID_TAGS:
        return
    _serialize(node.children, parts)
    parts.append(f"</{tag}>")


def render_to_html(node: Any) -> str:
    """Render an element (or any child value) to an HTML string."""
    parts = _Output()
    _serialize(expand(node), parts)
    return "".join(parts)


def render_component(component: Any, props: dict[str, Any] | None = None) -> str:
    """
    Mount a component with the given props and render it.

    Raises:
        PreviewError: For any fault raised while rendering
    """
    try:
        return render_to_html(create_element(component, props or {}))
    except PreviewError:
        raise
    except RecursionError:
        raise RenderError("Maximum call stack size exceeded") from None
