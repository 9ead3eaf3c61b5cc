"""Element tree produced by createElement and by the component library."""

from dataclasses import dataclass, field
from typing import Any

from .values import UNDEFINED, is_nullish


class _Fragment:
    def __repr__(self) -> str:
        return "Fragment"


FRAGMENT = _Fragment()


@dataclass
class Element:
    """A host tag, a fragment, or an unexpanded component call."""

    type: Any  # str tag | FRAGMENT | callable component
    props: dict[str, Any] = field(default_factory=dict)
    children: list[Any] = field(default_factory=list)
    key: Any = None


def flatten_children(children: Any) -> list[Any]:
    """Flatten nested child arrays and drop empty slots."""
    flat: list[Any] = []
    if isinstance(children, (list, tuple)):
        for child in children:
            flat.extend(flatten_children(child))
    elif not (is_nullish(children) or isinstance(children, bool)):
        flat.append(children)
    return flat


def create_element(type_: Any, props: Any = None, *children: Any) -> Element:
    """Python rendition of React.createElement."""
    if is_nullish(props):
        props = {}
    elif not isinstance(props, dict):
        props = {}
    else:
        props = dict(props)

    key = props.pop("key", None)
    if children:
        kids = flatten_children(list(children))
    else:
        kids = flatten_children(props.get("children", UNDEFINED))
    props["children"] = kids
    return Element(type_, props, kids, key)


def h(tag: str, class_name: str | None = None, *children: Any, **attrs: Any) -> Element:
    """Shorthand for building library markup."""
    props: dict[str, Any] = {k: v for k, v in attrs.items() if v is not None}
    if class_name:
        props["className"] = class_name
    kids = flatten_children(list(children))
    props["children"] = kids
    return Element(tag, props, kids)
