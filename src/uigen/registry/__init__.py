"""Fixed component registry."""

from .registry import CATEGORY_ORDER, ComponentRegistry
from .schema import ComponentCategory, ComponentSchema, PropSchema

UI_LIBRARY_MODULE = "@/components/ui-library"

DEFAULT_REGISTRY = ComponentRegistry()

COMPONENT_REGISTRY: dict[str, ComponentSchema] = dict(DEFAULT_REGISTRY.components)
ALLOWED_COMPONENTS: frozenset[str] = frozenset(COMPONENT_REGISTRY)
COMPONENTS_BY_CATEGORY: dict[ComponentCategory, list[str]] = {
    category: [c.name for c in DEFAULT_REGISTRY.list_components(category)]
    for category in DEFAULT_REGISTRY.get_categories()
}

__all__ = [
    "ALLOWED_COMPONENTS",
    "CATEGORY_ORDER",
    "COMPONENTS_BY_CATEGORY",
    "COMPONENT_REGISTRY",
    "ComponentCategory",
    "ComponentRegistry",
    "ComponentSchema",
    "DEFAULT_REGISTRY",
    "PropSchema",
    "UI_LIBRARY_MODULE",
]
