"""Component Registry - the fixed vocabulary generated code may use."""

from typing import Dict, List, Optional

import structlog

from .categories import (
    register_layout_components,
    register_display_components,
    register_input_components,
    register_feedback_components,
    register_navigation_components,
    register_overlay_components,
    register_data_viz_components,
)
from .schema import ComponentCategory, ComponentSchema

logger = structlog.get_logger(__name__)

CATEGORY_ORDER = [
    ComponentCategory.LAYOUT,
    ComponentCategory.DISPLAY,
    ComponentCategory.INPUT,
    ComponentCategory.FEEDBACK,
    ComponentCategory.NAVIGATION,
    ComponentCategory.OVERLAY,
    ComponentCategory.DATA_VIZ,
]


class ComponentRegistry:
    """
    Category-organized registry of library components.
    Populated once at construction; read-only afterwards.
    """

    def __init__(self) -> None:
        self.components: Dict[str, ComponentSchema] = {}
        self._initialize_builtin_components()

    def _initialize_builtin_components(self) -> None:
        """Initialize the fixed component library from category modules."""
        register_layout_components(self)
        register_display_components(self)
        register_input_components(self)
        register_feedback_components(self)
        register_navigation_components(self)
        register_overlay_components(self)
        register_data_viz_components(self)

        logger.debug(
            "component_registry_initialized",
            components=len(self.components),
            categories=len(self.get_categories()),
        )

    def register(self, component: ComponentSchema) -> None:
        """Register a component; names are unique."""
        if component.name in self.components:
            raise ValueError(f"Component already registered: {component.name}")
        self.components[component.name] = component

    def get(self, name: str) -> Optional[ComponentSchema]:
        """Get component by name."""
        return self.components.get(name)

    def is_allowed(self, name: str) -> bool:
        """Check membership in the allowed component set."""
        return name in self.components

    def get_categories(self) -> List[ComponentCategory]:
        """Categories that have at least one component, in display order."""
        present = {c.category for c in self.components.values()}
        return [category for category in CATEGORY_ORDER if category in present]

    def list_components(self, category: Optional[ComponentCategory] = None) -> List[ComponentSchema]:
        """List all components, optionally filtered by category."""
        components = list(self.components.values())
        if category:
            components = [c for c in components if c.category == category]
        return components

    def category_summary(self) -> str:
        """One line per category listing its component names."""
        lines = []
        for category in self.get_categories():
            names = ", ".join(c.name for c in self.list_components(category))
            lines.append(f"{category.value.upper()}: {names}")
        return "\n".join(lines)

    def describe(self) -> str:
        """Full component reference for model prompts."""
        sections = [self.category_summary(), "", "COMPONENT DETAILS:"]

        for component in self.components.values():
            sections.append(f"\n{component.name} ({component.category.value})")
            sections.append(f"  Description: {component.description}")
            if component.props:
                sections.append("  Props:")
                for prop_name, prop in component.props.items():
                    detail = f"    - {prop_name}: {prop.type}"
                    if prop.required:
                        detail += " (required)"
                    if prop.options:
                        detail += f" options: {', '.join(prop.options)}"
                    if prop.default is not None:
                        detail += f" default: {prop.default}"
                    sections.append(detail)
            if component.example:
                sections.append(f"  Example: {component.example}")

        return "\n".join(sections)


__all__ = ["CATEGORY_ORDER", "ComponentRegistry"]
