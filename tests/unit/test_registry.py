"""Component registry tests."""

import pytest

from uigen.preview import LIBRARY_COMPONENTS
from uigen.registry import (
    ALLOWED_COMPONENTS,
    CATEGORY_ORDER,
    COMPONENTS_BY_CATEGORY,
    ComponentCategory,
    ComponentRegistry,
    ComponentSchema,
    DEFAULT_REGISTRY,
)


@pytest.mark.unit
def test_registry_has_fixed_library():
    assert len(ALLOWED_COMPONENTS) == 26
    assert {"Container", "Card", "Table", "Button", "Modal", "PieChart"} <= ALLOWED_COMPONENTS


@pytest.mark.unit
def test_every_registered_component_is_renderable():
    assert set(LIBRARY_COMPONENTS) == set(ALLOWED_COMPONENTS)


@pytest.mark.unit
def test_categories_in_display_order():
    assert DEFAULT_REGISTRY.get_categories() == CATEGORY_ORDER
    assert COMPONENTS_BY_CATEGORY[ComponentCategory.LAYOUT] == ["Container", "Grid", "Flex", "Stack"]
    assert COMPONENTS_BY_CATEGORY[ComponentCategory.DATA_VIZ] == ["BarChart", "LineChart", "PieChart"]


@pytest.mark.unit
def test_lookup():
    table = DEFAULT_REGISTRY.get("Table")

    assert table is not None
    assert table.category == ComponentCategory.DISPLAY
    assert set(table.props) >= {"columns", "data"}
    assert DEFAULT_REGISTRY.get("Chart3D") is None
    assert not DEFAULT_REGISTRY.is_allowed("Chart3D")


@pytest.mark.unit
def test_duplicate_registration_rejected():
    registry = ComponentRegistry()
    with pytest.raises(ValueError, match="already registered"):
        registry.register(DEFAULT_REGISTRY.get("Card"))


@pytest.mark.unit
def test_schema_name_must_be_capitalized():
    with pytest.raises(Exception):
        ComponentSchema(name="card", category=ComponentCategory.DISPLAY, description="x")


@pytest.mark.unit
def test_describe_lists_every_component():
    text = DEFAULT_REGISTRY.describe()

    assert text.startswith("LAYOUT: Container, Grid, Flex, Stack")
    for name in ALLOWED_COMPONENTS:
        assert f"\n{name} (" in text
