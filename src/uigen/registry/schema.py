"""Component schema models."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ComponentCategory(str, Enum):
    """Fixed component categories."""

    LAYOUT = "layout"
    DISPLAY = "display"
    INPUT = "input"
    FEEDBACK = "feedback"
    NAVIGATION = "navigation"
    OVERLAY = "overlay"
    DATA_VIZ = "data-viz"


class PropSchema(BaseModel):
    """Schema of a single component prop."""

    model_config = ConfigDict(frozen=True)

    type: str = Field(..., description="Prop type as shown to the model")
    required: bool = Field(default=False)
    options: tuple[str, ...] | None = Field(default=None, description="Allowed values")
    default: str | int | float | bool | None = Field(default=None)


class ComponentSchema(BaseModel):
    """Capability entry for one library component."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., pattern=r"^[A-Z][A-Za-z0-9]*$")
    category: ComponentCategory
    description: str
    props: dict[str, PropSchema] = Field(default_factory=dict)
    example: str = ""

    @property
    def required_props(self) -> list[str]:
        """Names of props the component cannot render without."""
        return [name for name, prop in self.props.items() if prop.required]

    def prop_defaults(self) -> dict[str, Any]:
        """Default values for optional props."""
        return {
            name: prop.default for name, prop in self.props.items() if prop.default is not None
        }
