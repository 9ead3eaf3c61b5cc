"""
Fixed component catalog, one register function per category.
These entries describe the pre-built library; the model may only select
and compose them.
"""

from typing import TYPE_CHECKING

from .schema import ComponentCategory, ComponentSchema, PropSchema

if TYPE_CHECKING:
    from .registry import ComponentRegistry


NODE = PropSchema(type="ReactNode", required=True)
SIZES = ("sm", "md", "lg")


def _flag(default: bool = False) -> PropSchema:
    return PropSchema(type="boolean", default=default)


def _text(required: bool = False) -> PropSchema:
    return PropSchema(type="string", required=required)


def _choice(options: tuple[str, ...], default: str) -> PropSchema:
    return PropSchema(type="string", options=options, default=default)


def register_layout_components(registry: "ComponentRegistry") -> None:
    """Register page structure components."""
    layout = ComponentCategory.LAYOUT

    registry.register(ComponentSchema(
        name="Container",
        category=layout,
        description="Main container with max-width and padding",
        props={"children": NODE, "maxWidth": _choice(("sm", "md", "lg", "xl", "2xl", "full"), "xl")},
        example='<Container maxWidth="lg">{children}</Container>',
    ))
    registry.register(ComponentSchema(
        name="Grid",
        category=layout,
        description="Responsive grid layout",
        props={
            "children": NODE,
            "cols": PropSchema(type="number", options=("1", "2", "3", "4", "6", "12"), default="3"),
            "gap": _choice(SIZES, "md"),
        },
        example='<Grid cols={3} gap="md">{children}</Grid>',
    ))
    registry.register(ComponentSchema(
        name="Flex",
        category=layout,
        description="Flexbox container",
        props={
            "children": NODE,
            "direction": _choice(("row", "col"), "row"),
            "justify": _choice(("start", "center", "end", "between", "around"), "start"),
            "align": _choice(("start", "center", "end", "stretch"), "start"),
            "gap": _choice(SIZES, "md"),
        },
        example='<Flex direction="row" justify="between" align="center">{children}</Flex>',
    ))
    registry.register(ComponentSchema(
        name="Stack",
        category=layout,
        description="Vertical stack with spacing",
        props={"children": NODE, "spacing": _choice(("sm", "md", "lg", "xl"), "md")},
        example='<Stack spacing="lg">{children}</Stack>',
    ))


def register_display_components(registry: "ComponentRegistry") -> None:
    """Register read-only display components."""
    display = ComponentCategory.DISPLAY

    registry.register(ComponentSchema(
        name="Card",
        category=display,
        description="Card container with optional header and footer",
        props={
            "children": NODE,
            "title": _text(),
            "subtitle": _text(),
            "footer": PropSchema(type="ReactNode"),
            "variant": _choice(("default", "bordered", "elevated"), "default"),
        },
        example='<Card title="Dashboard" subtitle="Overview">{children}</Card>',
    ))
    registry.register(ComponentSchema(
        name="Table",
        category=display,
        description="Data table with columns and rows",
        props={
            "columns": PropSchema(type="Array<{key: string, label: string}>", required=True),
            "data": PropSchema(type="Array<Record<string, any>>", required=True),
            "striped": _flag(True),
            "hoverable": _flag(True),
        },
        example='<Table columns={[{key: "name", label: "Name"}]} data={users} />',
    ))
    registry.register(ComponentSchema(
        name="Badge",
        category=display,
        description="Small badge/tag component",
        props={
            "children": NODE,
            "variant": _choice(("default", "success", "warning", "error", "info"), "default"),
            "size": _choice(SIZES, "md"),
        },
        example='<Badge variant="success">Active</Badge>',
    ))
    registry.register(ComponentSchema(
        name="Avatar",
        category=display,
        description="User avatar with initials or image",
        props={"name": _text(), "src": _text(), "size": _choice(("sm", "md", "lg", "xl"), "md")},
        example='<Avatar name="John Doe" size="lg" />',
    ))


def register_input_components(registry: "ComponentRegistry") -> None:
    """Register interactive input components."""
    inputs = ComponentCategory.INPUT

    registry.register(ComponentSchema(
        name="Button",
        category=inputs,
        description="Interactive button",
        props={
            "children": NODE,
            "variant": _choice(("primary", "secondary", "outline", "ghost", "danger"), "primary"),
            "size": _choice(SIZES, "md"),
            "disabled": _flag(),
            "fullWidth": _flag(),
        },
        example='<Button variant="primary" size="md">Click Me</Button>',
    ))
    registry.register(ComponentSchema(
        name="Input",
        category=inputs,
        description="Text input field",
        props={
            "label": _text(),
            "placeholder": _text(),
            "type": _choice(("text", "email", "password", "number"), "text"),
            "disabled": _flag(),
            "required": _flag(),
        },
        example='<Input label="Email" placeholder="Enter email" type="email" />',
    ))
    registry.register(ComponentSchema(
        name="Textarea",
        category=inputs,
        description="Multi-line text input",
        props={
            "label": _text(),
            "placeholder": _text(),
            "rows": PropSchema(type="number", default=4),
            "disabled": _flag(),
        },
        example='<Textarea label="Description" rows={6} />',
    ))
    registry.register(ComponentSchema(
        name="Select",
        category=inputs,
        description="Dropdown select",
        props={
            "label": _text(),
            "options": PropSchema(type="Array<{value: string, label: string}>", required=True),
            "placeholder": _text(),
            "disabled": _flag(),
        },
        example='<Select label="Country" options={[{value: "us", label: "USA"}]} />',
    ))
    registry.register(ComponentSchema(
        name="Checkbox",
        category=inputs,
        description="Checkbox input",
        props={"label": _text(), "disabled": _flag(), "checked": _flag()},
        example='<Checkbox label="I agree to terms" />',
    ))
    registry.register(ComponentSchema(
        name="Switch",
        category=inputs,
        description="Toggle switch",
        props={"label": _text(), "disabled": _flag(), "checked": _flag()},
        example='<Switch label="Enable notifications" />',
    ))


def register_feedback_components(registry: "ComponentRegistry") -> None:
    """Register status and feedback components."""
    feedback = ComponentCategory.FEEDBACK

    registry.register(ComponentSchema(
        name="Alert",
        category=feedback,
        description="Alert message box",
        props={
            "children": NODE,
            "variant": _choice(("info", "success", "warning", "error"), "info"),
            "title": _text(),
            "dismissible": _flag(),
        },
        example='<Alert variant="success" title="Success">Operation completed</Alert>',
    ))
    registry.register(ComponentSchema(
        name="Progress",
        category=feedback,
        description="Progress bar",
        props={
            "value": PropSchema(type="number", required=True),
            "max": PropSchema(type="number", default=100),
            "variant": _choice(("default", "success", "warning", "error"), "default"),
            "showLabel": _flag(True),
        },
        example='<Progress value={75} max={100} variant="success" />',
    ))
    registry.register(ComponentSchema(
        name="Spinner",
        category=feedback,
        description="Loading spinner",
        props={"size": _choice(SIZES, "md"), "variant": _choice(("default", "primary"), "default")},
        example='<Spinner size="lg" variant="primary" />',
    ))


def register_navigation_components(registry: "ComponentRegistry") -> None:
    """Register navigation components."""
    navigation = ComponentCategory.NAVIGATION

    registry.register(ComponentSchema(
        name="Navbar",
        category=navigation,
        description="Top navigation bar",
        props={"brand": PropSchema(type="ReactNode"), "children": NODE, "sticky": _flag()},
        example='<Navbar brand="MyApp">{navItems}</Navbar>',
    ))
    registry.register(ComponentSchema(
        name="Sidebar",
        category=navigation,
        description="Side navigation panel",
        props={
            "children": NODE,
            "position": _choice(("left", "right"), "left"),
            "width": _choice(SIZES, "md"),
        },
        example='<Sidebar position="left" width="md">{menuItems}</Sidebar>',
    ))
    registry.register(ComponentSchema(
        name="Tabs",
        category=navigation,
        description="Tabbed interface",
        props={
            "tabs": PropSchema(type="Array<{id: string, label: string, content: ReactNode}>", required=True),
            "defaultTab": _text(),
        },
        example='<Tabs tabs={[{id: "1", label: "Tab 1", content: <div>Content</div>}]} />',
    ))
    registry.register(ComponentSchema(
        name="Breadcrumb",
        category=navigation,
        description="Breadcrumb navigation",
        props={"items": PropSchema(type="Array<{label: string, href?: string}>", required=True)},
        example='<Breadcrumb items={[{label: "Home", href: "/"}, {label: "Page"}]} />',
    ))


def register_overlay_components(registry: "ComponentRegistry") -> None:
    """Register overlay components."""
    overlay = ComponentCategory.OVERLAY

    registry.register(ComponentSchema(
        name="Modal",
        category=overlay,
        description="Modal dialog",
        props={
            "children": NODE,
            "title": _text(),
            "isOpen": PropSchema(type="boolean", required=True),
            "onClose": PropSchema(type="function", required=True),
            "size": _choice(("sm", "md", "lg", "xl", "full"), "md"),
        },
        example='<Modal title="Settings" isOpen={true} onClose={() => {}}>{content}</Modal>',
    ))
    registry.register(ComponentSchema(
        name="Drawer",
        category=overlay,
        description="Slide-out drawer",
        props={
            "children": NODE,
            "isOpen": PropSchema(type="boolean", required=True),
            "onClose": PropSchema(type="function", required=True),
            "position": _choice(("left", "right", "top", "bottom"), "right"),
        },
        example='<Drawer isOpen={true} onClose={() => {}} position="right">{content}</Drawer>',
    ))


def register_data_viz_components(registry: "ComponentRegistry") -> None:
    """Register chart components."""
    data_viz = ComponentCategory.DATA_VIZ
    series = PropSchema(type="Array<{name: string, value: number}>", required=True)

    registry.register(ComponentSchema(
        name="BarChart",
        category=data_viz,
        description="Bar chart visualization",
        props={
            "data": series,
            "height": PropSchema(type="number", default=300),
            "color": PropSchema(type="string", default="#3b82f6"),
        },
        example='<BarChart data={[{name: "Jan", value: 100}]} height={300} />',
    ))
    registry.register(ComponentSchema(
        name="LineChart",
        category=data_viz,
        description="Line chart visualization",
        props={
            "data": series,
            "height": PropSchema(type="number", default=300),
            "color": PropSchema(type="string", default="#3b82f6"),
        },
        example='<LineChart data={[{name: "Jan", value: 100}]} height={300} />',
    ))
    registry.register(ComponentSchema(
        name="PieChart",
        category=data_viz,
        description="Pie chart visualization",
        props={"data": series, "height": PropSchema(type="number", default=300)},
        example='<PieChart data={[{name: "Category A", value: 100}]} height={300} />',
    ))
