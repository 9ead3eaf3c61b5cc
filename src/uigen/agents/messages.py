"""User-facing chat messages for failed generation runs."""

from uigen.core.validate import (
    ARBITRARY_TAILWIND_ERROR,
    INLINE_STYLE_ERROR,
    UNAUTHORIZED_PREFIX,
)
from uigen.registry import COMPONENTS_BY_CATEGORY

SECTION_SEPARATOR = "\n\n---\n\n"

INLINE_STYLE_MESSAGE = (
    "❌ **Inline Styles Not Allowed**\n\n"
    "I cannot create components with inline `style={{...}}` attributes. "
    "All styling must use the pre-defined Tailwind classes built into our fixed component library.\n\n"
    "💡 **Why?** This ensures visual consistency across all generated UIs."
)

ARBITRARY_TAILWIND_MESSAGE = (
    "❌ **Custom Tailwind Values Not Allowed**\n\n"
    "I cannot use arbitrary Tailwind values like `bg-[#ff0000]` or `text-[20px]`. "
    "Only standard Tailwind classes from our component library are permitted.\n\n"
    "💡 **Why?** This maintains a consistent design system."
)


def _available_components() -> str:
    lines = []
    for category, names in COMPONENTS_BY_CATEGORY.items():
        label = category.value.replace("-", " ").title()
        lines.append(f"- {label}: {', '.join(names)}")
    return "\n".join(lines)


def _unauthorized_message(error: str, user_intent: str) -> str:
    components = error[len(UNAUTHORIZED_PREFIX):].strip() or "some components"
    return (
        "❌ **Component Not Available**\n\n"
        f"I cannot use `{components}` because they're not in our fixed component library.\n\n"
        "✅ **Available components include:**\n"
        f"{_available_components()}\n\n"
        f'💡 **Try rephrasing:** "{user_intent}" using these components.'
    )


def format_validation_error(errors: list[str], user_intent: str) -> str:
    """
    Turn validator errors into one chat message, a section per error.

    Args:
        errors: Validator error strings
        user_intent: The request that produced the rejected code

    Returns:
        Markdown message with sections separated by rules
    """
    sections = []
    for error in errors:
        if error == INLINE_STYLE_ERROR:
            sections.append(INLINE_STYLE_MESSAGE)
        elif error.startswith(UNAUTHORIZED_PREFIX):
            sections.append(_unauthorized_message(error, user_intent))
        elif error == ARBITRARY_TAILWIND_ERROR:
            sections.append(ARBITRARY_TAILWIND_MESSAGE)
        else:
            sections.append(f"❌ **Validation Error**\n\n{error}")
    return SECTION_SEPARATOR.join(sections)


def format_generation_error(message: str) -> str:
    """Chat message for a pipeline fault, with remediation tips."""
    return (
        "❌ **Generation Error**\n\n"
        "I encountered an issue while generating your UI:\n\n"
        f"{message}\n\n"
        "💡 **Try:**\n"
        "- Simplifying your request\n"
        "- Being more specific about what you want\n"
        "- Breaking down complex requests into smaller steps"
    )
