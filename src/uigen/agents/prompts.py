"""
Role Prompt Templates
Planner, generator, explainer, checkpoint-namer and classifier prompts.
"""

from uigen.core import safe_json_dumps
from uigen.core.validate import INLINE_STYLE_ERROR, UNAUTHORIZED_PREFIX
from uigen.registry import DEFAULT_REGISTRY, ComponentRegistry

from .models import ComponentPlan


# ============================================================================
# Shared Fragments
# ============================================================================

PLAN_SCHEMA = """{
  "layout": {
    "type": "single-page|dashboard|form|data-display",
    "structure": "describe the high-level layout structure"
  },
  "components": [
    {
      "name": "ComponentName",
      "props": {"prop": "value"},
      "purpose": "why this component is used"
    }
  ],
  "dataFlow": "brief description of how data flows through the UI"
}"""

CODE_FORMAT_RULES = """CRITICAL CODE FORMAT REQUIREMENTS:
1. Use React.createElement() syntax - NO JSX
2. DO NOT include import statements - all components are already available in scope
3. DO NOT use 'export default' - just write: function GeneratedUI() { ... }
4. Create a function component named 'GeneratedUI'
5. Include mock data where needed (realistic sample data)
6. Use ONLY the components specified in the plan; plain HTML tags are fine for text
7. All components must have their required props
8. ABSOLUTELY NO inline styles (no style attribute, no style: {} prop), NO custom CSS
9. NO arbitrary Tailwind values such as bg-[#ff0000] or w-[300px]
10. NO creating new components"""

STYLING_RULES = """STYLING RULES:
- All components accept a className prop; style with standard Tailwind utility classes only
- White or light backgrounds for cards, dark readable text (text-gray-900, text-gray-800)
- Generous spacing: p-6, p-8, space-y-6, gap-6
- Depth with shadow-lg or shadow-xl, rounded-xl or rounded-lg corners
- Vibrant accents: bg-blue-600, bg-green-600, bg-purple-600
- Gradient headers: bg-linear-to-r from-blue-600 to-purple-600 text-white"""

SYNTAX_EXAMPLES = """SYNTAX EXAMPLES (React.createElement):
- HTML div: React.createElement('div', { className: 'bg-white p-6' }, 'Hello World')
- Card: React.createElement(Card, { variant: 'elevated', className: 'shadow-xl' }, React.createElement('p', { className: 'text-gray-900' }, 'Content'))
- Button: React.createElement(Button, { variant: 'primary', onClick: () => alert('Clicked!') }, 'Click Me')
- Grid: React.createElement(Grid, { cols: 3, gap: 'lg' }, React.createElement(Card, null, 'Item 1'), React.createElement(Card, null, 'Item 2'))"""

OUTPUT_EXAMPLE = """OUTPUT FORMAT (NO imports, NO exports, NO markdown):
function GeneratedUI() {
  const mockData = [/* your data here */];

  return React.createElement(Container, { className: 'bg-linear-to-br from-blue-50 to-white p-8 min-h-screen' },
    React.createElement('div', { className: 'mb-8' },
      React.createElement('h1', { className: 'text-4xl font-bold text-gray-900 mb-2' }, 'Page Title'),
      React.createElement('p', { className: 'text-gray-600 text-lg' }, 'Descriptive subtitle')
    ),
    React.createElement(Grid, { cols: 3, gap: 'lg', className: 'mb-8' },
      React.createElement(Card, { variant: 'elevated', title: 'Card Title', className: 'bg-white shadow-xl' },
        React.createElement('p', { className: 'text-gray-800 text-base mb-4' }, 'Card content'),
        React.createElement(Button, { variant: 'primary', className: 'shadow-lg w-full' }, 'Action')
      )
    )
  );
}"""


# ============================================================================
# Planner
# ============================================================================


def get_planner_prompt(
    user_intent: str,
    current_code: str | None = None,
    registry: ComponentRegistry | None = None,
) -> str:
    """
    Build the planner prompt.

    Args:
        user_intent: Sanitized user request
        current_code: Existing code; its presence switches to modification mode
        registry: Component registry to embed (defaults to the fixed library)

    Returns:
        Complete planner prompt
    """
    registry = registry or DEFAULT_REGISTRY

    if current_code:
        mode = f"""CURRENT UI CODE:
```javascript
{current_code}
```

USER MODIFICATION REQUEST: "{user_intent}"

IMPORTANT: This is a MODIFICATION request. You must:
1. Preserve existing structure where possible
2. Only change what the user requested
3. Do NOT regenerate the entire UI
4. Identify specific components to modify/add/remove"""
    else:
        mode = f"""USER REQUEST: "{user_intent}"

This is a NEW UI generation request."""

    return f"""You are a UI Layout Planner. Your job is to analyze user intent and create a structured plan for UI generation.

AVAILABLE COMPONENTS (FIXED - YOU CANNOT CREATE NEW ONES):
{registry.describe()}

{mode}

OUTPUT REQUIRED (JSON only, no markdown):
{PLAN_SCHEMA}

RULES:
- Use ONLY components from the allowed list
- Choose appropriate layout components (Container, Grid, Flex, Stack)
- Select display components that match the use case
- Ensure all required props are included
- Plan visually polished UI: cards, buttons, colors, spacing
- For modifications: minimize changes

Generate the plan now:"""


# ============================================================================
# Generator
# ============================================================================


def get_generator_prompt(plan: ComponentPlan, user_intent: str, current_code: str | None = None) -> str:
    """Build the code generator prompt from an accepted plan."""
    modification = ""
    if current_code:
        modification = f"""
EXISTING CODE TO MODIFY:
```javascript
{current_code}
```

CRITICAL: This is a MODIFICATION. You must:
1. Preserve all existing code structure
2. Only modify the parts mentioned in the plan
3. Keep state and unrelated components unchanged
4. Make surgical changes, NOT full rewrites
"""

    return f"""You are a Code Generator. Convert the following UI plan into valid JavaScript code using React.createElement().

PLAN:
{safe_json_dumps(plan.to_wire(), indent=2)}

USER INTENT: "{user_intent}"
{modification}
{CODE_FORMAT_RULES}

{SYNTAX_EXAMPLES}

{STYLING_RULES}

{OUTPUT_EXAMPLE}

REMEMBER: Use React.createElement() syntax, NO imports, NO exports, just the function!
Generate the code now (NO markdown blocks):"""


def get_retry_prompt(base_prompt: str, errors: list[str]) -> str:
    """Append validation failures to a generator prompt as corrective instructions."""
    fixes: list[str] = []
    if INLINE_STYLE_ERROR in errors:
        fixes.append(
            "- Remove ALL style attributes\n"
            "- Use className with Tailwind classes instead\n"
            '- Example: use className: "bg-blue-500" NOT style: {backgroundColor: "blue"}'
        )
    if any(error.startswith(UNAUTHORIZED_PREFIX) for error in errors):
        fixes.append(
            "- Use ONLY components from the allowed list\n"
            "- Check the component registry"
        )

    error_lines = "\n".join(f"- {error}" for error in errors)
    fix_lines = "\n".join(fixes)

    return f"""{base_prompt}

PREVIOUS ATTEMPT FAILED VALIDATION WITH THESE ERRORS:
{error_lines}

CRITICAL FIXES REQUIRED:
{fix_lines}

Generate the corrected code now (NO style attributes allowed):"""


# ============================================================================
# Explainer
# ============================================================================


def get_explainer_prompt(
    user_intent: str, plan: ComponentPlan, code: str, is_modification: bool
) -> str:
    """Build the plain-language explanation prompt."""
    mode = (
        "This was a MODIFICATION to existing UI."
        if is_modification
        else "This was a NEW UI generation."
    )
    focus = (
        "What was changed and what was preserved"
        if is_modification
        else "The overall design approach"
    )

    return f"""You are a Technical Explainer. Explain the UI generation decisions in plain English.

USER INTENT: "{user_intent}"

PLAN USED:
{safe_json_dumps(plan.to_wire(), indent=2)}

GENERATED CODE LENGTH: {len(code)} characters

{mode}

Provide a clear, concise explanation covering:
1. What layout structure was chosen and why
2. Which components were selected and their purpose
3. How the components work together
4. {focus}

Keep it under 150 words, friendly tone, technical but accessible.

Generate explanation:"""


# ============================================================================
# Checkpoint Namer / Classifier
# ============================================================================


def get_checkpoint_name_prompt(user_intent: str, component_names: list[str]) -> str:
    """Build the short checkpoint label prompt."""
    return f"""Generate a concise checkpoint name (max 5 words) for this UI generation:

User requested: "{user_intent}"
Components used: {", ".join(component_names)}

Examples of good names:
- "Initial Dashboard Layout"
- "User Table Added"
- "Settings Modal Complete"
- "Chart Visualization Ready"

Generate checkpoint name (just the name, no quotes):"""


def get_modification_classifier_prompt(user_intent: str) -> str:
    """Build the major/minor change classifier prompt."""
    return f"""Classify if this request is a MAJOR change or MINOR modification:

User request: "{user_intent}"

MAJOR changes include:
- Adding new sections/pages
- Changing overall layout structure
- Adding 3+ new components
- Complete redesigns

MINOR modifications include:
- Changing colors, sizes, text
- Adding single component
- Adjusting spacing/alignment
- Small content changes

Respond with JSON only:
{{
  "classification": "major|minor",
  "shouldCreateCheckpoint": true|false,
  "reasoning": "brief explanation"
}}"""
