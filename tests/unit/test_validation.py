"""Validation tests."""

import pytest
from hypothesis import given, strategies as st
from returns.result import Failure, Success

from uigen.core import (
    GenerationRequest,
    RequestValidationError,
    check_generated_code,
    parse_generation_request,
    sanitize_user_input,
    validate_generated_code,
)
from uigen.core.validate import (
    ARBITRARY_TAILWIND_ERROR,
    EXPORT_WARNING,
    IMPORT_WARNING,
    INLINE_STYLE_ERROR,
    MISSING_ENTRY_ERROR,
    MISSING_RETURN_ERROR,
    extract_used_components,
)


VALID_CODE = """function GeneratedUI() {
  return React.createElement(Card, { padding: 'lg' },
    React.createElement(Button, { variant: 'primary' }, 'Save'));
}"""


# ============================================================================
# Generated code validator
# ============================================================================

@pytest.mark.unit
def test_valid_code_passes():
    result = validate_generated_code(VALID_CODE)

    assert result.valid is True
    assert result.errors == []
    assert result.used_components == ["Card", "Button"]


@pytest.mark.unit
def test_inline_style_jsx_form():
    code = "function GeneratedUI() { return <Button style={{color: 'red'}}>Go</Button>; }"
    result = validate_generated_code(code)

    assert not result.valid
    assert INLINE_STYLE_ERROR in result.errors


@pytest.mark.unit
def test_inline_style_create_element_form():
    code = "function GeneratedUI() { return React.createElement(Button, { style: { color: 'red' } }, 'Go'); }"
    result = validate_generated_code(code)

    assert INLINE_STYLE_ERROR in result.errors


@pytest.mark.unit
@pytest.mark.parametrize(
    "statement",
    [
        "const style = variant === 'compact' ? 'p-2' : 'p-6';",
        "let style = 'p-4';",
        "const active = style === 'bold';",
        "const flagged = style == null;",
        "const pick = (style) => style;",
    ],
)
def test_style_named_variables_are_not_inline_styles(statement):
    code = f"function GeneratedUI({{ variant }}) {{ {statement} return React.createElement(Card, null, 'x'); }}"
    result = validate_generated_code(code)

    assert INLINE_STYLE_ERROR not in result.errors


@pytest.mark.unit
def test_style_assignment_still_flagged():
    code = "function GeneratedUI() { const el = {}; el.style = 0; return React.createElement('div', null); }"

    assert INLINE_STYLE_ERROR in validate_generated_code(code).errors


@pytest.mark.unit
def test_arbitrary_tailwind_value():
    code = 'function GeneratedUI() { return <Card className="bg-[#ff0000] p-4">x</Card>; }'
    result = validate_generated_code(code)

    assert ARBITRARY_TAILWIND_ERROR in result.errors


@pytest.mark.unit
def test_unauthorized_components_listed_in_order():
    code = "function GeneratedUI() { return <Container><Chart3D /><Card /><Map /></Container>; }"
    result = validate_generated_code(code)

    assert "Unauthorized components used: Chart3D, Map" in result.errors
    assert result.used_components == ["Container", "Card"]


@pytest.mark.unit
def test_member_expression_is_not_a_component():
    # <React.Fragment> and createElement(React.Fragment) name no library component
    code = "function GeneratedUI() { return React.createElement(React.Fragment, null, <Card />); }"
    result = validate_generated_code(code)

    assert result.valid
    assert result.used_components == ["Card"]


@pytest.mark.unit
def test_missing_entry_and_return():
    result = validate_generated_code("const App = () => null")

    assert MISSING_ENTRY_ERROR in result.errors
    assert MISSING_RETURN_ERROR in result.errors


@pytest.mark.unit
def test_arrow_entry_point_accepted():
    code = "const GeneratedUI = () => { return React.createElement(Spinner, null); }"
    assert validate_generated_code(code).valid


@pytest.mark.unit
@pytest.mark.parametrize(
    "snippet,message",
    [
        ("<div dangerouslySetInnerHTML={{ __html: x }} />", "dangerouslySetInnerHTML is not allowed"),
        ("el.innerHTML = '<b>x</b>';", "innerHTML assignment is not allowed"),
        ("eval('1 + 1');", "eval() is not allowed"),
        ("new Function('return 1');", "new Function() is not allowed"),
    ],
)
def test_dangerous_patterns(snippet, message):
    code = f"function GeneratedUI() {{ {snippet} return null; }}"
    assert message in validate_generated_code(code).errors


@pytest.mark.unit
def test_import_and_export_are_warnings_only():
    code = (
        "import { Card, Badge } from '@/components/ui-library';\n"
        "export default function GeneratedUI() { return <Card>x</Card>; }"
    )
    result = validate_generated_code(code)

    assert result.valid
    assert IMPORT_WARNING in result.warnings
    assert EXPORT_WARNING in result.warnings
    assert "Unused imports: Badge" in result.warnings


@pytest.mark.unit
def test_errors_accumulate():
    code = "const x = <Widget style={{}} />"
    result = validate_generated_code(code)

    assert len(result.errors) >= 4


@pytest.mark.unit
def test_check_generated_code_result():
    assert isinstance(check_generated_code(VALID_CODE), Success)
    assert isinstance(check_generated_code("nothing here"), Failure)


@pytest.mark.unit
def test_extract_used_components_dedupes():
    source = "<Card><Card /><Badge />createElement(Badge, null)</Card>"
    assert extract_used_components(source) == ["Card", "Badge"]


@given(st.text(max_size=400))
def test_validator_is_pure(source):
    """Property: repeated validation of the same text gives the same result."""
    first = validate_generated_code(source)
    second = validate_generated_code(source)

    assert first == second
    assert first.valid == (not first.errors)


# ============================================================================
# Sanitizer
# ============================================================================

@pytest.mark.unit
def test_sanitize_strips_markers():
    text = "```Build <script>alert(1)</script> a javascript:void(0) form```"
    assert sanitize_user_input(text) == "Build alert(1)</script> a void(0) form"


@pytest.mark.unit
def test_sanitize_is_case_insensitive():
    assert sanitize_user_input("<SCRIPT>JavaScript:x") == "x"


@pytest.mark.unit
def test_sanitize_truncates():
    result = sanitize_user_input("a" * 600)

    assert result == "a" * 500 + "..."


@pytest.mark.unit
def test_sanitize_custom_limit():
    assert sanitize_user_input("  hello world  ", max_length=5) == "hello..."


@given(st.text(max_size=800))
def test_sanitize_length_bound(text):
    """Property: output never exceeds the limit plus the ellipsis."""
    result = sanitize_user_input(text)

    assert len(result) <= 503
    assert result == result.strip() or result.endswith("...")


# ============================================================================
# Request model
# ============================================================================

@pytest.mark.unit
def test_generation_request_aliases():
    request = parse_generation_request({
        "userIntent": "Add a chart",
        "currentCode": "function GeneratedUI() { return null }",
        "isModification": True,
    })

    assert request.user_intent == "Add a chart"
    assert request.is_modification is True
    assert request.create_checkpoint is True


@pytest.mark.unit
def test_generation_request_blank_intent():
    with pytest.raises(RequestValidationError):
        parse_generation_request({"userIntent": "   "})


@pytest.mark.unit
def test_generation_request_strict_types():
    with pytest.raises(RequestValidationError):
        parse_generation_request({"userIntent": "x", "isModification": "yes"})


@pytest.mark.unit
def test_generation_request_not_a_dict():
    with pytest.raises(RequestValidationError):
        parse_generation_request(["userIntent"])


@pytest.mark.unit
def test_generation_request_is_frozen():
    request = GenerationRequest(userIntent="x")
    with pytest.raises(Exception):
        request.user_intent = "y"
