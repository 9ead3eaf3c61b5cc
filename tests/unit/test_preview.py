"""Live preview tests: compile channel, render channel and the interpreter."""

import pytest

from uigen.agents.prompts import OUTPUT_EXAMPLE, SYNTAX_EXAMPLES
from uigen.preview import (
    CompileError,
    PreviewExecutor,
    compile_component,
    create_element,
    render_to_html,
    strip_module_syntax,
)
from uigen.preview.builtins import build_scope
from uigen.preview.executor import EMPTY_PANEL

from tests.conftest import BUTTON_CODE, DASHBOARD_CODE


def render_source(code: str, props: dict | None = None) -> str:
    component = compile_component(code, build_scope())
    return render_to_html(create_element(component, props or {}))


# ============================================================================
# Compile channel
# ============================================================================

@pytest.mark.unit
def test_button_component_renders():
    executor = PreviewExecutor()

    assert executor.update(BUTTON_CODE) is True
    outcome = executor.render()

    assert outcome.error is None
    assert outcome.channel is None
    assert outcome.html.startswith('<div class="min-h-full"><button')
    assert ">Hi</button>" in outcome.html


@pytest.mark.unit
def test_unknown_identifier_is_a_compile_fault():
    executor = PreviewExecutor()

    assert executor.update("function GeneratedUI() { return React.createElement(Widget, null); }") is False
    assert executor.error == "Widget is not defined"
    assert executor.component is None

    outcome = executor.render()
    assert outcome.channel == "compile"
    assert "Preview Error" in outcome.html
    assert "Widget is not defined" in outcome.html


@pytest.mark.unit
def test_compile_fault_published_to_store(app_store):
    executor = PreviewExecutor(store=app_store)

    executor.update("function GeneratedUI() { return Missing; }")
    assert app_store.state.preview_error == "Missing is not defined"

    executor.update(BUTTON_CODE)
    assert app_store.state.preview_error is None


@pytest.mark.unit
def test_missing_entry_point():
    executor = PreviewExecutor()
    executor.update("function App() { return null; }")

    assert executor.error == "GeneratedUI is not defined"


@pytest.mark.unit
def test_entry_point_must_be_callable():
    executor = PreviewExecutor()
    executor.update("const GeneratedUI = 42;")

    assert executor.error == "GeneratedUI is not a function"


@pytest.mark.unit
def test_syntax_error():
    executor = PreviewExecutor()
    executor.update("function GeneratedUI() { return (; }")

    assert executor.error.startswith("Unexpected token")
    assert executor.component is None


@pytest.mark.unit
def test_empty_code_shows_placeholder():
    executor = PreviewExecutor()

    assert executor.update("") is False
    outcome = executor.render()

    assert outcome.html == EMPTY_PANEL
    assert outcome.error is None


@pytest.mark.unit
def test_update_recovers_after_fault():
    executor = PreviewExecutor()
    executor.update("nonsense ((")
    assert executor.error

    executor.update(BUTTON_CODE)
    assert executor.error is None
    assert executor.render().error is None


@pytest.mark.unit
def test_module_syntax_lines_stripped():
    code = (
        "import { Button } from '@/components/ui-library';\n"
        f"{BUTTON_CODE}\n"
        "export default GeneratedUI;"
    )
    assert strip_module_syntax(code) == BUTTON_CODE

    executor = PreviewExecutor()
    assert executor.update(code) is True


@pytest.mark.unit
def test_constructor_without_binding_is_unknown():
    executor = PreviewExecutor()
    executor.update("function GeneratedUI() { const w = new Widget(); return null; }")

    assert executor.error == "Widget is not defined"


# ============================================================================
# Render channel
# ============================================================================

@pytest.mark.unit
def test_render_fault_is_caught():
    executor = PreviewExecutor()
    executor.update("function GeneratedUI(props) { return props.user.name; }")

    outcome = executor.render()

    assert outcome.channel == "render"
    assert outcome.error == "Cannot read properties of undefined (reading 'name')"
    assert "Render Error" in outcome.html
    assert executor.error is None
    assert executor.render_error == outcome.error


@pytest.mark.unit
def test_library_component_fault_is_caught():
    executor = PreviewExecutor()
    executor.update(
        "function GeneratedUI() {"
        " return React.createElement(Table, { columns: [{ key: 'a', label: 'A' }], data: 'oops' }); }"
    )

    outcome = executor.render()

    assert outcome.channel == "render"
    assert "(reading 'map')" in outcome.error


@pytest.mark.unit
def test_render_props_are_passed():
    executor = PreviewExecutor()
    executor.update("function GeneratedUI({ title }) { return React.createElement('h1', null, title); }")

    assert executor.render({"title": "Hello"}).html == '<div class="min-h-full"><h1>Hello</h1></div>'


@pytest.mark.unit
def test_object_child_is_a_render_fault():
    executor = PreviewExecutor()
    executor.update("function GeneratedUI() { return React.createElement('div', null, { a: 1 }); }")

    assert executor.render().error == "Objects are not valid as a React child"


@pytest.mark.unit
def test_runaway_loop_is_a_render_fault():
    executor = PreviewExecutor()
    executor.update("function GeneratedUI() { while (true) {} return null; }")

    assert executor.render().error == "Loop iteration limit exceeded"


@pytest.mark.unit
def test_runaway_recursion_is_a_render_fault():
    executor = PreviewExecutor()
    executor.update("function f(n) { return f(n + 1); } function GeneratedUI() { return f(0); }")

    assert executor.render().error == "Maximum call stack size exceeded"


# ============================================================================
# Interpreter and library
# ============================================================================

@pytest.mark.unit
def test_dashboard_table_renders():
    html = render_source(DASHBOARD_CODE)

    assert "<table" in html
    assert "<th" in html and ">Name</th>" in html
    assert ">Alpha</td>" in html and ">Paused</td>" in html


@pytest.mark.unit
def test_hooks_map_and_formatting():
    code = """
function GeneratedUI() {
  const [items] = React.useState([
    { id: 1, name: 'Apple', price: 1.5 },
    { id: 2, name: 'Pear', price: 1234.5 },
  ]);
  const total = items.reduce((sum, item) => sum + item.price, 0);
  React.useEffect(() => { console.log('mounted'); }, []);
  return React.createElement(Card, null,
    items.map(item => React.createElement(Badge, {
      key: item.id,
      variant: item.price > 100 ? 'danger' : 'success',
    }, `${item.name} (${item.id})`)),
    React.createElement('p', { className: 'total' }, 'Total ', total.toLocaleString()),
    React.createElement('span', null, items[0].price.toFixed(2))
  );
}"""
    html = render_source(code)

    assert "Apple (1)</span>" in html
    assert "bg-red-100" in html and "bg-green-100" in html
    assert '<p class="total">Total 1,236</p>' in html
    assert "<span>1.50</span>" in html


@pytest.mark.unit
def test_conditional_rendering_drops_booleans():
    code = """
function GeneratedUI() {
  const show = false;
  return React.createElement('div', null, show && React.createElement('b', null, 'x'), null, 'end');
}"""
    assert render_source(code) == "<div>end</div>"


@pytest.mark.unit
def test_text_is_escaped():
    code = "function GeneratedUI() { return React.createElement('p', { title: '\"q\"' }, '<b>&</b>'); }"
    assert render_source(code) == '<p title="&quot;q&quot;">&lt;b&gt;&amp;&lt;/b&gt;</p>'


@pytest.mark.unit
def test_event_handlers_not_serialized():
    code = """
function GeneratedUI() {
  const [count, setCount] = React.useState(0);
  return React.createElement(Button, { onClick: () => setCount(count + 1), disabled: true }, `Clicked ${count}`);
}"""
    html = render_source(code)

    assert "onClick" not in html
    assert " disabled" in html
    assert "Clicked 0" in html


@pytest.mark.unit
def test_closed_modal_renders_nothing():
    code = "function GeneratedUI() { return React.createElement(Modal, { isOpen: false, title: 'T' }, 'body'); }"
    assert render_source(code) == ""


@pytest.mark.unit
def test_fragment_and_nested_components():
    code = """
const Row = ({ label }) => React.createElement('li', null, label);
function GeneratedUI() {
  const labels = ['a', 'b'];
  return React.createElement(React.Fragment, null,
    React.createElement('ul', null, labels.map((label) => React.createElement(Row, { key: label, label })))
  );
}"""
    assert render_source(code) == "<ul><li>a</li><li>b</li></ul>"


@pytest.mark.unit
def test_builtins_available():
    code = """
function GeneratedUI() {
  const stats = { a: 3, b: 9 };
  const values = Object.values(stats);
  const text = [Math.max(...values), Object.keys(stats).join('|'), JSON.stringify({ n: 1 }), parseInt('42px')].join(' ');
  return React.createElement('p', null, text);
}"""
    assert render_source(code) == '<p>9 a|b {"n":1} 42</p>'


@pytest.mark.unit
def test_const_reassignment_is_a_fault():
    code = "function GeneratedUI() { const a = 1; a = 2; return null; }"
    component = compile_component(code, build_scope())

    with pytest.raises(Exception, match="Assignment to constant variable"):
        component({})


@pytest.mark.unit
def test_compile_component_raises():
    with pytest.raises(CompileError):
        compile_component("function GeneratedUI() { return nope; }", build_scope())


@pytest.mark.unit
def test_switch_matches_falls_through_and_defaults():
    code = """
function size(n) {
  switch (n) {
    case 1: return 'one';
    case 2:
    case 3: return 'few';
    default: return 'many';
  }
}
function GeneratedUI() {
  let trail = '';
  switch ('b') {
    case 'a': trail += 'a';
    case 'b': trail += 'b';
    case 'c': trail += 'c'; break;
    case 'd': trail += 'd';
  }
  switch (9) {
    default: trail += '-';
    case 1: trail += '1'; break;
  }
  return React.createElement('p', null, [size(1), size(3), size(7), trail].join(' '));
}"""
    assert render_source(code) == "<p>one few many bc-1</p>"


@pytest.mark.unit
def test_array_methods():
    code = """
function GeneratedUI() {
  const queue = [2, 3];
  queue.unshift(1);
  const first = queue.shift();
  const removed = queue.splice(0, 1, 'x', 'y');
  const rows = [
    Array(3).fill(0).join(''),
    [[1], [2, 3]].flatMap((pair) => pair).join(''),
    [1, 2, 1].lastIndexOf(1),
    [5, 6, 7].at(-1),
    'abc'.at(-2),
    first,
    removed.join(''),
    queue.join(''),
    ['a', 'b'].keys().join(''),
    ['a', 'b'].entries().map(([i, v]) => v + i).join(''),
  ];
  return React.createElement('p', null, rows.join(' '));
}"""
    assert render_source(code) == "<p>000 123 2 7 b 1 2 xy3 01 a0b1</p>"


@pytest.mark.unit
@pytest.mark.parametrize(
    ("body", "message"),
    [
        ("Array(3).foo()", "Array(...).foo is not a function"),
        ("({}).missing()", "(intermediate value).missing is not a function"),
    ],
)
def test_not_a_function_names_the_callee(body, message):
    executor = PreviewExecutor()
    executor.update(f"function GeneratedUI() {{ return {body}; }}")

    assert executor.render().error == message


# ============================================================================
# Browser globals
# ============================================================================


def _prompt_snippets() -> list:
    snippets = []
    for line in SYNTAX_EXAMPLES.splitlines()[1:]:
        label, _, expression = line.removeprefix("- ").partition(": ")
        snippets.append((label, f"function GeneratedUI() {{ return {expression}; }}"))
    snippets.append(("Output format", OUTPUT_EXAMPLE.split("\n", 1)[1]))
    return snippets


@pytest.mark.unit
@pytest.mark.parametrize(("label", "code"), _prompt_snippets())
def test_prompt_examples_render(label, code):
    executor = PreviewExecutor()

    assert executor.update(code) is True, executor.error
    outcome = executor.render()
    assert outcome.error is None
    assert outcome.html.startswith('<div class="min-h-full">')


@pytest.mark.unit
def test_dialogs_and_timers_are_inert():
    code = """
function GeneratedUI() {
  let fired = 0;
  const timeout = setTimeout(() => { fired += 1; }, 0);
  const interval = setInterval(() => { fired += 1; }, 10);
  clearTimeout(timeout);
  clearInterval(interval);
  const answer = confirm('Delete?');
  return React.createElement('p', null, [timeout, interval, fired, answer, String(alert('Clicked!'))].join(' '));
}"""
    assert render_source(code) == "<p>1 2 0 false undefined</p>"


@pytest.mark.unit
def test_date_getters_and_formatting():
    code = """
function GeneratedUI() {
  const d = new Date(2024, 0, 15, 9, 5, 3);
  const rolled = new Date(2024, 12, 1);
  const parts = [
    d.getFullYear(), d.getMonth(), d.getDate(), d.getDay(),
    d.toLocaleDateString(), d.toLocaleTimeString(), d.toDateString(),
    rolled.getFullYear() + '-' + rolled.getMonth(),
    new Date('2024-03-01').toISOString(),
    new Date(0).toISOString(),
    typeof Date.now(),
  ];
  return React.createElement('p', null, parts.join(' | '));
}"""
    assert render_source(code) == (
        "<p>2024 | 0 | 15 | 1 | 1/15/2024 | 9:05:03 AM | Mon Jan 15 2024 | 2025-0"
        " | 2024-03-01T00:00:00.000Z | 1970-01-01T00:00:00.000Z | number</p>"
    )


@pytest.mark.unit
def test_invalid_date():
    code = """
function GeneratedUI() {
  const d = new Date('not a date');
  return React.createElement('p', null, d.toLocaleDateString() + ' ' + isNaN(d.getTime()));
}"""
    assert render_source(code) == "<p>Invalid Date true</p>"


# ============================================================================
# Resource limits
# ============================================================================


@pytest.mark.unit
@pytest.mark.parametrize(
    ("body", "message"),
    [
        ("Array.from({ length: 300000000 })", "Invalid array length"),
        ("new Array(300000000)", "Invalid array length"),
        ("Array(-1)", "Invalid array length"),
        ("'a'.repeat(2000000000)", "Invalid string length"),
        ("'a'.repeat(-1)", "Invalid count value: -1"),
        ("'x'.padStart(2000000000)", "Invalid string length"),
        ("[1, 2].join('-'.repeat(999990)).length", None),
    ],
)
def test_allocation_limits(body, message):
    executor = PreviewExecutor()
    executor.update(f"function GeneratedUI() {{ const value = {body}; return null; }}")

    assert executor.render().error == message


@pytest.mark.unit
def test_nested_loops_exhaust_step_budget():
    code = """
function GeneratedUI() {
  let total = 0;
  for (let i = 0; i < 1000; i++) {
    for (let j = 0; j < 1000; j++) { total += 1; }
  }
  return React.createElement('p', null, total);
}"""
    executor = PreviewExecutor()
    executor.update(code)

    assert executor.render().error == "Execution step limit exceeded"


@pytest.mark.unit
def test_step_budget_resets_between_renders():
    code = """
function GeneratedUI() {
  let total = 0;
  for (let i = 0; i < 60000; i++) { total += 1; }
  for (let j = 0; j < 60000; j++) { total += 1; }
  return React.createElement('p', null, total);
}"""
    executor = PreviewExecutor()
    executor.update(code)

    for _ in range(3):
        outcome = executor.render()
        assert outcome.error is None
        assert "<p>120000</p>" in outcome.html
