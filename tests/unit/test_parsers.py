"""Tests for model-output parsing helpers."""

import pytest

from uigen.core import (
    JSONParseError,
    extract_json,
    extract_json_object,
    safe_json_dumps,
    strip_code_fences,
    strip_wrapping_quotes,
    validate_json_depth,
)


@pytest.mark.unit
def test_strip_code_fences_with_language():
    text = "```jsx\nfunction GeneratedUI() {}\n```"
    assert strip_code_fences(text) == "function GeneratedUI() {}"


@pytest.mark.unit
def test_strip_code_fences_with_surrounding_prose():
    text = "Here you go:\n```\nconst a = 1;\n```\nEnjoy!"
    assert strip_code_fences(text) == "const a = 1;"


@pytest.mark.unit
def test_strip_code_fences_unterminated():
    assert strip_code_fences("```javascript\nconst a = 1;") == "const a = 1;"


@pytest.mark.unit
def test_strip_code_fences_plain_text():
    assert strip_code_fences("  plain  ") == "plain"


@pytest.mark.unit
@pytest.mark.parametrize("raw", ['"Login Form"', "'Login Form'", "`Login Form`", "  Login Form \n"])
def test_strip_wrapping_quotes(raw):
    assert strip_wrapping_quotes(raw) == "Login Form"


@pytest.mark.unit
def test_extract_json_object_ignores_prose():
    text = 'Sure! {"a": {"b": 1}} Hope that helps.'
    assert extract_json_object(text) == '{"a": {"b": 1}}'


@pytest.mark.unit
def test_extract_json_object_none():
    assert extract_json_object("no braces") is None


@pytest.mark.unit
def test_extract_json_fenced():
    assert extract_json('```json\n{"shouldCreateCheckpoint": false}\n```') == {
        "shouldCreateCheckpoint": False
    }


@pytest.mark.unit
def test_extract_json_invalid():
    with pytest.raises(JSONParseError):
        extract_json("{'single': quotes,}")


@pytest.mark.unit
def test_extract_json_repair():
    assert extract_json('{"a": 1, "b": 2,}', repair=True) == {"a": 1, "b": 2}


@pytest.mark.unit
def test_extract_json_missing():
    with pytest.raises(JSONParseError, match="No JSON object"):
        extract_json("nothing")


@pytest.mark.unit
def test_safe_json_dumps():
    assert safe_json_dumps({"a": [1, 2]}) == '{"a":[1,2]}'
    assert safe_json_dumps({"a": 1}, indent=2) == '{\n  "a": 1\n}'


@pytest.mark.unit
def test_safe_json_dumps_big_int_fallback():
    assert safe_json_dumps({"n": 2**70}) == '{"n": 1180591620717411303424}'


@pytest.mark.unit
def test_validate_json_depth():
    validate_json_depth({"a": {"b": {"c": 1}}}, max_depth=5)

    deep: dict = {}
    current = deep
    for _ in range(25):
        current["nested"] = {}
        current = current["nested"]

    with pytest.raises(JSONParseError):
        validate_json_depth(deep, max_depth=20)
