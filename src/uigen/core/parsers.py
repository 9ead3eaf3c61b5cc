"""Text clean-up helpers for raw model output."""

import re

_FENCE_RE = re.compile(r"```[ \t]*([A-Za-z0-9_+-]*)[ \t]*\n?(.*?)```", re.DOTALL)


def strip_code_fences(text: str) -> str:
    """
    Remove markdown code-fence wrapping from model output.

    Returns the body of the first fenced block when one exists, otherwise
    the trimmed text unchanged. An unterminated opening fence is dropped
    together with its language tag.

    Examples:
        >>> strip_code_fences("```json\\n{\\"a\\": 1}\\n```")
        '{"a": 1}'
        >>> strip_code_fences("function GeneratedUI() {}")
        'function GeneratedUI() {}'
    """
    stripped = text.strip()

    match = _FENCE_RE.search(stripped)
    if match:
        return match.group(2).strip()

    if stripped.startswith("```"):
        first_newline = stripped.find("\n")
        if first_newline == -1:
            return ""
        return stripped[first_newline + 1 :].strip()

    return stripped


def strip_wrapping_quotes(text: str) -> str:
    """Trim whitespace and any quote characters wrapping a short label."""
    return text.strip().strip("\"'`").strip()
