"""Input validation, prompt-input sanitizing and static checks on generated code."""

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from returns.result import Failure, Result, Success

from uigen.registry import ALLOWED_COMPONENTS, UI_LIBRARY_MODULE


# Validation limits
MAX_INTENT_LENGTH = 500
MAX_CODE_LENGTH = 256 * 1024  # 256KB

INLINE_STYLE_ERROR = "Inline styles are not allowed"
ARBITRARY_TAILWIND_ERROR = "Arbitrary Tailwind values are not allowed"
MISSING_ENTRY_ERROR = "Missing GeneratedUI function"
MISSING_RETURN_ERROR = "Missing return statement"
UNAUTHORIZED_PREFIX = "Unauthorized components used: "
IMPORT_WARNING = (
    "Code should not contain import statements - all components are already available in scope"
)
EXPORT_WARNING = "Code should not contain export statements - just define function GeneratedUI"

# style= props and style: keys; declarations and comparisons are not styles
_STYLE_RE = re.compile(r"(?<![\w$])(?<!const )(?<!let )(?<!var )style\s*=(?![=>])|[{,]\s*style\s*:")
_ARBITRARY_CLASS_RE = re.compile(r"""className\s*[=:]\s*\{?\s*(["'`])[^"'`]*?-\[[^"'`]*?\1""")
_IMPORT_RE = re.compile(r"^\s*import\b", re.MULTILINE)
_EXPORT_RE = re.compile(r"^\s*export\b", re.MULTILINE)
_JSX_TAG_RE = re.compile(r"<([A-Z][A-Za-z0-9]*)(?![\w.])")
_CREATE_ELEMENT_RE = re.compile(r"createElement\(\s*([A-Z][A-Za-z0-9]*)\b(?!\s*\.)")
_ENTRY_RE = re.compile(r"\b(?:function|const)\s+GeneratedUI\b")
_RETURN_RE = re.compile(r"\breturn\b")
_LIBRARY_IMPORT_RE = re.compile(
    r"import\s*{([^}]+)}\s*from\s*['\"]" + re.escape(UI_LIBRARY_MODULE) + r"['\"]"
)

_DANGEROUS_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"dangerouslySetInnerHTML"), "dangerouslySetInnerHTML is not allowed"),
    (re.compile(r"\.innerHTML\s*="), "innerHTML assignment is not allowed"),
    (re.compile(r"\beval\s*\("), "eval() is not allowed"),
    (re.compile(r"\bnew\s+Function\s*\("), "new Function() is not allowed"),
)

_SANITIZE_PATTERNS = (
    re.compile(r"```"),
    re.compile(r"<script>", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
)


class RequestValidationError(Exception):
    """Request payload failed validation."""

    pass


# ============================================================================
# Request Models
# ============================================================================


class RequestValidator(BaseModel):
    """Base validator with strict configuration."""

    model_config = ConfigDict(
        strict=True, extra="ignore", frozen=True, populate_by_name=True
    )


class GenerationRequest(RequestValidator):
    """Validated generation request."""

    user_intent: str = Field(alias="userIntent", min_length=1)
    current_code: str | None = Field(default=None, alias="currentCode", max_length=MAX_CODE_LENGTH)
    is_modification: bool = Field(default=False, alias="isModification")
    create_checkpoint: bool = Field(default=True, alias="createCheckpoint")

    @field_validator("user_intent")
    @classmethod
    def validate_intent(cls, v: str) -> str:
        """Ensure intent is non-empty after stripping."""
        if not v.strip():
            raise ValueError("userIntent cannot be empty")
        return v


def parse_generation_request(payload: Any) -> GenerationRequest:
    """
    Build a GenerationRequest from a decoded body.

    Raises:
        RequestValidationError: If the payload is not a valid request
    """
    if not isinstance(payload, dict):
        raise RequestValidationError("Request body must be a JSON object")
    try:
        return GenerationRequest.model_validate(payload)
    except ValueError as e:
        raise RequestValidationError(str(e)) from e


# ============================================================================
# Sanitizer
# ============================================================================


def sanitize_user_input(text: str, max_length: int = MAX_INTENT_LENGTH) -> str:
    """
    Strip prompt-injection markers from free text before it reaches a prompt.

    Removes code fences, ``<script>`` tags and ``javascript:`` scheme markers,
    trims, and truncates to ``max_length`` characters followed by ``...``.
    """
    sanitized = text
    for pattern in _SANITIZE_PATTERNS:
        sanitized = pattern.sub("", sanitized)
    sanitized = sanitized.strip()

    if len(sanitized) > max_length:
        sanitized = sanitized[:max_length] + "..."

    return sanitized


# ============================================================================
# Generated Code Validator
# ============================================================================


class ValidationResult(BaseModel):
    """Outcome of the static check on a generated source text."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    used_components: list[str] = Field(default_factory=list, alias="usedComponents")


def extract_used_components(source: str) -> list[str]:
    """Capitalized identifiers used as JSX tags or createElement targets, first-seen order."""
    found: list[tuple[int, str]] = []
    for pattern in (_JSX_TAG_RE, _CREATE_ELEMENT_RE):
        found.extend((m.start(), m.group(1)) for m in pattern.finditer(source))

    used: list[str] = []
    for _, name in sorted(found):
        if name not in used:
            used.append(name)
    return used


def validate_generated_code(source: str) -> ValidationResult:
    """
    Statically check generated UI source against the library rules.

    All checks are independent and their findings accumulate; the function
    is pure, so repeated calls on the same text give the same result.

    Args:
        source: Generated source text

    Returns:
        ValidationResult with errors, warnings and the allowed components used
    """
    errors: list[str] = []
    warnings: list[str] = []

    if _STYLE_RE.search(source):
        errors.append(INLINE_STYLE_ERROR)

    if _ARBITRARY_CLASS_RE.search(source):
        errors.append(ARBITRARY_TAILWIND_ERROR)

    if _IMPORT_RE.search(source):
        warnings.append(IMPORT_WARNING)

    if _EXPORT_RE.search(source):
        warnings.append(EXPORT_WARNING)

    used = extract_used_components(source)
    unauthorized = [name for name in used if name not in ALLOWED_COMPONENTS]
    if unauthorized:
        errors.append(UNAUTHORIZED_PREFIX + ", ".join(unauthorized))

    if not _ENTRY_RE.search(source):
        errors.append(MISSING_ENTRY_ERROR)

    if not _RETURN_RE.search(source):
        errors.append(MISSING_RETURN_ERROR)

    for pattern, message in _DANGEROUS_PATTERNS:
        if pattern.search(source):
            errors.append(message)

    library_import = _LIBRARY_IMPORT_RE.search(source)
    if library_import:
        imported = [name.strip() for name in library_import.group(1).split(",") if name.strip()]
        unused = [name for name in imported if name not in used]
        if unused:
            warnings.append(f"Unused imports: {', '.join(unused)}")

    return ValidationResult(
        valid=not errors,
        errors=errors,
        warnings=warnings,
        used_components=[name for name in used if name in ALLOWED_COMPONENTS],
    )


def check_generated_code(source: str) -> Result[ValidationResult, ValidationResult]:
    """
    Validate generated code (Result pattern version).

    Returns:
        Success with the result when valid, Failure with it otherwise
    """
    result = validate_generated_code(source)
    if result.valid:
        return Success(result)
    return Failure(result)
