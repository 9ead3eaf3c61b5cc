"""Core utilities and infrastructure."""

from .config import Settings, get_settings
from .logging_config import configure_logging, get_logger, LogContext
from .json import (
    extract_json,
    extract_json_object,
    safe_json_dumps,
    JSONParseError,
    validate_json_depth,
)
from .parsers import strip_code_fences, strip_wrapping_quotes
from .validate import (
    RequestValidationError,
    GenerationRequest,
    ValidationResult,
    parse_generation_request,
    sanitize_user_input,
    validate_generated_code,
    check_generated_code,
)
from .tracing import init_tracer, trace_operation, trace_operation_async


def create_container(settings: Settings | None = None):
    """Create dependency injection container (lazy import to avoid circular deps)."""
    from .container import create_container as _create_container

    return _create_container(settings)


__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Logging
    "configure_logging",
    "get_logger",
    "LogContext",
    # JSON
    "extract_json",
    "extract_json_object",
    "safe_json_dumps",
    "JSONParseError",
    "validate_json_depth",
    # Parsing
    "strip_code_fences",
    "strip_wrapping_quotes",
    # Validation
    "RequestValidationError",
    "GenerationRequest",
    "ValidationResult",
    "parse_generation_request",
    "sanitize_user_input",
    "validate_generated_code",
    "check_generated_code",
    # Tracing
    "init_tracer",
    "trace_operation",
    "trace_operation_async",
    # DI
    "create_container",
]
